from __future__ import annotations

from typing import Dict, Iterable, Optional, Sequence, Tuple

from holdem.cards import Card, RANKS, SUITS, parse_cards
from holdem.game import GameEngine
from holdem.models import ActionType, GamePhase
from holdem.participant import Participant


def create_engine(
    *,
    seats: int = 4,
    starting_stack: int = 1_000,
    sb: int = 10,
    bb: int = 20,
    seed: Optional[int] = 42,
    side_pots: bool = False,
    stacks: Optional[Sequence[int]] = None,
) -> GameEngine:
    """Instantiate a game engine with a populated table."""
    chips = list(stacks) if stacks is not None else [starting_stack] * seats
    participants = [Participant(seat=idx, name=f"Player{idx}", chips=amount) for idx, amount in enumerate(chips)]
    return GameEngine(participants, sb, bb, seed=seed, side_pots=side_pots)


def start_hand(engine: GameEngine) -> GameEngine:
    engine.start_new_hand()
    assert engine.game_phase in (GamePhase.BETTING, GamePhase.FINISHED)
    return engine


def perform_actions(engine: GameEngine, actions: Iterable[Tuple[str, int]]) -> None:
    """Apply a scripted sequence of (action, amount) pairs; each must be accepted."""
    for action, amount in actions:
        seat = engine.current_player_index
        assert engine.player_action(action, amount), f"seat {seat} could not {action} {amount}"


def check_down(engine: GameEngine) -> None:
    """Check (or call when facing a bet) until the hand finishes."""
    while not engine.is_hand_complete():
        window = engine.legal_actions()
        if ActionType.CHECK in window.legal:
            assert engine.player_action("check")
        else:
            assert engine.player_action("call")


def auto_complete_hand(engine: GameEngine) -> None:
    """Advance the current hand with straightforward actions until completion."""
    while not engine.is_hand_complete():
        window = engine.legal_actions()
        if ActionType.CHECK in window.legal:
            engine.player_action("check")
        elif ActionType.CALL in window.legal:
            engine.player_action("call")
        else:
            engine.player_action("fold")


def rig_cards(engine: GameEngine, holes: Dict[int, Sequence[str]], board: Sequence[str]) -> None:
    """Replace hole cards and stack the deck so the next streets deal ``board``.

    Must be called right after ``start_new_hand`` while the board is empty.
    """
    assert not engine.community_cards
    used = {label for cards in holes.values() for label in cards} | set(board)
    spare = [Card(rank, suit) for rank in RANKS for suit in SUITS if f"{rank}{suit}" not in used]
    for seat, labels in holes.items():
        engine.participants[seat].hole_cards = parse_cards(labels)
    flop, turn, river = parse_cards(board[:3]), parse_cards(board[3:4]), parse_cards(board[4:5])
    draw_order = [spare[0], *flop, spare[1], *turn, spare[2], *river]
    # Deck.deal pops from the end.
    engine.deck.cards = spare[3:10] + list(reversed(draw_order))


def total_chips(engine: GameEngine) -> int:
    return sum(p.chips for p in engine.participants) + engine.pot
