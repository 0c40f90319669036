from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from holdem.game import GameEngine
from holdem.models import GameState

from .bots import Strategy

LOGGER = logging.getLogger("selfplay")


@dataclass
class MatchReport:
    hands_played: int = 0
    starting_total: int = 0
    final_stacks: Dict[str, int] = field(default_factory=dict)
    rounding_loss: int = 0
    rejected_actions: int = 0

    @property
    def final_total(self) -> int:
        return sum(self.final_stacks.values())


def play_hand(engine: GameEngine, strategies: Sequence[Strategy]) -> int:
    """Run one hand to completion; returns how many bot actions the engine rejected."""
    engine.start_new_hand()
    rejected = 0
    while not engine.is_hand_complete():
        seat = engine.current_player_index
        if seat is None:
            raise RuntimeError("Hand stalled with nobody to act")
        state = engine.get_game_state(viewer=seat)
        action = strategies[seat](state, seat)
        if not engine.player_action(action, seat=seat):
            # Invalid submissions are simply rejected; fall back to the cheapest legal move.
            rejected += 1
            LOGGER.warning("Seat %s submitted illegal %s; checking or folding instead", seat, action)
            if not engine.player_action("check", seat=seat):
                engine.player_action("fold", seat=seat)
    return rejected


def play_match(
    engine: GameEngine,
    strategies: Sequence[Strategy],
    max_hands: int = 100,
    on_hand_end: Optional[Callable[[GameState], None]] = None,
) -> MatchReport:
    if len(strategies) != len(engine.participants):
        raise ValueError("One strategy per participant required")

    report = MatchReport(starting_total=sum(p.chips for p in engine.participants))
    while report.hands_played < max_hands and engine.can_start_game():
        report.rejected_actions += play_hand(engine, strategies)
        report.rounding_loss += engine.rounding_loss
        report.hands_played += 1
        if on_hand_end is not None:
            on_hand_end(engine.get_game_state())

    report.final_stacks = {p.name: p.chips for p in engine.participants}
    LOGGER.info(
        "Match finished after %s hands; stacks=%s rounding_loss=%s",
        report.hands_played,
        report.final_stacks,
        report.rounding_loss,
    )
    return report


def standings(engine: GameEngine) -> List[str]:
    ranked = sorted(engine.participants, key=lambda p: p.chips, reverse=True)
    return [f"{p.name}: {p.chips}" for p in ranked]
