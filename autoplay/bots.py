from __future__ import annotations

import random
from typing import Callable, Dict, Optional, Sequence

from holdem.cards import Card
from holdem.models import ActionType, BettingRound, GameState
from holdem.rules import Action, LegalActions, legal_actions


# A strategy only sees the immutable snapshot; whatever it returns is
# re-validated by the engine.
Strategy = Callable[[GameState, int], Action]

_RNG = random.Random()


def seed_bots(seed: Optional[int]) -> None:
    _RNG.seed(seed)


def snapshot_legal_actions(state: GameState, seat: int) -> LegalActions:
    opponents = any(p.can_act() for p in state.participants if p.seat != seat)
    return legal_actions(state.participants[seat], state.current_bet, state.min_raise, opponents)


def _rough_hand_strength(hole: Sequence[Card]) -> int:
    """Very rough proxy for hand quality used to drive aggression choices."""
    if len(hole) < 2:
        return 0

    values = [card.value for card in hole]
    score = sum(values)
    if values[0] == values[1]:
        score += 14  # pairs are quite strong pre-flop
    else:
        gap = abs(values[0] - values[1])
        if gap == 1:
            score += 4
        elif gap == 2:
            score += 2
    if hole[0].suit == hole[1].suit:
        score += 3
    if min(values) >= 11:
        score += 2

    return score


def _should_raise(strength: int, betting_round: BettingRound, facing_bet: bool) -> bool:
    base = 0.2 if facing_bet else 0.35
    round_bonus = {
        BettingRound.PREFLOP: 0.0,
        BettingRound.FLOP: 0.05,
        BettingRound.TURN: 0.1,
        BettingRound.RIVER: 0.12,
    }[betting_round]
    scaled_strength = min(strength / 45.0, 0.45)
    probability = min(0.85, base + round_bonus + scaled_strength)

    # Always attack with premium holdings.
    if strength >= 36:
        return True
    return _RNG.random() < probability


def _choose_raise_amount(window: LegalActions, facing_bet: bool) -> int:
    min_raise_to, max_raise_to = window.min_raise_to, window.max_raise_to
    if min_raise_to is None or max_raise_to is None:
        raise ValueError("Raise requested without a legal range")
    if max_raise_to <= min_raise_to:
        return min_raise_to

    span = max_raise_to - min_raise_to
    roll = _RNG.random()

    # Facing a bet: weight toward stronger responses, otherwise mix in more probes.
    if facing_bet:
        if roll < 0.2:
            return min_raise_to
        if roll > 0.85:
            return max_raise_to
    else:
        if roll < 0.35:
            return min_raise_to
        if roll > 0.9:
            return max_raise_to

    return min_raise_to + int(span * _RNG.random())


def baseline_strategy(state: GameState, seat: int) -> Action:
    """Aggressive demo bot: mixes in random raises with a bias toward stronger holdings."""
    window = snapshot_legal_actions(state, seat)
    if not window.legal or window.legal == [ActionType.FOLD]:
        return Action.fold()

    hole = state.participants[seat].hole_cards
    strength = _rough_hand_strength(hole)
    facing_bet = window.call_amount is not None

    if ActionType.RAISE in window.legal and hole and _should_raise(strength, state.betting_round, facing_bet):
        return Action.raise_to(_choose_raise_amount(window, facing_bet))

    if ActionType.CALL in window.legal:
        return Action.call(window.call_amount or 0)

    if ActionType.CHECK in window.legal:
        return Action.check()

    return Action.fold()


def simple_strategy(state: GameState, seat: int) -> Action:
    """Pairs raise, high cards stay in cheaply, everything else calls small bets."""
    window = snapshot_legal_actions(state, seat)
    if not window.legal:
        return Action.fold()

    hole = state.participants[seat].hole_cards
    values = [card.value for card in hole]
    can_check = ActionType.CHECK in window.legal
    can_call = ActionType.CALL in window.legal
    is_pair = len(values) == 2 and values[0] == values[1]
    has_high_card = any(value >= 12 for value in values)
    is_connected = len(values) == 2 and abs(values[0] - values[1]) <= 3

    if is_pair:
        if ActionType.RAISE in window.legal:
            assert window.min_raise_to is not None
            return Action.raise_to(window.min_raise_to)
        if can_call:
            return Action.call(window.call_amount or 0)
    elif has_high_card:
        if can_call and not can_check and state.current_bet <= 2 * state.big_blind:
            return Action.call(window.call_amount or 0)
    elif is_connected and can_check:
        return Action.check()
    elif can_call and state.current_bet <= state.big_blind:
        return Action.call(window.call_amount or 0)

    if can_check:
        return Action.check()
    return Action.fold()


def passive_strategy(state: GameState, seat: int) -> Action:
    """Check when possible, otherwise call; mirrors the host's timeout fallback."""
    window = snapshot_legal_actions(state, seat)
    if ActionType.CHECK in window.legal:
        return Action.check()
    if ActionType.CALL in window.legal:
        return Action.call(window.call_amount or 0)
    return Action.fold()


STRATEGIES: Dict[str, Strategy] = {
    "baseline": baseline_strategy,
    "simple": simple_strategy,
    "passive": passive_strategy,
}


def get_strategy(name: str) -> Strategy:
    try:
        return STRATEGIES[name]
    except KeyError:
        raise ValueError(f"Unknown strategy {name!r}; choose from {sorted(STRATEGIES)}") from None
