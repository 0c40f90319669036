"""Action legality shared by the engine, bots and presentation layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union

from .models import ActionType

_TOKEN_ALIASES = {
    "raise_to": ActionType.RAISE,
    "bet": ActionType.RAISE,
}


@dataclass(frozen=True)
class Action:
    kind: ActionType
    amount: int = 0

    @classmethod
    def fold(cls) -> "Action":
        return cls(ActionType.FOLD)

    @classmethod
    def check(cls) -> "Action":
        return cls(ActionType.CHECK)

    @classmethod
    def call(cls, amount: int = 0) -> "Action":
        return cls(ActionType.CALL, amount)

    @classmethod
    def raise_to(cls, amount: int) -> "Action":
        return cls(ActionType.RAISE, amount)

    @classmethod
    def parse(cls, kind: Union["Action", ActionType, str], amount: Optional[int] = 0) -> "Action":
        if isinstance(kind, Action):
            return kind
        amount = int(amount or 0)
        if isinstance(kind, ActionType):
            return cls(kind, amount)
        if not isinstance(kind, str):
            raise ValueError(f"Unsupported action {kind!r}")
        token = kind.strip().lower()
        if token in _TOKEN_ALIASES:
            return cls(_TOKEN_ALIASES[token], amount)
        try:
            return cls(ActionType(token), amount)
        except ValueError:
            raise ValueError(f"Unsupported action {kind!r}") from None

    def __str__(self) -> str:
        if self.kind in (ActionType.FOLD, ActionType.CHECK):
            return self.kind.value
        return f"{self.kind.value} {self.amount}"


@dataclass(frozen=True)
class LegalActions:
    legal: List[ActionType] = field(default_factory=list)
    call_amount: Optional[int] = None
    min_raise_to: Optional[int] = None
    max_raise_to: Optional[int] = None

    def allows(self, action: Action) -> bool:
        if action.kind not in self.legal:
            # A call with nothing owed is accepted as a check.
            return action.kind == ActionType.CALL and ActionType.CHECK in self.legal
        if action.kind == ActionType.RAISE:
            assert self.min_raise_to is not None and self.max_raise_to is not None
            # Chips are whole units.
            if not isinstance(action.amount, int) or isinstance(action.amount, bool):
                return False
            return self.min_raise_to <= action.amount <= self.max_raise_to
        return True

    def to_dict(self) -> dict:
        return {
            "legal": [action.value for action in self.legal],
            "call_amount": self.call_amount,
            "min_raise_to": self.min_raise_to,
            "max_raise_to": self.max_raise_to,
        }


NO_ACTIONS = LegalActions()


def legal_actions(
    participant,
    current_bet: int,
    min_raise: int,
    opponents_can_act: bool = True,
) -> LegalActions:
    """Every legal move for ``participant`` plus helper numbers.

    ``participant`` may be a live ``Participant`` or a snapshot
    ``ParticipantView``; both expose the same betting fields. Raising is
    only offered while ``opponents_can_act``: once every other seat is
    folded or all-in there is nobody left to call a raise.
    """
    if not participant.can_act():
        return NO_ACTIONS

    legal: List[ActionType] = [ActionType.FOLD]
    owed = current_bet - participant.current_bet
    call_amount = None
    if owed <= 0:
        legal.append(ActionType.CHECK)
    else:
        legal.append(ActionType.CALL)
        call_amount = min(owed, participant.chips)

    min_raise_to = None
    max_raise_to = None
    reach = participant.chips + participant.current_bet
    if opponents_can_act and reach >= current_bet + min_raise:
        min_raise_to = current_bet + min_raise
        max_raise_to = reach
        legal.append(ActionType.RAISE)

    return LegalActions(legal, call_amount, min_raise_to, max_raise_to)
