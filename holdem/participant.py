from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from .cards import Card
from .models import ParticipantView


@dataclass
class Participant:
    """A seat at the table: persistent chip stack plus per-hand betting state.

    ``total_in_pot`` accumulates every chip this seat put in during the
    current hand; ``current_bet`` only covers the current betting round.
    """

    seat: int
    name: str
    chips: int
    is_ai: bool = False
    hole_cards: List[Card] = field(default_factory=list)
    current_bet: int = 0
    total_in_pot: int = 0
    active: bool = True
    folded: bool = False
    all_in: bool = False

    def __post_init__(self) -> None:
        if self.chips < 0:
            raise ValueError("Chip stack cannot be negative")

    def fold(self) -> None:
        self.folded = True
        self.active = False

    def call(self, target_bet: int) -> int:
        amount = min(max(target_bet - self.current_bet, 0), self.chips)
        self._commit(amount)
        return amount

    def raise_to(self, target_total: int) -> int:
        total = min(target_total, self.chips + self.current_bet)
        amount = max(total - self.current_bet, 0)
        self._commit(amount)
        return amount

    def _commit(self, amount: int) -> None:
        self.chips -= amount
        self.current_bet += amount
        self.total_in_pot += amount
        if self.chips == 0:
            self.all_in = True

    def deal_cards(self, first: Card, second: Card) -> None:
        self.hole_cards = [first, second]

    def award(self, amount: int) -> None:
        self.chips += amount

    def reset_for_new_hand(self) -> None:
        self.hole_cards = []
        self.current_bet = 0
        self.total_in_pot = 0
        self.folded = False
        self.all_in = False
        self.active = True

    def reset_for_round(self) -> None:
        self.current_bet = 0

    def can_act(self) -> bool:
        return self.active and not self.folded and not self.all_in

    def view(self, show_cards: bool = True) -> ParticipantView:
        return ParticipantView(
            seat=self.seat,
            name=self.name,
            chips=self.chips,
            is_ai=self.is_ai,
            hole_cards=tuple(self.hole_cards) if show_cards else (),
            current_bet=self.current_bet,
            total_in_pot=self.total_in_pot,
            active=self.active,
            folded=self.folded,
            all_in=self.all_in,
        )
