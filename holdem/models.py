from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .cards import Card
from .evaluator import HandResult


class BettingRound(str, Enum):
    PREFLOP = "preflop"
    FLOP = "flop"
    TURN = "turn"
    RIVER = "river"


class GamePhase(str, Enum):
    WAITING = "waiting"
    DEALING = "dealing"
    BETTING = "betting"
    SHOWDOWN = "showdown"
    FINISHED = "finished"


class ActionType(str, Enum):
    FOLD = "fold"
    CHECK = "check"
    CALL = "call"
    RAISE = "raise"


# Community cards dealt when entering each post-flop round.
STREET_CARDS = {
    BettingRound.FLOP: 3,
    BettingRound.TURN: 1,
    BettingRound.RIVER: 1,
}
NEXT_ROUND = {
    BettingRound.PREFLOP: BettingRound.FLOP,
    BettingRound.FLOP: BettingRound.TURN,
    BettingRound.TURN: BettingRound.RIVER,
}

MIN_SEATS = 2
# 2 hole cards per seat + 3 burns + 5 board cards must fit in 52.
MAX_SEATS = 22


@dataclass
class TableConfig:
    small_blind: int = 10
    big_blind: int = 20
    starting_stack: int = 1_000
    side_pots: bool = False
    seed: Optional[int] = None
    think_delay_ms: int = 0


@dataclass(frozen=True)
class ParticipantView:
    seat: int
    name: str
    chips: int
    is_ai: bool
    hole_cards: Tuple[Card, ...]
    current_bet: int
    total_in_pot: int
    active: bool
    folded: bool
    all_in: bool

    def can_act(self) -> bool:
        return self.active and not self.folded and not self.all_in

    def to_dict(self) -> Dict[str, object]:
        return {
            "seat": self.seat,
            "name": self.name,
            "chips": self.chips,
            "is_ai": self.is_ai,
            "hole_cards": [card.label for card in self.hole_cards],
            "current_bet": self.current_bet,
            "total_in_pot": self.total_in_pot,
            "active": self.active,
            "folded": self.folded,
            "all_in": self.all_in,
        }


@dataclass(frozen=True)
class PotView:
    amount: int
    eligible: Tuple[int, ...]


@dataclass(frozen=True)
class GameState:
    """Read-only snapshot handed to presentation layers and bots."""

    participants: Tuple[ParticipantView, ...]
    community_cards: Tuple[Card, ...]
    pot: int
    current_bet: int
    min_raise: int
    dealer_position: Optional[int]
    current_player_index: Optional[int]
    betting_round: BettingRound
    game_phase: GamePhase
    winners: Tuple[int, ...]
    hand_number: int
    small_blind: int
    big_blind: int
    pots: Tuple[PotView, ...] = ()
    hand_results: Dict[int, HandResult] = field(default_factory=dict)
    rounding_loss: int = 0

    @property
    def current_participant(self) -> Optional[ParticipantView]:
        if self.current_player_index is None:
            return None
        return self.participants[self.current_player_index]

    def to_dict(self) -> Dict[str, object]:
        players: List[Dict[str, object]] = [view.to_dict() for view in self.participants]
        return {
            "hand_number": self.hand_number,
            "game_phase": self.game_phase.value,
            "betting_round": self.betting_round.value,
            "players": players,
            "community_cards": [card.label for card in self.community_cards],
            "pot": self.pot,
            "pots": [{"amount": pot.amount, "eligible": list(pot.eligible)} for pot in self.pots],
            "current_bet": self.current_bet,
            "min_raise": self.min_raise,
            "dealer_position": self.dealer_position,
            "current_player_index": self.current_player_index,
            "winners": list(self.winners),
            "small_blind": self.small_blind,
            "big_blind": self.big_blind,
            "hand_results": {str(seat): result.to_dict() for seat, result in self.hand_results.items()},
            "rounding_loss": self.rounding_loss,
        }
