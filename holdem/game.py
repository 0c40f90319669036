from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple, Union

from .cards import Card, Deck, cards_to_labels
from .evaluator import HandResult, evaluate_hand
from .models import (
    MAX_SEATS,
    MIN_SEATS,
    NEXT_ROUND,
    STREET_CARDS,
    ActionType,
    BettingRound,
    GamePhase,
    GameState,
    PotView,
    TableConfig,
)
from .participant import Participant
from .rules import NO_ACTIONS, Action, LegalActions, legal_actions

LOGGER = logging.getLogger("holdem.engine")

# GameEngine keeps all table state in memory. No networking or rendering lives
# here, only poker rules, chip accounting, and betting order. Callers get
# immutable snapshots; every mutation goes through start_new_hand/player_action.


class GameEngine:
    """No-Limit Texas Hold'em engine for a single table."""

    def __init__(
        self,
        participants: Sequence[Participant],
        small_blind: int = 10,
        big_blind: int = 20,
        *,
        seed: Optional[int] = None,
        side_pots: bool = False,
    ) -> None:
        if not MIN_SEATS <= len(participants) <= MAX_SEATS:
            raise ValueError(f"Table needs {MIN_SEATS}-{MAX_SEATS} participants, got {len(participants)}")
        if small_blind <= 0 or big_blind < small_blind:
            raise ValueError("Blinds must satisfy 0 < small blind <= big blind")

        self.participants: List[Participant] = list(participants)
        for idx, participant in enumerate(self.participants):
            participant.seat = idx
        self.small_blind = small_blind
        self.big_blind = big_blind
        self.side_pots = side_pots
        self.deck = Deck(seed)

        self.community_cards: List[Card] = []
        self.pot = 0
        self.current_bet = 0
        self.min_raise = big_blind
        self.dealer_position: Optional[int] = None
        self.current_player_index: Optional[int] = None
        self.betting_round = BettingRound.PREFLOP
        self.game_phase = GamePhase.WAITING
        self.winners: List[int] = []
        self.hand_number = 0
        self.hand_results: Dict[int, HandResult] = {}
        self.rounding_loss = 0
        # Seats that still owe an action since the last full raise.
        self.pending: Set[int] = set()
        self.events: List[Dict[str, object]] = []

    @classmethod
    def from_config(cls, config: TableConfig, names: Iterable[str], ai_seats: Iterable[int] = ()) -> "GameEngine":
        ai = set(ai_seats)
        participants = [
            Participant(seat=idx, name=name, chips=config.starting_stack, is_ai=idx in ai)
            for idx, name in enumerate(names)
        ]
        return cls(
            participants,
            config.small_blind,
            config.big_blind,
            seed=config.seed,
            side_pots=config.side_pots,
        )

    # Hand lifecycle --------------------------------------------------
    def can_start_game(self) -> bool:
        ready = [p for p in self.participants if p.chips > 0]
        return len(ready) >= 2

    def start_new_hand(self) -> None:
        if self.game_phase in (GamePhase.DEALING, GamePhase.BETTING, GamePhase.SHOWDOWN):
            raise RuntimeError("Hand already in progress")
        if not self.can_start_game():
            raise RuntimeError("Not enough players with chips to start a hand")

        self.game_phase = GamePhase.DEALING
        self.hand_number += 1
        self.deck.reset()
        self.community_cards = []
        self.pot = 0
        self.current_bet = 0
        self.min_raise = self.big_blind
        self.betting_round = BettingRound.PREFLOP
        self.winners = []
        self.hand_results = {}
        self.rounding_loss = 0
        self.events = []

        for participant in self.participants:
            participant.reset_for_new_hand()
            if participant.chips == 0:
                participant.active = False  # busted seats sit out

        self.dealer_position = self._next_seated(self.dealer_position)
        seated = self._seated_from(self.dealer_position + 1)
        self._deal_hole_cards(seated)
        sb_seat, bb_seat = self._post_blinds(seated)

        self.pending = {p.seat for p in self.participants if p.can_act()}
        self.game_phase = GamePhase.BETTING
        self.current_player_index = self.get_next_active_player(bb_seat + 1)
        LOGGER.info(
            "Hand #%s started: button=%s sb=%s bb=%s pot=%s",
            self.hand_number,
            self.dealer_position,
            sb_seat,
            bb_seat,
            self.pot,
        )

        if self.is_betting_round_complete():
            self._finish_round()

    def _deal_hole_cards(self, seated: List[int]) -> None:
        first_cards = {seat: self.deck.deal() for seat in seated}
        for seat in seated:
            self.participants[seat].deal_cards(first_cards[seat], self.deck.deal())

    def _post_blinds(self, seated: List[int]) -> Tuple[int, int]:
        if len(seated) == 2:
            # Heads-up: the button posts the small blind.
            sb_seat, bb_seat = self.dealer_position, seated[0]
        else:
            sb_seat, bb_seat = seated[0], seated[1]
        assert sb_seat is not None

        self.pot += self.participants[sb_seat].call(self.small_blind)
        self.pot += self.participants[bb_seat].call(self.big_blind)
        self.current_bet = self.big_blind
        self.events.append(
            {
                "ev": "POST_BLINDS",
                "sb_seat": sb_seat,
                "bb_seat": bb_seat,
                "sb": self.participants[sb_seat].current_bet,
                "bb": self.participants[bb_seat].current_bet,
            }
        )
        return sb_seat, bb_seat

    def _next_seated(self, start: Optional[int]) -> int:
        origin = -1 if start is None else start
        for offset in range(1, len(self.participants) + 1):
            idx = (origin + offset) % len(self.participants)
            if self.participants[idx].active:
                return idx
        raise RuntimeError("No seated participants")

    def _seated_from(self, start: int) -> List[int]:
        count = len(self.participants)
        order = [(start + offset) % count for offset in range(count)]
        return [idx for idx in order if self.participants[idx].active]

    # Action handling -------------------------------------------------
    def current_participant(self) -> Optional[Participant]:
        if self.current_player_index is None:
            return None
        return self.participants[self.current_player_index]

    def legal_actions(self, seat: Optional[int] = None) -> LegalActions:
        if self.game_phase != GamePhase.BETTING:
            return NO_ACTIONS
        if seat is None:
            seat = self.current_player_index
        if seat is None:
            return NO_ACTIONS
        opponents = any(p.can_act() for p in self.participants if p.seat != seat)
        return legal_actions(self.participants[seat], self.current_bet, self.min_raise, opponents)

    def player_action(
        self,
        action: Union[Action, ActionType, str],
        amount: Optional[int] = 0,
        seat: Optional[int] = None,
    ) -> bool:
        """Apply an action for the participant whose turn it is.

        ``seat`` optionally names who is acting; a mismatch with the current
        turn is rejected. Returns False (and changes nothing) for any
        illegal action.
        """
        try:
            parsed = Action.parse(action, amount)
        except ValueError as exc:
            LOGGER.debug("Rejected action %r: %s", action, exc)
            return False

        participant = self.current_participant()
        if self.game_phase != GamePhase.BETTING or participant is None:
            LOGGER.debug("Rejected %s: no betting in progress", parsed)
            return False
        if seat is not None and seat != participant.seat:
            LOGGER.debug("Rejected %s from seat %s: seat %s to act", parsed, seat, participant.seat)
            return False
        window = self.legal_actions(participant.seat)
        if not window.allows(parsed):
            LOGGER.debug(
                "Rejected %s from seat %s (current_bet=%s min_raise=%s)",
                parsed,
                participant.seat,
                self.current_bet,
                self.min_raise,
            )
            return False

        seat = participant.seat
        if parsed.kind == ActionType.FOLD:
            participant.fold()
            self.pending.discard(seat)
            self.events.append({"ev": "FOLD", "seat": seat})
        elif parsed.kind == ActionType.CHECK:
            self.pending.discard(seat)
            self.events.append({"ev": "CHECK", "seat": seat})
        elif parsed.kind == ActionType.CALL:
            wagered = participant.call(self.current_bet)
            self.pot += wagered
            self.pending.discard(seat)
            self.events.append({"ev": "CALL", "seat": seat, "amount": wagered})
        else:
            previous_bet = self.current_bet
            wagered = participant.raise_to(parsed.amount)
            self.pot += wagered
            self.current_bet = parsed.amount
            self.min_raise = parsed.amount - previous_bet
            self.pending = {p.seat for p in self.participants if p.can_act() and p.seat != seat}
            self.events.append({"ev": "RAISE", "seat": seat, "amount": wagered, "to": parsed.amount})

        if participant.all_in:
            self.pending.discard(seat)

        if self.is_betting_round_complete():
            self._finish_round()
        else:
            self.current_player_index = self.get_next_active_player(seat + 1)
        return True

    def is_betting_round_complete(self) -> bool:
        in_hand = self._in_hand()
        if len(in_hand) <= 1:
            return True
        actors = [p for p in in_hand if p.can_act()]
        matched = all(p.current_bet == self.current_bet for p in actors)
        if len(actors) <= 1:
            # Nobody left to bet against once the lone actor has matched.
            return matched
        return matched and not any(p.seat in self.pending for p in actors)

    def get_next_active_player(self, start: int) -> Optional[int]:
        count = len(self.participants)
        for offset in range(count):
            idx = (start + offset) % count
            if self.participants[idx].can_act():
                return idx
        return None

    def _in_hand(self) -> List[Participant]:
        return [p for p in self.participants if p.active and not p.folded]

    def _finish_round(self) -> None:
        if len(self._in_hand()) <= 1:
            self.showdown()
        else:
            self.next_betting_round()

    def next_betting_round(self) -> None:
        while True:
            if self.betting_round == BettingRound.RIVER:
                self.showdown()
                return

            for participant in self.participants:
                participant.reset_for_round()
            self.current_bet = 0
            self.min_raise = self.big_blind
            self.betting_round = NEXT_ROUND[self.betting_round]

            self.deck.deal()  # burn
            cards = self.deck.deal_many(STREET_CARDS[self.betting_round])
            self.community_cards.extend(cards)
            self.events.append({"ev": self.betting_round.name, "cards": cards_to_labels(cards)})

            actors = [p.seat for p in self._in_hand() if p.can_act()]
            if len(actors) >= 2:
                self.pending = set(actors)
                assert self.dealer_position is not None
                self.current_player_index = self.get_next_active_player(self.dealer_position + 1)
                return

            # No more betting possible; keep revealing until showdown.
            self.pending = set()
            self.current_player_index = None

    # Showdown --------------------------------------------------------
    def showdown(self) -> None:
        self.game_phase = GamePhase.SHOWDOWN
        self.current_player_index = None
        self.pending = set()
        in_hand = self._in_hand()

        if len(in_hand) == 1:
            winner = in_hand[0]
            winner.award(self.pot)
            self.winners = [winner.seat]
            self.events.append({"ev": "POT_AWARD", "seat": winner.seat, "amount": self.pot})
            LOGGER.info("Hand #%s: seat %s wins %s uncontested", self.hand_number, winner.seat, self.pot)
        else:
            for participant in in_hand:
                result = evaluate_hand(participant.hole_cards + self.community_cards)
                self.hand_results[participant.seat] = result
                self.events.append(
                    {
                        "ev": "SHOWDOWN",
                        "seat": participant.seat,
                        "hand": cards_to_labels(participant.hole_cards),
                        "board": cards_to_labels(self.community_cards),
                        "rank": result.category.name,
                    }
                )
            for amount, contenders in self._build_pots():
                self._award_pot(amount, contenders)

        self.pot = 0
        for participant in self.participants:
            if participant.chips == 0 and participant.total_in_pot > 0:
                self.events.append({"ev": "ELIMINATED", "seat": participant.seat})
        self.game_phase = GamePhase.FINISHED

    def _award_pot(self, amount: int, contenders: List[int]) -> None:
        best = max(self.hand_results[seat] for seat in contenders)
        winners = [seat for seat in contenders if self.hand_results[seat] == best]
        share = amount // len(winners)
        # Remainder chips are not awarded to anyone.
        self.rounding_loss += amount - share * len(winners)
        for seat in winners:
            self.participants[seat].award(share)
            if seat not in self.winners:
                self.winners.append(seat)
            self.events.append({"ev": "POT_AWARD", "seat": seat, "amount": share})
        LOGGER.info(
            "Hand #%s: pot %s to seats %s with %s (%s each)",
            self.hand_number,
            amount,
            winners,
            best.name,
            share,
        )

    def _build_pots(self) -> List[Tuple[int, List[int]]]:
        contenders = [p.seat for p in self._in_hand()]
        if not self.side_pots:
            return [(self.pot, contenders)]

        remaining: Dict[int, int] = {
            p.seat: p.total_in_pot for p in self.participants if p.total_in_pot > 0
        }
        pots: List[Tuple[int, List[int]]] = []
        while True:
            active = [seat for seat, amount in remaining.items() if amount > 0]
            if not active:
                break
            level = min(remaining[seat] for seat in active)
            pot_total = 0
            for seat in active:
                pot_total += level
                remaining[seat] -= level
            eligible = [seat for seat in active if seat in contenders]
            if eligible:
                pots.append((pot_total, eligible))
            elif pots:
                # Only folded seats reached this level; fold it into the pot below.
                amount, below = pots[-1]
                pots[-1] = (amount + pot_total, below)
        return pots

    # Observers -------------------------------------------------------
    def is_hand_complete(self) -> bool:
        return self.game_phase == GamePhase.FINISHED

    def is_match_over(self) -> bool:
        return not self.can_start_game()

    def consume_events(self) -> List[Dict[str, object]]:
        events = list(self.events)
        self.events.clear()
        return events

    def get_game_state(self, viewer: Optional[int] = None) -> GameState:
        showing = self.game_phase in (GamePhase.SHOWDOWN, GamePhase.FINISHED)
        views = tuple(
            p.view(
                show_cards=viewer is None
                or p.seat == viewer
                or (showing and p.seat in self.hand_results)
            )
            for p in self.participants
        )
        pots: Tuple[PotView, ...] = ()
        if self.side_pots and self.game_phase == GamePhase.BETTING:
            pots = tuple(PotView(amount, tuple(eligible)) for amount, eligible in self._build_pots())
        return GameState(
            participants=views,
            community_cards=tuple(self.community_cards),
            pot=self.pot,
            current_bet=self.current_bet,
            min_raise=self.min_raise,
            dealer_position=self.dealer_position,
            current_player_index=self.current_player_index,
            betting_round=self.betting_round,
            game_phase=self.game_phase,
            winners=tuple(self.winners),
            hand_number=self.hand_number,
            small_blind=self.small_blind,
            big_blind=self.big_blind,
            pots=pots,
            hand_results=dict(self.hand_results),
            rounding_loss=self.rounding_loss,
        )
