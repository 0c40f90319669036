"""Texas Hold'em rules engine: cards, hand evaluation, betting and showdown."""

from .cards import Card, Deck, DeckExhaustedError, RANKS, SUITS, build_deck, parse_cards
from .evaluator import HandCategory, HandResult, compare_hands, evaluate_hand
from .game import GameEngine
from .models import ActionType, BettingRound, GamePhase, GameState, ParticipantView, TableConfig
from .participant import Participant
from .rules import Action, LegalActions, legal_actions

__all__ = [
    "Card",
    "Deck",
    "DeckExhaustedError",
    "RANKS",
    "SUITS",
    "build_deck",
    "parse_cards",
    "HandCategory",
    "HandResult",
    "compare_hands",
    "evaluate_hand",
    "GameEngine",
    "ActionType",
    "BettingRound",
    "GamePhase",
    "GameState",
    "ParticipantView",
    "TableConfig",
    "Participant",
    "Action",
    "LegalActions",
    "legal_actions",
]
