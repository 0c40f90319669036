from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

RANKS = "AKQJT98765432"
SUITS = "hdcs"
RANK_VALUE = {rank: idx for idx, rank in enumerate(RANKS[::-1], start=2)}
SUIT_SYMBOLS = {"h": "♥", "d": "♦", "c": "♣", "s": "♠"}


class DeckExhaustedError(RuntimeError):
    """Raised when a card is requested from an empty deck."""


@dataclass(frozen=True)
class Card:
    rank: str
    suit: str

    def __post_init__(self) -> None:
        if self.rank not in RANKS:
            raise ValueError(f"Invalid rank: {self.rank}")
        if self.suit not in SUITS:
            raise ValueError(f"Invalid suit: {self.suit}")

    @property
    def value(self) -> int:
        return RANK_VALUE[self.rank]

    @property
    def label(self) -> str:
        return f"{self.rank}{self.suit}"

    @property
    def display(self) -> str:
        rank = "10" if self.rank == "T" else self.rank
        return f"{rank}{SUIT_SYMBOLS[self.suit]}"

    def __str__(self) -> str:
        return self.label


def build_deck(seed: Optional[int] = None, rng: Optional[random.Random] = None) -> List[Card]:
    rng = rng or random.Random(seed)
    deck = [Card(rank, suit) for rank in RANKS[::-1] for suit in SUITS]
    rng.shuffle(deck)
    return deck


class Deck:
    """52 distinct cards in random order; cards are drawn from the end."""

    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = random.Random(seed)
        self.cards: List[Card] = []
        self.reset()

    def reset(self) -> None:
        self.cards = build_deck(rng=self._rng)

    def deal(self) -> Card:
        if not self.cards:
            raise DeckExhaustedError("Not enough cards left in deck")
        return self.cards.pop()

    def deal_many(self, count: int) -> List[Card]:
        if len(self.cards) < count:
            raise DeckExhaustedError(f"Not enough cards left in deck ({len(self.cards)} < {count})")
        return [self.deal() for _ in range(count)]

    def is_empty(self) -> bool:
        return not self.cards

    def remaining_cards(self) -> int:
        return len(self.cards)

    def __len__(self) -> int:
        return len(self.cards)


def cards_to_labels(cards: Iterable[Card]) -> List[str]:
    return [card.label for card in cards]


def parse_label(label: str) -> Card:
    text = label.strip()
    if len(text) == 3 and text.startswith("10"):
        text = "T" + text[2]
    if len(text) != 2:
        raise ValueError(f"Invalid card label: {label}")
    return Card(text[0].upper(), text[1].lower())


def parse_cards(labels: Sequence[str]) -> List[Card]:
    return [parse_label(label) for label in labels]
