from __future__ import annotations

import itertools
from collections import Counter
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, List, Optional, Sequence, Tuple

from .cards import Card, parse_cards


class HandCategory(IntEnum):
    HIGH_CARD = 1
    ONE_PAIR = 2
    TWO_PAIR = 3
    THREE_OF_A_KIND = 4
    STRAIGHT = 5
    FLUSH = 6
    FULL_HOUSE = 7
    FOUR_OF_A_KIND = 8
    STRAIGHT_FLUSH = 9
    ROYAL_FLUSH = 10

    @property
    def display_name(self) -> str:
        return self.name.replace("_", " ").title()


@dataclass(frozen=True, order=True)
class HandResult:
    """Best five-card hand. Ordering follows (category, tiebreak)."""

    category: HandCategory
    tiebreak: Tuple[int, ...]
    cards: Tuple[Card, ...] = field(default=(), compare=False)

    @property
    def name(self) -> str:
        return self.category.display_name

    def to_dict(self) -> Dict[str, object]:
        return {
            "category": self.category.name,
            "name": self.name,
            "tiebreak": list(self.tiebreak),
            "cards": [card.label for card in self.cards],
        }


# Index tables for every 5-card subset of n cards; 21 entries for seven.
_SUBSET_INDEXES: Dict[int, Tuple[Tuple[int, ...], ...]] = {
    n: tuple(itertools.combinations(range(n), 5)) for n in (5, 6, 7)
}
_WHEEL = (14, 5, 4, 3, 2)


def evaluate_hand(cards: Sequence[Card]) -> HandResult:
    """Return the best five-card hand from 5 to 7 cards (Texas Hold'em). Higher is better."""
    subsets = _SUBSET_INDEXES.get(len(cards))
    if subsets is None:
        raise ValueError(f"Expected 5 to 7 cards, got {len(cards)}")
    if len(set(cards)) != len(cards):
        raise ValueError("Duplicate cards in hand")

    best: Optional[HandResult] = None
    for indexes in subsets:
        result = _evaluate_five([cards[idx] for idx in indexes])
        if best is None or result > best:
            best = result
    assert best is not None
    return best


def compare_hands(first: HandResult, second: HandResult) -> int:
    """Return 1 if ``first`` wins, -1 if ``second`` wins, 0 for an exact tie."""
    if first.category != second.category:
        return 1 if first.category > second.category else -1
    for left, right in zip(first.tiebreak, second.tiebreak):
        if left != right:
            return 1 if left > right else -1
    return 0


def _evaluate_five(cards: List[Card]) -> HandResult:
    ordered = tuple(sorted(cards, key=lambda card: card.value, reverse=True))
    values = [card.value for card in ordered]

    is_flush = len({card.suit for card in ordered}) == 1
    straight_high = _straight_high(values)

    counts = Counter(values)
    # Groups sorted by multiplicity, then by value: [(value, count), ...]
    groups = sorted(counts.items(), key=lambda item: (item[1], item[0]), reverse=True)
    shape = [count for _, count in groups]

    if straight_high and is_flush:
        if straight_high == 14:
            return HandResult(HandCategory.ROYAL_FLUSH, (14,), ordered)
        return HandResult(HandCategory.STRAIGHT_FLUSH, (straight_high,), ordered)
    if shape[0] == 4:
        return HandResult(HandCategory.FOUR_OF_A_KIND, (groups[0][0], groups[1][0]), ordered)
    if shape[:2] == [3, 2]:
        return HandResult(HandCategory.FULL_HOUSE, (groups[0][0], groups[1][0]), ordered)
    if is_flush:
        return HandResult(HandCategory.FLUSH, tuple(values), ordered)
    if straight_high:
        return HandResult(HandCategory.STRAIGHT, (straight_high,), ordered)
    if shape[0] == 3:
        kickers = [value for value, _ in groups[1:]]
        return HandResult(HandCategory.THREE_OF_A_KIND, (groups[0][0], *kickers), ordered)
    if shape[:2] == [2, 2]:
        return HandResult(HandCategory.TWO_PAIR, (groups[0][0], groups[1][0], groups[2][0]), ordered)
    if shape[0] == 2:
        kickers = [value for value, _ in groups[1:]]
        return HandResult(HandCategory.ONE_PAIR, (groups[0][0], *kickers), ordered)
    return HandResult(HandCategory.HIGH_CARD, tuple(values), ordered)


def _straight_high(values: List[int]) -> Optional[int]:
    # values are sorted descending
    if len(set(values)) != 5:
        return None
    if tuple(values) == _WHEEL:  # Ace low
        return 5
    if values[0] - values[4] == 4:
        return values[0]
    return None


def evaluate_labels(labels: Sequence[str]) -> HandResult:
    return evaluate_hand(parse_cards(labels))
