import random

import pytest

from holdem.cards import Deck, parse_cards
from holdem.evaluator import HandCategory, compare_hands, evaluate_hand, evaluate_labels

# Seven-card fixtures, strongest first.
CATEGORY_FIXTURES = [
    (HandCategory.ROYAL_FLUSH, ["Ah", "Kh", "Qh", "Jh", "Th", "2c", "3d"]),
    (HandCategory.STRAIGHT_FLUSH, ["9s", "8s", "7s", "6s", "5s", "Ad", "Kc"]),
    (HandCategory.FOUR_OF_A_KIND, ["As", "Ah", "Ad", "Ac", "Kd", "2c", "3h"]),
    (HandCategory.FULL_HOUSE, ["Qc", "Qd", "Qs", "9h", "9s", "2d", "3c"]),
    (HandCategory.FLUSH, ["Ah", "Jh", "9h", "6h", "2h", "Kd", "3c"]),
    (HandCategory.STRAIGHT, ["9h", "8d", "7c", "6s", "5h", "2d", "2c"]),
    (HandCategory.THREE_OF_A_KIND, ["8h", "8d", "8s", "Qd", "Js", "3c", "2h"]),
    (HandCategory.TWO_PAIR, ["7h", "7d", "4s", "4c", "As", "2d", "9c"]),
    (HandCategory.ONE_PAIR, ["6h", "6s", "Qh", "8d", "4c", "2s", "3d"]),
    (HandCategory.HIGH_CARD, ["As", "Kd", "Jh", "9c", "4d", "3s", "2h"]),
]


@pytest.mark.parametrize("expected, labels", CATEGORY_FIXTURES)
def test_evaluate_hand_identifies_all_hand_categories(expected, labels):
    assert evaluate_labels(labels).category == expected


def test_category_ordering_holds_for_fixtures():
    results = [evaluate_labels(labels) for _, labels in CATEGORY_FIXTURES]
    for stronger, weaker in zip(results, results[1:]):
        assert compare_hands(stronger, weaker) == 1
        assert compare_hands(weaker, stronger) == -1


def test_wheel_straight_plays_ace_low():
    result = evaluate_labels(["Ah", "2d", "3c", "4s", "5h", "9d", "Kd"])
    assert result.category == HandCategory.STRAIGHT
    assert result.tiebreak == (5,)
    six_high = evaluate_labels(["2d", "3c", "4s", "5h", "6c", "9d", "Kd"])
    assert compare_hands(six_high, result) == 1


def test_steel_wheel_is_straight_flush_not_royal():
    result = evaluate_labels(["Ad", "2d", "3d", "4d", "5d", "Kc", "Qh"])
    assert result.category == HandCategory.STRAIGHT_FLUSH
    assert result.tiebreak == (5,)


def test_tiebreak_vectors_follow_category_rules():
    assert evaluate_labels(["As", "Ah", "Ad", "Ac", "Kd", "Qc", "3h"]).tiebreak == (14, 13)
    assert evaluate_labels(["Qc", "Qd", "Qs", "9h", "9s", "Kd", "Kc"]).tiebreak == (12, 13)
    assert evaluate_labels(["8h", "8d", "8s", "Qd", "Js", "3c", "2h"]).tiebreak == (8, 12, 11)
    assert evaluate_labels(["7h", "7d", "4s", "4c", "As", "Ad", "9c"]).tiebreak == (14, 7, 9)
    assert evaluate_labels(["6h", "6s", "Qh", "8d", "4c", "2s", "3d"]).tiebreak == (6, 12, 8, 4)
    assert evaluate_labels(["Ah", "Jh", "9h", "6h", "2h", "Kh", "3c"]).tiebreak == (14, 13, 11, 9, 6)


def test_kickers_break_ties_between_equal_pairs():
    hand_a = evaluate_labels(["Ah", "Ad", "Kc", "Qs", "9h", "2d", "3c"])
    hand_b = evaluate_labels(["Ah", "Ad", "Qc", "Js", "8h", "2d", "3c"])
    assert compare_hands(hand_a, hand_b) == 1
    assert hand_a > hand_b


def test_trip_aces_beat_trip_kings():
    board = ["Ac", "Kd", "2s", "3s", "4s"]
    aces = evaluate_labels(["As", "Ad", *board])
    kings = evaluate_labels(["Kc", "Kh", *board])
    assert aces.category == HandCategory.THREE_OF_A_KIND
    assert kings.category == HandCategory.THREE_OF_A_KIND
    assert compare_hands(aces, kings) == 1


def test_evaluation_is_invariant_under_permutation():
    rng = random.Random(5)
    for seed in range(20):
        cards = Deck(seed=seed).deal_many(7)
        expected = evaluate_hand(cards)
        for _ in range(10):
            shuffled = list(cards)
            rng.shuffle(shuffled)
            assert evaluate_hand(shuffled) == expected


def test_compare_is_reflexive_and_antisymmetric():
    deck = Deck(seed=777)
    hands = [evaluate_hand(deck.deal_many(7)) for _ in range(7)]
    for first in hands:
        assert compare_hands(first, first) == 0
        for second in hands:
            assert compare_hands(first, second) == -compare_hands(second, first)


def test_board_playing_hands_tie_exactly():
    board = ["As", "Ks", "Qs", "Js", "Ts"]
    first = evaluate_labels(["2c", "3d", *board])
    second = evaluate_labels(["2d", "3c", *board])
    assert first.category == HandCategory.ROYAL_FLUSH
    assert compare_hands(first, second) == 0


def test_evaluate_hand_accepts_five_and_six_cards():
    assert evaluate_labels(["9h", "8d", "7c", "6s", "5h"]).category == HandCategory.STRAIGHT
    assert evaluate_labels(["9h", "9d", "7c", "6s", "5h", "2c"]).category == HandCategory.ONE_PAIR


def test_evaluate_hand_rejects_bad_input():
    with pytest.raises(ValueError, match="Expected 5 to 7 cards"):
        evaluate_labels(["Ah", "Kd", "Qc", "Js"])
    with pytest.raises(ValueError, match="Duplicate"):
        evaluate_hand(parse_cards(["Ah", "Ah", "Qc", "Js", "9d", "2c", "3c"]))


def test_best_hand_reports_five_cards_and_name():
    result = evaluate_labels(["Qc", "Qd", "Qs", "9h", "9s", "2d", "3c"])
    assert len(result.cards) == 5
    assert result.name == "Full House"
    assert result.to_dict()["category"] == "FULL_HOUSE"
