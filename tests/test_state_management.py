import dataclasses
import json

import pytest

from holdem.models import GamePhase

from .helpers import auto_complete_hand, check_down, create_engine, perform_actions, rig_cards, start_hand

BOARD = ["2c", "7d", "9h", "Jc", "4s"]


def test_button_rotates_every_hand():
    engine = create_engine()
    buttons = []
    for _ in range(5):
        start_hand(engine)
        buttons.append(engine.dealer_position)
        auto_complete_hand(engine)
    assert buttons == [0, 1, 2, 3, 0]
    assert engine.hand_number == 5


def test_stacks_carry_over_between_hands():
    engine = start_hand(create_engine())
    perform_actions(engine, [("fold", 0), ("fold", 0), ("fold", 0)])
    assert [p.chips for p in engine.participants] == [1_000, 990, 1_010, 1_000]

    start_hand(engine)
    # Button moved to seat 1: seat 2 posts the small blind, seat 3 the big blind.
    assert [p.chips for p in engine.participants] == [1_000, 990, 1_000, 980]
    assert engine.current_player_index == 0


def test_new_hand_resets_per_hand_state():
    engine = start_hand(create_engine())
    auto_complete_hand(engine)
    assert engine.winners

    start_hand(engine)
    assert engine.winners == []
    assert engine.hand_results == {}
    assert engine.community_cards == []
    assert engine.betting_round.value == "preflop"
    assert all(not p.folded for p in engine.participants)
    assert engine.deck.remaining_cards() == 52 - 8


def test_snapshots_are_immutable_copies():
    engine = start_hand(create_engine())
    state = engine.get_game_state()
    with pytest.raises(dataclasses.FrozenInstanceError):
        state.pot = 0  # type: ignore[misc]
    with pytest.raises(dataclasses.FrozenInstanceError):
        state.participants[0].chips = 0  # type: ignore[misc]

    engine.player_action("call")
    assert state.pot == 30
    assert engine.get_game_state().pot == 50


def test_state_payload_is_json_serialisable():
    engine = start_hand(create_engine(side_pots=True))
    auto_complete_hand(engine)
    payload = engine.get_game_state(viewer=0).to_dict()
    decoded = json.loads(json.dumps(payload))
    assert decoded["game_phase"] == GamePhase.FINISHED.value
    assert len(decoded["community_cards"]) in (0, 5)
    assert len(decoded["players"]) == 4


def test_busted_seat_stays_out_of_later_hands():
    engine = start_hand(create_engine(stacks=[40, 1_000, 1_000]))
    rig_cards(engine, {0: ["2h", "3d"], 1: ["As", "Ad"], 2: ["Kh", "Ks"]}, BOARD)
    perform_actions(engine, [("raise", 40), ("call", 0), ("call", 0)])
    check_down(engine)
    assert engine.participants[0].chips == 0
    assert engine.participants[1].chips == 1_080

    start_hand(engine)
    assert not engine.participants[0].active
    assert engine.participants[0].hole_cards == []
    assert engine.dealer_position == 1
    assert engine.get_next_active_player(0) != 0


def test_match_over_after_everyone_else_busts():
    engine = start_hand(create_engine(seats=2, stacks=[50, 1_000]))
    rig_cards(engine, {0: ["2h", "3d"], 1: ["As", "Ad"]}, BOARD)
    perform_actions(engine, [("raise", 50), ("call", 0)])
    assert engine.is_hand_complete()
    assert [p.chips for p in engine.participants] == [0, 1_050]
    assert engine.is_match_over()
    with pytest.raises(RuntimeError):
        engine.start_new_hand()
