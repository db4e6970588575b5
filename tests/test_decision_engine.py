"""Tests for request routing in the decision engine."""

from pathlib import Path
import sys

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from logic.decision_engine import BOTTOM_OPTIONS, NO_ITEMS_REASON, TOP_OPTIONS, make_decision
from models.decision import RequestClassification
from models.outfit import classify_outfit_state
from models.outfit_item import OutfitItem

TEE = OutfitItem(name="White T-Shirt", zone="top", category="t-shirt")
TANK = OutfitItem(name="Black Tank Top", zone="top", category="tank top")
BLOUSE = OutfitItem(name="Silk Blouse", zone="top", category="blouse")
JEANS = OutfitItem(name="Blue Jeans", zone="bottom", category="jeans")
BLACK_JEANS = OutfitItem(name="Black Jeans", zone="bottom", category="jeans")
SNEAKERS = OutfitItem(name="White Sneakers", zone="footwear", category="sneakers")
JACKET = OutfitItem(name="Denim Jacket", zone="outerwear", category="jacket")
CARDIGAN = OutfitItem(name="Grey Cardigan", zone="outerwear", category="cardigan")
COAT = OutfitItem(name="Wool Coat", zone="outerwear", category="coat")
BLAZER = OutfitItem(name="Navy Blazer", zone="outerwear", category="blazer")
DRESS = OutfitItem(name="Red Dress", zone="one_piece", category="dress")
GREEN_DRESS = OutfitItem(name="Green Dress", zone="one_piece", category="dress")


def _classify(request_type: str = "type_b_single_item", **kwargs) -> RequestClassification:
    return RequestClassification(type=request_type, confidence=0.9, **kwargs)


def _apply(current, decision):
    removed = {item.name for item in decision.items_to_remove}
    return [item for item in current if item.name not in removed] + list(decision.items_to_add)


def test_empty_state_adds_items() -> None:
    decision = make_decision(_classify("type_a_complete_outfit"), [], [TEE, JEANS])
    assert decision.action == "execute"
    assert decision.items_to_add == [TEE, JEANS]
    assert decision.items_to_remove == []


def test_one_piece_into_empty_state_drops_lone_top() -> None:
    decision = make_decision(_classify(), [TEE], [DRESS])
    assert decision.items_to_remove == [TEE]
    assert classify_outfit_state(_apply([TEE], decision)) == "one_piece"


def test_separates_top_replaces_existing_top() -> None:
    decision = make_decision(_classify(), [TEE, JEANS], [BLOUSE])
    assert decision.action == "execute"
    assert decision.items_to_remove == [TEE]
    assert decision.should_regenerate_from_scratch


def test_separates_top_with_layering_keywords_adds_layer() -> None:
    decision = make_decision(_classify("type_e_layering", layering_keywords=["over"]), [TEE, JEANS], [BLOUSE])
    assert decision.items_to_remove == []
    assert classify_outfit_state(_apply([TEE, JEANS], decision)) == "layered"


def test_separates_bottom_is_replaced() -> None:
    decision = make_decision(_classify(), [TEE, JEANS], [BLACK_JEANS])
    assert decision.items_to_remove == [JEANS]
    assert decision.reasoning == "Replace existing bottom with new bottom item"


def test_separates_one_piece_is_suggested() -> None:
    decision = make_decision(_classify(), [TEE, JEANS], [DRESS])
    assert decision.action == "suggest"
    assert decision.items_to_remove == [TEE, JEANS]
    assert decision.suggestions[0].title == "Switch to One-Piece"
    assert decision.suggestions[0].description == "Replace your White T-Shirt and Blue Jeans with Red Dress"
    assert decision.clarification_question is None


def test_separates_outerwear_adds_unless_replacing() -> None:
    added = make_decision(_classify(intent="Add a denim jacket"), [TEE, JEANS], [JACKET])
    assert added.reasoning == "Add outerwear as layer over existing outfit"

    replaced = make_decision(_classify(intent="Swap in a blazer"), [TEE, JEANS], [BLAZER])
    assert replaced.reasoning == "Replace existing outerwear as requested"
    assert replaced.items_to_remove == []


def test_separates_footwear_replaces_same_zone() -> None:
    first = make_decision(_classify(), [TEE, JEANS], [SNEAKERS])
    assert first.items_to_remove == []
    boots = OutfitItem(name="Black Boots", zone="footwear")
    second = make_decision(_classify(), [TEE, JEANS, SNEAKERS], [boots])
    assert second.items_to_remove == [SNEAKERS]


def test_missing_new_items_asks_for_clarification() -> None:
    decision = make_decision(_classify(), [TEE, JEANS], [])
    assert decision.action == "clarify"
    assert decision.reasoning == NO_ITEMS_REASON


def test_top_over_one_piece_restores_original_bottom() -> None:
    decision = make_decision(_classify(), [DRESS], [TEE], original_photo_outfit=[BLOUSE, JEANS])
    assert decision.action == "execute"
    assert decision.items_to_add == [TEE, JEANS]
    assert decision.items_to_remove == [DRESS]
    assert classify_outfit_state(_apply([DRESS], decision)) == "separates"


def test_top_over_one_piece_without_photo_asks_for_bottom() -> None:
    decision = make_decision(_classify(), [DRESS], [TEE])
    assert decision.action == "clarify"
    question = decision.clarification_question
    assert question.question == "I'll swap your Red Dress for White T-Shirt! What would you like for the bottom?"
    assert question.options == BOTTOM_OPTIONS
    assert question.context.type == "missing_info"


def test_bottom_over_one_piece_asks_for_top() -> None:
    decision = make_decision(_classify(), [DRESS], [JEANS])
    assert decision.clarification_question.question == "I'll add Blue Jeans! What would you like for the top?"
    assert decision.clarification_question.options == TOP_OPTIONS


def test_one_piece_swaps_and_layers() -> None:
    swap = make_decision(_classify(), [DRESS], [GREEN_DRESS])
    assert swap.items_to_remove == [DRESS]

    combo = make_decision(_classify("type_a_complete_outfit"), [DRESS], [TEE, JEANS])
    assert combo.items_to_remove == [DRESS]

    layer = make_decision(_classify(), [DRESS], [JACKET])
    assert layer.items_to_remove == []
    assert layer.reasoning == "Add outerwear layer over one-piece"


def test_layered_base_layer_replaces_innermost() -> None:
    decision = make_decision(_classify(), [TEE, JEANS, JACKET], [TANK])
    assert decision.action == "execute"
    assert decision.items_to_remove == [TEE]


def test_layered_two_layers_asks_which_to_replace() -> None:
    decision = make_decision(_classify(), [TEE, JEANS, JACKET], [BLOUSE])
    assert decision.action == "clarify"
    assert decision.clarification_question.question == "Which layer would you like to replace?"
    assert [option.label for option in decision.clarification_question.options] == ["White T-Shirt", "Denim Jacket"]


def test_layered_three_layers_offers_add_layer() -> None:
    decision = make_decision(_classify(), [TEE, JEANS, CARDIGAN, COAT], [BLAZER])
    options = decision.clarification_question.options
    assert decision.action == "clarify"
    assert [option.id for option in options] == ["layer_0", "layer_1", "layer_2", "add_layer"]
    assert [option.description for option in options[:3]] == [
        "Replace inner layer",
        "Replace middle layer",
        "Replace outer layer",
    ]


def test_layered_with_layering_keywords_adds() -> None:
    decision = make_decision(_classify(layering_keywords=["layer"]), [TEE, JEANS, CARDIGAN, COAT], [BLAZER])
    assert decision.action == "execute"
    assert decision.items_to_remove == []


def test_layered_dress_is_suggested_as_switch() -> None:
    decision = make_decision(_classify(), [TEE, JEANS, JACKET], [DRESS])
    assert decision.action == "suggest"
    assert set(item.name for item in decision.items_to_remove) == {"White T-Shirt", "Blue Jeans"}


def test_style_mood_is_suggested() -> None:
    decision = make_decision(_classify("type_d_style_mood", intent="User wants a more formal look"), [TEE, JEANS], [])
    assert decision.action == "suggest"
    assert decision.should_regenerate_from_scratch
    assert decision.suggestions[0].title == "Style Transformation"
    assert decision.suggestions[0].description == "User wants a more formal look"


def test_removal_matches_named_items() -> None:
    decision = make_decision(
        _classify("type_f_removal", intent="remove the blue jeans", removal_keywords=["remove"]),
        [TEE, JEANS, SNEAKERS],
        [],
    )
    assert decision.action == "execute"
    assert decision.items_to_remove == [JEANS]


def test_removal_without_match_asks_which_item() -> None:
    decision = make_decision(
        _classify("type_f_removal", intent="remove it", removal_keywords=["remove"]), [TEE, JEANS], []
    )
    assert decision.action == "clarify"
    assert [option.id for option in decision.clarification_question.options] == ["remove_0", "remove_1"]


def test_removal_of_everything_is_refused() -> None:
    decision = make_decision(
        _classify("type_f_removal", intent="remove the white t-shirt and blue jeans"), [TEE, JEANS], []
    )
    assert decision.action == "clarify"
    assert decision.reasoning == "Cannot remove all items - outfit would be empty"


def test_attribute_modification_replaces_target() -> None:
    decision = make_decision(
        _classify("type_c_attribute_modification", intent="make the jeans black"), [TEE, JEANS], [BLACK_JEANS]
    )
    assert decision.action == "execute"
    assert decision.items_to_remove == [JEANS]
    assert decision.items_to_add == [BLACK_JEANS]


def test_attribute_modification_without_target_asks() -> None:
    decision = make_decision(
        _classify("type_c_attribute_modification", intent="make it darker"), [TEE, JEANS], [BLACK_JEANS]
    )
    assert decision.action == "clarify"
    assert decision.clarification_question.question == "Which item would you like to modify?"


@pytest.mark.parametrize(
    "current, new_items",
    [
        ([], [DRESS]),
        ([TEE], [DRESS]),
        ([JEANS], [DRESS]),
        ([DRESS], [TEE, JEANS]),
        ([DRESS], [GREEN_DRESS]),
        ([DRESS], [TEE]),
        ([DRESS], [JACKET]),
    ],
)
def test_executed_one_piece_never_keeps_separates(current, new_items) -> None:
    decision = make_decision(_classify(), current, new_items, original_photo_outfit=[BLOUSE, JEANS])
    if decision.action != "execute":
        return
    result = _apply(current, decision)
    zones = {item.zone for item in result}
    assert not ("one_piece" in zones and zones & {"top", "bottom"})


def test_layering_separates_over_one_piece_replaces_it() -> None:
    layering = _classify("type_e_layering", layering_keywords=["layer", "over"])
    decision = make_decision(layering, [DRESS], [TEE, JEANS])
    assert decision.action == "execute"
    assert decision.items_to_remove == [DRESS]
    assert classify_outfit_state(_apply([DRESS], decision)) == "separates"


def test_layering_only_shortcuts_for_pieces_that_sit_over_a_one_piece() -> None:
    layering = _classify("type_e_layering", layering_keywords=["over"])
    jacket = make_decision(layering, [DRESS], [JACKET])
    assert jacket.items_to_remove == []
    assert jacket.reasoning == "Add outerwear layer over one-piece"

    top = make_decision(layering, [DRESS], [TEE])
    assert top.action == "clarify"
    assert top.items_to_remove == [DRESS]


@pytest.mark.parametrize("new_items", [[TEE, JEANS], [TEE], [JEANS], [JACKET], [SNEAKERS]])
def test_layering_requests_never_mix_one_piece_and_separates(new_items) -> None:
    layering = _classify("type_e_layering", layering_keywords=["layer", "over"])
    decision = make_decision(layering, [DRESS], new_items, original_photo_outfit=[BLOUSE, JEANS])
    if decision.action != "execute":
        return
    zones = {item.zone for item in _apply([DRESS], decision)}
    assert not ("one_piece" in zones and zones & {"top", "bottom"})
