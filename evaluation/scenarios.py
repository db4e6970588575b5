"""Scripted conversations exercising state transitions, clarifications and checks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from models.decision import ExtractedEntities, ExtractedGarment, RequestClassification
from models.outfit_item import OutfitItem


@dataclass
class ScriptedTurn:
    message: str
    classification: RequestClassification
    new_items: List[OutfitItem] = field(default_factory=list)
    original_photo_outfit: Optional[List[OutfitItem]] = None


@dataclass
class EvaluationScenario:
    name: str
    description: str
    turns: List[ScriptedTurn]
    expectations: Dict[str, object]


def scripted_classification(request_type: str, items: Sequence[OutfitItem] = (), **kwargs) -> RequestClassification:
    garments = [ExtractedGarment(name=item.name, category=item.category, zone=item.zone) for item in items]
    return RequestClassification(
        type=request_type,
        confidence=0.9,
        intent=kwargs.pop("intent", ""),
        extracted_entities=ExtractedEntities(
            garments=garments,
            style_descriptors=kwargs.pop("style_descriptors", []),
        ),
        **kwargs,
    )


def _turn(message: str, request_type: str, *items: OutfitItem, **kwargs) -> ScriptedTurn:
    classification = scripted_classification(request_type, items, **kwargs)
    return ScriptedTurn(message=message, classification=classification, new_items=list(items))


WHITE_TEE = OutfitItem(name="White T-Shirt", zone="top", category="t-shirt", colors=("white",))
BLUE_JEANS = OutfitItem(name="Blue Jeans", zone="bottom", category="jeans", colors=("blue",))
BLACK_JEANS = OutfitItem(name="Black Jeans", zone="bottom", category="jeans", colors=("black",))
SNEAKERS = OutfitItem(name="White Sneakers", zone="footwear", category="sneakers", colors=("white",))
DENIM_JACKET = OutfitItem(name="Denim Jacket", zone="outerwear", category="jacket", colors=("blue",))
RED_DRESS = OutfitItem(name="Red Dress", zone="one_piece", category="dress", colors=("red",))
GREEN_SKIRT = OutfitItem(name="Green Skirt", zone="bottom", category="skirt", colors=("green",))
SUIT_BLAZER = OutfitItem(name="Navy Suit Blazer", zone="outerwear", category="blazer", colors=("navy",))
GYM_SHORTS = OutfitItem(name="Athletic Gym Shorts", zone="bottom", category="shorts", colors=("gray",))
WOOL_COAT = OutfitItem(name="Wool Coat", zone="outerwear", category="coat", colors=("camel",))
DENIM_SHORTS = OutfitItem(name="Denim Shorts", zone="bottom", category="shorts", colors=("blue",))


SCENARIOS: List[EvaluationScenario] = [
    EvaluationScenario(
        name="build_separates",
        description="An outfit assembled from scratch ends up as separates.",
        turns=[
            _turn("a white t-shirt and blue jeans", "type_a_complete_outfit", WHITE_TEE, BLUE_JEANS),
            _turn("add white sneakers", "type_e_layering", SNEAKERS, layering_keywords=["add"]),
        ],
        expectations={"final_state": "separates", "final_items": 3, "needs_clarification": False},
    ),
    EvaluationScenario(
        name="swap_bottom",
        description="Asking for new jeans replaces the current bottom.",
        turns=[
            _turn("a white t-shirt and blue jeans", "type_a_complete_outfit", WHITE_TEE, BLUE_JEANS),
            _turn("black jeans", "type_b_single_item", BLACK_JEANS),
        ],
        expectations={"final_state": "separates", "contains": ["Black Jeans"], "excludes": ["Blue Jeans"]},
    ),
    EvaluationScenario(
        name="layer_jacket",
        description="Outerwear over separates moves the outfit to the layered state.",
        turns=[
            _turn("a white t-shirt and blue jeans", "type_a_complete_outfit", WHITE_TEE, BLUE_JEANS),
            _turn("layer a denim jacket over everything", "type_e_layering", DENIM_JACKET, layering_keywords=["layer", "over"]),
        ],
        expectations={"final_state": "layered", "final_items": 3},
    ),
    EvaluationScenario(
        name="dress_over_separates",
        description="A dress requested over separates is offered as a switch, not applied.",
        turns=[
            _turn("a white t-shirt and blue jeans", "type_a_complete_outfit", WHITE_TEE, BLUE_JEANS),
            _turn("a red dress", "type_b_single_item", RED_DRESS),
        ],
        expectations={"final_state": "separates", "needs_clarification": True},
    ),
    EvaluationScenario(
        name="impossible_dress_and_skirt",
        description="A dress requested together with a skirt triggers a clarification.",
        turns=[
            _turn("a red dress with a green skirt", "type_a_complete_outfit", RED_DRESS, GREEN_SKIRT),
        ],
        expectations={"final_state": "empty", "needs_clarification": True},
    ),
    EvaluationScenario(
        name="formality_clash",
        description="A suit blazer over gym shorts fails the formality check.",
        turns=[
            _turn("a white t-shirt and athletic gym shorts", "type_a_complete_outfit", WHITE_TEE, GYM_SHORTS),
            _turn("add a navy suit blazer", "type_e_layering", SUIT_BLAZER, layering_keywords=["add"]),
        ],
        expectations={"final_state": "layered", "failed_checks": ["formality"]},
    ),
    EvaluationScenario(
        name="coat_with_shorts",
        description="A wool coat layered over denim shorts fails the seasonal check.",
        turns=[
            _turn("a white t-shirt and denim shorts", "type_a_complete_outfit", WHITE_TEE, DENIM_SHORTS),
            _turn("add a wool coat", "type_e_layering", WOOL_COAT, layering_keywords=["add"]),
        ],
        expectations={"final_state": "layered", "failed_checks": ["seasonal"]},
    ),
    EvaluationScenario(
        name="undo_redo",
        description="Undo restores the previous look and redo brings the change back.",
        turns=[
            _turn("a white t-shirt and blue jeans", "type_a_complete_outfit", WHITE_TEE, BLUE_JEANS),
            _turn("black jeans", "type_b_single_item", BLACK_JEANS),
            _turn("undo", "type_b_single_item"),
            _turn("redo", "type_b_single_item"),
        ],
        expectations={"final_state": "separates", "contains": ["Black Jeans"], "excludes": ["Blue Jeans"]},
    ),
]


__all__ = ["EvaluationScenario", "SCENARIOS", "ScriptedTurn", "scripted_classification"]
