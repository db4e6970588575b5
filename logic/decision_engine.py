"""Routing of classified requests to outfit decisions.

``make_decision`` first handles request types that do not depend on the
current outfit shape (style/mood, removal, attribute modification) and then
dispatches on the outfit state to one of the separates, one-piece or layered
decision trees.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Sequence

from models.clarification import ClarificationContext, ClarificationOption
from models.compatibility import Suggestion
from models.decision import ClarificationQuestion, DecisionResult, RequestClassification
from models.outfit import OutfitState, describe_outfit, innermost_layer, outermost_layer
from models.outfit_item import OutfitItem

logger = logging.getLogger(__name__)

REPLACE_PATTERN = re.compile(r"replace|swap|change", re.IGNORECASE)
BASE_LAYER_KEYWORDS = ("tank", "tee", "t-shirt", "cami", "undershirt")
NO_ITEMS_REASON = "No items found for request"
ONE_PIECE_LAYER_ZONES = {"outerwear", "accessories", "footwear"}


def _question(
    question: str,
    options: List[ClarificationOption],
    classification: RequestClassification,
    clarification_type: str = "ambiguous",
) -> ClarificationQuestion:
    context = ClarificationContext(
        question=question,
        original_message=classification.intent,
        conversation_id="",
        type=clarification_type,
        options=options,
    )
    return ClarificationQuestion(question=question, options=options, context=context)


def _item_options(items: Sequence[OutfitItem], prefix: str) -> List[ClarificationOption]:
    return [
        ClarificationOption(id=f"{prefix}_{index}", label=item.name, description=item.category or "", value=item.name)
        for index, item in enumerate(items)
    ]


def _mentions(text: str, item: OutfitItem) -> bool:
    """True when ``text`` names the item or its category."""

    lowered = text.lower()
    if item.name.lower() in lowered:
        return True
    return bool(item.category) and item.category.lower() in lowered


def _in_zone(items: Sequence[OutfitItem], zone: str) -> List[OutfitItem]:
    return [item for item in items if item.zone == zone]


def _no_items() -> DecisionResult:
    return DecisionResult(action="clarify", reasoning=NO_ITEMS_REASON)


# --- state independent requests -------------------------------------------


def handle_style_mood(classification: RequestClassification, new_items: Sequence[OutfitItem]) -> DecisionResult:
    return DecisionResult(
        action="suggest",
        reasoning="Style transformation requires suggestion and approval",
        suggestions=[
            Suggestion(
                type="style",
                title="Style Transformation",
                description=classification.intent,
                items=list(new_items),
                requires_approval=True,
            )
        ],
        should_regenerate_from_scratch=True,
    )


def handle_removal(classification: RequestClassification, state: OutfitState) -> DecisionResult:
    intent = classification.intent or ""
    to_remove = [item for item in state.items if _mentions(intent, item)]

    if not to_remove and classification.removal_keywords:
        question = "Which item would you like to remove?"
        return DecisionResult(
            action="clarify",
            reasoning="Need to identify which item to remove",
            clarification_question=_question(question, _item_options(state.items, "remove"), classification),
            should_regenerate_from_scratch=True,
        )

    remaining = [item for item in state.items if item not in to_remove]
    if not remaining:
        return DecisionResult(action="clarify", reasoning="Cannot remove all items - outfit would be empty")

    return DecisionResult(
        action="execute",
        reasoning="Remove specified items",
        items_to_remove=to_remove,
        should_regenerate_from_scratch=True,
    )


def handle_attribute_modification(
    classification: RequestClassification, state: OutfitState, new_items: Sequence[OutfitItem]
) -> DecisionResult:
    intent = classification.intent or ""
    target = next((item for item in state.items if _mentions(intent, item)), None)

    if target is None and len(state.items) > 1:
        question = "Which item would you like to modify?"
        return DecisionResult(
            action="clarify",
            reasoning="Need to identify which item to modify",
            clarification_question=_question(question, _item_options(state.items, "modify"), classification),
            should_regenerate_from_scratch=True,
        )
    if new_items and target is not None:
        return DecisionResult(
            action="execute",
            reasoning="Modify item attribute by replacing with new variant",
            items_to_add=list(new_items),
            items_to_remove=[target],
            should_regenerate_from_scratch=True,
        )
    if len(state.items) == 1 and new_items:
        return DecisionResult(
            action="execute",
            reasoning="Modify the only item in outfit",
            items_to_add=list(new_items),
            items_to_remove=[state.items[0]],
            should_regenerate_from_scratch=True,
        )
    return DecisionResult(action="clarify", reasoning="Unable to determine which item to modify")


def handle_empty_state(state: OutfitState, new_items: Sequence[OutfitItem]) -> DecisionResult:
    to_remove: List[OutfitItem] = []
    if any(item.zone == "one_piece" for item in new_items):
        to_remove = [item for item in state.items if item.zone in ("top", "bottom")]
    return DecisionResult(
        action="execute",
        reasoning="Starting new outfit with first items",
        items_to_add=list(new_items),
        items_to_remove=to_remove,
    )


# --- separates: top + bottom ------------------------------------------------


def _one_piece_over_separates(state: OutfitState, new_items: Sequence[OutfitItem]) -> DecisionResult:
    tops = _in_zone(state.items, "top")
    bottoms = _in_zone(state.items, "bottom")
    replaced = tops + bottoms
    return DecisionResult(
        action="suggest",
        reasoning=(
            "One-piece replaces both top and bottom. Removing: "
            f"{', '.join(i.name for i in tops)} and {', '.join(i.name for i in bottoms)}"
        ),
        items_to_add=list(new_items),
        items_to_remove=replaced,
        suggestions=[
            Suggestion(
                type="style",
                title="Switch to One-Piece",
                description=f"Replace your {' and '.join(i.name for i in replaced)} with {new_items[0].name}",
                items=list(new_items),
                requires_approval=True,
            )
        ],
        should_regenerate_from_scratch=True,
    )


def handle_separates(
    classification: RequestClassification, state: OutfitState, new_items: Sequence[OutfitItem]
) -> DecisionResult:
    if not new_items:
        return _no_items()

    zone = new_items[0].zone
    if zone == "top":
        if classification.layering_keywords:
            return DecisionResult(
                action="execute",
                reasoning="User wants to layer over existing top",
                items_to_add=list(new_items),
            )
        return DecisionResult(
            action="execute",
            reasoning="Replace existing top with new top item",
            items_to_add=list(new_items),
            items_to_remove=_in_zone(state.items, "top"),
            should_regenerate_from_scratch=True,
        )
    if zone == "bottom":
        return DecisionResult(
            action="execute",
            reasoning="Replace existing bottom with new bottom item",
            items_to_add=list(new_items),
            items_to_remove=_in_zone(state.items, "bottom"),
            should_regenerate_from_scratch=True,
        )
    if zone == "one_piece":
        return _one_piece_over_separates(state, new_items)
    if zone == "outerwear":
        if REPLACE_PATTERN.search(classification.intent or ""):
            return DecisionResult(
                action="execute",
                reasoning="Replace existing outerwear as requested",
                items_to_add=list(new_items),
                items_to_remove=_in_zone(state.items, "outerwear"),
                should_regenerate_from_scratch=True,
            )
        return DecisionResult(
            action="execute",
            reasoning="Add outerwear as layer over existing outfit",
            items_to_add=list(new_items),
        )

    current = _in_zone(state.items, str(zone))
    return DecisionResult(
        action="execute",
        reasoning=f"Add or replace {zone}",
        items_to_add=list(new_items),
        items_to_remove=current,
        should_regenerate_from_scratch=bool(current),
    )


# --- one-piece: dress, jumpsuit, romper -------------------------------------

BOTTOM_OPTIONS = [
    ClarificationOption(id="jeans", label="High-waisted jeans", description="Casual and versatile", value="high-waisted jeans"),
    ClarificationOption(id="skirt", label="Mini skirt", description="Flirty and fun", value="mini skirt"),
    ClarificationOption(id="shorts", label="Shorts", description="Comfortable and casual", value="shorts"),
    ClarificationOption(id="choose", label="You choose", description="Let the AI pick", value="ai_choose"),
]

TOP_OPTIONS = [
    ClarificationOption(id="tshirt", label="T-shirt", description="Casual and comfortable", value="t-shirt"),
    ClarificationOption(id="blouse", label="Blouse", description="Dressy and elegant", value="blouse"),
    ClarificationOption(id="crop", label="Crop top", description="Trendy and fun", value="crop top"),
    ClarificationOption(id="choose", label="You choose", description="Let the AI pick", value="ai_choose"),
]


def _top_over_one_piece(
    classification: RequestClassification,
    one_piece: List[OutfitItem],
    new_items: Sequence[OutfitItem],
    original_photo_outfit: Optional[Sequence[OutfitItem]],
) -> DecisionResult:
    original_bottom = next(
        (item for item in original_photo_outfit or () if item.zone == "bottom"),
        None,
    )
    if original_bottom is not None:
        logger.debug("restoring original bottom %s", original_bottom.name)
        return DecisionResult(
            action="execute",
            reasoning=(
                f"Replacing one-piece with {new_items[0].name} and restoring original bottom "
                f"({original_bottom.name}) from photo"
            ),
            items_to_add=list(new_items) + [original_bottom],
            items_to_remove=one_piece,
            should_regenerate_from_scratch=True,
        )

    dress = one_piece[0].name if one_piece else "dress"
    question = f"I'll swap your {dress} for {new_items[0].name}! What would you like for the bottom?"
    return DecisionResult(
        action="clarify",
        reasoning="One-piece to top requires bottom selection (no original bottom found in photo)",
        clarification_question=_question(question, list(BOTTOM_OPTIONS), classification, "missing_info"),
        items_to_add=list(new_items),
        items_to_remove=one_piece,
        should_regenerate_from_scratch=True,
    )


def handle_one_piece(
    classification: RequestClassification,
    state: OutfitState,
    new_items: Sequence[OutfitItem],
    original_photo_outfit: Optional[Sequence[OutfitItem]] = None,
) -> DecisionResult:
    if not new_items:
        return _no_items()

    layer = DecisionResult(
        action="execute",
        reasoning="Add outerwear layer over one-piece",
        items_to_add=list(new_items),
    )
    zones = {item.zone for item in new_items}
    one_piece = _in_zone(state.items, "one_piece")

    layering = classification.type == "type_e_layering" or bool(classification.layering_keywords)
    if layering and zones <= ONE_PIECE_LAYER_ZONES:
        return layer

    if "one_piece" in zones:
        return DecisionResult(
            action="execute",
            reasoning="Replace one-piece with another one-piece",
            items_to_add=list(new_items),
            items_to_remove=one_piece,
            should_regenerate_from_scratch=True,
        )
    if "top" in zones and "bottom" in zones:
        return DecisionResult(
            action="execute",
            reasoning="Replace one-piece with separates combo (both top and bottom specified)",
            items_to_add=list(new_items),
            items_to_remove=one_piece,
            should_regenerate_from_scratch=True,
        )
    if "outerwear" in zones:
        return layer
    if "top" in zones:
        return _top_over_one_piece(classification, one_piece, new_items, original_photo_outfit)
    if "bottom" in zones:
        question = f"I'll add {new_items[0].name}! What would you like for the top?"
        return DecisionResult(
            action="clarify",
            reasoning="One-piece to bottom requires top selection",
            clarification_question=_question(question, list(TOP_OPTIONS), classification, "missing_info"),
            items_to_add=list(new_items),
            items_to_remove=one_piece,
            should_regenerate_from_scratch=True,
        )
    return DecisionResult(
        action="execute",
        reasoning="Add item to one-piece outfit",
        items_to_add=list(new_items),
    )


# --- layered: several tops or outerwear ---------------------------------------


def _layer_position(index: int, total: int) -> str:
    if index == 0:
        return "inner"
    if index == total - 1:
        return "outer"
    return "middle"


def handle_layered(
    classification: RequestClassification, state: OutfitState, new_items: Sequence[OutfitItem]
) -> DecisionResult:
    if not new_items:
        return _no_items()

    zone = new_items[0].zone
    if zone == "one_piece":
        return _one_piece_over_separates(state, new_items)
    if zone not in ("top", "outerwear"):
        current = _in_zone(state.items, str(zone))
        return DecisionResult(
            action="execute",
            reasoning=f"Replace {zone}",
            items_to_add=list(new_items),
            items_to_remove=current,
            should_regenerate_from_scratch=bool(current),
        )

    if classification.layering_keywords:
        return DecisionResult(
            action="execute",
            reasoning="Add as new layer (layering keywords detected)",
            items_to_add=list(new_items),
        )

    top_layers = state.zones.get("top", []) + state.zones.get("outerwear", [])
    if len(top_layers) >= 3:
        options = [
            ClarificationOption(
                id=f"layer_{index}",
                label=layer.name,
                description=f"Replace {_layer_position(index, len(top_layers))} layer",
                value=layer.name,
            )
            for index, layer in enumerate(top_layers)
        ]
        options.append(
            ClarificationOption(
                id="add_layer",
                label="Add as new layer",
                description="Keep all current layers and add this on top",
                value="add_layer",
            )
        )
        return DecisionResult(
            action="clarify",
            reasoning="Multiple layers present, need to know which to replace or whether to add",
            clarification_question=_question(
                "Should I replace a layer or add this as a new layer?", options, classification
            ),
            items_to_add=list(new_items),
            should_regenerate_from_scratch=True,
        )

    if len(top_layers) == 2:
        if any(keyword in new_items[0].name.lower() for keyword in BASE_LAYER_KEYWORDS):
            innermost = innermost_layer(state, "top")
            return DecisionResult(
                action="execute",
                reasoning="Replace innermost base layer",
                items_to_add=list(new_items),
                items_to_remove=[innermost] if innermost else [],
                should_regenerate_from_scratch=True,
            )
        options = [
            ClarificationOption(id=f"layer_{index}", label=layer.name, description="Replace this layer", value=layer.name)
            for index, layer in enumerate(top_layers)
        ]
        return DecisionResult(
            action="clarify",
            reasoning="Need to know which layer to replace",
            clarification_question=_question("Which layer would you like to replace?", options, classification),
            items_to_add=list(new_items),
            should_regenerate_from_scratch=True,
        )

    outermost = outermost_layer(state, "top")
    return DecisionResult(
        action="execute",
        reasoning="Replace outermost layer",
        items_to_add=list(new_items),
        items_to_remove=[outermost] if outermost else [],
        should_regenerate_from_scratch=True,
    )


def make_decision(
    classification: RequestClassification,
    current_items: Sequence[OutfitItem],
    new_items: Sequence[OutfitItem],
    original_photo_outfit: Optional[Sequence[OutfitItem]] = None,
) -> DecisionResult:
    """Decide how ``new_items`` change the outfit made of ``current_items``."""

    state = describe_outfit(current_items)
    logger.debug(
        "deciding type=%s state=%s new_items=%d", classification.type, state.type, len(new_items)
    )

    if classification.type == "type_d_style_mood":
        return handle_style_mood(classification, new_items)
    if classification.type == "type_f_removal":
        return handle_removal(classification, state)
    if classification.type == "type_c_attribute_modification":
        return handle_attribute_modification(classification, state, new_items)

    if state.type == "separates":
        return handle_separates(classification, state, new_items)
    if state.type == "one_piece":
        return handle_one_piece(classification, state, new_items, original_photo_outfit)
    if state.type == "layered":
        return handle_layered(classification, state, new_items)
    return handle_empty_state(state, new_items)


__all__ = [
    "handle_attribute_modification",
    "handle_empty_state",
    "handle_layered",
    "handle_one_piece",
    "handle_removal",
    "handle_separates",
    "handle_style_mood",
    "make_decision",
]
