"""Detection and resolution of ambiguous or contradictory styling requests.

Detection inspects the raw message together with the current outfit and
returns an :class:`EdgeCaseScenario` (or ``None``). Resolution maps a scenario
to an :class:`EdgeCaseResolution` carrying the question and the options shown
to the user. Both steps are stateless and never raise.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Dict, List, Optional, Sequence

from models.clarification import ClarificationOption, EdgeCaseResolution, EdgeCaseScenario
from models.color_theory import COLOR_WORDS
from models.outfit_item import OutfitItem

logger = logging.getLogger(__name__)

REMOVAL_PATTERN = re.compile(r"remove|take off", re.IGNORECASE)
AMBIGUOUS_TERM_PATTERN = re.compile(r"\b(top|bottom|shirt|pants)\b", re.IGNORECASE)
SPECIFIC_TERM_PATTERN = re.compile(r"\b(crop|tank|t-shirt|specific)\b", re.IGNORECASE)
PRONOUN_PATTERN = re.compile(r"\b(it|this|that)\b", re.IGNORECASE)
COLOR_MENTION_PATTERN = re.compile(r"\b(" + "|".join(COLOR_WORDS) + r")\b", re.IGNORECASE)

UNEXPECTED_SITUATION = "I encountered an unexpected situation. Could you rephrase your request?"

AMBIGUOUS_GARMENT_OPTIONS: List[ClarificationOption] = [
    ClarificationOption(id="tshirt", label="T-shirt", description="Casual and comfortable", value="t-shirt"),
    ClarificationOption(id="blouse", label="Blouse", description="Dressy and feminine", value="blouse"),
    ClarificationOption(id="tank", label="Tank top", description="Sleeveless and casual", value="tank top"),
    ClarificationOption(id="crop", label="Crop top", description="Trendy and short", value="crop top"),
    ClarificationOption(id="sweater", label="Sweater", description="Warm and cozy", value="sweater"),
    ClarificationOption(id="hoodie", label="Hoodie", description="Casual with hood", value="hoodie"),
]


def detect_edge_case(
    message: str,
    current_outfit: Sequence[OutfitItem],
    new_items: Sequence[OutfitItem] = (),
) -> Optional[EdgeCaseScenario]:
    """Return the first matching scenario for ``message`` or ``None``.

    Rules are tried in a fixed order: removal that would leave at most nothing
    behind, a bare ambiguous garment word, then a pronoun whose color matches
    several items of the current outfit.
    """

    message = message or ""

    if REMOVAL_PATTERN.search(message) and len(current_outfit) <= 1:
        removed = current_outfit[0].name if current_outfit else None
        return EdgeCaseScenario(
            type="incomplete_outfit",
            message=message,
            context={"removed_item": removed, "remaining_items": []},
        )

    match = AMBIGUOUS_TERM_PATTERN.search(message)
    if match and not SPECIFIC_TERM_PATTERN.search(message):
        return EdgeCaseScenario(
            type="ambiguous_name",
            message=message,
            context={"ambiguous_term": match.group(1).lower()},
        )

    if PRONOUN_PATTERN.search(message) and len(current_outfit) > 1:
        color_match = COLOR_MENTION_PATTERN.search(message)
        if color_match:
            color = color_match.group(1).lower()
            candidates = [item for item in current_outfit if color in item.name.lower()]
            if len(candidates) > 1:
                return EdgeCaseScenario(
                    type="multiple_interpretations",
                    message=message,
                    context={"ambiguous_reference": "change", "possible_items": candidates},
                )

    return None


def detect_impossible_combination(
    new_items: Sequence[OutfitItem], message: str = ""
) -> Optional[EdgeCaseScenario]:
    """A one-piece requested together with a separate top or bottom."""

    zones = {item.zone for item in new_items}
    if "one_piece" in zones and zones & {"top", "bottom"}:
        return EdgeCaseScenario(
            type="impossible_combination",
            message=message,
            context={"requested_items": list(new_items)},
        )
    return None


def handle_incomplete_outfit(scenario: EdgeCaseScenario) -> EdgeCaseResolution:
    removed = scenario.context.get("removed_item") or "this item"
    remaining = scenario.context.get("remaining_items") or []
    if not remaining:
        return EdgeCaseResolution(
            resolved=True,
            action="error",
            response=f"Removing {removed} would leave the outfit empty. Would you like to replace it instead?",
            options=[
                ClarificationOption(id="replace", label="Replace it", description="Choose a new item", value="replace"),
                ClarificationOption(id="cancel", label="Keep it", description="Don't remove", value="cancel"),
            ],
        )
    return EdgeCaseResolution(
        resolved=True,
        action="clarify",
        response="This will leave you with an incomplete outfit. Continue?",
        options=[
            ClarificationOption(id="continue", label="Yes, remove it", value=True),
            ClarificationOption(id="cancel", label="No, keep it", value=False),
        ],
    )


def handle_impossible_combination(scenario: EdgeCaseScenario) -> EdgeCaseResolution:
    return EdgeCaseResolution(
        resolved=True,
        action="clarify",
        response="A dress is a complete outfit. Did you mean:",
        options=[
            ClarificationOption(
                id="dress_only", label="Just the dress", description="Remove top and bottom", value="dress"
            ),
            ClarificationOption(
                id="separates", label="T-shirt with skirt", description="Convert dress to separates", value="separates"
            ),
        ],
    )


def handle_ambiguous_name(scenario: EdgeCaseScenario) -> EdgeCaseResolution:
    term = scenario.context.get("ambiguous_term") or "item"
    return EdgeCaseResolution(
        resolved=True,
        action="clarify",
        response=f"What kind of {term} are you looking for?",
        options=list(AMBIGUOUS_GARMENT_OPTIONS),
    )


def handle_conflicting_instructions(scenario: EdgeCaseScenario) -> EdgeCaseResolution:
    return EdgeCaseResolution(
        resolved=True,
        action="clarify",
        response="I'm not sure I understand. Would you like to:",
        options=[
            ClarificationOption(id="option_a", label=str(scenario.context.get("option_a", "")), value="a"),
            ClarificationOption(id="option_b", label=str(scenario.context.get("option_b", "")), value="b"),
            ClarificationOption(
                id="something_else", label="Something else", description="Let me rephrase", value="else"
            ),
        ],
    )


def handle_multiple_interpretations(scenario: EdgeCaseScenario) -> EdgeCaseResolution:
    reference = scenario.context.get("ambiguous_reference") or "change"
    candidates: List[OutfitItem] = list(scenario.context.get("possible_items") or [])
    options = [
        ClarificationOption(
            id=f"item_{index}", label=item.name, description=item.category or "", value=item.name
        )
        for index, item in enumerate(candidates)
    ]
    if len(candidates) == 2:
        options.append(
            ClarificationOption(id="both", label="Both", description="Apply to all items", value="both")
        )
    return EdgeCaseResolution(
        resolved=True,
        action="clarify",
        response=f"Which item should I {reference}?",
        options=options,
    )


def handle_unknown_term(scenario: EdgeCaseScenario) -> EdgeCaseResolution:
    term = scenario.context.get("unknown_term", "")
    similar = scenario.context.get("suggested_category") or "something else"
    return EdgeCaseResolution(
        resolved=True,
        action="clarify",
        response=f'I\'m not familiar with "{term}". Could you describe it or choose from these options?',
        options=[
            ClarificationOption(id="describe", label="Describe it", description="Tell me more about it", value="describe"),
            ClarificationOption(
                id="similar", label=f"Similar to {similar}", description="Choose from similar items", value="similar"
            ),
            ClarificationOption(id="skip", label="Skip it", description="Try something else", value="skip"),
        ],
    )


EDGE_CASE_HANDLERS: Dict[str, Callable[[EdgeCaseScenario], EdgeCaseResolution]] = {
    "incomplete_outfit": handle_incomplete_outfit,
    "impossible_combination": handle_impossible_combination,
    "ambiguous_name": handle_ambiguous_name,
    "conflicting_instructions": handle_conflicting_instructions,
    "multiple_interpretations": handle_multiple_interpretations,
    "unknown_term": handle_unknown_term,
}


def handle_edge_case(scenario: EdgeCaseScenario) -> EdgeCaseResolution:
    handler = EDGE_CASE_HANDLERS.get(scenario.type)
    if handler is None:
        logger.debug("no handler for edge case type %s", scenario.type)
        return EdgeCaseResolution(resolved=False, action="error", response=UNEXPECTED_SITUATION)
    return handler(scenario)


__all__ = [
    "AMBIGUOUS_GARMENT_OPTIONS",
    "EDGE_CASE_HANDLERS",
    "UNEXPECTED_SITUATION",
    "detect_edge_case",
    "detect_impossible_combination",
    "handle_edge_case",
]
