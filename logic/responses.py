"""Template-based reply generation for the stylist."""

from __future__ import annotations

import logging
import random
from typing import Dict, List, Optional, Sequence

from models.compatibility import CompatibilityCheck
from models.outfit import OutfitState
from models.outfit_item import OutfitItem

logger = logging.getLogger(__name__)

NO_MATCH_MESSAGE = (
    "I couldn't find items matching your request. Try being more specific with brands, colors, or item types."
)
INCOMPLETE_FOLLOW_UP = "Want to add more items to complete your outfit?"
FOLLOW_UP_PROMPTS: List[str] = [
    "Want to add accessories or change anything?",
    "Ready to complete your look with shoes or accessories?",
    "Want to add or replace anything else?",
    "How about shoes or accessories to finish the look?",
]
WARNING_MARKER = "\U0001f4a1"

CONFIRMATION_TEMPLATES: Dict[str, str] = {
    "simple": "Swapped to {item}!",
    "multiple": "Updated your outfit: {items}!",
    "with_rationale": "Switched to {item} - {reason}!",
    "replacement": "Replaced {old_item} with {new_item}!",
    "addition": "Added {item} to your outfit!",
}

CLARIFICATION_TEMPLATES: Dict[str, str] = {
    "need_info": "What kind of {category} are you thinking?",
    "ambiguous": "Just to confirm - did you mean {option_a} or {option_b}?",
    "suggest": "I'm thinking {item}. Does that work?",
    "multiple_options": "Which would you prefer?",
}

SUGGESTION_TEMPLATES: Dict[str, str] = {
    "coordination": "FYI: {item1} and {item2} might clash. Want me to adjust?",
    "upgrade": "These {item} would look sharper with {complementary}. Interested?",
    "style": "For a {style} look, I'd recommend {items}.",
    "tip": "Quick tip: {suggestion} would tie this together nicely!",
}

ERROR_TEMPLATES: Dict[str, str] = {
    "no_results": "I couldn't find good matches for \"{query}\". Try something like '{example}'.",
    "conflict": "That would conflict with your current outfit. {explanation}",
    "incomplete": "That would make your outfit incomplete. {suggestion}",
    "unknown": "I'm not familiar with \"{term}\". Could you describe it differently?",
}

GENERIC_CLARIFICATION = "Could you tell me a bit more about what you'd like?"
GENERIC_ERROR = "Something went wrong with that request. Could you try again?"
GENERIC_SUGGESTION = "I have a few ideas for this outfit. Want to hear them?"
GENERIC_CONFIRMATION = "Your outfit has been updated!"


def format_template(template: str, variables: Dict[str, str]) -> str:
    """Replace ``{key}`` tokens; unknown tokens stay as they are."""

    result = template
    for key, value in variables.items():
        result = result.replace("{" + key + "}", str(value))
    return result


def _render(table: Dict[str, str], key: str, variables: Dict[str, str], fallback: str) -> str:
    template = table.get(key)
    if template is None:
        logger.debug("unknown template key %s", key)
        return fallback
    return format_template(template, variables)


def generate_confirmation_response(key: str, variables: Dict[str, str]) -> str:
    return _render(CONFIRMATION_TEMPLATES, key, variables, GENERIC_CONFIRMATION)


def generate_clarification_response(key: str, variables: Dict[str, str]) -> str:
    return _render(CLARIFICATION_TEMPLATES, key, variables, GENERIC_CLARIFICATION)


def generate_suggestion_response(key: str, variables: Dict[str, str]) -> str:
    return _render(SUGGESTION_TEMPLATES, key, variables, GENERIC_SUGGESTION)


def generate_error_response(key: str, variables: Dict[str, str]) -> str:
    return _render(ERROR_TEMPLATES, key, variables, GENERIC_ERROR)


def confirmation_message(items_changed: Sequence[OutfitItem], all_items: Sequence[OutfitItem]) -> str:
    if not items_changed:
        return NO_MATCH_MESSAGE
    if len(items_changed) == 1 and len(all_items) == 1:
        return f"Here's your look with {items_changed[0].name}!"
    if len(items_changed) > 1:
        return f"Updated your outfit with: {', '.join(item.name for item in items_changed)}!"
    wearing = ", ".join(item.name for item in all_items)
    return f"Added {items_changed[0].name}! Now wearing: {wearing}."


def compatibility_warnings(checks: Sequence[CompatibilityCheck]) -> str:
    lines = []
    for check in checks:
        for issue in check.warnings():
            suffix = f": {issue.suggestion}" if issue.suggestion else ""
            lines.append(f"{WARNING_MARKER} {issue.message}{suffix}")
    return "\n".join(lines)


def follow_up_prompt(is_complete: bool, rng: Optional[random.Random] = None) -> str:
    if not is_complete:
        return INCOMPLETE_FOLLOW_UP
    return (rng or random).choice(FOLLOW_UP_PROMPTS)


def generate_response(
    request_type: str,
    outfit_state: OutfitState,
    items_changed: Sequence[OutfitItem],
    compatibility_checks: Sequence[CompatibilityCheck],
    rng: Optional[random.Random] = None,
) -> str:
    """Compose confirmation, warnings and a follow-up prompt into one reply.

    ``rng`` picks the follow-up prompt for complete outfits; pass a seeded
    :class:`random.Random` for reproducible output.
    """

    parts = [confirmation_message(items_changed, outfit_state.items)]
    warnings = compatibility_warnings(compatibility_checks)
    if warnings:
        parts.append(warnings)
    parts.append(follow_up_prompt(outfit_state.is_complete, rng))
    logger.debug("generated response for %s with %d changed items", request_type, len(items_changed))
    return "\n\n".join(parts).strip()


def generate_style_transformation_response(style_name: str, items: Sequence[OutfitItem]) -> str:
    wearing = ", ".join(item.name for item in items)
    return f"Here's your {style_name} transformation! Now wearing: {wearing}. Love it?"


def generate_undo_response() -> str:
    return "Reverted to previous outfit!"


def generate_redo_response() -> str:
    return "Restored next outfit!"


def generate_nothing_to_undo_response() -> str:
    return "Nothing to undo - this is your original outfit."


def generate_nothing_to_redo_response() -> str:
    return "Nothing to redo - you're at the latest version."


def generate_removal_response(removed_items: Sequence[OutfitItem], remaining_items: Sequence[OutfitItem]) -> str:
    removed = " and ".join(item.name for item in removed_items)
    if not remaining_items:
        return f"Removed {removed}. Your outfit is now empty. Ready to start fresh?"
    remaining = ", ".join(item.name for item in remaining_items)
    return f"Removed {removed}. Still wearing: {remaining}."


__all__ = [
    "CLARIFICATION_TEMPLATES",
    "CONFIRMATION_TEMPLATES",
    "ERROR_TEMPLATES",
    "FOLLOW_UP_PROMPTS",
    "INCOMPLETE_FOLLOW_UP",
    "NO_MATCH_MESSAGE",
    "SUGGESTION_TEMPLATES",
    "format_template",
    "generate_clarification_response",
    "generate_confirmation_response",
    "generate_error_response",
    "generate_nothing_to_redo_response",
    "generate_nothing_to_undo_response",
    "generate_redo_response",
    "generate_removal_response",
    "generate_response",
    "generate_style_transformation_response",
    "generate_suggestion_response",
    "generate_undo_response",
]
