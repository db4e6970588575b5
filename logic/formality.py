"""Formality compatibility check.

Every item is mapped to a level from 1 (very casual) to 5 (formal) using the
keyword groups in :data:`FORMALITY_KEYWORDS`. Groups are tried from the most
formal down; within a group the item name is searched before the category,
and the first hit wins. Items that match nothing count as casual (level 2).
"""

from __future__ import annotations

import logging
import math
from typing import Dict, List, Sequence, Tuple

from models.compatibility import CompatibilityIssue, FormalityCheck, Suggestion
from models.outfit_item import OutfitItem

logger = logging.getLogger(__name__)

DEFAULT_FORMALITY_LEVEL = 2
MISMATCH_GAP = 2

FORMALITY_KEYWORDS: List[Tuple[int, List[str]]] = [
    (5, ["suit", "tuxedo", "gown", "evening dress", "dress shoes", "oxfords"]),
    (4, ["blazer", "dress pants", "dress shirt", "pencil skirt", "modest dress", "heels", "loafers"]),
    (3, ["chinos", "blouse", "cardigan", "midi skirt", "ankle boots", "flats"]),
    (2, ["jeans", "t-shirt", "tee", "sneakers", "sandals", "casual"]),
    (1, ["sweatpants", "hoodie", "sweatshirt", "athletic", "gym", "joggers"]),
]

FORMALITY_LABELS: Dict[int, str] = {
    1: "Very Casual",
    2: "Casual",
    3: "Smart Casual",
    4: "Business Casual",
    5: "Formal",
}


def calculate_formality_level(item: OutfitItem) -> int:
    """Return the formality level (1-5) of a single item."""

    name = item.name.lower()
    category = (item.category or "").lower()
    for level, keywords in FORMALITY_KEYWORDS:
        if any(keyword in name for keyword in keywords):
            return level
        if category and any(keyword in category for keyword in keywords):
            return level
    return DEFAULT_FORMALITY_LEVEL


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def check_formality(items: Sequence[OutfitItem]) -> FormalityCheck:
    """Flag outfits mixing formal and casual pieces two or more levels apart."""

    if not items:
        return FormalityCheck(passed=True, overall_level=DEFAULT_FORMALITY_LEVEL, item_levels={}, gap=0)

    levels = [calculate_formality_level(item) for item in items]
    item_levels = {item.name: level for item, level in zip(items, levels)}
    overall_level = _round_half_up(sum(levels) / len(levels))
    gap = max(levels) - min(levels)

    issues: List[CompatibilityIssue] = []
    suggestions: List[Suggestion] = []

    if gap >= MISMATCH_GAP:
        formal_items = [item for item, level in zip(items, levels) if level >= 4]
        casual_items = [item for item, level in zip(items, levels) if level <= 2]
        if formal_items and casual_items:
            direction = "upgrading casual items" if overall_level >= 3 else "making outfit more casual"
            issues.append(
                CompatibilityIssue(
                    type="formality",
                    severity="warning",
                    message="Formality mismatch detected",
                    affected_items=formal_items + casual_items,
                    suggestion=f"Consider {direction}",
                )
            )
            if overall_level >= 3:
                for casual_item in casual_items:
                    suggestions.append(
                        Suggestion(
                            type="upgrade",
                            title=f"Upgrade {casual_item.name}",
                            description="Consider a more formal alternative to match the overall style",
                            requires_approval=True,
                            before_items=[casual_item],
                        )
                    )

    logger.debug("formality levels=%s overall=%s gap=%s", item_levels, overall_level, gap)
    return FormalityCheck(
        passed=gap < MISMATCH_GAP,
        issues=issues,
        suggestions=suggestions,
        overall_level=overall_level,
        item_levels=item_levels,
        gap=gap,
    )


def detect_formality_mismatch(items: Sequence[OutfitItem]) -> Tuple[bool, int]:
    """Return ``(has_mismatch, gap)`` for an outfit."""

    check = check_formality(items)
    return (not check.passed, check.gap)


def suggest_formality_upgrade(items: Sequence[OutfitItem], target_level: int) -> List[Suggestion]:
    """Suggest an upgrade for every item below ``target_level``."""

    suggestions = []
    for item in items:
        current = calculate_formality_level(item)
        if current < target_level:
            suggestions.append(
                Suggestion(
                    type="upgrade",
                    title=f"Upgrade {item.name}",
                    description=f"Current level: {current}, Target: {target_level}",
                    requires_approval=True,
                    before_items=[item],
                )
            )
    return suggestions


def formality_label(level: int) -> str:
    return FORMALITY_LABELS.get(level, FORMALITY_LABELS[DEFAULT_FORMALITY_LEVEL])


__all__ = [
    "FORMALITY_KEYWORDS",
    "FORMALITY_LABELS",
    "calculate_formality_level",
    "check_formality",
    "detect_formality_mismatch",
    "formality_label",
    "suggest_formality_upgrade",
]
