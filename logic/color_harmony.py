"""Color compatibility check for an outfit."""

from __future__ import annotations

import logging
from collections import Counter
from typing import List, Sequence

from models.color_theory import BRIGHT_COLORS, colors_clash, determine_harmony, extract_colors
from models.compatibility import ColorCheck, CompatibilityIssue, Suggestion
from models.outfit_item import OutfitItem

logger = logging.getLogger(__name__)

MAX_BRIGHT_COLORS = 2


def _clashing_items(items: Sequence[OutfitItem]) -> List[OutfitItem]:
    clashing: List[OutfitItem] = []
    for i, first in enumerate(items):
        first_colors = extract_colors(first)
        for second in items[i + 1 :]:
            second_colors = extract_colors(second)
            if any(colors_clash(c1, c2) for c1 in first_colors for c2 in second_colors):
                if first not in clashing:
                    clashing.append(first)
                if second not in clashing:
                    clashing.append(second)
    return clashing


def check_color_harmony(items: Sequence[OutfitItem]) -> ColorCheck:
    """Classify the outfit's color harmony and flag clashes or too many brights."""

    if not items:
        return ColorCheck(passed=True, harmony="monochromatic", dominant_colors=[])

    all_colors = [color for item in items for color in extract_colors(item)]
    dominant_colors = [color for color, _ in Counter(all_colors).most_common(3)]
    harmony = determine_harmony(all_colors)

    issues: List[CompatibilityIssue] = []
    suggestions: List[Suggestion] = []

    if harmony == "clash":
        clashing = _clashing_items(items)
        if clashing:
            issues.append(
                CompatibilityIssue(
                    type="color",
                    severity="warning",
                    message="Color clash detected",
                    affected_items=clashing,
                    suggestion="Consider changing one of the clashing colors",
                )
            )
            suggestions.append(
                Suggestion(
                    type="coordination",
                    title="Fix Color Clash",
                    description="These colors might not work well together. Want suggestions?",
                    requires_approval=True,
                )
            )

    bright_count = sum(1 for color in all_colors if color in BRIGHT_COLORS)
    if bright_count > MAX_BRIGHT_COLORS:
        issues.append(
            CompatibilityIssue(
                type="color",
                severity="warning",
                message="Too many bright colors",
                affected_items=list(items),
                suggestion="Consider using neutrals to balance the outfit",
            )
        )

    passed = harmony != "clash" and bright_count <= MAX_BRIGHT_COLORS
    logger.debug("color check harmony=%s dominant=%s passed=%s", harmony, dominant_colors, passed)
    return ColorCheck(
        passed=passed,
        issues=issues,
        suggestions=suggestions,
        harmony=harmony,
        dominant_colors=dominant_colors,
    )


def generate_color_suggestions(items: Sequence[OutfitItem]) -> List[Suggestion]:
    return check_color_harmony(items).suggestions


__all__ = ["check_color_harmony", "generate_color_suggestions", "MAX_BRIGHT_COLORS"]
