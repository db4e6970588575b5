"""Pattern mixing check."""

from __future__ import annotations

import logging
import re
from typing import List, Sequence, Tuple

from models.compatibility import CompatibilityIssue, PatternCheck, Suggestion
from models.outfit_item import OutfitItem

logger = logging.getLogger(__name__)

# Tried in order against the item name; the first hit wins.
PATTERN_RULES: List[Tuple[str, re.Pattern]] = [
    ("stripes", re.compile(r"stripe|striped")),
    ("polka_dots", re.compile(r"polka dot|dots")),
    ("floral", re.compile(r"floral|flower")),
    ("geometric", re.compile(r"geometric|abstract")),
    ("animal_print", re.compile(r"animal|leopard|zebra|snake")),
]

BUSY_PATTERNS = {"floral", "geometric", "animal_print"}


def detect_pattern(item: OutfitItem) -> str:
    if item.pattern:
        return item.pattern
    name = item.name.lower()
    for pattern, regex in PATTERN_RULES:
        if regex.search(name):
            return pattern
    return "solid"


def can_patterns_mix(pattern1: str, pattern2: str) -> bool:
    """Solids and identical patterns always mix; two different busy prints never do."""

    if pattern1 == "solid" or pattern2 == "solid":
        return True
    if pattern1 == pattern2:
        return True
    if pattern1 in BUSY_PATTERNS and pattern2 in BUSY_PATTERNS:
        return False
    return True


def check_pattern_mixing(items: Sequence[OutfitItem]) -> PatternCheck:
    if not items:
        return PatternCheck(passed=True, patterns=[], mixing_valid=True)

    detected = [detect_pattern(item) for item in items]
    unique_patterns: List[str] = []
    for pattern in detected:
        if pattern != "solid" and pattern not in unique_patterns:
            unique_patterns.append(pattern)

    issues: List[CompatibilityIssue] = []
    suggestions: List[Suggestion] = []
    mixing_valid = True

    if len(unique_patterns) >= 2:
        for i, pattern1 in enumerate(detected):
            if pattern1 == "solid":
                continue
            for j in range(i + 1, len(items)):
                pattern2 = detected[j]
                if pattern2 == "solid" or can_patterns_mix(pattern1, pattern2):
                    continue
                mixing_valid = False
                issues.append(
                    CompatibilityIssue(
                        type="pattern",
                        severity="warning",
                        message=f"{pattern1} and {pattern2} patterns might clash",
                        affected_items=[items[i], items[j]],
                        suggestion="Consider making one item solid",
                    )
                )
                suggestions.append(
                    Suggestion(
                        type="coordination",
                        title="Simplify Pattern Mix",
                        description="Consider making one item solid to balance the look",
                        requires_approval=True,
                    )
                )

    logger.debug("pattern check patterns=%s valid=%s", unique_patterns, mixing_valid)
    return PatternCheck(
        passed=mixing_valid,
        issues=issues,
        suggestions=suggestions,
        patterns=unique_patterns,
        mixing_valid=mixing_valid,
    )


__all__ = ["BUSY_PATTERNS", "PATTERN_RULES", "can_patterns_mix", "check_pattern_mixing", "detect_pattern"]
