"""Runs every compatibility rule family over one outfit."""

from __future__ import annotations

from typing import Callable, Dict, List, Sequence

from logic.color_harmony import check_color_harmony
from logic.formality import check_formality
from logic.pattern_mixing import check_pattern_mixing
from logic.seasonal import check_seasonal_compatibility
from models.compatibility import CompatibilityCheck, Suggestion
from models.outfit_item import OutfitItem

CHECKERS: Dict[str, Callable[[Sequence[OutfitItem]], CompatibilityCheck]] = {
    "color": check_color_harmony,
    "formality": check_formality,
    "pattern": check_pattern_mixing,
    "seasonal": check_seasonal_compatibility,
}


def run_compatibility_checks(items: Sequence[OutfitItem]) -> List[CompatibilityCheck]:
    return [checker(items) for checker in CHECKERS.values()]


def all_passed(checks: Sequence[CompatibilityCheck]) -> bool:
    return all(check.passed for check in checks)


def collect_suggestions(checks: Sequence[CompatibilityCheck]) -> List[Suggestion]:
    return [suggestion for check in checks for suggestion in check.suggestions]


def summarize_checks(checks: Sequence[CompatibilityCheck]) -> Dict[str, bool]:
    """Map each rule family to its pass flag, for badges and evaluation."""

    return {check.check_type: check.passed for check in checks}


__all__ = ["CHECKERS", "all_passed", "collect_suggestions", "run_compatibility_checks", "summarize_checks"]
