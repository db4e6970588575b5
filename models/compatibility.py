"""Compatibility check results produced by the rule modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional

from models.outfit_item import OutfitItem

Severity = Literal["warning", "error"]
SuggestionType = Literal["upgrade", "coordination", "style", "accessory"]
Harmony = Literal["complementary", "analogous", "monochromatic", "clash"]


@dataclass(frozen=True)
class CompatibilityIssue:
    type: str
    severity: Severity
    message: str
    affected_items: List[OutfitItem] = field(default_factory=list)
    suggestion: Optional[str] = None


@dataclass(frozen=True)
class Suggestion:
    type: SuggestionType
    title: str
    description: str
    requires_approval: bool = True
    items: Optional[List[OutfitItem]] = None
    before_items: Optional[List[OutfitItem]] = None
    after_items: Optional[List[OutfitItem]] = None


@dataclass
class CompatibilityCheck:
    """Base result shared by every rule family."""

    passed: bool
    issues: List[CompatibilityIssue] = field(default_factory=list)
    suggestions: List[Suggestion] = field(default_factory=list)

    check_type = "compatibility"

    def warnings(self) -> List[CompatibilityIssue]:
        return [issue for issue in self.issues if issue.severity == "warning"]


@dataclass
class ColorCheck(CompatibilityCheck):
    harmony: Harmony = "monochromatic"
    dominant_colors: List[str] = field(default_factory=list)

    check_type = "color"


@dataclass
class FormalityCheck(CompatibilityCheck):
    overall_level: int = 2
    item_levels: Dict[str, int] = field(default_factory=dict)
    gap: int = 0

    check_type = "formality"


@dataclass
class PatternCheck(CompatibilityCheck):
    patterns: List[str] = field(default_factory=list)
    mixing_valid: bool = True

    check_type = "pattern"


@dataclass
class SeasonalCheck(CompatibilityCheck):
    season: str = "transitional"
    conflicts: List[str] = field(default_factory=list)

    check_type = "seasonal"


__all__ = [
    "CompatibilityIssue",
    "Suggestion",
    "CompatibilityCheck",
    "ColorCheck",
    "FormalityCheck",
    "PatternCheck",
    "SeasonalCheck",
]
