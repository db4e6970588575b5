"""Seasonal appropriateness check.

Items are tagged with seasons from :data:`SEASON_TAG_RULES`; a tag can be
counted more than once per item, and the season with the highest count across
the outfit becomes the outfit season. Two pairings are always flagged no
matter which season wins: a heavy coat with shorts, and a tank with a scarf.
Only the first of those fails the check.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Sequence, Tuple

from models.compatibility import CompatibilityIssue, SeasonalCheck, Suggestion
from models.outfit_item import OutfitItem

logger = logging.getLogger(__name__)

# (keywords, seasons added on a match, skip seasons already tagged)
SEASON_TAG_RULES: List[Tuple[Tuple[str, ...], Tuple[str, ...], bool]] = [
    (("coat", "puffer", "parka", "scarf", "boots", "sweater", "turtleneck"), ("winter",), False),
    (("boots", "sweater"), ("fall", "spring"), False),
    (("tank", "shorts", "sandals", "sundress", "light", "sleeveless"), ("summer",), False),
    (("tank", "sandals"), ("spring",), False),
    (("jacket", "cardigan", "blazer", "boots"), ("fall", "spring", "transitional"), True),
    (("jeans", "t-shirt", "tee", "sneakers", "pants"), ("spring", "summer", "fall", "winter"), False),
]

# Ties keep the earlier season.
SEASON_PRECEDENCE = ("winter", "fall", "spring", "summer")

HEAVY_OUTERWEAR = ("coat", "puffer")
HEAVY_COAT_WITH_SHORTS = "Heavy coat with shorts"
TANK_WITH_SCARF = "Tank top with scarf"


def detect_item_seasons(item: OutfitItem) -> List[str]:
    """Season tags for one item, duplicates included."""

    name = item.name.lower()
    seasons: List[str] = []
    for keywords, tagged, unique in SEASON_TAG_RULES:
        if not any(keyword in name for keyword in keywords):
            continue
        for season in tagged:
            if unique and season in seasons:
                continue
            seasons.append(season)
    return seasons or ["transitional"]


def determine_outfit_season(items: Sequence[OutfitItem]) -> str:
    counts: Dict[str, int] = {season: 0 for season in SEASON_PRECEDENCE}
    for item in items:
        for season in detect_item_seasons(item):
            if season in counts:
                counts[season] += 1

    dominant = "transitional"
    best = 0
    for season in SEASON_PRECEDENCE:
        if counts[season] > best:
            best = counts[season]
            dominant = season
    return dominant


def check_seasonal_compatibility(items: Sequence[OutfitItem]) -> SeasonalCheck:
    if not items:
        return SeasonalCheck(passed=True, season="transitional", conflicts=[])

    season = determine_outfit_season(items)
    conflicts: List[str] = []
    issues: List[CompatibilityIssue] = []
    suggestions: List[Suggestion] = []

    for item in items:
        item_seasons = detect_item_seasons(item)
        if season in item_seasons or "transitional" in item_seasons:
            continue
        conflicts.append(item.name)
        issues.append(
            CompatibilityIssue(
                type="seasonal",
                severity="warning",
                message=f"{item.name} might not be appropriate for {season}",
                affected_items=[item],
                suggestion=f"Consider a more {season}-appropriate alternative",
            )
        )

    names = [item.name.lower() for item in items]
    if any(k in n for n in names for k in HEAVY_OUTERWEAR) and any("shorts" in n for n in names):
        conflicts.append(HEAVY_COAT_WITH_SHORTS)
        suggestions.append(
            Suggestion(
                type="coordination",
                title="Seasonal Mismatch",
                description="Heavy coat with shorts creates a seasonal conflict",
                requires_approval=False,
            )
        )

    if any("tank" in n for n in names) and any("scarf" in n for n in names):
        conflicts.append(TANK_WITH_SCARF)

    passed = all(conflict == TANK_WITH_SCARF for conflict in conflicts)
    logger.debug("seasonal check season=%s conflicts=%s", season, conflicts)
    return SeasonalCheck(
        passed=passed,
        issues=issues,
        suggestions=suggestions,
        season=season,
        conflicts=conflicts,
    )


__all__ = [
    "HEAVY_COAT_WITH_SHORTS",
    "SEASON_PRECEDENCE",
    "SEASON_TAG_RULES",
    "TANK_WITH_SCARF",
    "check_seasonal_compatibility",
    "detect_item_seasons",
    "determine_outfit_season",
]
