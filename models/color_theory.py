"""Color vocabulary and harmony rules for deterministic outfit checks."""
from __future__ import annotations

import logging
import re
from typing import Dict, Iterable, List, Sequence, Tuple

from models.outfit_item import OutfitItem

logger = logging.getLogger(__name__)

COLOR_WORDS: List[str] = [
    "black",
    "blue",
    "red",
    "white",
    "green",
    "pink",
    "purple",
    "yellow",
    "orange",
    "brown",
    "grey",
    "gray",
    "navy",
    "beige",
    "cream",
    "tan",
    "maroon",
    "burgundy",
    "olive",
    "khaki",
    "teal",
    "turquoise",
    "coral",
]

CLASH_PAIRS: List[Tuple[str, str]] = [
    ("red", "pink"),
    ("brown", "black"),
    ("navy", "black"),
]

NEUTRAL_COLORS = {"black", "white", "grey", "gray", "beige", "cream", "tan"}
BRIGHT_COLORS = {"red", "yellow", "orange", "pink", "purple", "turquoise"}

_COLOR_PATTERNS: Dict[str, re.Pattern] = {
    color: re.compile(rf"\b{color}\b", re.IGNORECASE) for color in COLOR_WORDS
}


def colors_in_text(text: str) -> List[str]:
    """Return vocabulary colors appearing as whole words in ``text``."""

    return [color for color, pattern in _COLOR_PATTERNS.items() if pattern.search(text or "")]


def extract_colors(item: OutfitItem) -> List[str]:
    """Explicit colors win; otherwise scan the item name."""

    if item.colors:
        return list(item.colors)
    return colors_in_text(item.name)


def colors_clash(color1: str, color2: str) -> bool:
    """Return True when the pair appears in the clash table, in either order."""

    return (color1, color2) in CLASH_PAIRS or (color2, color1) in CLASH_PAIRS


def monochrome(color_list: Iterable[str]) -> bool:
    """Return True when all provided colors collapse to a single tone."""

    unique_colors = {color for color in color_list if color}
    result = len(unique_colors) <= 1
    logger.debug("monochrome check %s -> %s", unique_colors, result)
    return result


def determine_harmony(colors: Sequence[str]) -> str:
    """Classify a color list as ``clash``, ``monochromatic``, ``complementary`` or ``analogous``."""

    if len(colors) <= 1:
        return "monochromatic"

    for i, first in enumerate(colors):
        for second in colors[i + 1 :]:
            if colors_clash(first, second):
                logger.debug("clash between %s and %s", first, second)
                return "clash"

    if monochrome(colors):
        return "monochromatic"

    has_neutral = any(color in NEUTRAL_COLORS for color in colors)
    has_accent = any(color not in NEUTRAL_COLORS for color in colors)
    if has_neutral and has_accent:
        return "complementary"
    return "analogous"


__all__ = [
    "BRIGHT_COLORS",
    "CLASH_PAIRS",
    "COLOR_WORDS",
    "NEUTRAL_COLORS",
    "colors_clash",
    "colors_in_text",
    "determine_harmony",
    "extract_colors",
    "monochrome",
]
