"""Canonical taxonomy definitions for outfit items.

This module centralises the canonical labels for garment zones, patterns and
seasons together with the keyword tables used to infer them from free-form
item names. Helper functions keep validation logic consistent across the rule
modules, the session state machine and the payload schemas.
"""

from typing import Dict, Iterable, List, Optional


def _normalize_key(value: str) -> str:
    """Normalise a free-form string into a taxonomy key."""

    return value.strip().lower().replace(" ", "_").replace("-", "_")


ZONES: List[str] = ["top", "bottom", "one_piece", "outerwear", "footwear", "accessories"]
PATTERNS: List[str] = ["solid", "stripes", "polka_dots", "floral", "geometric", "animal_print"]
SEASONS: List[str] = ["winter", "fall", "spring", "summer", "transitional"]
OUTFIT_STATES: List[str] = ["separates", "one_piece", "layered", "empty"]

# Category labels are matched in this order; the first zone that hits wins.
ZONE_KEYWORDS: Dict[str, List[str]] = {
    "top": [
        "top",
        "t-shirt",
        "tshirt",
        "tee",
        "blouse",
        "shirt",
        "tank top",
        "tank",
        "crop top",
        "sweater",
        "hoodie",
        "bodysuit",
    ],
    "bottom": ["jeans", "pants", "trousers", "shorts", "skirt", "leggings"],
    "one_piece": ["dress", "gown", "jumpsuit", "romper", "swimsuit"],
    "outerwear": ["jacket", "blazer", "coat", "cardigan", "vest", "suit"],
    "footwear": ["shoes", "boots", "sneakers", "heels", "sandals", "flats"],
    "accessories": ["bag", "jewelry", "hat", "scarf", "belt", "sunglasses"],
}

Z_INDEX_BY_ZONE: Dict[str, int] = {
    "accessories": 100,
    "footwear": 150,
    "bottom": 200,
    "one_piece": 250,
    "top": 300,
    "outerwear": 400,
}


def validate_zone(value: str) -> str:
    """Validate and normalise a zone value.

    Raises a :class:`ValueError` if the zone is not part of the canonical
    taxonomy.
    """

    key = _normalize_key(value)
    if key == "onepiece":
        key = "one_piece"
    if key not in ZONES:
        raise ValueError(f"Unsupported zone '{value}'. Allowed: {ZONES}")
    return key


def validate_pattern(value: str) -> str:
    """Validate and normalise a pattern value."""

    key = _normalize_key(value)
    if key not in PATTERNS:
        raise ValueError(f"Unsupported pattern '{value}'. Allowed: {PATTERNS}")
    return key


def match_zone(text: Optional[str]) -> Optional[str]:
    """Return the first zone whose keywords occur in ``text``."""

    if not text:
        return None
    lowered = text.lower()
    for zone, keywords in ZONE_KEYWORDS.items():
        if any(keyword in lowered for keyword in keywords):
            return zone
    return None


def head_noun_zone(name: Optional[str]) -> Optional[str]:
    """Return the zone of the garment word that ends latest in ``name``.

    Product names stack garment words ("dress shirt", "shirt dress"); the
    last one is the garment itself.
    """

    if not name:
        return None
    lowered = name.lower()
    best_zone: Optional[str] = None
    best_end = -1
    for zone, keywords in ZONE_KEYWORDS.items():
        for keyword in keywords:
            position = lowered.rfind(keyword)
            if position >= 0 and position + len(keyword) > best_end:
                best_zone = zone
                best_end = position + len(keyword)
    return best_zone


def normalize_zone(category: Optional[str], name: Optional[str] = None) -> str:
    """Infer a zone from a category label, then the item name.

    Anything that cannot be placed is treated as an accessory.
    """

    if category:
        try:
            return validate_zone(category)
        except ValueError:
            pass
    return match_zone(category) or head_noun_zone(name) or "accessories"


def default_z_index(zone: str) -> int:
    """Stacking order used when an item does not carry its own z-index."""

    return Z_INDEX_BY_ZONE.get(zone, Z_INDEX_BY_ZONE["accessories"])


def normalise_tags(values: Iterable[str]) -> List[str]:
    """Strip, lowercase and deduplicate free-form descriptor tags."""

    normalised = []
    seen = set()
    for value in values:
        key = str(value).strip().lower()
        if key and key not in seen:
            normalised.append(key)
            seen.add(key)
    return normalised


__all__ = [
    "ZONES",
    "PATTERNS",
    "SEASONS",
    "OUTFIT_STATES",
    "ZONE_KEYWORDS",
    "Z_INDEX_BY_ZONE",
    "validate_zone",
    "validate_pattern",
    "match_zone",
    "head_noun_zone",
    "normalize_zone",
    "default_z_index",
    "normalise_tags",
]
