"""Outfit item data model and helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from models.taxonomy import (
    default_z_index,
    normalise_tags,
    normalize_zone,
    validate_pattern,
    validate_zone,
)


def _ensure_list(value: Any) -> List[Any]:
    """Coerce a scalar or iterable into a list."""

    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        return list(value)
    return [value]


def _normalise_colors(values: Iterable[str]) -> Tuple[str, ...]:
    """Lowercase color names while keeping their order."""

    normalised = []
    for value in values:
        key = str(value).strip().lower()
        if key:
            normalised.append(key)
    return tuple(normalised)


@dataclass(frozen=True)
class OutfitItem:
    """A single garment or accessory in an outfit.

    Items are immutable values. ``zone`` is inferred from ``category`` and
    then ``name`` when not supplied, and ``z_index`` defaults to the stacking
    order of that zone.
    """

    name: str
    zone: Optional[str] = None
    category: Optional[str] = None
    colors: Tuple[str, ...] = field(default_factory=tuple)
    pattern: Optional[str] = None
    brand: Optional[str] = None
    style_descriptors: Tuple[str, ...] = field(default_factory=tuple)
    z_index: Optional[int] = None
    image_url: Optional[str] = None
    product_url: Optional[str] = None

    def __post_init__(self) -> None:
        zone = validate_zone(self.zone) if self.zone else normalize_zone(self.category, self.name)
        object.__setattr__(self, "zone", zone)
        object.__setattr__(self, "colors", _normalise_colors(_ensure_list(self.colors)))
        object.__setattr__(
            self, "style_descriptors", tuple(normalise_tags(_ensure_list(self.style_descriptors)))
        )
        if self.pattern:
            object.__setattr__(self, "pattern", validate_pattern(self.pattern))
        if self.z_index is None:
            object.__setattr__(self, "z_index", default_z_index(zone))

    @property
    def key(self) -> Tuple[str, str]:
        """Grouping key: items with the same name in the same zone are alike."""

        return (self.name.strip().lower(), str(self.zone))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "zone": self.zone,
            "category": self.category,
            "colors": list(self.colors),
            "pattern": self.pattern,
            "brand": self.brand,
            "style_descriptors": list(self.style_descriptors),
            "z_index": self.z_index,
            "image_url": self.image_url,
            "product_url": self.product_url,
        }


def from_raw_metadata(metadata: Dict[str, Any]) -> OutfitItem:
    """Factory to build an :class:`OutfitItem` from loose classifier or vision output."""

    name = metadata.get("name")
    if not name:
        raise ValueError("Missing required field for OutfitItem: ['name']")

    z_index = metadata.get("z_index", metadata.get("zIndex"))
    return OutfitItem(
        name=str(name),
        zone=metadata.get("zone") or None,
        category=metadata.get("category") or None,
        colors=_ensure_list(metadata.get("colors")),
        pattern=metadata.get("pattern") or None,
        brand=metadata.get("brand") or None,
        style_descriptors=_ensure_list(metadata.get("style_descriptors", metadata.get("style"))),
        z_index=int(z_index) if z_index is not None else None,
        image_url=metadata.get("image_url", metadata.get("imageUrl")),
        product_url=metadata.get("product_url", metadata.get("productUrl")),
    )


def item_names(items: Iterable[OutfitItem]) -> List[str]:
    return [item.name for item in items]


__all__ = ["OutfitItem", "from_raw_metadata", "item_names"]
