"""Outfit snapshot and outfit state schemas."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple
from uuid import uuid4

from models.outfit_item import OutfitItem, from_raw_metadata
from models.taxonomy import ZONES

_COMPLETENESS_ZONES = ("top", "bottom", "footwear")


def classify_outfit_state(items: Sequence[OutfitItem]) -> str:
    """Tag a list of items as ``separates``, ``one_piece``, ``layered`` or ``empty``.

    A single top or a single bottom is not a viable outfit yet and is tagged
    ``empty``, the same as no items at all.
    """

    if not items:
        return "empty"
    if any(item.zone == "one_piece" for item in items):
        return "one_piece"

    top_count = sum(1 for item in items if item.zone == "top")
    has_bottom = any(item.zone == "bottom" for item in items)
    has_outerwear = any(item.zone == "outerwear" for item in items)
    if top_count and has_bottom:
        if has_outerwear or top_count > 1:
            return "layered"
        return "separates"
    return "empty"


def group_by_zone(items: Sequence[OutfitItem]) -> Dict[str, List[OutfitItem]]:
    zones: Dict[str, List[OutfitItem]] = {zone: [] for zone in ZONES}
    for item in items:
        zones.setdefault(str(item.zone), []).append(item)
    return zones


@dataclass
class OutfitState:
    """Derived view of an outfit used by the decision engine and templates."""

    type: str
    items: List[OutfitItem]
    zones: Dict[str, List[OutfitItem]]
    layer_count: int
    is_complete: bool
    missing_zones: List[str] = field(default_factory=list)


def describe_outfit(items: Sequence[OutfitItem]) -> OutfitState:
    """Build an :class:`OutfitState` for a list of items."""

    zones = group_by_zone(items)
    state_type = classify_outfit_state(items)
    covered = {zone for zone, members in zones.items() if members}
    if "one_piece" in covered:
        covered.update({"top", "bottom"})
    missing = [zone for zone in _COMPLETENESS_ZONES if zone not in covered]
    return OutfitState(
        type=state_type,
        items=list(items),
        zones=zones,
        layer_count=len(items),
        is_complete=state_type != "empty",
        missing_zones=missing,
    )


def _layer_candidates(state: OutfitState, zone: str) -> List[OutfitItem]:
    candidates = list(state.zones.get(zone, []))
    if zone == "top":
        candidates.extend(state.zones.get("outerwear", []))
    return candidates


def innermost_layer(state: OutfitState, zone: str) -> Optional[OutfitItem]:
    """Lowest z-index item covering ``zone`` (tops include outerwear)."""

    candidates = _layer_candidates(state, zone)
    if not candidates:
        return None
    return min(candidates, key=lambda item: item.z_index or 0)


def outermost_layer(state: OutfitState, zone: str) -> Optional[OutfitItem]:
    """Highest z-index item covering ``zone`` (tops include outerwear)."""

    candidates = _layer_candidates(state, zone)
    if not candidates:
        return None
    return max(candidates, key=lambda item: item.z_index or 0)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class OutfitSnapshot:
    """Immutable record of the outfit at one point of a conversation."""

    conversation_id: str
    items: Tuple[OutfitItem, ...]
    outfit_state: str
    id: str = field(default_factory=lambda: f"snapshot_{uuid4().hex}")
    message_id: Optional[str] = None
    image_ref: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))

    @classmethod
    def create(
        cls,
        conversation_id: str,
        items: Sequence[OutfitItem],
        image_ref: Optional[str] = None,
        message_id: Optional[str] = None,
    ) -> "OutfitSnapshot":
        return cls(
            conversation_id=conversation_id,
            items=tuple(items),
            outfit_state=classify_outfit_state(items),
            message_id=message_id,
            image_ref=image_ref,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "conversation_id": self.conversation_id,
            "message_id": self.message_id,
            "outfit_state": self.outfit_state,
            "items": [item.to_dict() for item in self.items],
            "image_ref": self.image_ref,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "OutfitSnapshot":
        created_at = payload.get("created_at")
        return cls(
            id=str(payload["id"]),
            conversation_id=str(payload["conversation_id"]),
            message_id=payload.get("message_id"),
            outfit_state=str(payload.get("outfit_state", "empty")),
            items=tuple(from_raw_metadata(item) for item in payload.get("items", [])),
            image_ref=payload.get("image_ref"),
            created_at=datetime.fromisoformat(created_at) if created_at else _utcnow(),
        )


__all__ = [
    "OutfitSnapshot",
    "OutfitState",
    "classify_outfit_state",
    "describe_outfit",
    "group_by_zone",
    "innermost_layer",
    "outermost_layer",
]
