"""User style preference learning from outfit interactions."""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Dict, List, Literal, Optional, Sequence

from models.compatibility import Suggestion
from models.outfit_item import OutfitItem

logger = logging.getLogger(__name__)

InteractionAction = Literal["accepted", "rejected", "modified"]

ACTION_WEIGHTS: Dict[str, float] = {"accepted": 1.0, "rejected": -0.5, "modified": 0.5}

STYLE_ALIASES: Dict[str, str] = {
    "casual": "casual",
    "formal": "formal",
    "edgy": "edgy",
    "bohemian": "bohemian",
    "smart casual": "smart_casual",
    "streetwear": "streetwear",
}

REQUEST_CATEGORY_KEYWORDS: List[tuple] = [
    ("outerwear", ("jacket", "coat")),
    ("bottom", ("jean", "pants")),
    ("top", ("shirt", "top", "blouse")),
]


@dataclass
class UserStylePreferences:
    user_id: str
    style_preference: Optional[str] = None
    favorite_colors: List[str] = field(default_factory=list)
    avoided_items: List[str] = field(default_factory=list)
    preferred_categories: Dict[str, float] = field(default_factory=dict)
    brand_affinities: Dict[str, float] = field(default_factory=dict)
    color_preferences: Dict[str, float] = field(default_factory=dict)


@dataclass
class TrackingResult:
    """Outcome of a preference update; ``error`` is set when ``ok`` is false."""

    ok: bool
    error: Optional[str] = None


class ProfileStore:
    """Interface for user style profile persistence."""

    def load(self, user_id: str) -> Optional[UserStylePreferences]:
        raise NotImplementedError

    def save(self, profile: UserStylePreferences) -> None:
        raise NotImplementedError


class InMemoryProfileStore(ProfileStore):
    def __init__(self) -> None:
        self._profiles: Dict[str, UserStylePreferences] = {}
        self._lock = threading.Lock()

    def load(self, user_id: str) -> Optional[UserStylePreferences]:
        with self._lock:
            return self._profiles.get(user_id)

    def save(self, profile: UserStylePreferences) -> None:
        with self._lock:
            self._profiles[profile.user_id] = profile


class JSONProfileStore(ProfileStore):
    """One JSON document per user under ``base_dir``."""

    def __init__(self, base_dir: str = "data/profiles") -> None:
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _profile_path(self, user_id: str) -> Path:
        return self.base_dir / f"{user_id}.json"

    def load(self, user_id: str) -> Optional[UserStylePreferences]:
        path = self._profile_path(user_id)
        if not path.exists():
            return None
        data = json.loads(path.read_text())
        return UserStylePreferences(**data)

    def save(self, profile: UserStylePreferences) -> None:
        self._profile_path(profile.user_id).write_text(json.dumps(asdict(profile), indent=2))


def _unique(values) -> List[str]:
    seen: List[str] = []
    for value in values:
        if value and value not in seen:
            seen.append(value)
    return seen


class PreferenceTracker:
    """Accumulates weighted color, brand and category affinities per user.

    Store failures are returned as a failed :class:`TrackingResult` rather
    than raised; the caller decides whether to log and continue.
    """

    def __init__(self, store: ProfileStore | None = None) -> None:
        self.store = store or InMemoryProfileStore()

    def _update(self, user_id: str, mutate) -> TrackingResult:
        try:
            profile = self.store.load(user_id) or UserStylePreferences(user_id=user_id)
            mutate(profile)
            self.store.save(profile)
        except (OSError, ValueError, TypeError) as exc:
            logger.debug("preference update failed for %s: %s", user_id, exc)
            return TrackingResult(ok=False, error=str(exc))
        return TrackingResult(ok=True)

    def track_outfit_interaction(
        self, user_id: str, items: Sequence[OutfitItem], action: InteractionAction
    ) -> TrackingResult:
        colors = _unique(color for item in items for color in item.colors)
        categories = _unique(item.category for item in items)
        brands = _unique(item.brand for item in items)
        return self._apply_weights(user_id, action, colors=colors, categories=categories, brands=brands)

    def _apply_weights(
        self,
        user_id: str,
        action: InteractionAction,
        colors: Sequence[str] = (),
        categories: Sequence[str] = (),
        brands: Sequence[str] = (),
    ) -> TrackingResult:
        weight = ACTION_WEIGHTS.get(action, 0.0)

        def mutate(profile: UserStylePreferences) -> None:
            for color in colors:
                profile.color_preferences[color] = profile.color_preferences.get(color, 0) + weight
            for brand in brands:
                profile.brand_affinities[brand] = profile.brand_affinities.get(brand, 0) + weight
            if action != "rejected":
                for category in categories:
                    profile.preferred_categories[category] = profile.preferred_categories.get(category, 0) + 1

        return self._update(user_id, mutate)

    def track_accepted_suggestion(self, user_id: str, suggestion: Suggestion) -> TrackingResult:
        if not suggestion.items:
            return TrackingResult(ok=True)
        return self.track_outfit_interaction(user_id, suggestion.items, "accepted")

    def track_rejected_suggestion(self, user_id: str, suggestion: Suggestion) -> TrackingResult:
        if not suggestion.items:
            return TrackingResult(ok=True)
        return self.track_outfit_interaction(user_id, suggestion.items, "rejected")

    def learn_from_requests(self, user_id: str, requested_items: Sequence[str]) -> TrackingResult:
        categories = []
        for name in requested_items:
            lowered = name.lower()
            for category, keywords in REQUEST_CATEGORY_KEYWORDS:
                if any(keyword in lowered for keyword in keywords):
                    categories.append(category)
                    break
        if not categories:
            return TrackingResult(ok=True)
        return self._apply_weights(user_id, "modified", categories=categories)

    def track_style_transformation(self, user_id: str, to_style: str) -> TrackingResult:
        style = STYLE_ALIASES.get(to_style.strip().lower(), "casual")

        def mutate(profile: UserStylePreferences) -> None:
            profile.style_preference = style

        return self._update(user_id, mutate)

    def add_to_avoided_items(self, user_id: str, item_name: str) -> TrackingResult:
        def mutate(profile: UserStylePreferences) -> None:
            if item_name not in profile.avoided_items:
                profile.avoided_items.append(item_name)

        return self._update(user_id, mutate)

    def add_to_favorite_colors(self, user_id: str, color: str) -> TrackingResult:
        def mutate(profile: UserStylePreferences) -> None:
            if color not in profile.favorite_colors:
                profile.favorite_colors.append(color)

        return self._update(user_id, mutate)

    def get_user_preferences(self, user_id: str) -> UserStylePreferences:
        return self.store.load(user_id) or UserStylePreferences(user_id=user_id)


__all__ = [
    "ACTION_WEIGHTS",
    "InMemoryProfileStore",
    "JSONProfileStore",
    "PreferenceTracker",
    "ProfileStore",
    "TrackingResult",
    "UserStylePreferences",
]
