from pathlib import Path
import sys

sys.path.append(str(Path(__file__).resolve().parents[1]))

from memory.preference_tracker import JSONProfileStore, PreferenceTracker, ProfileStore
from models.compatibility import Suggestion
from models.outfit_item import OutfitItem

TEE = OutfitItem(name="White T-Shirt", zone="top", category="t-shirt", colors=("white",), brand="Uniqlo")
JEANS = OutfitItem(name="Blue Jeans", zone="bottom", category="jeans", colors=("blue", "white"))


def test_interaction_weights_by_action() -> None:
    tracker = PreferenceTracker()
    assert tracker.track_outfit_interaction("u-1", [TEE, JEANS], "accepted").ok
    tracker.track_outfit_interaction("u-1", [JEANS], "modified")
    tracker.track_outfit_interaction("u-1", [TEE], "rejected")

    profile = tracker.get_user_preferences("u-1")
    assert profile.color_preferences == {"white": 1.0, "blue": 1.5}
    assert profile.brand_affinities == {"Uniqlo": 0.5}
    assert profile.preferred_categories == {"t-shirt": 1, "jeans": 2}


def test_suggestions_without_items_are_ignored() -> None:
    tracker = PreferenceTracker()
    empty = Suggestion(type="style", title="Style Transformation", description="More formal")
    assert tracker.track_accepted_suggestion("u-1", empty).ok
    assert tracker.get_user_preferences("u-1").color_preferences == {}

    with_items = Suggestion(type="upgrade", title="Switch", description="Swap", items=[TEE])
    tracker.track_rejected_suggestion("u-1", with_items)
    assert tracker.get_user_preferences("u-1").color_preferences == {"white": -0.5}


def test_learn_from_requests_maps_keywords_to_categories() -> None:
    tracker = PreferenceTracker()
    tracker.learn_from_requests("u-1", ["Denim Jacket", "black jeans", "silk blouse", "scarf"])
    assert tracker.get_user_preferences("u-1").preferred_categories == {"outerwear": 1, "bottom": 1, "top": 1}


def test_style_transformation_normalises_names() -> None:
    tracker = PreferenceTracker()
    tracker.track_style_transformation("u-1", "Smart Casual")
    assert tracker.get_user_preferences("u-1").style_preference == "smart_casual"
    tracker.track_style_transformation("u-1", "cottagecore")
    assert tracker.get_user_preferences("u-1").style_preference == "casual"


def test_json_store_round_trips_profiles(tmp_path: Path) -> None:
    tracker = PreferenceTracker(store=JSONProfileStore(str(tmp_path)))
    tracker.add_to_favorite_colors("u-1", "green")
    tracker.add_to_favorite_colors("u-1", "green")
    tracker.add_to_avoided_items("u-1", "Crocs")

    reloaded = PreferenceTracker(store=JSONProfileStore(str(tmp_path))).get_user_preferences("u-1")
    assert reloaded.favorite_colors == ["green"]
    assert reloaded.avoided_items == ["Crocs"]
    assert (tmp_path / "u-1.json").exists()


class _FailingStore(ProfileStore):
    def load(self, user_id):
        return None

    def save(self, profile):
        raise OSError("read-only")


def test_store_failures_are_reported_not_raised() -> None:
    result = PreferenceTracker(store=_FailingStore()).track_outfit_interaction("u-1", [TEE], "accepted")
    assert not result.ok
    assert result.error == "read-only"
