"""Model package exports."""

from models.taxonomy import *  # noqa: F401,F403
from models.outfit_item import OutfitItem, from_raw_metadata
from models.outfit import OutfitSnapshot, OutfitState, describe_outfit

__all__ = ["OutfitItem", "OutfitSnapshot", "OutfitState", "describe_outfit", "from_raw_metadata"]
