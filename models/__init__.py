"""Model package exports."""

from models.taxonomy import *  # noqa: F401,F403
from models.occasions import OccasionProfile, get_occasion, resolve_occasion_key
from models.outfit import GeneratedOutfit, GenerateOutfitsResult, OutfitPick, OutfitScoreResult
from models.wardrobe_item import ResolvedItem, WardrobeItem, from_raw_metadata

__all__ = [
    "OccasionProfile",
    "get_occasion",
    "resolve_occasion_key",
    "GeneratedOutfit",
    "GenerateOutfitsResult",
    "OutfitPick",
    "OutfitScoreResult",
    "ResolvedItem",
    "WardrobeItem",
    "from_raw_metadata",
]
