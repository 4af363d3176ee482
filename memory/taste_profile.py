"""Per-user taste profile and the rating-driven learner that updates it."""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from models.outfit import OutfitPick
from models.taxonomy import SLOTS, normalize_key
from models.wardrobe_item import ResolvedItem

logger = logging.getLogger(__name__)

DEFAULT_PREFERRED_FORMALITY = 0.55
SMOOTHING = 0.85
RATING_WEIGHTS: Dict[int, int] = {5: 3, 4: 2, 3: 0, 2: -1, 1: -2}

PickLike = Union[OutfitPick, Mapping[str, Optional[str]]]


@dataclass
class OccasionPreference:
    preferred_formality: Optional[float] = None
    tag_prefs: Dict[str, float] = field(default_factory=dict)


@dataclass
class TasteProfile:
    """Accumulated color, tag and formality preferences for one user.

    Weights are unbounded accumulators; clamping happens only when a boost is
    computed from them.
    """

    updated_at: float = field(default_factory=lambda: time.time() * 1000)
    color_prefs: Dict[str, float] = field(default_factory=dict)
    tag_prefs: Dict[str, float] = field(default_factory=dict)
    preferred_formality: float = DEFAULT_PREFERRED_FORMALITY
    disliked_items: Dict[str, float] = field(default_factory=dict)
    occasion_prefs: Dict[str, OccasionPreference] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "updatedAt": self.updated_at,
            "colorPrefs": dict(self.color_prefs),
            "tagPrefs": dict(self.tag_prefs),
            "preferredFormality": self.preferred_formality,
            "dislikedItems": dict(self.disliked_items),
            "occasionPrefs": {
                occasion: {"preferredFormality": pref.preferred_formality, "tagPrefs": dict(pref.tag_prefs)}
                for occasion, pref in self.occasion_prefs.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "TasteProfile":
        if not data:
            return empty_taste_profile()
        occasion_prefs: Dict[str, OccasionPreference] = {}
        for occasion, raw in (data.get("occasionPrefs") or {}).items():
            raw = raw or {}
            formality = raw.get("preferredFormality")
            occasion_prefs[occasion] = OccasionPreference(
                preferred_formality=float(formality) if isinstance(formality, (int, float)) else None,
                tag_prefs={k: float(v) for k, v in (raw.get("tagPrefs") or {}).items()},
            )
        formality = data.get("preferredFormality")
        return cls(
            updated_at=float(data.get("updatedAt") or time.time() * 1000),
            color_prefs={k: float(v) for k, v in (data.get("colorPrefs") or {}).items()},
            tag_prefs={k: float(v) for k, v in (data.get("tagPrefs") or {}).items()},
            preferred_formality=(
                float(formality) if isinstance(formality, (int, float)) else DEFAULT_PREFERRED_FORMALITY
            ),
            disliked_items={str(k): float(v) for k, v in (data.get("dislikedItems") or {}).items()},
            occasion_prefs=occasion_prefs,
        )


def empty_taste_profile() -> TasteProfile:
    return TasteProfile()


def rating_weight(rating: Any) -> int:
    """Clamp a 1..5 star rating and map it to its learning weight."""

    try:
        value = float(rating)
    except (TypeError, ValueError):
        value = 3.0
    if math.isnan(value) or value == 0:
        value = 3.0
    stars = int(round(max(1.0, min(5.0, value))))
    return RATING_WEIGHTS[stars]


def pick_item_ids(pick: PickLike) -> List[str]:
    """Return the item ids of a pick (object or slot -> id mapping) in slot order."""

    if isinstance(pick, OutfitPick):
        return [item.item_id for item in pick.items()]
    return [str(pick[slot]) for slot in SLOTS if pick.get(slot)]


def resolve_pick_items(pick: PickLike, wardrobe_index: Mapping[str, ResolvedItem]) -> List[ResolvedItem]:
    return [wardrobe_index[item_id] for item_id in pick_item_ids(pick) if item_id in wardrobe_index]


def average_formality(items: List[ResolvedItem]) -> float:
    return sum(item.formality for item in items) / max(1, len(items))


def _bump(weights: Dict[str, float], key: str, amount: float) -> None:
    normalized = normalize_key(key)
    if not normalized:
        return
    weights[normalized] = weights.get(normalized, 0) + amount


def update_taste_from_rating(
    profile: TasteProfile,
    occasion: str,
    pick: PickLike,
    rating: Any,
    wardrobe_index: Mapping[str, ResolvedItem],
    now: Optional[float] = None,
) -> TasteProfile:
    """Fold one star rating into ``profile`` in place and return it.

    Ratings are additive: applying the same rating twice counts twice.
    """

    weight = rating_weight(rating)
    items = resolve_pick_items(pick, wardrobe_index)
    if not items:
        logger.info("Rating for occasion=%s references no known wardrobe items", occasion)
        return profile

    for item in items:
        if weight > 0:
            for color in item.colors:
                _bump(profile.color_prefs, color, weight)
            for tag in item.style_tags:
                _bump(profile.tag_prefs, tag, weight)
        elif weight < 0:
            profile.disliked_items[item.item_id] = profile.disliked_items.get(item.item_id, 0) + abs(weight)

    outfit_formality = average_formality(items)
    occasion_pref = profile.occasion_prefs.setdefault(occasion, OccasionPreference())
    if weight > 0:
        profile.preferred_formality = SMOOTHING * profile.preferred_formality + (1 - SMOOTHING) * outfit_formality
        if occasion_pref.preferred_formality is None:
            occasion_pref.preferred_formality = outfit_formality
        else:
            occasion_pref.preferred_formality = (
                SMOOTHING * occasion_pref.preferred_formality + (1 - SMOOTHING) * outfit_formality
            )
        for item in items:
            for tag in item.style_tags:
                _bump(occasion_pref.tag_prefs, tag, weight)

    profile.updated_at = time.time() * 1000 if now is None else now
    logger.debug("Applied rating weight=%s for occasion=%s over %s items", weight, occasion, len(items))
    return profile


def top_preferences(weights: Mapping[str, float], limit: int) -> List[Tuple[str, float]]:
    """Highest-weighted entries first; ties keep insertion order."""

    return sorted(weights.items(), key=lambda kv: -kv[1])[:limit]


__all__ = [
    "OccasionPreference",
    "TasteProfile",
    "RATING_WEIGHTS",
    "empty_taste_profile",
    "rating_weight",
    "pick_item_ids",
    "resolve_pick_items",
    "average_formality",
    "update_taste_from_rating",
    "top_preferences",
]
