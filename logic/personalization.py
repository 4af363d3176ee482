"""Bounded score adjustments derived from a user's taste profile."""

from __future__ import annotations

from typing import Mapping

from memory.taste_profile import (
    PickLike,
    TasteProfile,
    average_formality,
    pick_item_ids,
    resolve_pick_items,
)
from models.outfit import PersonalizationResult
from models.wardrobe_item import ResolvedItem

MAX_BOOST = 0.25
STYLE_MATCH_THRESHOLD = 0.07
FORMALITY_MATCH = 0.08
FORMALITY_MISMATCH = 0.25
FORMALITY_ADJUSTMENT = 0.08


def personalization_boost(
    profile: TasteProfile,
    occasion: str,
    pick: PickLike,
    wardrobe_index: Mapping[str, ResolvedItem],
) -> PersonalizationResult:
    """Return the boost for ``pick``, clamped to ``[-MAX_BOOST, MAX_BOOST]``.

    Pure: ``profile`` is read but never modified.
    """

    items = resolve_pick_items(pick, wardrobe_index)
    if not items:
        return PersonalizationResult()

    boost = 0.0
    reasons = []
    penalties = []

    for item_id in pick_item_ids(pick):
        dislike = profile.disliked_items.get(item_id, 0)
        if dislike > 0:
            boost -= min(0.25, dislike * 0.05)
            penalties.append("Contains an item you previously disliked.")

    occasion_pref = profile.occasion_prefs.get(occasion)
    occasion_tags = occasion_pref.tag_prefs if occasion_pref else {}
    for item in items:
        for color in item.colors:
            count = profile.color_prefs.get(color, 0)
            if count > 2:
                boost += min(0.08, count * 0.01)
        for tag in item.style_tags:
            score = profile.tag_prefs.get(tag, 0) + 1.5 * occasion_tags.get(tag, 0)
            if score > 2:
                boost += min(0.1, score * 0.01)

    if boost > STYLE_MATCH_THRESHOLD:
        reasons.append("Matches your style preferences.")

    target = profile.preferred_formality
    if occasion_pref and occasion_pref.preferred_formality is not None:
        target = occasion_pref.preferred_formality
    diff = abs(average_formality(items) - target)
    if diff < FORMALITY_MATCH:
        boost += FORMALITY_ADJUSTMENT
        reasons.append("Matches your preferred formality level.")
    elif diff > FORMALITY_MISMATCH:
        boost -= FORMALITY_ADJUSTMENT
        penalties.append("Formality may not match your preferences.")

    boost = max(-MAX_BOOST, min(MAX_BOOST, boost))
    return PersonalizationResult(boost=boost, reasons=reasons, penalties=penalties)


__all__ = ["MAX_BOOST", "personalization_boost"]
