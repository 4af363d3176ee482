"""Deterministic scoring for candidate outfits against an occasion profile."""

from __future__ import annotations

import time
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from models.occasions import OccasionProfile
from models.outfit import OutfitPick, OutfitScoreResult
from models.taxonomy import NEUTRAL_COLORS, normalize_key, unique
from models.wardrobe_item import ResolvedItem

WEIGHTS: Dict[str, float] = {
    "formality_fit": 0.36,
    "vibe_match": 0.22,
    "color_pref": 0.14,
    "color_harmony": 0.16,
    "completeness": 0.12,
    "avoid_vibe_penalty": -0.16,
    "avoid_colors_penalty": -0.10,
    "freshness_penalty": -0.14,
}

COMPLETENESS_WEIGHTS: Dict[str, float] = {
    "top": 0.25,
    "bottom": 0.25,
    "shoes": 0.22,
    "outer": 0.14,
    "accessory": 0.14,
}

# (max days since worn, penalty), first match wins.
FRESHNESS_STEPS = ((2, 0.25), (5, 0.15), (10, 0.08))
MAX_MESSAGES = 6
_DAY_MS = 1000 * 60 * 60 * 24


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def now_ms() -> float:
    return time.time() * 1000


def intersection_score(values: Sequence[str], targets: Sequence[str]) -> float:
    """Overlap ratio ``|hits| / min(|values|, |targets|)``; 0 when either side is empty."""

    if not values or not targets:
        return 0.0
    target_set = {normalize_key(target) for target in targets}
    hits = sum(1 for value in values if normalize_key(value) in target_set)
    return hits / max(1, min(len(values), len(targets)))


def color_harmony_score(colors: Iterable[str]) -> float:
    distinct = unique(normalize_key(color) for color in colors)
    if len(distinct) <= 1:
        return 0.85
    neutral_count = sum(1 for color in distinct if color in NEUTRAL_COLORS)
    if neutral_count >= 1 and len(distinct) <= 3:
        return 0.75
    if len(distinct) >= 4:
        return 0.35
    return 0.6


def freshness_penalty(item: ResolvedItem, now: float) -> float:
    if not item.last_worn_at:
        return 0.0
    days = (now - item.last_worn_at) / _DAY_MS
    for max_days, penalty in FRESHNESS_STEPS:
        if days < max_days:
            return penalty
    return 0.0


def formality_fit(average: float, profile: OccasionProfile) -> float:
    low, high = profile.formality_range
    if low <= average <= high:
        return 1.0
    return _clamp(1 - min(1.0, abs(average - profile.formality_target)))


def completeness_score(pick: OutfitPick) -> float:
    return _clamp(sum(weight for slot, weight in COMPLETENESS_WEIGHTS.items() if getattr(pick, slot)))


def weighted_total(breakdown: Mapping[str, float], weights: Mapping[str, float] = WEIGHTS) -> float:
    return _clamp(sum(weights[name] * breakdown.get(name, 0.0) for name in weights))


def score_outfit(
    profile: OccasionProfile,
    pick: OutfitPick,
    now: Optional[float] = None,
    weights: Mapping[str, float] = WEIGHTS,
) -> OutfitScoreResult:
    """Score ``pick`` for ``profile`` and explain the result.

    ``now`` is the reference time in epoch milliseconds used for the freshness
    penalty and defaults to the current time. ``weights`` defaults to the
    canonical :data:`WEIGHTS` table.
    """

    items = pick.items()
    if not items:
        return OutfitScoreResult(score=0.0, warnings=["No items provided"])

    reference = now_ms() if now is None else now
    reasons: List[str] = []
    warnings: List[str] = []
    breakdown: Dict[str, float] = {}

    if not pick.top:
        warnings.append("Missing top item - outfit may look incomplete.")
    if not pick.bottom:
        warnings.append("Missing bottom item - outfit may look incomplete.")
    if not pick.shoes:
        warnings.append("No shoes selected - add footwear for a complete look.")

    average_formality = sum(item.formality for item in items) / len(items)
    breakdown["formality_fit"] = formality_fit(average_formality, profile)
    if breakdown["formality_fit"] > 0.8:
        reasons.append("Formality level matches the occasion perfectly.")
    elif breakdown["formality_fit"] > 0.6:
        reasons.append("Formality is appropriate for this occasion.")
    elif breakdown["formality_fit"] < 0.45:
        warnings.append("This outfit might be too casual or too formal for this occasion.")

    tags = unique(tag for item in items for tag in item.style_tags)
    vibe_hit = intersection_score(tags, profile.vibe_tags)
    avoid_hit = intersection_score(tags, profile.avoid_tags)
    breakdown["vibe_match"] = _clamp(vibe_hit)
    breakdown["avoid_vibe_penalty"] = _clamp(avoid_hit)
    if vibe_hit > 0.35:
        reasons.append("The overall vibe fits the occasion mood.")
    elif not tags:
        reasons.append("Clean and simple outfit - safe for most events.")
    if avoid_hit > 0.15:
        warnings.append("Some pieces may clash with the occasion vibe.")

    colors = unique(color for item in items for color in item.colors)
    color_hit = intersection_score(colors, profile.color_pref)
    avoid_color_hit = intersection_score(colors, profile.avoid_colors)
    breakdown["color_pref"] = _clamp(color_hit)
    breakdown["avoid_colors_penalty"] = _clamp(avoid_color_hit)
    breakdown["color_harmony"] = _clamp(color_harmony_score(colors))
    if colors:
        if breakdown["color_harmony"] > 0.75:
            reasons.append("Color harmony is strong - looks premium.")
        elif breakdown["color_harmony"] < 0.4:
            warnings.append("Too many colors - outfit may look messy. Try a neutral base.")
    if color_hit > 0.25:
        reasons.append("Colors match the occasion vibe well.")
    if avoid_color_hit > 0.15:
        warnings.append("Some colors may feel wrong for the occasion.")

    freshness = sum(freshness_penalty(item, reference) for item in items)
    breakdown["freshness_penalty"] = _clamp(freshness)
    if freshness > 0.2:
        warnings.append("Some items were worn recently. Consider a fresher combo.")

    breakdown["completeness"] = completeness_score(pick)
    if breakdown["completeness"] > 0.8:
        reasons.append("Outfit is complete and looks well put-together.")

    return OutfitScoreResult(
        score=weighted_total(breakdown, weights),
        reasons=unique(reasons)[:MAX_MESSAGES],
        warnings=unique(warnings)[:MAX_MESSAGES],
        breakdown=breakdown,
    )


__all__ = [
    "WEIGHTS",
    "COMPLETENESS_WEIGHTS",
    "intersection_score",
    "color_harmony_score",
    "freshness_penalty",
    "formality_fit",
    "completeness_score",
    "weighted_total",
    "score_outfit",
]
