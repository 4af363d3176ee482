"""Combinatorial outfit generation with per-style-mode ranking.

Candidate generation samples the wardrobe: each bucket is shuffled and
truncated before the nested top x bottom x shoes loop, so results for large
wardrobes vary from call to call unless a seeded ``random.Random`` is passed.
"""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, TypeVar

from logic.attribute_resolver import build_wardrobe_index, resolve_item
from logic.outfit_scoring import WEIGHTS, score_outfit, weighted_total
from logic.personalization import personalization_boost
from memory.taste_profile import TasteProfile
from models.occasions import OccasionProfile, get_occasion
from models.outfit import GeneratedOutfit, GenerateOutfitsResult, OutfitPick, PersonalizationResult
from models.taxonomy import CATEGORIES, STYLE_MODES
from models.wardrobe_item import ResolvedItem, WardrobeItem

logger = logging.getLogger(__name__)

DEFAULT_MAX_COMBOS = 1200
MAX_TOPS = 40
MAX_BOTTOMS = 40
MAX_SHOES = 20
OUTFIT_COUNT = 3
FALLBACK_SCORE = 0.2

# Only used when mode diversification is switched on.
MODE_WEIGHTS: Dict[str, Dict[str, float]] = {
    "safe": {**WEIGHTS, "formality_fit": 0.42, "vibe_match": 0.16, "avoid_vibe_penalty": -0.2},
    "attraction": {**WEIGHTS, "formality_fit": 0.3, "vibe_match": 0.3, "color_pref": 0.18},
    "statement": {**WEIGHTS, "vibe_match": 0.3, "color_harmony": 0.08, "avoid_vibe_penalty": 0.08},
}

T = TypeVar("T")


@dataclass
class _ScoredCandidate:
    pick: OutfitPick
    base_score: float
    reasons: List[str]
    warnings: List[str]
    breakdown: Dict[str, float]
    personalization: Optional[PersonalizationResult]

    def total(self, weights: Optional[Mapping[str, float]] = None) -> float:
        base = self.base_score
        if weights is not None and self.breakdown:
            base = weighted_total(self.breakdown, weights)
        boost = self.personalization.boost if self.personalization else 0.0
        return max(0.0, min(1.0, base + boost))


def _shuffled(values: Sequence[T], rng: random.Random) -> List[T]:
    copy = list(values)
    rng.shuffle(copy)
    return copy


def bucket_wardrobe(items: Iterable[ResolvedItem]) -> Dict[str, List[ResolvedItem]]:
    buckets: Dict[str, List[ResolvedItem]] = {category: [] for category in CATEGORIES}
    for item in items:
        buckets[item.category].append(item)
    return buckets


def _distinct(*items: Optional[ResolvedItem]) -> bool:
    ids = [item.item_id for item in items if item is not None]
    return len(ids) == len(set(ids))


def build_candidates(
    buckets: Mapping[str, List[ResolvedItem]],
    max_combos: int = DEFAULT_MAX_COMBOS,
    rng: Optional[random.Random] = None,
) -> List[OutfitPick]:
    """Sample outfit picks from category buckets, stopping at ``max_combos``.

    Empty top or bottom buckets borrow from ``other``.
    """

    rng = rng or random.Random()
    tops = buckets["top"] or buckets["other"]
    bottoms = buckets["bottom"] or buckets["other"]
    shoes = buckets["shoes"]
    outers = buckets["outer"]
    accessories = buckets["accessory"]

    combos: List[OutfitPick] = []
    for top in _shuffled(tops, rng)[:MAX_TOPS]:
        for bottom in _shuffled(bottoms, rng)[:MAX_BOTTOMS]:
            if not _distinct(top, bottom):
                continue
            if not shoes:
                combos.append(OutfitPick(top=top, bottom=bottom))
            else:
                for shoe in _shuffled(shoes, rng)[:MAX_SHOES]:
                    if not _distinct(top, bottom, shoe):
                        continue
                    outer = _shuffled(outers, rng)[0] if outers else None
                    accessory = _shuffled(accessories, rng)[0] if accessories else None
                    combos.append(
                        OutfitPick(
                            top=top,
                            bottom=bottom,
                            shoes=shoe,
                            outer=outer if outer and _distinct(outer, top, bottom, shoe) else None,
                            accessory=(
                                accessory if accessory and _distinct(accessory, top, bottom, shoe) else None
                            ),
                        )
                    )
                    if len(combos) >= max_combos:
                        break
            if len(combos) >= max_combos:
                break
        if len(combos) >= max_combos:
            break

    if not combos and tops and bottoms:
        top, bottom = tops[0], bottoms[0]
        logger.info("No combinations generated, forcing fallback top/bottom pick")
        combos.append(OutfitPick(top=top, bottom=bottom) if _distinct(top, bottom) else OutfitPick(top=top))
    return combos


def _score_candidate(
    profile: OccasionProfile,
    occasion: str,
    pick: OutfitPick,
    taste_profile: Optional[TasteProfile],
    wardrobe_index: Mapping[str, ResolvedItem],
    now: Optional[float],
) -> _ScoredCandidate:
    try:
        result = score_outfit(profile, pick, now=now)
        base, reasons, warnings, breakdown = result.score, result.reasons, result.warnings, result.breakdown
    except Exception:  # noqa: BLE001
        logger.warning("Scoring failed for pick %s, using fallback score", pick.item_ids(), exc_info=True)
        base, reasons, warnings, breakdown = FALLBACK_SCORE, [], [], {}

    personalization = None
    if taste_profile is not None:
        try:
            personalization = personalization_boost(taste_profile, occasion, pick, wardrobe_index)
        except Exception:  # noqa: BLE001
            logger.warning("Personalization failed for pick %s, ignoring boost", pick.item_ids(), exc_info=True)
            personalization = None
    return _ScoredCandidate(pick, base, reasons, warnings, breakdown, personalization)


def _as_outfit(candidate: _ScoredCandidate, mode: str, score: float) -> GeneratedOutfit:
    return GeneratedOutfit(
        pick=candidate.pick,
        score=score,
        reasons=list(candidate.reasons),
        warnings=list(candidate.warnings),
        breakdown=dict(candidate.breakdown),
        style_mode=mode,
        personalization=candidate.personalization,
    )


def generate_top_outfits(
    occasion: str,
    wardrobe: Iterable[WardrobeItem],
    taste_profile: Optional[TasteProfile] = None,
    max_combos: int = DEFAULT_MAX_COMBOS,
    rng: Optional[random.Random] = None,
    now: Optional[float] = None,
    diversify_modes: bool = False,
) -> GenerateOutfitsResult:
    """Return the best outfit for each style mode (safe, attraction, statement).

    Unknown occasions yield an empty result rather than an error. By default
    the three modes share one ranking, so the same pick can appear three
    times; ``diversify_modes`` ranks each mode with its own weight profile
    from :data:`MODE_WEIGHTS` and avoids repeating a pick across modes.
    """

    profile = get_occasion(occasion)
    if profile is None:
        logger.info("Unknown occasion '%s', returning no outfits", occasion)
        return GenerateOutfitsResult(occasion=occasion, outfits=[])
    occasion = profile.key

    resolved = [resolve_item(item) for item in wardrobe if item is not None and not item.banned]
    wardrobe_index = build_wardrobe_index(resolved)
    buckets = bucket_wardrobe(resolved)
    combos = build_candidates(buckets, max_combos=max_combos, rng=rng)
    logger.info(
        "Generated %s candidate outfits for occasion=%s from %s items",
        len(combos),
        occasion,
        len(resolved),
    )

    scored = [_score_candidate(profile, occasion, pick, taste_profile, wardrobe_index, now) for pick in combos]

    results: List[GeneratedOutfit] = []
    used_ids: set[tuple] = set()
    for mode in STYLE_MODES:
        weights = MODE_WEIGHTS[mode] if diversify_modes else None
        ranked = sorted(scored, key=lambda candidate: candidate.total(weights), reverse=True)
        if not ranked:
            continue
        best = ranked[0]
        if diversify_modes:
            fresh = [c for c in ranked if tuple(c.pick.item_ids().values()) not in used_ids]
            best = fresh[0] if fresh else best
            used_ids.add(tuple(best.pick.item_ids().values()))
        results.append(_as_outfit(best, mode, best.total(weights)))

    leftovers = list(combos)
    while len(results) < OUTFIT_COUNT and leftovers:
        candidate = _score_candidate(profile, occasion, leftovers.pop(0), None, wardrobe_index, now)
        results.append(_as_outfit(candidate, "safe", candidate.total()))

    return GenerateOutfitsResult(occasion=occasion, outfits=results[:OUTFIT_COUNT])


def apply_force_mode(outfits: List[GeneratedOutfit], force_mode: Optional[str]) -> List[GeneratedOutfit]:
    """Move outfits in the user-forced style mode to the front, then by score."""

    if not force_mode:
        return list(outfits)
    return sorted(outfits, key=lambda outfit: (outfit.style_mode != force_mode, -outfit.score))


__all__ = [
    "DEFAULT_MAX_COMBOS",
    "MODE_WEIGHTS",
    "bucket_wardrobe",
    "build_candidates",
    "generate_top_outfits",
    "apply_force_mode",
]
