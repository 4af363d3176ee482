"""Outfit scorer behaviour: bounds, explanations and penalties."""

import pytest

from logic.outfit_scoring import (
    WEIGHTS,
    color_harmony_score,
    completeness_score,
    formality_fit,
    freshness_penalty,
    intersection_score,
    score_outfit,
)
from models.occasions import OCCASION_KEYS, get_occasion
from models.outfit import OutfitPick
from models.wardrobe_item import ResolvedItem

DAY_MS = 24 * 60 * 60 * 1000
NOW = 1_700_000_000_000.0


def _item(item_id, category, formality, tags=(), colors=(), last_worn_at=None) -> ResolvedItem:
    return ResolvedItem(
        item_id=item_id,
        category=category,
        formality=formality,
        style_tags=tuple(tags),
        colors=tuple(colors),
        last_worn_at=last_worn_at,
    )


def _interview_pick() -> OutfitPick:
    return OutfitPick(
        top=_item("t", "top", 0.9, ["professional", "clean"], ["black"]),
        bottom=_item("b", "bottom", 0.85, [], ["navy"]),
        shoes=_item("s", "shoes", 0.8, [], ["black"]),
    )


def test_interview_ready_outfit_scores_high() -> None:
    result = score_outfit(get_occasion("interview"), _interview_pick(), now=NOW)

    assert result.score > 0.7
    assert result.breakdown["formality_fit"] == 1.0
    assert result.breakdown["vibe_match"] == 1.0
    assert result.breakdown["color_pref"] == 1.0
    assert "Formality level matches the occasion perfectly." in result.reasons
    assert "Colors match the occasion vibe well." in result.reasons
    assert result.warnings == []


def test_party_outfit_at_funeral_scores_low_with_warnings() -> None:
    pick = OutfitPick(
        top=_item("t", "top", 0.35, ["casual", "bold", "party"], ["red"]),
        bottom=_item("b", "bottom", 0.25, ["casual", "street"], ["olive"]),
        shoes=_item("s", "shoes", 0.3, ["casual", "sporty"], ["neon"]),
    )
    result = score_outfit(get_occasion("funeral"), pick, now=NOW)

    assert result.score < 0.4
    assert "Some pieces may clash with the occasion vibe." in result.warnings
    assert "Some colors may feel wrong for the occasion." in result.warnings


def test_empty_pick_scores_zero() -> None:
    result = score_outfit(get_occasion("interview"), OutfitPick(), now=NOW)
    assert result.score == 0.0
    assert result.warnings == ["No items provided"]


def test_missing_slots_are_warned_about() -> None:
    pick = OutfitPick(top=_item("t", "top", 0.5))
    result = score_outfit(get_occasion("casual_hangout"), pick, now=NOW)

    assert "Missing bottom item - outfit may look incomplete." in result.warnings
    assert "No shoes selected - add footwear for a complete look." in result.warnings
    assert "Clean and simple outfit - safe for most events." in result.reasons


@pytest.mark.parametrize("occasion", ["interview", "gym", "wedding_guest", "streetwear", "casual"])
def test_score_stays_in_unit_interval(occasion: str) -> None:
    result = score_outfit(get_occasion(occasion), _interview_pick(), now=NOW)
    assert 0.0 <= result.score <= 1.0
    assert len(result.reasons) <= 6 and len(result.warnings) <= 6


def test_recently_worn_items_lower_the_score() -> None:
    fresh = _interview_pick()
    worn = OutfitPick(
        top=_item("t", "top", 0.9, ["professional", "clean"], ["black"], last_worn_at=NOW - DAY_MS),
        bottom=_item("b", "bottom", 0.85, [], ["navy"], last_worn_at=NOW - DAY_MS),
        shoes=_item("s", "shoes", 0.8, [], ["black"]),
    )
    profile = get_occasion("interview")

    fresh_result = score_outfit(profile, fresh, now=NOW)
    worn_result = score_outfit(profile, worn, now=NOW)

    assert worn_result.score < fresh_result.score
    assert worn_result.breakdown["freshness_penalty"] == pytest.approx(0.5)
    assert "Some items were worn recently. Consider a fresher combo." in worn_result.warnings


def test_freshness_penalty_steps() -> None:
    assert freshness_penalty(_item("a", "top", 0.5), NOW) == 0.0
    assert freshness_penalty(_item("a", "top", 0.5, last_worn_at=NOW - 1 * DAY_MS), NOW) == 0.25
    assert freshness_penalty(_item("a", "top", 0.5, last_worn_at=NOW - 4 * DAY_MS), NOW) == 0.15
    assert freshness_penalty(_item("a", "top", 0.5, last_worn_at=NOW - 7 * DAY_MS), NOW) == 0.08
    assert freshness_penalty(_item("a", "top", 0.5, last_worn_at=NOW - 30 * DAY_MS), NOW) == 0.0


def test_more_matching_tags_never_lower_vibe_match() -> None:
    profile = get_occasion("interview")
    base = OutfitPick(top=_item("t", "top", 0.8, ["professional", "casual"]))
    better = OutfitPick(top=_item("t", "top", 0.8, ["professional", "sharp"]))

    assert (
        score_outfit(profile, better, now=NOW).breakdown["vibe_match"]
        >= score_outfit(profile, base, now=NOW).breakdown["vibe_match"]
    )


def test_helpers() -> None:
    assert intersection_score([], ["a"]) == 0.0
    assert intersection_score(["a", "b"], ["a"]) == 1.0
    assert color_harmony_score(["black"]) == 0.85
    assert color_harmony_score(["black", "red"]) == 0.75
    assert color_harmony_score(["red", "green"]) == 0.6
    assert color_harmony_score(["red", "green", "blue", "pink"]) == 0.35
    assert sum(weight for weight in WEIGHTS.values() if weight > 0) == pytest.approx(1.0)


@pytest.mark.parametrize("occasion", OCCASION_KEYS)
def test_formality_fit_never_rises_moving_away_from_band(occasion: str) -> None:
    profile = get_occasion(occasion)
    low, high = profile.formality_range

    below = [formality_fit(max(0.0, low - step), profile) for step in (0.0, 0.05, 0.15, 0.3, 0.6, 1.0)]
    above = [formality_fit(min(1.0, high + step), profile) for step in (0.0, 0.05, 0.15, 0.3, 0.6, 1.0)]

    assert below[0] == 1.0 and above[0] == 1.0
    assert all(later <= earlier for earlier, later in zip(below, below[1:]))
    assert all(later <= earlier for earlier, later in zip(above, above[1:]))


def test_completeness_never_drops_as_slots_fill() -> None:
    top = _item("t", "top", 0.5)
    bottom = _item("b", "bottom", 0.5)
    shoes = _item("s", "shoes", 0.5)
    outer = _item("o", "outer", 0.5)
    picks = [
        OutfitPick(top=top, bottom=bottom),
        OutfitPick(top=top, bottom=bottom, shoes=shoes),
        OutfitPick(top=top, bottom=bottom, shoes=shoes, outer=outer),
    ]

    scores = [completeness_score(pick) for pick in picks]
    breakdowns = [score_outfit(get_occasion("office"), pick, now=NOW).breakdown["completeness"] for pick in picks]

    assert scores == sorted(scores)
    assert scores[0] < scores[-1]
    assert breakdowns == sorted(breakdowns)
