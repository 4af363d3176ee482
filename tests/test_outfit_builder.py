"""Combinatorial outfit generation and per-mode selection."""

import random

import pytest

import logic.outfit_builder as outfit_builder
from logic.attribute_resolver import resolve_item
from logic.outfit_builder import (
    apply_force_mode,
    bucket_wardrobe,
    build_candidates,
    generate_top_outfits,
)
from memory.taste_profile import TasteProfile
from models.wardrobe_item import WardrobeItem


def test_interview_generation_returns_three_modes(interview_wardrobe) -> None:
    result = generate_top_outfits("interview", interview_wardrobe, rng=random.Random(1))

    assert result.occasion == "interview"
    assert [outfit.style_mode for outfit in result.outfits] == ["safe", "attraction", "statement"]
    best = result.outfits[0].pick
    assert (best.top.item_id, best.bottom.item_id, best.shoes.item_id) == ("shirt-1", "trouser-1", "oxford-1")
    for outfit in result.outfits:
        assert 0.0 <= outfit.score <= 1.0


def test_modes_share_one_ranking_by_default(interview_wardrobe) -> None:
    result = generate_top_outfits("interview", interview_wardrobe, rng=random.Random(3))
    picks = {tuple(outfit.pick.item_ids().values()) for outfit in result.outfits}
    assert len(picks) == 1


def test_diversified_modes_avoid_repeating_picks(interview_wardrobe) -> None:
    result = generate_top_outfits("interview", interview_wardrobe, rng=random.Random(3), diversify_modes=True)
    picks = [tuple(outfit.pick.item_ids().values()) for outfit in result.outfits]
    assert len(result.outfits) == 3
    assert len(set(picks)) == 3


def test_unknown_occasion_returns_no_outfits(interview_wardrobe) -> None:
    result = generate_top_outfits("moon_landing", interview_wardrobe)
    assert result.occasion == "moon_landing"
    assert result.outfits == []


def test_empty_wardrobe_returns_no_outfits() -> None:
    assert generate_top_outfits("interview", []).outfits == []


def test_picks_never_repeat_an_item(interview_wardrobe) -> None:
    resolved = [resolve_item(item) for item in interview_wardrobe]
    for pick in build_candidates(bucket_wardrobe(resolved), rng=random.Random(5)):
        ids = [item.item_id for item in pick.items()]
        assert len(ids) == len(set(ids))


def test_candidate_count_is_capped(interview_wardrobe) -> None:
    resolved = [resolve_item(item) for item in interview_wardrobe]
    combos = build_candidates(bucket_wardrobe(resolved), max_combos=3, rng=random.Random(0))
    assert len(combos) == 3


def test_seeded_generation_is_reproducible(interview_wardrobe) -> None:
    first = generate_top_outfits("party", interview_wardrobe, rng=random.Random(42))
    second = generate_top_outfits("party", interview_wardrobe, rng=random.Random(42))
    assert [o.pick.item_ids() for o in first.outfits] == [o.pick.item_ids() for o in second.outfits]


def test_banned_items_are_excluded(interview_wardrobe) -> None:
    interview_wardrobe[0].banned = True
    result = generate_top_outfits("interview", interview_wardrobe, rng=random.Random(1))
    for outfit in result.outfits:
        assert "shirt-1" not in outfit.pick.item_ids().values()


def test_uncategorised_items_fill_top_and_bottom() -> None:
    wardrobe = [WardrobeItem(item_id="a", cloth_type="thing"), WardrobeItem(item_id="b", cloth_type="gadget")]
    result = generate_top_outfits("casual_hangout", wardrobe, rng=random.Random(0))

    assert len(result.outfits) == 3
    pick = result.outfits[0].pick
    assert {pick.top.item_id, pick.bottom.item_id} == {"a", "b"}


def test_single_uncategorised_item_yields_top_only_pick() -> None:
    result = generate_top_outfits("casual_hangout", [WardrobeItem(item_id="solo", cloth_type="thing")])

    assert len(result.outfits) == 3
    pick = result.outfits[0].pick
    assert pick.top.item_id == "solo" and pick.bottom is None


def test_scorer_failure_falls_back_to_default_score(interview_wardrobe, monkeypatch: pytest.MonkeyPatch) -> None:
    def _boom(*_, **__):
        raise RuntimeError("scorer exploded")

    monkeypatch.setattr(outfit_builder, "score_outfit", _boom)
    result = generate_top_outfits("interview", interview_wardrobe, rng=random.Random(1))

    assert len(result.outfits) == 3
    assert all(outfit.score == pytest.approx(0.2) for outfit in result.outfits)


def test_disliked_items_are_ranked_down(build_item) -> None:
    wardrobe = [
        build_item("top-a", "top", 0.9, ["professional"], ["black"]),
        build_item("top-b", "top", 0.9, ["professional"], ["black"]),
        build_item("bottom", "bottom", 0.85, ["clean"], ["navy"]),
        build_item("shoes", "shoes", 0.8, ["clean"], ["black"]),
    ]
    profile = TasteProfile(disliked_items={"top-a": 5})

    result = generate_top_outfits("interview", wardrobe, taste_profile=profile, rng=random.Random(9))

    best = result.outfits[0]
    assert best.pick.top.item_id == "top-b"
    assert best.personalization is not None


def test_force_mode_moves_mode_to_front(interview_wardrobe) -> None:
    outfits = generate_top_outfits("interview", interview_wardrobe, rng=random.Random(1)).outfits
    reordered = apply_force_mode(outfits, "statement")
    assert reordered[0].style_mode == "statement"
    assert apply_force_mode(outfits, None) == outfits


def test_booster_failure_keeps_base_scores(interview_wardrobe, monkeypatch: pytest.MonkeyPatch) -> None:
    baseline = generate_top_outfits("interview", interview_wardrobe, rng=random.Random(4))

    def _boom(*_, **__):
        raise RuntimeError("booster exploded")

    monkeypatch.setattr(outfit_builder, "personalization_boost", _boom)
    result = generate_top_outfits(
        "interview", interview_wardrobe, taste_profile=TasteProfile(), rng=random.Random(4)
    )

    assert len(result.outfits) == 3
    assert [o.score for o in result.outfits] == pytest.approx([o.score for o in baseline.outfits])
    assert all(outfit.personalization is None for outfit in result.outfits)
