"""Taste learning from ratings and the personalization boost."""

import pytest

from logic.personalization import MAX_BOOST, personalization_boost
from memory.taste_profile import (
    TasteProfile,
    empty_taste_profile,
    rating_weight,
    top_preferences,
    update_taste_from_rating,
)
from models.wardrobe_item import ResolvedItem


def _index() -> dict:
    items = [
        ResolvedItem("top", "top", 0.8, ("classic", "clean"), ("navy",)),
        ResolvedItem("bottom", "bottom", 0.6, ("clean",), ("beige",)),
        ResolvedItem("shoes", "shoes", 0.7, (), ("brown",)),
    ]
    return {item.item_id: item for item in items}


OUTFIT = {"top": "top", "bottom": "bottom", "shoes": "shoes"}


@pytest.mark.parametrize(
    "rating, weight",
    [(5, 3), (4, 2), (3, 0), (2, -1), (1, -2), (9, 3), (-4, -2), ("great", 0), (None, 0), (0, 0), (4.6, 3)],
)
def test_rating_weights(rating, weight) -> None:
    assert rating_weight(rating) == weight


def test_five_star_rating_learns_colors_tags_and_formality() -> None:
    profile = update_taste_from_rating(empty_taste_profile(), "office", OUTFIT, 5, _index(), now=123.0)

    assert profile.color_prefs == {"navy": 3, "beige": 3, "brown": 3}
    assert profile.tag_prefs == {"classic": 3, "clean": 6}
    assert profile.preferred_formality == pytest.approx(0.85 * 0.55 + 0.15 * 0.7)
    assert profile.occasion_prefs["office"].preferred_formality == pytest.approx(0.7)
    assert profile.occasion_prefs["office"].tag_prefs == {"classic": 3, "clean": 6}
    assert profile.updated_at == 123.0


def test_repeated_ratings_are_additive() -> None:
    profile = empty_taste_profile()
    update_taste_from_rating(profile, "office", OUTFIT, 4, _index())
    update_taste_from_rating(profile, "office", OUTFIT, 4, _index())
    assert profile.color_prefs["navy"] == 4


def test_low_rating_records_dislikes_only() -> None:
    profile = update_taste_from_rating(empty_taste_profile(), "office", OUTFIT, 2, _index())

    assert profile.disliked_items == {"top": 1, "bottom": 1, "shoes": 1}
    assert profile.color_prefs == {} and profile.tag_prefs == {}
    assert profile.preferred_formality == 0.55
    assert profile.occasion_prefs["office"].preferred_formality is None


def test_neutral_rating_touches_only_timestamp() -> None:
    profile = update_taste_from_rating(empty_taste_profile(), "office", OUTFIT, 3, _index(), now=50.0)
    assert profile.color_prefs == {} and profile.disliked_items == {}
    assert profile.updated_at == 50.0


def test_unknown_items_leave_profile_untouched() -> None:
    profile = update_taste_from_rating(TasteProfile(updated_at=0.0), "office", {"top": "ghost"}, 5, _index())
    assert profile == TasteProfile(updated_at=0.0)


def test_profile_document_round_trip() -> None:
    profile = update_taste_from_rating(empty_taste_profile(), "office", OUTFIT, 5, _index(), now=1.0)
    assert TasteProfile.from_dict(profile.to_dict()) == profile


def test_top_preferences_orders_by_weight() -> None:
    assert top_preferences({"a": 1, "b": 5, "c": 3}, 2) == [("b", 5), ("c", 3)]


def test_boost_rewards_learned_style() -> None:
    profile = empty_taste_profile()
    for _ in range(2):
        update_taste_from_rating(profile, "office", OUTFIT, 5, _index())

    result = personalization_boost(profile, "office", OUTFIT, _index())

    assert 0 < result.boost <= MAX_BOOST
    assert "Matches your style preferences." in result.reasons
    assert "Matches your preferred formality level." in result.reasons


def test_boost_penalises_disliked_items() -> None:
    profile = TasteProfile(disliked_items={"top": 2})
    result = personalization_boost(profile, "office", OUTFIT, _index())

    assert result.boost < 0
    assert "Contains an item you previously disliked." in result.penalties


def test_boost_is_clamped() -> None:
    profile = TasteProfile(disliked_items={"top": 10, "bottom": 10, "shoes": 10}, preferred_formality=0.0)
    assert personalization_boost(profile, "office", OUTFIT, _index()).boost == -MAX_BOOST


def test_boost_does_not_mutate_profile() -> None:
    profile = update_taste_from_rating(empty_taste_profile(), "office", OUTFIT, 5, _index(), now=1.0)
    snapshot = profile.to_dict()
    personalization_boost(profile, "office", OUTFIT, _index())
    assert profile.to_dict() == snapshot


def test_boost_for_unknown_pick_is_zero() -> None:
    result = personalization_boost(empty_taste_profile(), "office", {"top": "ghost"}, _index())
    assert result.boost == 0.0 and result.reasons == [] and result.penalties == []
