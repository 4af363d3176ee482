"""Taste profile persistence and rating recording."""

from pathlib import Path

import pytest

from memory.taste_store import (
    JSONTasteProfileStore,
    RatingEvent,
    SQLiteTasteProfileStore,
    TasteMemoryService,
    changed_summary,
)
from models.wardrobe_item import ResolvedItem

INDEX = {
    "top": ResolvedItem("top", "top", 0.8, ("classic", "clean"), ("navy",)),
    "shoes": ResolvedItem("shoes", "shoes", 0.6, ("clean",), ("white",)),
}
OUTFIT = {"top": "top", "shoes": "shoes"}


@pytest.fixture(params=["json", "sqlite"])
def store(request, tmp_path: Path):
    if request.param == "json":
        return JSONTasteProfileStore(base_dir=tmp_path / "taste")
    return SQLiteTasteProfileStore(db_path=tmp_path / "taste.db")


def test_missing_user_loads_empty_record(store) -> None:
    record = store.load("nobody")
    assert record.taste_version == 0
    assert record.profile.color_prefs == {}
    assert TasteMemoryService(store).get_profile("nobody") is None


def test_record_rating_persists_and_versions(store) -> None:
    service = TasteMemoryService(store)

    first = service.record_rating("u1", "office", OUTFIT, 5, INDEX)
    second = service.record_rating("u1", "office", OUTFIT, 4, INDEX)

    assert (first.taste_version, second.taste_version) == (1, 2)
    assert second.changed_summary == "Nice — locked in more of this style."
    assert second.top_tags[0] == ("clean", 10)
    assert second.snapshot["top_colors"] == ["navy", "white"]

    reloaded = store.load("u1")
    assert reloaded.taste_version == 2
    assert reloaded.profile.tag_prefs["clean"] == 10
    assert reloaded.last_rating["rating"] == 4
    assert reloaded.last_rating["outfit"]["bottom"] is None
    assert service.get_profile("u1") is not None


def test_rating_events_are_appended(store) -> None:
    service = TasteMemoryService(store)
    service.record_rating("u1", "office", OUTFIT, 2, INDEX, source="chat")
    service.record_rating("u1", "party", OUTFIT, 5, INDEX)

    events = store.list_rating_events("u1")
    assert [event["rating"] for event in events] == [2, 5]
    assert events[0]["source"] == "chat"
    assert events[1]["taste_version"] == 2
    assert store.list_rating_events("u1", limit=1)[0]["occasion"] == "party"


def test_event_log_failure_does_not_lose_the_rating(store, monkeypatch: pytest.MonkeyPatch) -> None:
    def _fail(user_id: str, event: RatingEvent) -> None:
        raise OSError("disk full")

    monkeypatch.setattr(store, "append_rating_event", _fail)
    outcome = TasteMemoryService(store).record_rating("u1", "office", OUTFIT, 1, INDEX)

    assert outcome.taste_version == 1
    assert outcome.changed_summary == "Got it — reducing outfits like this."
    assert store.load("u1").profile.disliked_items == {"top": 2, "shoes": 2}


@pytest.mark.parametrize(
    "rating, summary",
    [
        (5, "Nice — locked in more of this style."),
        (4, "Nice — locked in more of this style."),
        (3, "Noted — adjusting slightly."),
        (2, "Got it — reducing outfits like this."),
    ],
)
def test_changed_summary(rating: int, summary: str) -> None:
    assert changed_summary(rating) == summary


def test_json_store_keeps_hostile_user_ids_inside_base_dir(tmp_path: Path) -> None:
    base_dir = tmp_path / "store" / "taste"
    service = TasteMemoryService(JSONTasteProfileStore(base_dir=base_dir))

    outcome = service.record_rating("../../escaped", "office", OUTFIT, 5, INDEX)

    assert outcome.taste_version == 1
    assert not (tmp_path / "escaped.json").exists()
    assert not list(tmp_path.glob("escaped*"))
    assert all(path.parent == base_dir for path in base_dir.iterdir())
    assert service.get_record("../../escaped").taste_version == 1


def test_rating_with_no_known_items_changes_nothing(store) -> None:
    service = TasteMemoryService(store)
    service.record_rating("u1", "office", OUTFIT, 5, INDEX)

    outcome = service.record_rating("u1", "office", {"top": "ghost"}, 5, INDEX)

    assert outcome.applied is False
    assert outcome.taste_version == 1
    assert outcome.changed_summary == "Couldn't match those items, taste unchanged."
    assert store.load("u1").taste_version == 1
    assert len(store.list_rating_events("u1")) == 1
