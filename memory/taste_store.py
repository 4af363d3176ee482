"""Taste profile persistence, rating event log and the rating service."""
from __future__ import annotations

import hashlib
import json
import logging
import sqlite3
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from memory.taste_profile import (
    TasteProfile,
    empty_taste_profile,
    resolve_pick_items,
    top_preferences,
    update_taste_from_rating,
)
from models.taxonomy import SLOTS
from models.wardrobe_item import ResolvedItem

logger = logging.getLogger(__name__)

TOP_COLORS_LIMIT = 6
TOP_TAGS_LIMIT = 10
SNAPSHOT_LIMIT = 5
UNMATCHED_SUMMARY = "Couldn't match those items, taste unchanged."


def _now_ms() -> float:
    return time.time() * 1000


@dataclass
class RatingEvent:
    """One rating, as appended to the audit log."""

    occasion: str
    rating: int
    outfit: Dict[str, Optional[str]]
    source: str = "outfits"
    taste_version: int = 0
    at: float = field(default_factory=_now_ms)


@dataclass
class TasteRecord:
    """The stored taste document for one user."""

    profile: TasteProfile
    taste_version: int = 0
    updated_at: Optional[float] = None
    last_rating: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "profile": self.profile.to_dict(),
            "tasteVersion": self.taste_version,
            "updatedAt": self.updated_at,
            "lastRating": self.last_rating,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TasteRecord":
        return cls(
            profile=TasteProfile.from_dict(data.get("profile")),
            taste_version=int(data.get("tasteVersion") or 0),
            updated_at=data.get("updatedAt"),
            last_rating=data.get("lastRating"),
        )


class TasteProfileStore:
    """Interface for taste profile persistence."""

    def load(self, user_id: str) -> TasteRecord:
        raise NotImplementedError

    def save(self, user_id: str, record: TasteRecord) -> None:
        raise NotImplementedError

    def append_rating_event(self, user_id: str, event: RatingEvent) -> None:
        raise NotImplementedError

    def list_rating_events(self, user_id: str, limit: int = 50) -> List[Dict[str, Any]]:
        raise NotImplementedError


class JSONTasteProfileStore(TasteProfileStore):
    """JSON-file-backed store suitable for local runs; one file per user.

    File names are the sha256 digest of the user id, so caller-supplied ids
    never become paths.
    """

    def __init__(self, base_dir: str | Path = "data/taste") -> None:
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def _stem(user_id: str) -> str:
        return hashlib.sha256(str(user_id).encode("utf-8")).hexdigest()

    def _path(self, user_id: str) -> Path:
        return self.base_dir / f"{self._stem(user_id)}.json"

    def _events_path(self, user_id: str) -> Path:
        return self.base_dir / f"{self._stem(user_id)}.events.jsonl"

    def load(self, user_id: str) -> TasteRecord:
        path = self._path(user_id)
        if not path.exists():
            return TasteRecord(profile=empty_taste_profile())
        return TasteRecord.from_dict(json.loads(path.read_text()))

    def save(self, user_id: str, record: TasteRecord) -> None:
        self._path(user_id).write_text(json.dumps(record.to_dict(), indent=2))

    def append_rating_event(self, user_id: str, event: RatingEvent) -> None:
        with self._events_path(user_id).open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(asdict(event)) + "\n")

    def list_rating_events(self, user_id: str, limit: int = 50) -> List[Dict[str, Any]]:
        path = self._events_path(user_id)
        if not path.exists():
            return []
        lines = [line for line in path.read_text(encoding="utf-8").splitlines() if line.strip()]
        return [json.loads(line) for line in lines[-limit:]]


class SQLiteTasteProfileStore(TasteProfileStore):
    """SQLite-backed taste store for lightweight durability."""

    def __init__(self, db_path: str | Path = "data/taste_store.db") -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS taste_profiles (
                    user_id TEXT PRIMARY KEY,
                    document TEXT NOT NULL,
                    taste_version INTEGER NOT NULL DEFAULT 0,
                    updated_at REAL
                );
                CREATE TABLE IF NOT EXISTS rating_events (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id TEXT NOT NULL,
                    occasion TEXT,
                    rating INTEGER,
                    outfit TEXT,
                    source TEXT,
                    taste_version INTEGER,
                    at REAL
                );
                """
            )

    def load(self, user_id: str) -> TasteRecord:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT document FROM taste_profiles WHERE user_id = ?", (user_id,)
            ).fetchone()
        if row is None:
            return TasteRecord(profile=empty_taste_profile())
        return TasteRecord.from_dict(json.loads(row["document"]))

    def save(self, user_id: str, record: TasteRecord) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO taste_profiles(user_id, document, taste_version, updated_at) VALUES (?, ?, ?, ?)\n"
                "ON CONFLICT(user_id) DO UPDATE SET document=excluded.document, "
                "taste_version=excluded.taste_version, updated_at=excluded.updated_at",
                (user_id, json.dumps(record.to_dict()), record.taste_version, record.updated_at),
            )

    def append_rating_event(self, user_id: str, event: RatingEvent) -> None:
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO rating_events(user_id, occasion, rating, outfit, source, taste_version, at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?)",
                (
                    user_id,
                    event.occasion,
                    event.rating,
                    json.dumps(event.outfit),
                    event.source,
                    event.taste_version,
                    event.at,
                ),
            )

    def list_rating_events(self, user_id: str, limit: int = 50) -> List[Dict[str, Any]]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT occasion, rating, outfit, source, taste_version, at FROM rating_events "
                "WHERE user_id = ? ORDER BY id DESC LIMIT ?",
                (user_id, limit),
            ).fetchall()
        events = []
        for row in reversed(rows):
            events.append(
                {
                    "occasion": row["occasion"],
                    "rating": row["rating"],
                    "outfit": json.loads(row["outfit"]) if row["outfit"] else {},
                    "source": row["source"],
                    "taste_version": row["taste_version"],
                    "at": row["at"],
                }
            )
        return events


@dataclass
class RatingOutcome:
    taste_version: int
    top_colors: List[tuple]
    top_tags: List[tuple]
    changed_summary: str
    snapshot: Dict[str, Any]
    applied: bool = True


def changed_summary(rating: int) -> str:
    if rating >= 4:
        return "Nice — locked in more of this style."
    if rating <= 2:
        return "Got it — reducing outfits like this."
    return "Noted — adjusting slightly."


class TasteMemoryService:
    """Coordinates taste profile loading, rating updates and the event log."""

    def __init__(self, store: TasteProfileStore) -> None:
        self.store = store

    def get_record(self, user_id: str) -> TasteRecord:
        return self.store.load(user_id)

    def get_profile(self, user_id: str) -> Optional[TasteProfile]:
        """Return the stored profile, or ``None`` if the user never rated."""

        record = self.store.load(user_id)
        return record.profile if record.taste_version > 0 else None

    def record_rating(
        self,
        user_id: str,
        occasion: str,
        outfit: Mapping[str, Optional[str]],
        rating: int,
        wardrobe_index: Mapping[str, ResolvedItem],
        source: str = "outfits",
    ) -> RatingOutcome:
        """Apply ``rating`` and persist the new profile version.

        A rating whose ids match no wardrobe item changes nothing: the version
        stays put and the outcome comes back with ``applied=False``.
        """

        outfit_ids = {slot: (str(outfit[slot]) if outfit.get(slot) else None) for slot in SLOTS}
        record = self.store.load(user_id)
        if not resolve_pick_items(outfit_ids, wardrobe_index):
            logger.info("Rating for occasion=%s matched no wardrobe items, profile unchanged", occasion)
            return self._outcome(record, UNMATCHED_SUMMARY, applied=False)

        update_taste_from_rating(record.profile, occasion, outfit_ids, rating, wardrobe_index)

        record.taste_version += 1
        record.updated_at = _now_ms()
        record.last_rating = {
            "occasion": occasion,
            "rating": rating,
            "outfit": outfit_ids,
            "source": source,
            "at": record.updated_at,
        }
        self.store.save(user_id, record)

        event = RatingEvent(
            occasion=occasion,
            rating=rating,
            outfit=outfit_ids,
            source=source,
            taste_version=record.taste_version,
        )
        try:
            self.store.append_rating_event(user_id, event)
        except Exception:  # noqa: BLE001
            logger.warning("Failed to append rating event, keeping profile update", exc_info=True)

        return self._outcome(record, changed_summary(rating))

    @staticmethod
    def _outcome(record: TasteRecord, summary: str, applied: bool = True) -> RatingOutcome:
        top_colors = top_preferences(record.profile.color_prefs, TOP_COLORS_LIMIT)
        top_tags = top_preferences(record.profile.tag_prefs, TOP_TAGS_LIMIT)
        return RatingOutcome(
            taste_version=record.taste_version,
            top_colors=top_colors,
            top_tags=top_tags,
            changed_summary=summary,
            snapshot={
                "taste_version": record.taste_version,
                "top_tags": [tag for tag, _ in top_tags[:SNAPSHOT_LIMIT]],
                "top_colors": [color for color, _ in top_colors[:SNAPSHOT_LIMIT]],
            },
            applied=applied,
        )


__all__ = [
    "RatingEvent",
    "TasteRecord",
    "TasteProfileStore",
    "JSONTasteProfileStore",
    "SQLiteTasteProfileStore",
    "RatingOutcome",
    "TasteMemoryService",
    "changed_summary",
]
