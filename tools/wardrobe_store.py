"""Wardrobe storage abstractions and SQLite implementation."""
from __future__ import annotations

import json
import sqlite3
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

from models.wardrobe_item import WardrobeItem, from_raw_metadata

_UPDATABLE_FIELDS = {
    "category",
    "cloth_type",
    "color_name",
    "ai_name",
    "image_url",
    "confidence",
    "ai_normalized",
    "last_worn_at",
}


class WardrobeStore:
    """Persistence interface for wardrobe items, scoped per user."""

    def create_item(self, user_id: str, item: WardrobeItem) -> WardrobeItem:
        raise NotImplementedError

    def get_item(self, user_id: str, item_id: str) -> Optional[WardrobeItem]:
        raise NotImplementedError

    def list_items_for_user(self, user_id: str) -> List[WardrobeItem]:
        raise NotImplementedError

    def update_item(self, user_id: str, item_id: str, updated_fields: Dict[str, object]) -> Optional[WardrobeItem]:
        raise NotImplementedError

    def delete_item(self, user_id: str, item_id: str) -> bool:
        raise NotImplementedError

    def mark_worn(self, user_id: str, item_ids: List[str], worn_at: Optional[float] = None) -> int:
        raise NotImplementedError


class SQLiteWardrobeStore(WardrobeStore):
    """Local SQLite-backed store keeping each item as a JSON document."""

    def __init__(self, database_path: str | Path = "data/wardrobe.db") -> None:
        self.database_path = Path(database_path)
        if self.database_path.parent and not self.database_path.parent.exists():
            self.database_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_tables()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.database_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_tables(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS wardrobe_items (
                    user_id TEXT NOT NULL,
                    item_id TEXT NOT NULL,
                    document TEXT NOT NULL,
                    last_worn_at REAL,
                    PRIMARY KEY (user_id, item_id)
                );
                """
            )

    def create_item(self, user_id: str, item: WardrobeItem) -> WardrobeItem:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO wardrobe_items (user_id, item_id, document, last_worn_at)
                VALUES (?, ?, ?, ?)
                """,
                (user_id, item.item_id, json.dumps(item.to_document()), item.last_worn_at),
            )
        return item

    @staticmethod
    def _row_to_item(row: sqlite3.Row) -> WardrobeItem:
        document: Dict[str, Any] = json.loads(row["document"])
        document["lastWornAt"] = row["last_worn_at"]
        return from_raw_metadata(document)

    def _select(self, where: str, params: tuple) -> List[WardrobeItem]:
        query = f"SELECT document, last_worn_at FROM wardrobe_items WHERE {where} ORDER BY item_id"
        with self._connect() as conn:
            return [self._row_to_item(row) for row in conn.execute(query, params)]

    def get_item(self, user_id: str, item_id: str) -> Optional[WardrobeItem]:
        matches = self._select("user_id = ? AND item_id = ?", (user_id, item_id))
        return matches[0] if matches else None

    def list_items_for_user(self, user_id: str) -> List[WardrobeItem]:
        return self._select("user_id = ?", (user_id,))

    def update_item(self, user_id: str, item_id: str, updated_fields: Dict[str, object]) -> Optional[WardrobeItem]:
        current = self.get_item(user_id, item_id)
        if not current:
            return None

        for key, value in updated_fields.items():
            if key in _UPDATABLE_FIELDS:
                setattr(current, key, value)

        validated = from_raw_metadata({**current.to_document(), "aiNormalized": current.ai_normalized})
        return self.create_item(user_id, validated)

    def delete_item(self, user_id: str, item_id: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM wardrobe_items WHERE user_id = ? AND item_id = ?",
                (user_id, item_id),
            )
            return cursor.rowcount > 0

    def mark_worn(self, user_id: str, item_ids: List[str], worn_at: Optional[float] = None) -> int:
        """Stamp ``last_worn_at`` (epoch ms) on the given items; returns rows touched."""

        timestamp = worn_at if worn_at is not None else time.time() * 1000
        with self._connect() as conn:
            cursor = conn.executemany(
                "UPDATE wardrobe_items SET last_worn_at = ? WHERE user_id = ? AND item_id = ?",
                [(timestamp, user_id, str(item_id)) for item_id in item_ids],
            )
            return cursor.rowcount


__all__ = ["WardrobeStore", "SQLiteWardrobeStore"]
