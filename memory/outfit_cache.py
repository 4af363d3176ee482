"""Expiring in-memory cache for generated outfits."""
from __future__ import annotations

import hashlib
import json
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional

from models.wardrobe_item import WardrobeItem

DEFAULT_TTL_SECONDS = 7 * 60


@dataclass
class CacheEntry:
    value: Any
    expires_at: float


class OutfitCache:
    """Key/value cache with TTL checked on read; no other eviction."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._store: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            if self._clock() > entry.expires_at:
                del self._store[key]
                return None
            return entry.value

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        with self._lock:
            self._store[key] = CacheEntry(value=value, expires_at=self._clock() + ttl)

    def clear(self, prefix: Optional[str] = None) -> None:
        with self._lock:
            if not prefix:
                self._store.clear()
                return
            for key in [key for key in self._store if key.startswith(prefix)]:
                del self._store[key]

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)


def wardrobe_hash(wardrobe: Iterable[WardrobeItem]) -> str:
    """Stable digest of the wardrobe documents, independent of item order."""

    documents = sorted((item.to_document() for item in wardrobe), key=lambda doc: doc["id"])
    encoded = json.dumps(documents, sort_keys=True, default=str).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()[:16]


def cache_key(user_id: str, occasion: str, wardrobe: Iterable[WardrobeItem], taste_version: int) -> str:
    return f"outfits:{user_id}:{occasion}:{wardrobe_hash(wardrobe)}:v{taste_version}"


__all__ = ["OutfitCache", "CacheEntry", "wardrobe_hash", "cache_key", "DEFAULT_TTL_SECONDS"]
