"""Canonical taxonomy definitions for wardrobe items and outfits.

This module centralises the canonical labels for categories, outfit slots,
style modes and stylist tones. Helper functions keep normalisation consistent
across the resolver, scorer, learner and chat stylist.
"""

from typing import Any, Iterable, List, Tuple

CATEGORIES: Tuple[str, ...] = ("top", "bottom", "shoes", "outer", "accessory", "other")

# Order matters: it is the order items are read out of a pick everywhere.
SLOTS: Tuple[str, ...] = ("top", "bottom", "shoes", "outer", "accessory")

STYLE_MODES: Tuple[str, ...] = ("safe", "attraction", "statement")
TONES: Tuple[str, ...] = ("safe", "attraction", "statement", "balanced")

NEUTRAL_COLORS = frozenset({"black", "white", "grey", "gray", "charcoal", "beige", "cream"})


def normalize_key(value: Any) -> str:
    """Lowercase and strip a free-form value; ``None`` becomes an empty string."""

    if value is None:
        return ""
    return str(value).strip().lower()


def normalize_color_name(raw: Any) -> str:
    """Map a raw color value to its normalised lowercase name."""

    return normalize_key(raw)


def unique(values: Iterable[str]) -> List[str]:
    """Deduplicate while keeping first-seen order and dropping empty values."""

    seen = set()
    ordered: List[str] = []
    for value in values:
        if value and value not in seen:
            seen.add(value)
            ordered.append(value)
    return ordered


__all__ = [
    "CATEGORIES",
    "SLOTS",
    "STYLE_MODES",
    "TONES",
    "NEUTRAL_COLORS",
    "normalize_key",
    "normalize_color_name",
    "unique",
]
