"""Shared fixtures for the stylist test suite."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, List

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from models.wardrobe_item import WardrobeItem, from_raw_metadata  # noqa: E402


def item_doc(
    item_id: str,
    category: str,
    formality: float | None = None,
    tags: List[str] | None = None,
    colors: List[str] | None = None,
    **extra: Any,
) -> Dict[str, Any]:
    """Build a camelCase wardrobe document with analysed attributes."""

    attributes: Dict[str, Any] = {"category": category, "colors": colors or [], "styleTags": tags or []}
    if formality is not None:
        attributes["formality"] = formality
    return {"id": item_id, "aiNormalized": {"topLabel": category, "attributes": attributes}, **extra}


def make_item(*args: Any, **kwargs: Any) -> WardrobeItem:
    return from_raw_metadata(item_doc(*args, **kwargs))


@pytest.fixture
def interview_wardrobe() -> List[WardrobeItem]:
    return [
        make_item("shirt-1", "top", 0.9, ["professional", "clean"], ["white"]),
        make_item("tee-1", "top", 0.3, ["casual", "street"], ["red"]),
        make_item("trouser-1", "bottom", 0.85, ["professional"], ["navy"]),
        make_item("jeans-1", "bottom", 0.45, ["casual"], ["blue"]),
        make_item("oxford-1", "shoes", 0.8, ["clean"], ["black"]),
        make_item("sneaker-1", "shoes", 0.3, ["sporty"], ["neon"]),
    ]


@pytest.fixture
def wardrobe_docs() -> List[Dict[str, Any]]:
    return [
        item_doc("shirt-1", "top", 0.9, ["professional", "clean"], ["white"]),
        item_doc("trouser-1", "bottom", 0.85, ["professional"], ["navy"]),
        item_doc("oxford-1", "shoes", 0.8, ["clean"], ["black"]),
        item_doc("tee-1", "top", 0.3, ["casual"], ["red"]),
    ]


@pytest.fixture
def build_item():
    return make_item


@pytest.fixture
def build_doc():
    return item_doc
