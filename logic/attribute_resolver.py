"""Deterministic attribute resolution for wardrobe items.

Every wardrobe item resolves to *some* category, formality, tag list and color
list. Structured analysis attributes win when present; otherwise ordered
keyword rules over the item's text fields supply a best-effort guess. The rule
tables below are evaluated in order and the first category rule that matches
wins, which is what keeps ambiguous labels such as "leather boots" stable.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from models.taxonomy import normalize_color_name, normalize_key, unique
from models.wardrobe_item import ResolvedItem, WardrobeItem

logger = logging.getLogger(__name__)

DEFAULT_FORMALITY = 0.5


@dataclass(frozen=True)
class KeywordRule:
    """Maps any of ``keywords`` appearing in item text to ``result``."""

    result: object
    keywords: Tuple[str, ...]

    def matches(self, text: str) -> bool:
        return any(keyword in text for keyword in self.keywords)


CATEGORY_RULES: Tuple[KeywordRule, ...] = (
    KeywordRule("shoes", ("shoe", "sneaker", "boot", "loafer", "heel", "sandal", "footwear")),
    KeywordRule("bottom", ("pant", "jean", "trouser", "short", "skirt", "legging", "cargo", "bottom")),
    KeywordRule("outer", ("jacket", "coat", "blazer", "hoodie", "outer")),
    KeywordRule("accessory", ("watch", "belt", "chain", "bracelet", "accessory")),
    KeywordRule("top", ("shirt", "tshirt", "t-shirt", "top", "sweater", "kurta")),
)

FORMALITY_RULES: Tuple[KeywordRule, ...] = (
    KeywordRule(0.92, ("blazer", "suit")),
    KeywordRule(0.72, ("formal", "shirt")),
    KeywordRule(0.45, ("jeans", "cargo")),
    KeywordRule(0.38, ("tshirt", "t-shirt")),
    KeywordRule(0.25, ("short",)),
)

# Tag rules are cumulative: every matching rule contributes its tags.
STYLE_TAG_RULES: Tuple[KeywordRule, ...] = (
    KeywordRule(("formal", "classic"), ("formal", "shirt", "blazer")),
    KeywordRule(("casual", "street"), ("tshirt", "t-shirt", "hoodie", "sneaker")),
    KeywordRule(("ethnic",), ("kurta", "ethnic")),
    KeywordRule(("casual",), ("jeans",)),
    KeywordRule(("minimal",), ("black", "white")),
)


def _joined(parts: Iterable[Optional[str]]) -> str:
    return " ".join(normalize_key(part) for part in parts)


def _category_text(item: WardrobeItem) -> str:
    attributes = item.attributes
    return _joined(
        [attributes.category if attributes else None, item.category, item.cloth_type, item.ai_name]
    )


def _heuristic_text(item: WardrobeItem) -> str:
    attributes = item.attributes
    top_label = item.ai_normalized.top_label if item.ai_normalized else None
    category = (attributes.category if attributes else None) or item.category
    return _joined([category, item.cloth_type or top_label, item.ai_name])


def first_match(rules: Iterable[KeywordRule], text: str, default: object) -> object:
    """Return the result of the first rule matching ``text``."""

    for rule in rules:
        if rule.matches(text):
            return rule.result
    return default


def resolve_category(item: WardrobeItem) -> str:
    """Return the outfit category for ``item``; ``other`` when nothing matches."""

    return str(first_match(CATEGORY_RULES, _category_text(item), "other"))


def get_formality(item: WardrobeItem) -> float:
    attributes = item.attributes
    if attributes and attributes.formality is not None:
        return max(0.0, min(1.0, attributes.formality))
    return float(first_match(FORMALITY_RULES, _heuristic_text(item), DEFAULT_FORMALITY))


def get_style_tags(item: WardrobeItem) -> List[str]:
    attributes = item.attributes
    if attributes and attributes.style_tags:
        return list(attributes.style_tags)

    text = _heuristic_text(item)
    tags: List[str] = []
    for rule in STYLE_TAG_RULES:
        if rule.matches(text):
            tags.extend(rule.result)  # type: ignore[arg-type]
    return unique(tags)


def get_colors(item: WardrobeItem) -> List[str]:
    attributes = item.attributes
    if attributes and attributes.colors:
        return list(attributes.colors)
    color = normalize_color_name(item.color_name)
    return [color] if color else []


def resolve_item(item: WardrobeItem) -> ResolvedItem:
    """Resolve every derived field once so downstream code sees a complete shape."""

    top_label = item.ai_normalized.top_label if item.ai_normalized else None
    resolved = ResolvedItem(
        item_id=item.item_id,
        category=resolve_category(item),
        formality=get_formality(item),
        style_tags=tuple(get_style_tags(item)),
        colors=tuple(get_colors(item)),
        last_worn_at=item.last_worn_at,
        image_url=item.image_url,
        label=top_label or item.cloth_type or item.ai_name,
    )
    logger.debug(
        "Resolved wardrobe item %s -> category=%s formality=%.2f",
        item.item_id,
        resolved.category,
        resolved.formality,
    )
    return resolved


def build_wardrobe_index(items: Iterable[ResolvedItem]) -> Dict[str, ResolvedItem]:
    """Index resolved items by id for personalization and rating lookups."""

    return {item.item_id: item for item in items}


__all__ = [
    "KeywordRule",
    "CATEGORY_RULES",
    "FORMALITY_RULES",
    "STYLE_TAG_RULES",
    "DEFAULT_FORMALITY",
    "first_match",
    "resolve_category",
    "get_formality",
    "get_style_tags",
    "get_colors",
    "resolve_item",
    "build_wardrobe_index",
]
