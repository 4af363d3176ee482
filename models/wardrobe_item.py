"""Wardrobe item data model and helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from models.taxonomy import normalize_color_name, normalize_key, unique


def _ensure_list(value: Any) -> List[Any]:
    """Coerce a scalar or iterable into a list."""

    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        return list(value)
    return [value]


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _optional_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return number


def _pick(raw: Mapping[str, Any], *keys: str) -> Any:
    """Return the first present value among snake_case / camelCase aliases."""

    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return None


@dataclass
class ItemAttributes:
    """Normalized attributes produced by clothing analysis."""

    category: Optional[str] = None
    colors: List[str] = field(default_factory=list)
    formality: Optional[float] = None
    style_tags: List[str] = field(default_factory=list)
    season: List[str] = field(default_factory=list)
    pattern: Optional[str] = None
    material: Optional[str] = None

    def __post_init__(self) -> None:
        self.category = _optional_str(self.category)
        self.colors = unique(normalize_color_name(c) for c in _ensure_list(self.colors))
        self.formality = _optional_float(self.formality)
        self.style_tags = unique(normalize_key(t) for t in _ensure_list(self.style_tags))
        self.season = unique(normalize_key(s) for s in _ensure_list(self.season))


@dataclass
class AINormalized:
    """Cached analysis for one image. ``source_image_url`` is the cache key."""

    top_label: Optional[str] = None
    top_confidence: Optional[float] = None
    attributes: ItemAttributes = field(default_factory=ItemAttributes)
    source_image_url: Optional[str] = None


@dataclass
class WardrobeItem:
    """A clothing article as stored; raw fields may be partially populated."""

    item_id: str
    category: Optional[str] = None
    cloth_type: Optional[str] = None
    color_name: Optional[str] = None
    ai_name: Optional[str] = None
    image_url: Optional[str] = None
    confidence: Optional[float] = None
    ai_normalized: Optional[AINormalized] = None
    last_worn_at: Optional[float] = None
    banned: bool = False

    def __post_init__(self) -> None:
        self.item_id = str(self.item_id)
        self.last_worn_at = _optional_float(self.last_worn_at)

    @property
    def attributes(self) -> Optional[ItemAttributes]:
        return self.ai_normalized.attributes if self.ai_normalized else None

    def to_document(self) -> Dict[str, Any]:
        """Serialise to the camelCase document shape used by storage."""

        doc: Dict[str, Any] = {
            "id": self.item_id,
            "category": self.category,
            "clothType": self.cloth_type,
            "colorName": self.color_name,
            "aiName": self.ai_name,
            "imageUrl": self.image_url,
            "confidence": self.confidence,
            "lastWornAt": self.last_worn_at,
        }
        if self.ai_normalized:
            attrs = self.ai_normalized.attributes
            doc["aiNormalized"] = {
                "topLabel": self.ai_normalized.top_label,
                "topConfidence": self.ai_normalized.top_confidence,
                "sourceImageUrl": self.ai_normalized.source_image_url,
                "attributes": {
                    "category": attrs.category,
                    "colors": list(attrs.colors),
                    "formality": attrs.formality,
                    "styleTags": list(attrs.style_tags),
                    "season": list(attrs.season),
                    "pattern": attrs.pattern,
                    "material": attrs.material,
                },
            }
        return doc


@dataclass(frozen=True)
class ResolvedItem:
    """Fully-resolved wardrobe item consumed by scoring and personalization."""

    item_id: str
    category: str
    formality: float
    style_tags: Tuple[str, ...]
    colors: Tuple[str, ...]
    last_worn_at: Optional[float] = None
    image_url: Optional[str] = None
    label: Optional[str] = None


def _attributes_from_raw(raw: Mapping[str, Any]) -> ItemAttributes:
    return ItemAttributes(
        category=_pick(raw, "category"),
        colors=_ensure_list(_pick(raw, "colors")),
        formality=_pick(raw, "formality"),
        style_tags=_ensure_list(_pick(raw, "style_tags", "styleTags")),
        season=_ensure_list(_pick(raw, "season")),
        pattern=_optional_str(_pick(raw, "pattern")),
        material=_optional_str(_pick(raw, "material")),
    )


def from_raw_metadata(metadata: Mapping[str, Any]) -> WardrobeItem:
    """Factory to build a :class:`WardrobeItem` from a loose storage document.

    Accepts both camelCase (document store) and snake_case keys. Only the id is
    required; everything else is optional and resolved later.
    """

    item_id = _pick(metadata, "item_id", "id")
    if item_id is None or not str(item_id).strip():
        raise ValueError("Missing required field for WardrobeItem: id")

    normalized_raw = _pick(metadata, "ai_normalized", "aiNormalized")
    ai_normalized: Optional[AINormalized] = None
    if isinstance(normalized_raw, AINormalized):
        ai_normalized = normalized_raw
    elif isinstance(normalized_raw, Mapping):
        attributes_raw = normalized_raw.get("attributes") or {}
        ai_normalized = AINormalized(
            top_label=_optional_str(_pick(normalized_raw, "top_label", "topLabel")),
            top_confidence=_optional_float(_pick(normalized_raw, "top_confidence", "topConfidence")),
            attributes=_attributes_from_raw(attributes_raw),
            source_image_url=_optional_str(_pick(normalized_raw, "source_image_url", "sourceImageUrl")),
        )

    return WardrobeItem(
        item_id=str(item_id),
        category=_optional_str(_pick(metadata, "category")),
        cloth_type=_optional_str(_pick(metadata, "cloth_type", "clothType")),
        color_name=_optional_str(_pick(metadata, "color_name", "colorName")),
        ai_name=_optional_str(_pick(metadata, "ai_name", "aiName")),
        image_url=_optional_str(_pick(metadata, "image_url", "imageUrl")),
        confidence=_optional_float(_pick(metadata, "confidence")),
        ai_normalized=ai_normalized,
        last_worn_at=_pick(metadata, "last_worn_at", "lastWornAt"),
        banned=bool(_pick(metadata, "banned") or False),
    )


__all__ = ["ItemAttributes", "AINormalized", "WardrobeItem", "ResolvedItem", "from_raw_metadata"]
