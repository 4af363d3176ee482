"""Clothing attribute analysis providers and the per-image analysis cache."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

import requests
from pydantic import BaseModel, ValidationError

from models.wardrobe_item import AINormalized, ItemAttributes
from tools.observability import instrument_tool
from tools.wardrobe_store import WardrobeStore

LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIDENCE = 0.75
DEFAULT_LABEL = "outfit"

_SHOES = ("shoe", "sneaker", "boot", "loafer", "heel", "sandal", "flipflop", "slipper")
_BOTTOMS = ("pant", "jean", "trouser", "bottom", "short", "skirt", "legging", "cargo", "chino")
_OUTERS = ("jacket", "hoodie", "coat", "blazer", "sweater", "outer", "cardigan")
_ACCESSORIES = ("watch", "belt", "cap", "hat", "ring", "bracelet", "accessory")
_TOPS = ("shirt", "t-shirt", "tshirt", "tee", "top", "kurta", "suit", "blouse")


class _Card(BaseModel):
    label: str = ""
    confidence: Optional[float] = None


class _PredictionResponse(BaseModel):
    wardrobeCards: List[_Card] = []
    colors: List[str] = []
    pattern: Optional[str] = None
    material: Optional[str] = None


def _has_any(text: str, keywords: tuple) -> bool:
    return any(keyword in text for keyword in keywords)


def map_label_to_category(label: str) -> str:
    text = (label or "").lower()
    if _has_any(text, _SHOES):
        return "shoes"
    if _has_any(text, _BOTTOMS):
        return "bottom"
    if _has_any(text, _OUTERS):
        return "outer"
    if _has_any(text, _ACCESSORIES):
        return "accessory"
    if _has_any(text, _TOPS):
        return "top"
    return "other"


def infer_formality(label: str, category: str) -> float:
    text = (label or "").lower()
    if _has_any(text, ("suit", "blazer")):
        return 0.92
    if _has_any(text, ("formal", "shirt")):
        return 0.75
    if "kurta" in text:
        return 0.65
    if _has_any(text, ("hoodie", "tshirt", "t-shirt")):
        return 0.35
    if category == "shoes":
        if _has_any(text, ("loafer", "heel")):
            return 0.72
        if "sneaker" in text:
            return 0.35
    if category == "bottom":
        if "jeans" in text:
            return 0.42
        if "trouser" in text:
            return 0.68
    return 0.5


def infer_style_tags(label: str, category: str) -> List[str]:
    text = (label or "").lower()
    tags = ["clean"]
    if _has_any(text, ("formal", "blazer", "suit")):
        tags.append("professional")
    if _has_any(text, ("street", "oversized")):
        tags.append("streetwear")
    if _has_any(text, ("sport", "gym")):
        tags.append("sporty")
    if _has_any(text, ("premium", "blazer", "coat")):
        tags.append("premium")
    if _has_any(text, ("party", "club")):
        tags.append("bold")
    category_tag = {"top": "top", "bottom": "bottom", "shoes": "footwear", "outer": "outer"}.get(category)
    if category_tag:
        tags.append(category_tag)
    return tags


def infer_season(label: str) -> List[str]:
    text = (label or "").lower()
    if _has_any(text, ("coat", "hoodie", "sweater")):
        return ["winter"]
    if _has_any(text, ("short", "tee", "tshirt")):
        return ["summer"]
    return ["all"]


def normalize_prediction(
    label: Optional[str],
    confidence: Optional[float],
    image_url: Optional[str],
    colors: Optional[List[str]] = None,
    pattern: Optional[str] = None,
    material: Optional[str] = None,
) -> AINormalized:
    """Turn a detector label plus colors into engine-ready normalized attributes."""

    top_label = label or DEFAULT_LABEL
    category = map_label_to_category(top_label)
    return AINormalized(
        top_label=top_label,
        top_confidence=DEFAULT_CONFIDENCE if confidence is None else confidence,
        attributes=ItemAttributes(
            category=category,
            colors=[str(color).lower() for color in colors or []],
            formality=infer_formality(top_label, category),
            style_tags=infer_style_tags(top_label, category),
            season=infer_season(top_label),
            pattern=pattern,
            material=material,
        ),
        source_image_url=image_url,
    )


class AttributeProvider(ABC):
    """Abstract clothing analysis provider."""

    @abstractmethod
    def analyze(self, image_url: str, label_hint: Optional[str] = None) -> AINormalized:
        """Return normalized attributes for the image."""


class HeuristicAttributeProvider(AttributeProvider):
    """Offline provider that derives attributes from the item's text label."""

    def analyze(self, image_url: str, label_hint: Optional[str] = None) -> AINormalized:
        LOGGER.info("Using heuristic attribute analysis", extra={"label_hint": label_hint})
        return normalize_prediction(label_hint, None, image_url)


class HTTPAttributeProvider(AttributeProvider):
    """Calls a prediction endpoint with schema validation and heuristic fallback."""

    def __init__(
        self,
        endpoint: str | None = None,
        timeout_seconds: float = 5.0,
        fallback: AttributeProvider | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.timeout_seconds = timeout_seconds
        self.fallback = fallback or HeuristicAttributeProvider()

    def _fallback(self, reason: str, image_url: str, label_hint: Optional[str]) -> AINormalized:
        LOGGER.warning("Using fallback attribute analysis", extra={"reason": reason})
        return self.fallback.analyze(image_url, label_hint)

    def analyze(self, image_url: str, label_hint: Optional[str] = None) -> AINormalized:
        if not image_url:
            raise ValueError("image_url is required for attribute analysis")
        if not self.endpoint:
            return self._fallback("missing_endpoint", image_url, label_hint)

        try:
            response = requests.post(self.endpoint, json={"imageUrl": image_url}, timeout=self.timeout_seconds)
            response.raise_for_status()
            parsed = _PredictionResponse.model_validate(response.json())
        except (requests.Timeout, requests.RequestException) as exc:
            LOGGER.error("Attribute endpoint unreachable", exc_info=exc)
            return self._fallback("request_error", image_url, label_hint)
        except (ValidationError, ValueError) as exc:
            LOGGER.error("Attribute payload schema validation failed", exc_info=exc)
            return self._fallback("schema_validation", image_url, label_hint)

        cards = [card for card in parsed.wardrobeCards if card.label.lower() != "person"]
        if not cards:
            return self._fallback("no_detections", image_url, label_hint)
        return normalize_prediction(
            cards[0].label,
            cards[0].confidence,
            image_url,
            colors=parsed.colors,
            pattern=parsed.pattern,
            material=parsed.material,
        )


@dataclass
class AnalysisResult:
    ai_normalized: AINormalized
    cached: bool


@instrument_tool("analyze_item_if_needed")
def analyze_item_if_needed(
    store: WardrobeStore,
    user_id: str,
    item_id: str,
    provider: AttributeProvider,
) -> AnalysisResult:
    """Analyze an item once per image URL, persisting the normalized result.

    Raises ``LookupError`` for unknown items and ``ValueError`` for items
    without an image.
    """

    item = store.get_item(user_id, item_id)
    if item is None:
        raise LookupError(f"Wardrobe item not found: {item_id}")
    if not item.image_url:
        raise ValueError(f"Wardrobe item has no image: {item_id}")

    if item.ai_normalized and item.ai_normalized.source_image_url == item.image_url:
        return AnalysisResult(ai_normalized=item.ai_normalized, cached=True)

    normalized = provider.analyze(item.image_url, item.cloth_type or item.ai_name)
    colors = normalized.attributes.colors
    better_name = " ".join(part for part in (colors[0] if colors else "", normalized.top_label or "") if part)
    store.update_item(
        user_id,
        item_id,
        {
            "ai_normalized": normalized,
            "cloth_type": normalized.top_label,
            "ai_name": better_name or item.ai_name,
            "confidence": normalized.top_confidence,
        },
    )
    return AnalysisResult(ai_normalized=normalized, cached=False)


__all__ = [
    "AttributeProvider",
    "HeuristicAttributeProvider",
    "HTTPAttributeProvider",
    "AnalysisResult",
    "analyze_item_if_needed",
    "map_label_to_category",
    "infer_formality",
    "infer_style_tags",
    "infer_season",
    "normalize_prediction",
]
