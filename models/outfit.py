"""Outfit schemas: slot picks, score results and generated outfits."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from models.taxonomy import SLOTS
from models.wardrobe_item import ResolvedItem


@dataclass(frozen=True)
class OutfitPick:
    """At most one item per slot; an item id never fills two slots."""

    top: Optional[ResolvedItem] = None
    bottom: Optional[ResolvedItem] = None
    shoes: Optional[ResolvedItem] = None
    outer: Optional[ResolvedItem] = None
    accessory: Optional[ResolvedItem] = None

    def __post_init__(self) -> None:
        ids = [item.item_id for item in self.items()]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Outfit pick repeats an item across slots: {ids}")

    def slot_items(self) -> List[Tuple[str, ResolvedItem]]:
        pairs = []
        for slot in SLOTS:
            item = getattr(self, slot)
            if item is not None:
                pairs.append((slot, item))
        return pairs

    def items(self) -> List[ResolvedItem]:
        return [item for _, item in self.slot_items()]

    def item_ids(self) -> Dict[str, Optional[str]]:
        return {slot: (getattr(self, slot).item_id if getattr(self, slot) else None) for slot in SLOTS}


@dataclass
class OutfitScoreResult:
    score: float
    reasons: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    breakdown: Dict[str, float] = field(default_factory=dict)


@dataclass
class PersonalizationResult:
    boost: float = 0.0
    reasons: List[str] = field(default_factory=list)
    penalties: List[str] = field(default_factory=list)


@dataclass
class GeneratedOutfit:
    """A ranked outfit together with its explanation."""

    pick: OutfitPick
    score: float
    reasons: List[str]
    warnings: List[str]
    breakdown: Dict[str, float]
    style_mode: str
    personalization: Optional[PersonalizationResult] = None

    def to_payload(self) -> Dict[str, object]:
        items: Dict[str, object] = {}
        for slot in SLOTS:
            item: Optional[ResolvedItem] = getattr(self.pick, slot)
            items[slot] = (
                {
                    "id": item.item_id,
                    "category": item.category,
                    "colors": list(item.colors),
                    "image_url": item.image_url,
                }
                if item
                else None
            )
        personalization = None
        if self.personalization is not None:
            personalization = {
                "boost": self.personalization.boost,
                "reasons": list(self.personalization.reasons),
                "penalties": list(self.personalization.penalties),
            }
        return {
            "style_mode": self.style_mode,
            "score": round(self.score, 4),
            "reasons": list(self.reasons),
            "warnings": list(self.warnings),
            "breakdown": dict(self.breakdown),
            "personalization": personalization,
            "items": items,
        }


@dataclass
class GenerateOutfitsResult:
    occasion: str
    outfits: List[GeneratedOutfit] = field(default_factory=list)

    def to_payload(self) -> Dict[str, object]:
        return {"occasion": self.occasion, "outfits": [outfit.to_payload() for outfit in self.outfits]}
