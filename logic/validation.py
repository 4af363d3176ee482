"""Pydantic schemas and helpers for validating stylist requests."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from models.taxonomy import SLOTS

StyleMode = Literal["safe", "attraction", "statement"]


class GenerateRequest(BaseModel):
    """Input contract for outfit generation.

    ``wardrobe`` is optional; when omitted the stored wardrobe is used.
    """

    user_id: str = Field(min_length=1)
    occasion: str = Field(min_length=1)
    wardrobe: Optional[List[Dict[str, Any]]] = None
    use_taste: bool = True
    force_mode: Optional[StyleMode] = None


class RateRequest(BaseModel):
    """Input contract for a 1-5 star outfit rating."""

    user_id: str = Field(min_length=1)
    occasion: str = Field(min_length=1)
    outfit: Dict[str, Optional[str]]
    rating: int = Field(ge=1, le=5)
    source: str = "outfits"
    wardrobe: Optional[List[Dict[str, Any]]] = None

    @field_validator("outfit")
    @classmethod
    def _validate_slots(cls, outfit: Dict[str, Optional[str]]) -> Dict[str, Optional[str]]:
        unknown = set(outfit) - set(SLOTS)
        if unknown:
            raise ValueError(f"unknown outfit slots: {sorted(unknown)}")
        if not any(outfit.values()):
            raise ValueError("outfit must reference at least one item")
        return outfit


class WornRequest(BaseModel):
    user_id: str = Field(min_length=1)
    item_ids: List[str] = Field(min_length=1)
    worn_at: Optional[float] = None


class IntentRequest(BaseModel):
    message: str = Field(min_length=1)


class ChatMemoryPayload(BaseModel):
    occasion: Optional[str] = None
    avoid_colors: List[str] = []
    prefer_colors: List[str] = []
    ban_items: List[str] = []
    force_mode: Optional[StyleMode] = None
    formality_delta: float = 0.0


class ChatRequest(BaseModel):
    """One chat turn; ``memory`` is echoed back updated for the next turn."""

    user_id: str = Field(min_length=1)
    message: str = Field(min_length=1)
    occasion: Optional[str] = None
    memory: ChatMemoryPayload = Field(default_factory=ChatMemoryPayload)
    wardrobe: Optional[List[Dict[str, Any]]] = None


class ValidationResult(BaseModel):
    """Wrapper returned to callers when validation fails."""

    status: Literal["needs_review"] = "needs_review"
    message: str
    details: List[Dict[str, Any]]


def validation_failure(message: str, exc: ValidationError) -> Dict[str, Any]:
    """Translate Pydantic errors into a consistent review payload."""

    details = exc.errors(include_url=False, include_context=False, include_input=False)
    return ValidationResult(message=message, details=details).model_dump()


__all__ = [
    "GenerateRequest",
    "RateRequest",
    "WornRequest",
    "IntentRequest",
    "ChatMemoryPayload",
    "ChatRequest",
    "ValidationResult",
    "validation_failure",
]
