"""FastAPI server exposing the stylist endpoints for deployment."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from logic.validation import ChatMemoryPayload, StyleMode
from stylist_app.app import WardrobeStylistApp
from stylist_app.logging_config import configure_logging


class GenerateBody(BaseModel):
    """Request payload for outfit generation."""

    user_id: str = Field(..., description="Unique user identifier")
    occasion: str = Field(..., description="Occasion key, e.g. 'interview'")
    wardrobe: Optional[List[Dict[str, Any]]] = Field(None, description="Inline wardrobe; stored wardrobe if omitted")
    use_taste: bool = True
    force_mode: Optional[StyleMode] = None


class RateBody(BaseModel):
    user_id: str
    occasion: str
    outfit: Dict[str, Optional[str]]
    rating: int
    source: str = "outfits"
    wardrobe: Optional[List[Dict[str, Any]]] = None


class WornBody(BaseModel):
    user_id: str
    item_ids: List[str]
    worn_at: Optional[float] = None


class IntentBody(BaseModel):
    message: str


class ChatBody(BaseModel):
    user_id: str
    message: str
    occasion: Optional[str] = None
    memory: Optional[ChatMemoryPayload] = None
    wardrobe: Optional[List[Dict[str, Any]]] = None


def _unwrap(response: Dict[str, Any]) -> Dict[str, Any]:
    status = response.get("status")
    if status == "needs_review":
        raise HTTPException(status_code=422, detail=response)
    if status != "ok":
        raise HTTPException(status_code=400, detail=response.get("message", "request failed"))
    return response


def create_app(stylist: WardrobeStylistApp | None = None) -> FastAPI:
    """Build the FastAPI app around a stylist service instance."""

    configure_logging()
    stylist_app = stylist or WardrobeStylistApp()
    api = FastAPI(title="Wardrobe Stylist", version="0.1.0")

    @api.get("/healthz")
    async def healthcheck() -> dict:
        """Lightweight readiness probe."""

        return {
            "status": "ok",
            "service": "wardrobe-stylist",
            "environment": stylist_app.config.environment or "local",
        }

    @api.post("/outfits/generate")
    def generate_outfits(body: GenerateBody) -> dict:
        return _unwrap(stylist_app.generate_outfits(body.model_dump()))

    @api.post("/outfits/rate")
    def rate_outfit(body: RateBody) -> dict:
        return _unwrap(stylist_app.record_rating(body.model_dump()))

    @api.post("/outfits/worn")
    def mark_worn(body: WornBody) -> dict:
        return _unwrap(stylist_app.mark_worn(body.model_dump()))

    @api.post("/stylist/intent")
    def interpret(body: IntentBody) -> dict:
        return _unwrap(stylist_app.interpret_message(body.model_dump()))

    @api.post("/stylist/chat")
    def chat(body: ChatBody) -> dict:
        return _unwrap(stylist_app.chat(body.model_dump(exclude_none=True)))

    return api


def get_app() -> FastAPI:
    """Expose a FastAPI instance for ASGI servers (``uvicorn server.api:get_app --factory``)."""

    return create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server.api:get_app", factory=True, host="0.0.0.0", port=8080, reload=False)
