"""Wardrobe stylist app bootstrap: wires stores, cache and the outfit engine."""

from __future__ import annotations

import logging
import random
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from logic.attribute_resolver import build_wardrobe_index, resolve_item
from logic.chat_stylist import (
    MODE_TITLES,
    StylistMemory,
    apply_memory_bans,
    build_stylist_response_text,
    extract_memory_updates,
    infer_intent_from_message,
    resolve_requested_occasion,
)
from logic.outfit_builder import apply_force_mode, generate_top_outfits
from logic.validation import (
    ChatRequest,
    GenerateRequest,
    IntentRequest,
    RateRequest,
    WornRequest,
    validation_failure,
)
from memory.outfit_cache import OutfitCache, cache_key
from memory.taste_profile import TasteProfile
from memory.taste_store import (
    JSONTasteProfileStore,
    SQLiteTasteProfileStore,
    TasteMemoryService,
    TasteProfileStore,
)
from models.occasions import resolve_occasion_key
from models.wardrobe_item import WardrobeItem, from_raw_metadata
from stylist_app.config import StylistConfig
from stylist_app.logging_config import configure_logging, get_logger, log_event, operation_context
from tools.attribute_provider import AttributeProvider, HTTPAttributeProvider, analyze_item_if_needed
from tools.wardrobe_store import SQLiteWardrobeStore, WardrobeStore

LOGGER = get_logger(__name__)

EMPTY_WARDROBE_MESSAGE = "No wardrobe items found. Upload items first."


def _error(message: str) -> Dict[str, Any]:
    return {"status": "error", "message": message}


class WardrobeStylistApp:
    """Application service behind the CLI and HTTP surfaces.

    Every public method takes a plain payload dict, validates it with the
    schemas in :mod:`logic.validation` and returns a JSON-ready dict with a
    ``status`` of ``ok``, ``error`` or ``needs_review``.
    """

    def __init__(
        self,
        config: StylistConfig | None = None,
        wardrobe_store: WardrobeStore | None = None,
        taste_store: TasteProfileStore | None = None,
        attribute_provider: AttributeProvider | None = None,
        cache: OutfitCache | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.config = config or StylistConfig.from_env()
        configure_logging()

        self.wardrobe_store = wardrobe_store or SQLiteWardrobeStore(self.config.wardrobe_db_path)
        self.taste_memory = TasteMemoryService(taste_store or self._build_taste_store())
        self.attribute_provider = attribute_provider or HTTPAttributeProvider(
            endpoint=self.config.attribute_endpoint,
            timeout_seconds=self.config.attribute_timeout_seconds,
        )
        self.cache = cache or OutfitCache(ttl_seconds=self.config.cache_ttl_seconds)
        self.rng = rng

    def _build_taste_store(self) -> TasteProfileStore:
        if self.config.taste_store_backend.lower() == "sqlite":
            return SQLiteTasteProfileStore(self.config.taste_store_path or "data/taste_store.db")
        return JSONTasteProfileStore(self.config.taste_store_path or "data/taste")

    def _load_wardrobe(self, user_id: str, raw_items: Optional[List[Dict[str, Any]]]) -> List[WardrobeItem]:
        if raw_items is None:
            return self.wardrobe_store.list_items_for_user(user_id)
        items: List[WardrobeItem] = []
        for raw in raw_items:
            try:
                items.append(from_raw_metadata(raw))
            except ValueError as exc:
                log_event(LOGGER, logging.WARNING, "wardrobe_item_skipped", reason=str(exc))
        return items

    def _taste_profile(self, user_id: str, use_taste: bool = True) -> Tuple[Optional[TasteProfile], int]:
        """Return the profile to personalize with and the version it was read at."""

        if not use_taste:
            return None, 0
        record = self.taste_memory.get_record(user_id)
        if record.taste_version == 0:
            return None, 0
        return record.profile, record.taste_version

    def _generate(self, occasion: str, wardrobe: List[WardrobeItem], taste_profile: Optional[TasteProfile]):
        return generate_top_outfits(
            occasion,
            wardrobe,
            taste_profile=taste_profile,
            max_combos=self.config.max_combos,
            rng=self.rng,
            diversify_modes=self.config.diversify_modes,
        )

    def generate_outfits(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Return the top outfit per style mode for an occasion."""

        with operation_context("app:generate_outfits") as correlation_id:
            try:
                request = GenerateRequest.model_validate(payload)
            except ValidationError as exc:
                log_event(
                    LOGGER,
                    logging.WARNING,
                    "app_request_invalid",
                    method="generate_outfits",
                    correlation_id=correlation_id,
                )
                return validation_failure("Invalid outfit generation request", exc)

            wardrobe = self._load_wardrobe(request.user_id, request.wardrobe)
            if not wardrobe:
                return _error(EMPTY_WARDROBE_MESSAGE)

            occasion = resolve_requested_occasion(request.occasion)
            taste_profile, version = self._taste_profile(request.user_id, request.use_taste)
            key = cache_key(request.user_id, occasion, wardrobe, version)
            cached = self.cache.get(key)
            if cached is None:
                result = self._generate(occasion, wardrobe, taste_profile)
                cached = {
                    **result.to_payload(),
                    "personalized": taste_profile is not None,
                    "taste_version": version,
                }
                self.cache.set(key, cached)
                hit = False
            else:
                hit = True

            outfits = list(cached["outfits"])
            if request.force_mode:
                outfits.sort(key=lambda outfit: (outfit["style_mode"] != request.force_mode, -outfit["score"]))

            log_event(
                LOGGER,
                logging.INFO,
                "outfits_generated",
                occasion=occasion,
                outfit_count=len(outfits),
                cache_hit=hit,
                correlation_id=correlation_id,
            )
            return {"status": "ok", **cached, "outfits": outfits, "cached": hit}

    def record_rating(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Fold a star rating into the user's taste profile."""

        with operation_context("app:record_rating") as correlation_id:
            try:
                request = RateRequest.model_validate(payload)
            except ValidationError as exc:
                return validation_failure("Invalid rating request", exc)

            occasion = resolve_requested_occasion(request.occasion)
            wardrobe = self._load_wardrobe(request.user_id, request.wardrobe)
            index = build_wardrobe_index(resolve_item(item) for item in wardrobe)
            outcome = self.taste_memory.record_rating(
                request.user_id,
                occasion,
                request.outfit,
                request.rating,
                index,
                source=request.source,
            )
            if outcome.applied:
                self.cache.clear(prefix=f"outfits:{request.user_id}:")
            log_event(
                LOGGER,
                logging.INFO,
                "rating_recorded",
                occasion=occasion,
                rating=request.rating,
                applied=outcome.applied,
                taste_version=outcome.taste_version,
                correlation_id=correlation_id,
            )
            return {
                "status": "ok",
                "applied": outcome.applied,
                "taste_version": outcome.taste_version,
                "top_colors": [list(entry) for entry in outcome.top_colors],
                "top_tags": [list(entry) for entry in outcome.top_tags],
                "changed_summary": outcome.changed_summary,
                "snapshot": outcome.snapshot,
            }

    def mark_worn(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Stamp the items of a chosen outfit as worn now."""

        with operation_context("app:mark_worn") as correlation_id:
            try:
                request = WornRequest.model_validate(payload)
            except ValidationError as exc:
                return validation_failure("Invalid worn request", exc)

            updated = self.wardrobe_store.mark_worn(request.user_id, request.item_ids, worn_at=request.worn_at)
            self.cache.clear(prefix=f"outfits:{request.user_id}:")
            log_event(
                LOGGER,
                logging.INFO,
                "items_marked_worn",
                requested=len(request.item_ids),
                updated=updated,
                correlation_id=correlation_id,
            )
            return {"status": "ok", "updated": updated}

    def analyze_item(self, user_id: str, item_id: str) -> Dict[str, Any]:
        """Run attribute analysis for a stored item unless its image is unchanged."""

        try:
            result = analyze_item_if_needed(
                store=self.wardrobe_store,
                user_id=user_id,
                item_id=item_id,
                provider=self.attribute_provider,
            )
        except (LookupError, ValueError) as exc:
            return _error(str(exc))
        attributes = result.ai_normalized.attributes
        self.cache.clear(prefix=f"outfits:{user_id}:")
        return {
            "status": "ok",
            "cached": result.cached,
            "top_label": result.ai_normalized.top_label,
            "category": attributes.category,
            "formality": attributes.formality,
            "style_tags": list(attributes.style_tags),
            "colors": list(attributes.colors),
        }

    def interpret_message(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Infer occasion and tone from free text, with the stylist's reply copy."""

        with operation_context("app:interpret_message") as correlation_id:
            try:
                request = IntentRequest.model_validate(payload)
            except ValidationError as exc:
                return validation_failure("Invalid intent request", exc)

            intent = infer_intent_from_message(request.message)
            text = build_stylist_response_text(intent.occasion, intent.tone)
            log_event(
                LOGGER,
                logging.INFO,
                "intent_inferred",
                occasion=intent.occasion,
                tone=intent.tone,
                confidence=intent.confidence,
                correlation_id=correlation_id,
            )
            return {
                "status": "ok",
                "occasion": intent.occasion,
                "tone": intent.tone,
                "confidence": intent.confidence,
                "matched": list(intent.matched),
                "intro": text.intro,
                "psychology": text.psychology,
            }

    def chat(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Run one stylist chat turn and return outfits plus updated memory.

        An explicit ``occasion`` wins; otherwise the message decides, and a
        message with no occasion cue keeps the occasion from earlier turns.
        """

        with operation_context("app:chat") as correlation_id:
            try:
                request = ChatRequest.model_validate(payload)
            except ValidationError as exc:
                return validation_failure("Invalid chat request", exc)

            intent = infer_intent_from_message(request.message)
            if request.occasion:
                occasion = resolve_occasion_key(request.occasion)
            elif "casual_fallback" in intent.matched and request.memory.occasion:
                occasion = resolve_occasion_key(request.memory.occasion)
            else:
                occasion = resolve_occasion_key(intent.occasion)

            wardrobe = self._load_wardrobe(request.user_id, request.wardrobe)
            if not wardrobe:
                return _error(EMPTY_WARDROBE_MESSAGE)

            prior = StylistMemory(**request.memory.model_dump())
            memory = prior.merge(extract_memory_updates(request.message), occasion=occasion)
            wardrobe = apply_memory_bans(wardrobe, memory)

            taste_profile, _ = self._taste_profile(request.user_id)
            result = self._generate(occasion, wardrobe, taste_profile)
            outfits = apply_force_mode(result.outfits, memory.force_mode)
            text = build_stylist_response_text(occasion, intent.tone)

            log_event(
                LOGGER,
                logging.INFO,
                "chat_turn_completed",
                occasion=occasion,
                tone=intent.tone,
                force_mode=memory.force_mode,
                outfit_count=len(outfits),
                correlation_id=correlation_id,
            )
            return {
                "status": "ok",
                "intent": {
                    "occasion": occasion,
                    "tone": intent.tone,
                    "confidence": intent.confidence,
                    "matched": list(intent.matched),
                },
                "memory": {
                    "occasion": memory.occasion,
                    "avoid_colors": list(memory.avoid_colors),
                    "prefer_colors": list(memory.prefer_colors),
                    "ban_items": list(memory.ban_items),
                    "force_mode": memory.force_mode,
                    "formality_delta": round(memory.formality_delta, 4),
                },
                "assistant": {
                    "intro": text.intro,
                    "psychology": text.psychology,
                    "personalized": taste_profile is not None,
                    "outfits": [
                        {"title": MODE_TITLES.get(outfit.style_mode, outfit.style_mode), **outfit.to_payload()}
                        for outfit in outfits
                    ],
                },
            }


__all__ = ["WardrobeStylistApp", "EMPTY_WARDROBE_MESSAGE"]
