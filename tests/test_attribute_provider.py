"""Attribute providers and the analyse-once-per-image cache."""

from pathlib import Path

import pytest
import requests

import tools.attribute_provider as attribute_provider
from models.wardrobe_item import WardrobeItem
from tools.attribute_provider import (
    HeuristicAttributeProvider,
    HTTPAttributeProvider,
    analyze_item_if_needed,
    infer_formality,
    map_label_to_category,
)
from tools.wardrobe_store import SQLiteWardrobeStore


class _FakeResponse:
    def __init__(self, payload, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"status {self.status_code}")

    def json(self):
        return self._payload


def test_label_mapping() -> None:
    assert map_label_to_category("Chelsea Boot") == "shoes"
    assert map_label_to_category("Chinos") == "bottom"
    assert map_label_to_category("Cardigan") == "outer"
    assert map_label_to_category("Baseball Cap") == "accessory"
    assert map_label_to_category("Blouse") == "top"
    assert map_label_to_category("person") == "other"
    assert infer_formality("Penny Loafer", "shoes") == 0.72
    assert infer_formality("Straight Trouser", "bottom") == 0.68


def test_heuristic_provider_uses_label_hint() -> None:
    normalized = HeuristicAttributeProvider().analyze("https://img/1.jpg", "Navy Blazer")

    assert normalized.top_label == "Navy Blazer"
    assert normalized.source_image_url == "https://img/1.jpg"
    assert normalized.attributes.category == "outer"
    assert normalized.attributes.formality == 0.92
    assert normalized.attributes.style_tags == ["clean", "professional", "premium", "outer"]


def test_http_provider_parses_prediction(monkeypatch: pytest.MonkeyPatch) -> None:
    payload = {
        "wardrobeCards": [{"label": "person", "confidence": 0.99}, {"label": "oxford shirt", "confidence": 0.81}],
        "colors": ["White"],
    }
    calls = {}

    def _post(url, json, timeout):
        calls.update(url=url, json=json, timeout=timeout)
        return _FakeResponse(payload)

    monkeypatch.setattr(attribute_provider.requests, "post", _post)
    normalized = HTTPAttributeProvider(endpoint="http://predict", timeout_seconds=2.0).analyze("https://img/2.jpg")

    assert calls == {"url": "http://predict", "json": {"imageUrl": "https://img/2.jpg"}, "timeout": 2.0}
    assert normalized.top_label == "oxford shirt"
    assert normalized.top_confidence == 0.81
    assert normalized.attributes.category == "top"
    assert normalized.attributes.colors == ["white"]


@pytest.mark.parametrize(
    "behaviour",
    ["timeout", "bad_status", "bad_schema"],
)
def test_http_provider_falls_back(monkeypatch: pytest.MonkeyPatch, behaviour: str) -> None:
    def _post(*_, **__):
        if behaviour == "timeout":
            raise requests.Timeout("slow")
        if behaviour == "bad_status":
            return _FakeResponse({}, status_code=503)
        return _FakeResponse({"wardrobeCards": "not-a-list"})

    monkeypatch.setattr(attribute_provider.requests, "post", _post)
    normalized = HTTPAttributeProvider(endpoint="http://predict").analyze("https://img/3.jpg", "hoodie")

    assert normalized.attributes.category == "outer"
    assert normalized.attributes.formality == 0.35


def test_http_provider_without_endpoint_uses_heuristics() -> None:
    normalized = HTTPAttributeProvider().analyze("https://img/4.jpg", "jeans")
    assert normalized.attributes.category == "bottom"


def test_analysis_runs_once_per_image(tmp_path: Path) -> None:
    store = SQLiteWardrobeStore(tmp_path / "wardrobe.db")
    store.create_item("u1", WardrobeItem(item_id="a", cloth_type="formal shirt", image_url="https://img/a.jpg"))

    class _CountingProvider(HeuristicAttributeProvider):
        calls = 0

        def analyze(self, image_url, label_hint=None):
            type(self).calls += 1
            return super().analyze(image_url, label_hint)

    provider = _CountingProvider()
    first = analyze_item_if_needed(store=store, user_id="u1", item_id="a", provider=provider)
    second = analyze_item_if_needed(store=store, user_id="u1", item_id="a", provider=provider)

    assert first.cached is False and second.cached is True
    assert _CountingProvider.calls == 1
    stored = store.get_item("u1", "a")
    assert stored.attributes.category == "top"
    assert stored.ai_normalized.source_image_url == "https://img/a.jpg"

    store.update_item("u1", "a", {"image_url": "https://img/a2.jpg"})
    third = analyze_item_if_needed(store=store, user_id="u1", item_id="a", provider=provider)
    assert third.cached is False
    assert _CountingProvider.calls == 2


def test_analysis_requires_known_item_with_image(tmp_path: Path) -> None:
    store = SQLiteWardrobeStore(tmp_path / "wardrobe.db")
    store.create_item("u1", WardrobeItem(item_id="no-image"))

    with pytest.raises(LookupError):
        analyze_item_if_needed(store=store, user_id="u1", item_id="ghost", provider=HeuristicAttributeProvider())
    with pytest.raises(ValueError):
        analyze_item_if_needed(store=store, user_id="u1", item_id="no-image", provider=HeuristicAttributeProvider())
