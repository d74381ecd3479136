from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from restaurant_gallery.app import app
from restaurant_gallery.images.cache import TTLCache
from restaurant_gallery.images.errors import QuotaExceeded
from restaurant_gallery.images.models import ImageSource
from restaurant_gallery.recommendations.catalog import FEATURED_RESTAURANTS

from .fakes import FakeProvider, build_test_resolver, make_image

client = TestClient(app)


@pytest.fixture
def providers():
    primary = FakeProvider("primary", results=[make_image(n) for n in range(5)])
    secondary = FakeProvider("secondary", results=[make_image(9, ImageSource.secondary)])
    app.state.resolver = build_test_resolver(primary, secondary)
    app.state.restaurant_cache = TTLCache("restaurants", max_entries=4, ttl_seconds=1_800)
    yield primary, secondary
    app.state.resolver = None
    app.state.restaurant_cache = None


# ── Health ───────────────────────────────────────────────────────────────


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


# ── Images ───────────────────────────────────────────────────────────────


class TestImages:
    def test_returns_camel_case_results(self, providers):
        response = client.get("/images", params={"q": "Carbone New York"})

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 3
        assert set(data[0]) == {"title", "imageLink", "thumbnailLink", "contextLink", "source"}
        assert data[0]["source"] == "primary"

    def test_count_parameter(self, providers):
        response = client.get("/images", params={"q": "Carbone", "count": 5})
        assert len(response.json()) == 5

    def test_repeat_request_uses_cache(self, providers):
        primary, _ = providers
        client.get("/images", params={"q": "Katz's Delicatessen"})
        client.get("/images", params={"q": "katz's delicatessen"})
        assert len(primary.calls) == 1

    def test_primary_quota_uses_secondary(self, providers):
        primary, secondary = providers
        primary.error = QuotaExceeded("quota", provider="primary", status_code=429)

        data = client.get("/images", params={"q": "Cosme"}).json()

        assert [img["source"] for img in data] == ["secondary"] * 3
        assert len(secondary.calls) == 1

    def test_empty_query_is_rejected(self, providers):
        assert client.get("/images", params={"q": ""}).status_code == 422

    def test_missing_query_is_rejected(self, providers):
        assert client.get("/images").status_code == 422

    @pytest.mark.parametrize("params", [{"page": 0}, {"page": 11}, {"count": 0}, {"count": 11}])
    def test_out_of_range_parameters_are_rejected(self, providers, params):
        response = client.get("/images", params={"q": "Carbone", **params})
        assert response.status_code == 422


# ── Restaurants ──────────────────────────────────────────────────────────


class TestRestaurants:
    def test_lists_featured_restaurants_with_images(self, providers):
        response = client.get("/restaurants")

        assert response.status_code == 200
        data = response.json()
        assert [r["name"] for r in data] == [r.name for r in FEATURED_RESTAURANTS]
        assert all(len(r["images"]) == 3 for r in data)
        assert "imageLink" in data[0]["images"][0]

    def test_second_listing_is_cached(self, providers):
        primary, _ = providers
        client.get("/restaurants")
        calls_after_first = len(primary.calls)
        client.get("/restaurants")

        assert calls_after_first == len(FEATURED_RESTAURANTS)
        assert len(primary.calls) == calls_after_first


# ── Chat ─────────────────────────────────────────────────────────────────


SUGGESTIONS = [
    {
        "name": "Carbone",
        "cuisine": "Italian",
        "location": "Greenwich Village, New York",
        "price_range": "$$$$",
        "rating": 4.7,
        "description": "Red-sauce classics.",
    },
]


class TestChat:
    @patch("restaurant_gallery.recommendations.service.generate_recommendations", new_callable=AsyncMock)
    def test_chat_returns_recommendations_with_images(self, mock_generate, providers):
        mock_generate.return_value = SUGGESTIONS

        response = client.post("/chat", json={"message": "best italian in the village"})

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Here is 1 restaurant you might enjoy:"
        assert data["recommendations"][0]["name"] == "Carbone"
        assert len(data["recommendations"][0]["images"]) == 3

    @patch("restaurant_gallery.recommendations.service.generate_recommendations", new_callable=AsyncMock)
    def test_chat_without_suggestions_apologises(self, mock_generate, providers):
        mock_generate.return_value = []

        data = client.post("/chat", json={"message": "anything"}).json()

        assert data["recommendations"] == []
        assert data["message"].startswith("I'm sorry")

    def test_chat_rejects_empty_message(self, providers):
        assert client.post("/chat", json={"message": ""}).status_code == 422


# ── Cache stats ──────────────────────────────────────────────────────────


def test_cache_stats(providers):
    client.get("/images", params={"q": "Peter Luger"})

    data = client.get("/cache/stats").json()

    assert data["cache"]["size"] == 1
    assert data["governor"]["used"] == 1
    assert data["restaurants"]["name"] == "restaurants"
    assert set(data) == {"cache", "governor", "queue", "inflight", "restaurants"}
