from __future__ import annotations

import logging
import os

from fastapi import Depends, FastAPI, Query, Request

from .images.cache import TTLCache
from .images.config import DEFAULT_IMAGE_CONFIG
from .images.models import ImageResult
from .images.resolver import ImageResolver, build_resolver
from .recommendations.models import ChatRequest, ChatResponse, RestaurantWithImages
from .recommendations.service import (
    build_restaurant_cache,
    get_featured_restaurants,
    recommend_from_chat,
)

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s | %(levelname)-8s | %(name)s - %(message)s",
)

app = FastAPI(title="Restaurant Gallery API", version="1.0.0")


# ── Dependencies ─────────────────────────────────────────────────────────


def get_resolver(request: Request) -> ImageResolver:
    """Return the process-wide resolver, building it from config on first use."""
    state = request.app.state
    if getattr(state, "resolver", None) is None:
        state.resolver = build_resolver(DEFAULT_IMAGE_CONFIG)
    return state.resolver


def get_restaurant_cache(request: Request) -> TTLCache:
    state = request.app.state
    if getattr(state, "restaurant_cache", None) is None:
        state.restaurant_cache = build_restaurant_cache(DEFAULT_IMAGE_CONFIG)
    return state.restaurant_cache


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/images", response_model=list[ImageResult])
async def images(
    q: str = Query(..., min_length=1, max_length=200, description="Restaurant name and location"),
    page: int = Query(default=1, ge=1, le=10),
    cuisine: str | None = Query(default=None, max_length=100),
    count: int | None = Query(default=None, ge=1, le=10),
    resolver: ImageResolver = Depends(get_resolver),
) -> list[ImageResult]:
    return await resolver.resolve(q, page=page, cuisine=cuisine, count=count)


@app.get("/restaurants", response_model=list[RestaurantWithImages])
async def restaurants(
    resolver: ImageResolver = Depends(get_resolver),
    cache: TTLCache = Depends(get_restaurant_cache),
) -> list[RestaurantWithImages]:
    return await get_featured_restaurants(resolver, cache)


@app.post("/chat", response_model=ChatResponse)
async def chat(
    body: ChatRequest,
    resolver: ImageResolver = Depends(get_resolver),
) -> ChatResponse:
    return await recommend_from_chat(body.message, resolver)


# ── Operational endpoints ────────────────────────────────────────────────


@app.get("/cache/stats")
def cache_stats(
    resolver: ImageResolver = Depends(get_resolver),
    cache: TTLCache = Depends(get_restaurant_cache),
) -> dict:
    return {**resolver.stats(), "restaurants": cache.stats()}
