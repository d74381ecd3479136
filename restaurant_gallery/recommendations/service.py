from __future__ import annotations

import asyncio
import logging
import time

from ..images.cache import TTLCache
from ..images.config import DEFAULT_IMAGE_CONFIG, ImagePipelineConfig
from ..images.resolver import ImageResolver
from ..llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from ..llm.groq_client import generate_recommendations
from .catalog import FEATURED_RESTAURANTS
from .models import ChatResponse, RecommendationOut, Restaurant, RestaurantWithImages

logger = logging.getLogger(__name__)

_FEATURED_KEY = "featured"


def build_restaurant_cache(config: ImagePipelineConfig = DEFAULT_IMAGE_CONFIG) -> TTLCache:
    return TTLCache(
        name="restaurants",
        max_entries=config.restaurant_cache_max_entries,
        ttl_seconds=config.restaurant_cache_ttl_seconds,
    )


async def get_featured_restaurants(
    resolver: ImageResolver,
    cache: TTLCache,
    restaurants: list[Restaurant] = FEATURED_RESTAURANTS,
) -> list[RestaurantWithImages]:
    cached = cache.get(_FEATURED_KEY)
    if cached is not None:
        logger.debug("Returning cached featured restaurants")
        return cached

    start_time = time.time()
    image_sets = await asyncio.gather(
        *(resolver.resolve(r.image_query, cuisine=r.cuisine) for r in restaurants)
    )
    enriched = [
        RestaurantWithImages(**r.model_dump(), images=images)
        for r, images in zip(restaurants, image_sets)
    ]
    cache.set(_FEATURED_KEY, enriched)

    elapsed_ms = round((time.time() - start_time) * 1000, 1)
    logger.info("Assembled %d featured restaurants in %sms", len(enriched), elapsed_ms)
    return enriched


async def recommend_from_chat(
    message: str,
    resolver: ImageResolver,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> ChatResponse:
    suggestions = await generate_recommendations(message, config=config)
    if not suggestions:
        return ChatResponse(
            message="I'm sorry, I couldn't find recommendations right now. Please try again in a few seconds.",
            recommendations=[],
        )

    image_sets = await asyncio.gather(
        *(resolver.resolve(f"{s['name']} {s['location']}", cuisine=s["cuisine"]) for s in suggestions)
    )
    items = [RecommendationOut(**s, images=images) for s, images in zip(suggestions, image_sets)]

    count = len(items)
    reply = f"Here {'is' if count == 1 else 'are'} {count} restaurant{'' if count == 1 else 's'} you might enjoy:"
    return ChatResponse(message=reply, recommendations=items)
