from __future__ import annotations

import asyncio
import logging
import time

from .cache import TTLCache, make_image_cache_key
from .config import DEFAULT_IMAGE_CONFIG, ImagePipelineConfig
from .errors import RateGoverned
from .fallback import fallback_images
from .governor import RateGovernor
from .models import ImageResult
from .normalizer import normalize
from .providers import GoogleImageProvider, ProviderChain, UnsplashImageProvider, build_search_query
from .request_queue import RequestQueue

logger = logging.getLogger(__name__)


class ImageResolver:
    """Entry point of the image pipeline.

    ``resolve`` never raises and always returns exactly the requested number of
    images: cache hit, else governor check, else a queued provider-chain call,
    normalized and written back to the cache. The cache keeps the set at
    ``max_count`` so a later caller asking for more images still gets distinct
    ones. A governor denial serves fallback images and is not cached.
    """

    def __init__(
        self,
        cache: TTLCache,
        governor: RateGovernor,
        queue: RequestQueue,
        chain: ProviderChain,
        config: ImagePipelineConfig = DEFAULT_IMAGE_CONFIG,
    ) -> None:
        self.cache = cache
        self.governor = governor
        self.queue = queue
        self.chain = chain
        self.config = config
        self._inflight: dict[str, asyncio.Task] = {}

    def _target(self, count: int | None) -> int:
        if count is None:
            count = self.config.target_count
        return max(1, min(count, self._stored_count))

    @property
    def _stored_count(self) -> int:
        # Cache entries hold the full-size set; each read trims it to the caller's count
        return max(1, self.config.max_count)

    async def resolve(
        self,
        query: str,
        page: int = 1,
        cuisine: str | None = None,
        count: int | None = None,
    ) -> list[ImageResult]:
        target = self._target(count)
        hint = cuisine or query

        if not query or not query.strip():
            return fallback_images(hint, target)

        page = max(1, page)
        key = make_image_cache_key(query, page)

        try:
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug("Image cache hit for %r", key)
                return normalize(cached, hint, target)

            if not self.config.dedupe_inflight:
                images = await self._resolve_uncached(key, query, page, hint)
                return normalize(images, hint, target)

            task = self._inflight.get(key)
            if task is None or task.get_loop() is not asyncio.get_running_loop():
                task = asyncio.ensure_future(self._resolve_uncached(key, query, page, hint))
                self._inflight[key] = task
                task.add_done_callback(lambda done, key=key: self._forget(key, done))
            else:
                logger.debug("Joining in-flight resolution for %r", key)
            images = await asyncio.shield(task)
            return normalize(images, hint, target)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Image resolution failed for %r, serving fallback images", query)
            return fallback_images(hint, target)

    def _forget(self, key: str, done: asyncio.Task) -> None:
        if self._inflight.get(key) is done:
            del self._inflight[key]

    async def _resolve_uncached(
        self,
        key: str,
        query: str,
        page: int,
        hint: str,
    ) -> list[ImageResult]:
        try:
            self.governor.acquire(query=query)
        except RateGoverned as exc:
            # Not cached: the next call after the window clears tries the providers
            logger.warning("Provider call for %r denied by rate governor: %s", query, exc)
            return normalize([], hint, self._stored_count)

        search_query = build_search_query(query)
        start_index = (page - 1) * self.config.google_page_size + 1
        started = time.monotonic()
        raw = await self.queue.enqueue(lambda: self.chain.search(search_query, start_index=start_index))
        logger.info("Resolved %d raw images for %r in %.0fms",
                    len(raw), search_query, (time.monotonic() - started) * 1000)

        images = normalize(raw, hint, self._stored_count)
        self.cache.set(key, images)
        return images

    def stats(self) -> dict:
        return {
            "cache": self.cache.stats(),
            "governor": self.governor.stats(),
            "queue": self.queue.stats(),
            "inflight": len(self._inflight),
        }


def _encode_images(images: list[ImageResult]) -> list[dict]:
    return [img.model_dump(mode="json") for img in images]


def _decode_images(data: list[dict]) -> list[ImageResult]:
    return [ImageResult(**item) for item in data]


def build_image_cache(config: ImagePipelineConfig = DEFAULT_IMAGE_CONFIG) -> TTLCache:
    return TTLCache(
        name="images",
        max_entries=config.cache_max_entries,
        ttl_seconds=config.cache_ttl_seconds,
        persist_path=config.cache_path,
        encode=_encode_images,
        decode=_decode_images,
    )


def build_resolver(config: ImagePipelineConfig = DEFAULT_IMAGE_CONFIG) -> ImageResolver:
    """Wire the pipeline from configuration. Unconfigured providers are kept and skipped at call time."""
    chain = ProviderChain(
        primary=GoogleImageProvider(
            api_key=config.google_api_key,
            cse_id=config.google_cse_id,
            page_size=config.google_page_size,
            timeout=config.provider_timeout,
        ),
        secondary=UnsplashImageProvider(
            access_key=config.unsplash_access_key,
            per_page=config.unsplash_per_page,
            timeout=config.provider_timeout,
        ),
    )
    if not config.has_google_credentials and not config.has_unsplash_credentials:
        logger.warning("No image provider credentials configured; serving fallback images only")

    return ImageResolver(
        cache=build_image_cache(config),
        governor=RateGovernor(config.rate_max_per_window, config.rate_window_seconds),
        queue=RequestQueue(config.queue_concurrency, config.queue_delay_seconds),
        chain=chain,
        config=config,
    )
