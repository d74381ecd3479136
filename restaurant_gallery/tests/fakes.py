from __future__ import annotations

from typing import Any

from restaurant_gallery.images.cache import TTLCache
from restaurant_gallery.images.config import ImagePipelineConfig
from restaurant_gallery.images.errors import ConfigMissing
from restaurant_gallery.images.governor import RateGovernor
from restaurant_gallery.images.models import ImageResult, ImageSource
from restaurant_gallery.images.providers import ImageProvider, ProviderChain
from restaurant_gallery.images.request_queue import RequestQueue
from restaurant_gallery.images.resolver import ImageResolver


class FakeClock:
    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_image(n: int, source: ImageSource = ImageSource.primary) -> ImageResult:
    return ImageResult(
        title=f"Photo {n}",
        image_link=f"https://img.example.com/{source.value}/{n}.jpg",
        thumbnail_link=f"https://img.example.com/{source.value}/{n}_t.jpg",
        context_link=f"https://example.com/{source.value}/{n}",
        source=source,
    )


class FakeProvider(ImageProvider):
    """In-memory provider: returns ``results`` or raises ``error``, counting calls."""

    def __init__(
        self,
        name: str,
        results: list[ImageResult] | None = None,
        error: Exception | None = None,
        configured: bool = True,
    ) -> None:
        super().__init__()
        self.name = name
        self.results = results or []
        self.error = error
        self.configured = configured
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.network_calls = 0

    @property
    def is_configured(self) -> bool:
        return self.configured

    async def search(self, query: str, **kwargs: Any) -> list[ImageResult]:
        self.calls.append((query, kwargs))
        if not self.configured:
            raise ConfigMissing(f"{self.name} not configured", provider=self.name, query=query)
        self.network_calls += 1
        if self.error is not None:
            raise self.error
        return list(self.results)


TEST_CONFIG = ImagePipelineConfig(
    google_api_key="",
    google_cse_id="",
    unsplash_access_key="",
    cache_path=None,
    rate_window_seconds=60.0,
    rate_max_per_window=60,
    queue_concurrency=2,
    queue_delay_seconds=0.0,
    target_count=3,
    max_count=10,
)


def build_test_resolver(
    primary: ImageProvider | None,
    secondary: ImageProvider | None,
    clock: FakeClock | None = None,
    config: ImagePipelineConfig = TEST_CONFIG,
    max_per_window: int | None = None,
) -> ImageResolver:
    clock = clock or FakeClock()
    return ImageResolver(
        cache=TTLCache("images", max_entries=50, ttl_seconds=3_600, clock=clock),
        governor=RateGovernor(max_per_window or config.rate_max_per_window, config.rate_window_seconds, clock=clock),
        queue=RequestQueue(config.queue_concurrency, config.queue_delay_seconds),
        chain=ProviderChain(primary, secondary),
        config=config,
    )
