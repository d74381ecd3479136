from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    try:
        return float(raw) if raw else default
    except ValueError:
        return default


def _env_path(name: str) -> Path | None:
    raw = os.getenv(name, "").strip()
    return Path(raw) if raw else None


@dataclass(frozen=True)
class ImagePipelineConfig:
    # Primary provider: Google Custom Search (both values required)
    google_api_key: str = field(default_factory=lambda: os.getenv("GOOGLE_API_KEY", ""))
    google_cse_id: str = field(default_factory=lambda: os.getenv("GOOGLE_CSE_ID", ""))
    google_page_size: int = 10

    # Secondary provider: Unsplash
    unsplash_access_key: str = field(default_factory=lambda: os.getenv("UNSPLASH_ACCESS_KEY", ""))
    unsplash_per_page: int = field(default_factory=lambda: _env_int("UNSPLASH_FALLBACK_PER_PAGE", 10))

    provider_timeout: float = field(default_factory=lambda: _env_float("PROVIDER_TIMEOUT_SECONDS", 10.0))

    # Raw image search cache
    cache_ttl_seconds: float = field(default_factory=lambda: _env_float("IMAGE_CACHE_TTL_SECONDS", 24 * 60 * 60))
    cache_max_entries: int = field(default_factory=lambda: _env_int("IMAGE_CACHE_MAX_ENTRIES", 500))
    cache_path: Path | None = field(default_factory=lambda: _env_path("IMAGE_CACHE_PATH"))

    # Assembled restaurant-list cache
    restaurant_cache_ttl_seconds: float = field(
        default_factory=lambda: _env_float("RESTAURANT_CACHE_TTL_SECONDS", 30 * 60)
    )
    restaurant_cache_max_entries: int = 16

    # Rate governor
    rate_window_seconds: float = field(default_factory=lambda: _env_float("RATE_WINDOW_SECONDS", 60.0))
    rate_max_per_window: int = field(default_factory=lambda: _env_int("RATE_MAX_PER_WINDOW", 60))

    # Request queue
    queue_concurrency: int = field(default_factory=lambda: _env_int("QUEUE_CONCURRENCY", 2))
    queue_delay_seconds: float = field(default_factory=lambda: _env_int("QUEUE_DELAY_MS", 1000) / 1000.0)

    target_count: int = field(default_factory=lambda: _env_int("IMAGE_TARGET_COUNT", 3))
    max_count: int = field(default_factory=lambda: _env_int("IMAGE_MAX_COUNT", 10))
    dedupe_inflight: bool = True

    @property
    def has_google_credentials(self) -> bool:
        return bool(self.google_api_key and self.google_cse_id)

    @property
    def has_unsplash_credentials(self) -> bool:
        return bool(self.unsplash_access_key)


DEFAULT_IMAGE_CONFIG = ImagePipelineConfig()
