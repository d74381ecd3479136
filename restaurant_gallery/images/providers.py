from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from .errors import ConfigMissing, ImageSearchError, NoResults, QuotaExceeded, TransportError
from .models import ImageResult, ImageSource

logger = logging.getLogger(__name__)

GOOGLE_SEARCH_URL = "https://www.googleapis.com/customsearch/v1"
UNSPLASH_SEARCH_URL = "https://api.unsplash.com/search/photos"

# Google reports daily/per-minute quota exhaustion as 403 with one of these reasons
_GOOGLE_QUOTA_REASONS = {"rateLimitExceeded", "dailyLimitExceeded", "quotaExceeded", "userRateLimitExceeded"}


def build_search_query(query: str) -> str:
    """Bias a free-text entity description towards restaurant photos."""
    cleaned = " ".join(query.split())
    return cleaned if "restaurant" in cleaned.lower() else f"{cleaned} restaurant"


class ImageProvider(ABC):
    """A network-backed image search backend.

    ``search`` either returns at least one usable ``ImageResult`` or raises an
    ``ImageSearchError`` subclass describing why it could not.
    """

    name: str = "provider"

    def __init__(self, timeout: float = 10.0, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.timeout = timeout
        self._transport = transport

    @property
    @abstractmethod
    def is_configured(self) -> bool: ...

    @abstractmethod
    async def search(self, query: str, **kwargs: Any) -> list[ImageResult]: ...

    async def _get_json(self, url: str, query: str, **request_kwargs: Any) -> tuple[httpx.Response, Any]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url, **request_kwargs)
        except httpx.HTTPError as exc:
            raise TransportError(f"{self.name} request failed: {exc!r}", provider=self.name, query=query) from exc

        try:
            payload = response.json()
        except ValueError:
            payload = None
        return response, payload


class GoogleImageProvider(ImageProvider):
    """Primary provider: Google Custom Search in image mode (quota-metered)."""

    name = "google"

    def __init__(
        self,
        api_key: str,
        cse_id: str,
        page_size: int = 10,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(timeout=timeout, transport=transport)
        self.api_key = api_key
        self.cse_id = cse_id
        self.page_size = max(1, min(10, page_size))

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.cse_id)

    async def search(self, query: str, start_index: int = 1, **kwargs: Any) -> list[ImageResult]:
        if not self.is_configured:
            raise ConfigMissing("GOOGLE_API_KEY / GOOGLE_CSE_ID not configured", provider=self.name, query=query)

        logger.info("Google image search: %r (start=%d)", query, start_index)
        response, payload = await self._get_json(
            GOOGLE_SEARCH_URL,
            query,
            params={
                "key": self.api_key,
                "cx": self.cse_id,
                "q": query,
                "searchType": "image",
                "num": self.page_size,
                "start": start_index,
            },
            headers={"Accept": "application/json"},
        )

        if response.status_code == 429 or (
            response.status_code == 403 and self._error_reason(payload) in _GOOGLE_QUOTA_REASONS
        ):
            raise QuotaExceeded(
                f"Google quota exceeded ({self._error_reason(payload) or response.status_code})",
                provider=self.name, query=query, status_code=response.status_code,
            )
        if response.status_code != 200:
            raise TransportError(
                f"Google returned status {response.status_code}",
                provider=self.name, query=query, status_code=response.status_code,
            )
        if not isinstance(payload, dict):
            raise TransportError("Google returned a non-JSON body", provider=self.name, query=query,
                                 status_code=response.status_code)

        results = [r for r in (self._to_result(item) for item in payload.get("items") or []) if r]
        if not results:
            raise NoResults("No Google results found", provider=self.name, query=query,
                            status_code=response.status_code)
        return results

    @staticmethod
    def _error_reason(payload: Any) -> str | None:
        if not isinstance(payload, dict):
            return None
        errors = (payload.get("error") or {}).get("errors") or []
        if errors and isinstance(errors[0], dict):
            return errors[0].get("reason")
        return None

    @staticmethod
    def _to_result(item: Any) -> ImageResult | None:
        if not isinstance(item, dict):
            return None
        link = item.get("link")
        if not isinstance(link, str) or not link.strip():
            return None
        image = item.get("image") or {}
        return ImageResult(
            title=item.get("title") or "Restaurant photo",
            image_link=link,
            thumbnail_link=image.get("thumbnailLink") or link,
            context_link=image.get("contextLink") or link,
            source=ImageSource.primary,
        )


class UnsplashImageProvider(ImageProvider):
    """Secondary provider: Unsplash photo search (hourly request budget)."""

    name = "unsplash"

    def __init__(
        self,
        access_key: str,
        per_page: int = 10,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(timeout=timeout, transport=transport)
        self.access_key = access_key
        self.per_page = max(1, min(30, per_page))  # Unsplash max is 30

    @property
    def is_configured(self) -> bool:
        return bool(self.access_key)

    async def search(self, query: str, per_page: int | None = None, **kwargs: Any) -> list[ImageResult]:
        if not self.is_configured:
            raise ConfigMissing("UNSPLASH_ACCESS_KEY not configured", provider=self.name, query=query)

        logger.info("Unsplash image search: %r", query)
        response, payload = await self._get_json(
            UNSPLASH_SEARCH_URL,
            query,
            params={"query": query, "per_page": per_page or self.per_page},
            headers={"Authorization": f"Client-ID {self.access_key}", "Accept-Version": "v1"},
        )

        if response.status_code == 429 or (
            response.status_code == 403 and "rate limit" in response.text.lower()
        ):
            raise QuotaExceeded("Unsplash rate limit exceeded", provider=self.name, query=query,
                                status_code=response.status_code)
        if response.status_code != 200:
            raise TransportError(
                f"Unsplash returned status {response.status_code}",
                provider=self.name, query=query, status_code=response.status_code,
            )
        if not isinstance(payload, dict):
            raise TransportError("Unsplash returned a non-JSON body", provider=self.name, query=query,
                                 status_code=response.status_code)

        results = [r for r in (self._to_result(photo) for photo in payload.get("results") or []) if r]
        if not results:
            raise NoResults("No results from Unsplash", provider=self.name, query=query,
                            status_code=response.status_code)
        logger.info("Found %d Unsplash results for %r", len(results), query)
        return results

    @staticmethod
    def _to_result(photo: Any) -> ImageResult | None:
        if not isinstance(photo, dict):
            return None
        urls = photo.get("urls") or {}
        link = urls.get("raw") or urls.get("regular") or urls.get("full")
        if not isinstance(link, str) or not link.strip():
            return None
        links = photo.get("links") or {}
        return ImageResult(
            title=photo.get("description") or photo.get("alt_description") or "Unsplash image",
            image_link=link,
            thumbnail_link=urls.get("thumb") or urls.get("small") or link,
            context_link=links.get("html") or link,
            source=ImageSource.secondary,
        )


class ProviderChain:
    """Primary provider first, secondary on any classified failure.

    ``search`` never raises: when both providers fail it returns an empty list
    and leaves padding to the normalizer.
    """

    def __init__(self, primary: ImageProvider | None, secondary: ImageProvider | None) -> None:
        self.primary = primary
        self.secondary = secondary

    async def search(self, query: str, start_index: int = 1) -> list[ImageResult]:
        results = await self._attempt(self.primary, query, start_index=start_index)
        if results:
            return results

        logger.info("Falling back to secondary provider for %r", query)
        results = await self._attempt(self.secondary, query)
        if results:
            return results

        logger.info("No provider produced images for %r", query)
        return []

    async def _attempt(self, provider: ImageProvider | None, query: str, **kwargs: Any) -> list[ImageResult]:
        if provider is None:
            return []
        try:
            return await provider.search(query, **kwargs)
        except ConfigMissing as exc:
            logger.info("Skipping %s provider for %r: %s", provider.name, query, exc)
        except (QuotaExceeded, NoResults) as exc:
            logger.warning("%s search failed (%s) for %r: %s", provider.name, exc.kind, query, exc)
        except TransportError as exc:
            logger.error("%s transport error (status=%s) for %r: %s",
                         provider.name, exc.status_code, query, exc)
        except ImageSearchError as exc:
            logger.warning("%s search failed (%s) for %r: %s", provider.name, exc.kind, query, exc)
        except Exception:
            logger.exception("Unhandled error from %s provider for %r", provider.name, query)
        return []
