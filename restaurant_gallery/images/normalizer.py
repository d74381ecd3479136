from __future__ import annotations

from itertools import cycle, islice

from .fallback import fallback_images
from .models import ImageResult


def pad(images: list[ImageResult], target_count: int) -> list[ImageResult]:
    """Extend ``images`` to ``target_count`` by repeating from the start.

    Repeated entries keep their original ``source`` so callers can tell a
    duplicated photo from the fallback catalog. Empty input stays empty.
    """
    if not images or target_count <= 0:
        return []
    return list(islice(cycle(images), target_count))


def normalize(
    raw: list[ImageResult],
    cuisine_hint: str | None,
    target_count: int,
) -> list[ImageResult]:
    """Return exactly ``target_count`` images.

    - Long results are truncated, keeping provider ranking order.
    - Short non-empty results are padded by cycling (see ``pad``).
    - Empty results are filled from the fallback catalog for ``cuisine_hint``.
    """
    if target_count <= 0:
        return []

    usable = [img for img in raw if img.image_link.strip()]

    if len(usable) >= target_count:
        return usable[:target_count]
    if usable:
        return pad(usable, target_count)
    return fallback_images(cuisine_hint, target_count)
