"""
Curated fallback photographs, keyed by cuisine.

Used when every live provider is unconfigured, exhausted, or returns nothing.
No network access is involved.
"""
from __future__ import annotations

from enum import Enum
from itertools import cycle, islice

from .models import ImageResult, ImageSource


class CuisineBucket(str, Enum):
    italian = "italian"
    japanese = "japanese"
    mexican = "mexican"
    chinese = "chinese"
    thai = "thai"
    indian = "indian"
    french = "french"
    mediterranean = "mediterranean"
    korean = "korean"
    american = "american"
    general = "general"


# Checked in order; the first bucket with a matching keyword wins.
_CUISINE_KEYWORDS: list[tuple[CuisineBucket, tuple[str, ...]]] = [
    (CuisineBucket.italian, ("italian", "pizza", "pasta")),
    (CuisineBucket.japanese, ("japan", "sushi", "ramen")),
    (CuisineBucket.mexican, ("mexic", "taco", "burrito")),
    (CuisineBucket.chinese, ("chinese", "dim sum", "szechuan")),
    (CuisineBucket.thai, ("thai",)),
    (CuisineBucket.indian, ("indian", "curry")),
    (CuisineBucket.french, ("french",)),
    (CuisineBucket.mediterranean, ("greek", "mediterranean")),
    (CuisineBucket.korean, ("korean", "bbq")),
    (CuisineBucket.american, ("american", "burger", "steak")),
]

_UNSPLASH = "https://images.unsplash.com/"
_SIZED = "?w=800&auto=format&fit=crop"

FALLBACK_CATALOG: dict[CuisineBucket, list[str]] = {
    CuisineBucket.italian: [
        "photo-1555396273-367ea4eb4db5",
        "photo-1498579397066-22750a3cb424",
        "photo-1534649643822-e7431de08af6",
        "photo-1579684947550-22e945225d9a",
    ],
    CuisineBucket.japanese: [
        "photo-1611143669185-af224c5e3252",
        "photo-1580822184713-fc5400e7fe10",
        "photo-1579871494447-9811cf80d66c",
        "photo-1617196034183-421b4917c92d",
    ],
    CuisineBucket.mexican: [
        "photo-1584314465196-31db4a57b2d9",
        "photo-1615870216519-2f9fa575fa5c",
        "photo-1599974579688-8dbdd335c77f",
        "photo-1551504734-5ee1c4a1479b",
    ],
    CuisineBucket.chinese: [
        "photo-1563245372-f21724e3856d",
        "photo-1567529692333-de9fd6772897",
        "photo-1518983546435-91f8b87fe561",
        "photo-1548943487-a2e4e43b4853",
    ],
    CuisineBucket.thai: [
        "photo-1604020126714-86c81f9403a0",
        "photo-1567982047351-76b6f93e9942",
        "photo-1562565652-a0d8f0c59eb4",
        "photo-1562565651-7d4948f339f5",
    ],
    CuisineBucket.indian: [
        "photo-1585937421612-70a008356c36",
        "photo-1517244683847-7456b63c5969",
        "photo-1593252726954-ae843734c079",
        "photo-1561626423-a51b45aef0a1",
    ],
    CuisineBucket.french: [
        "photo-1550507992-eb63ffee0847",
        "photo-1551782450-a2132b4ba21d",
        "photo-1600891964599-f61ba0e24092",
        "photo-1605300045234-d0582c116871",
    ],
    CuisineBucket.mediterranean: [
        "photo-1550547660-d9450f859349",
        "photo-1579684947550-22e945225d9a",
        "photo-1530554764233-e79e16c91d08",
        "photo-1517254456976-ee8682099819",
    ],
    CuisineBucket.korean: [
        "photo-1598214886806-c87b84b7078b",
        "photo-1583592643761-bf2ecd0e6f84",
        "photo-1598866594230-a7c12756260f",
        "photo-1632756916135-f90a196a6e97",
    ],
    CuisineBucket.american: [
        "photo-1555992336-fb0d29498b13",
        "photo-1555992457-b8fefdd46da2",
        "photo-1544510806-7daec3d252cf",
        "photo-1615937657715-bc7b4b7962c1",
    ],
    CuisineBucket.general: [
        "photo-1552566626-52f8b828add9",
        "photo-1517248135467-4c7edcad34c4",
        "photo-1559339352-11d035aa65de",
        "photo-1414235077428-338989a2e8c0",
        "photo-1559305616-3f99cd43e353",
        "photo-1528605248644-14dd04022da1",
    ],
}


def normalize_cuisine(text: str | None) -> CuisineBucket:
    """Map free text (a cuisine tag or a whole query) to a fallback bucket."""
    if not text:
        return CuisineBucket.general
    lower = text.lower().strip()
    for bucket, keywords in _CUISINE_KEYWORDS:
        if any(keyword in lower for keyword in keywords):
            return bucket
    return CuisineBucket.general


def _to_result(bucket: CuisineBucket, photo_id: str) -> ImageResult:
    image_link = f"{_UNSPLASH}{photo_id}{_SIZED}"
    return ImageResult(
        title=f"{bucket.value.capitalize()} restaurant",
        image_link=image_link,
        thumbnail_link=f"{_UNSPLASH}{photo_id}?w=200&auto=format&fit=crop",
        context_link=f"{_UNSPLASH}{photo_id}",
        source=ImageSource.fallback,
    )


def fallback_images(cuisine: str | CuisineBucket | None, count: int) -> list[ImageResult]:
    """Return ``count`` fallback images for a cuisine, cycling the bucket as needed."""
    if count <= 0:
        return []
    bucket = cuisine if isinstance(cuisine, CuisineBucket) else normalize_cuisine(cuisine)
    if not FALLBACK_CATALOG.get(bucket):
        bucket = CuisineBucket.general
    photo_ids = FALLBACK_CATALOG[bucket]
    return [_to_result(bucket, photo_id) for photo_id in islice(cycle(photo_ids), count)]
