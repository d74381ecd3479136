from __future__ import annotations

import json

import pytest

from restaurant_gallery.images.cache import TTLCache, make_image_cache_key
from restaurant_gallery.images.models import ImageSource
from restaurant_gallery.images.resolver import _decode_images, _encode_images

from .fakes import FakeClock, make_image


def _cache(clock, max_entries=3, ttl=60.0, **kwargs) -> TTLCache:
    return TTLCache("test", max_entries=max_entries, ttl_seconds=ttl, clock=clock, **kwargs)


def test_key_is_lowercased_trimmed_query_and_page():
    assert make_image_cache_key("  Carbone Restaurant New York ", 1) == "carbone restaurant new york|1"
    assert make_image_cache_key("Carbone", 2) != make_image_cache_key("Carbone", 1)


def test_cache_miss_then_hit(clock):
    cache = _cache(clock)
    assert cache.get("a") is None
    cache.set("a", [1, 2, 3])
    assert cache.get("a") == [1, 2, 3]

    stats = cache.stats()
    assert stats["misses"] == 1
    assert stats["hits"] == 1
    assert stats["hit_rate"] == 50.0


def test_stale_entry_is_evicted_on_get(clock):
    cache = _cache(clock, ttl=10.0)
    cache.set("a", "value")
    clock.advance(5.0)
    assert cache.get("a") == "value"
    clock.advance(5.0)
    assert cache.get("a") is None
    assert len(cache) == 0


def test_inserting_past_capacity_evicts_least_recently_used(clock):
    cache = _cache(clock, max_entries=3)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("c", 3)

    # Reading "a" makes "b" the least recently used
    assert cache.get("a") == 1
    cache.set("d", 4)

    assert cache.get("b") is None
    assert cache.get("a") == 1
    assert cache.get("c") == 3
    assert cache.get("d") == 4


def test_has_does_not_change_recency(clock):
    cache = _cache(clock, max_entries=2)
    cache.set("a", 1)
    cache.set("b", 2)

    assert cache.has("a")
    cache.set("c", 3)

    assert not cache.has("a")
    assert cache.has("b")
    assert cache.has("c")


def test_has_is_false_for_stale_entries(clock):
    cache = _cache(clock, ttl=5.0)
    cache.set("a", 1)
    clock.advance(5.0)
    assert not cache.has("a")


def test_overwrite_refreshes_timestamp(clock):
    cache = _cache(clock, ttl=10.0)
    cache.set("a", 1)
    clock.advance(8.0)
    cache.set("a", 2)
    clock.advance(8.0)
    assert cache.get("a") == 2


def test_clear_resets_entries_and_stats(clock):
    cache = _cache(clock)
    cache.set("a", 1)
    cache.get("a")
    cache.clear()
    assert cache.stats() == {"name": "test", "size": 0, "hits": 0, "misses": 0, "hit_rate": 0.0}


def test_rejects_invalid_bounds(clock):
    with pytest.raises(ValueError):
        _cache(clock, max_entries=0)
    with pytest.raises(ValueError):
        _cache(clock, ttl=0)


def test_persistent_cache_warm_starts_from_file(tmp_path):
    clock = FakeClock()
    path = tmp_path / "images.json"
    images = [make_image(1, ImageSource.secondary), make_image(2, ImageSource.secondary)]

    first = _cache(clock, persist_path=path, encode=_encode_images, decode=_decode_images)
    first.set("carbone|1", images)
    assert path.exists()

    second = _cache(clock, persist_path=path, encode=_encode_images, decode=_decode_images)
    assert second.get("carbone|1") == images


def test_persistent_cache_skips_expired_entries(tmp_path):
    clock = FakeClock()
    path = tmp_path / "images.json"
    first = _cache(clock, ttl=30.0, persist_path=path)
    first.set("old", ["x"])
    clock.advance(31.0)

    second = _cache(clock, ttl=30.0, persist_path=path)
    assert len(second) == 0


def test_persistent_cache_ignores_corrupt_file(tmp_path):
    path = tmp_path / "images.json"
    path.write_text("not json{{{", encoding="utf-8")
    cache = _cache(FakeClock(), persist_path=path)
    assert len(cache) == 0


def test_persisted_file_records_timestamp(tmp_path):
    clock = FakeClock(start=42.0)
    path = tmp_path / "images.json"
    _cache(clock, persist_path=path).set("k", [1])
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data == {"k": {"value": [1], "created_at": 42.0}}
