from __future__ import annotations

import json
import logging
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


@dataclass
class CacheEntry:
    key: str
    value: Any
    created_at: float


def make_image_cache_key(query: str, page: int = 1) -> str:
    return f"{query.strip().lower()}|{page}"


class TTLCache:
    """Capacity- and time-bounded key/value store with LRU eviction.

    Entries expire ``ttl_seconds`` after they were written; a stale entry is
    evicted when it is next read. When ``persist_path`` is given the cache is
    mirrored to a JSON file so a restart can warm-start from it; ``encode`` and
    ``decode`` convert values to and from JSON-compatible data.
    """

    def __init__(
        self,
        name: str,
        max_entries: int,
        ttl_seconds: float,
        clock: Clock = time.time,
        persist_path: Path | None = None,
        encode: Callable[[Any], Any] | None = None,
        decode: Callable[[Any], Any] | None = None,
    ) -> None:
        if max_entries <= 0:
            raise ValueError(f"max_entries must be positive, got: {max_entries}")
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got: {ttl_seconds}")

        self.name = name
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._persist_path = persist_path
        self._encode = encode or (lambda v: v)
        self._decode = decode or (lambda v: v)
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._hits = 0
        self._misses = 0

        if persist_path is not None:
            self._load()

    def __len__(self) -> int:
        return len(self._entries)

    def _is_fresh(self, entry: CacheEntry) -> bool:
        return self._clock() - entry.created_at < self.ttl_seconds

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is not None and self._is_fresh(entry):
            self._entries.move_to_end(key)
            self._hits += 1
            return entry.value
        if entry is not None:
            logger.debug("Cache %s: entry %r expired, evicting", self.name, key)
            del self._entries[key]
            self._save()
        self._misses += 1
        return None

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = CacheEntry(key=key, value=value, created_at=self._clock())
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Cache %s: capacity reached, evicted %r", self.name, evicted)
        self._save()

    def has(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry is not None and self._is_fresh(entry)

    def clear(self) -> None:
        self._entries.clear()
        self._hits = 0
        self._misses = 0
        self._save()

    def stats(self) -> dict:
        total = self._hits + self._misses
        return {
            "name": self.name,
            "size": len(self._entries),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
        }

    # ── Persistence ──────────────────────────────────────────────────────

    def _load(self) -> None:
        path = self._persist_path
        if path is None or not path.exists():
            return
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Cache %s: could not read %s, starting empty", self.name, path, exc_info=True)
            return

        loaded = 0
        # Oldest first so recency order matches write order
        for key, item in sorted(raw.items(), key=lambda kv: kv[1].get("created_at", 0)):
            try:
                entry = CacheEntry(
                    key=key,
                    value=self._decode(item["value"]),
                    created_at=float(item["created_at"]),
                )
            except (KeyError, TypeError, ValueError):
                logger.warning("Cache %s: skipping malformed entry %r", self.name, key)
                continue
            if self._is_fresh(entry):
                self._entries[key] = entry
                loaded += 1

        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)
        logger.info("Cache %s: warm-started with %d entries from %s", self.name, loaded, path)

    def _save(self) -> None:
        path = self._persist_path
        if path is None:
            return
        payload = {
            key: {"value": self._encode(entry.value), "created_at": entry.created_at}
            for key, entry in self._entries.items()
        }
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp = path.with_suffix(".tmp")
            tmp.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
            tmp.replace(path)
        except (OSError, TypeError, ValueError):
            logger.warning("Cache %s: failed to write %s", self.name, path, exc_info=True)
