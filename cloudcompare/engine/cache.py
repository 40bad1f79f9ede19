from __future__ import annotations

import hashlib
import json
import logging
import threading
from typing import Any, Callable

from .models import ComparisonResult, Constraint

logger = logging.getLogger(__name__)

DEFAULT_MAX_SIZE = 100


def fingerprint(constraint: Constraint) -> str:
    """Order-independent cache key for a normalized constraint."""
    normalized = json.dumps(constraint.model_dump(mode="json"), sort_keys=True)
    return "comparison_" + hashlib.sha256(normalized.encode()).hexdigest()[:16]


class ResultCache:
    """Bounded fingerprint -> ComparisonResult store.

    Evicts the oldest inserted entry once ``max_size`` is exceeded. The
    lock only guards bookkeeping; two concurrent misses for the same key
    may both compute, and the later insert simply overwrites.

    Every ``clear()`` starts a new generation. A result computed under an
    older generation is returned to its caller but never stored.
    """

    def __init__(self, max_size: int = DEFAULT_MAX_SIZE) -> None:
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self._entries: dict[str, ComparisonResult] = {}
        self._hits = 0
        self._misses = 0
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def get(self, constraint: Constraint) -> ComparisonResult | None:
        key = fingerprint(constraint)
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                self._hits += 1
                logger.debug("Cache hit for %s", key)
                return entry
            self._misses += 1
        logger.debug("Cache miss for %s", key)
        return None

    def set(
        self,
        constraint: Constraint,
        result: ComparisonResult,
        generation: int | None = None,
    ) -> bool:
        """Store ``result``; skip it if the cache was cleared since ``generation``."""
        key = fingerprint(constraint)
        with self._lock:
            if generation is not None and generation != self._generation:
                logger.debug("Dropped stale result for %s", key)
                return False
            self._entries[key] = result
            while len(self._entries) > self.max_size:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
                logger.debug("Evicted %s", oldest)
        return True

    def get_or_compute(
        self,
        constraint: Constraint,
        compute: Callable[[], ComparisonResult],
    ) -> tuple[ComparisonResult, bool]:
        """Return ``(result, from_cache)``."""
        generation = self.generation
        cached = self.get(constraint)
        if cached is not None:
            return cached, True
        result = compute()
        self.set(constraint, result, generation)
        return result, False

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, constraint: Constraint) -> bool:
        key = fingerprint(constraint)
        with self._lock:
            return key in self._entries

    def stats(self) -> dict[str, Any]:
        with self._lock:
            total = self._hits + self._misses
            return {
                "size": len(self._entries),
                "maxSize": self.max_size,
                "hits": self._hits,
                "misses": self._misses,
                "hitRate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
            }

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0
            self._generation += 1
