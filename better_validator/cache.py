r"""Process-lifetime metadata caches.

This module provides:

  - `MetadataCache`: a keyed, thread-safe get-or-compute store mapping a
    type to its `ObjectMetadata`. Entries are never replaced or evicted.
  - `LazyMetadata`: a single deferred value, used by validators bound to
    exactly one type.
  - `get_shared_cache()`: the process-wide cache used by validators built
    without an explicit cache or introspector.

Threading:
    The lock only guards the dictionary. Extraction runs outside it, so two
    threads missing on the same type may both extract; the first value
    stored wins and every caller receives that canonical value. Extraction
    is pure, so the duplicate work is wasted but never wrong.

Failures:
    An `IntrospectionError` raised during extraction is not stored. The
    next lookup for that type extracts (and raises) again.
"""

from __future__ import annotations

import logging
from threading import RLock
from typing import Any, Callable, Dict, Iterator, Optional

from .introspection import Introspector
from .metadata import MetadataExtractor, ObjectMetadata
from .utils import get_type_name

logger = logging.getLogger(__name__)

__all__ = ["MetadataCache", "LazyMetadata", "get_shared_cache"]


class MetadataCache:
    """Thread-safe get-or-compute store keyed by type identity.

    Args:
        extractor: Callable turning a type into `ObjectMetadata`. Defaults to
            a `MetadataExtractor` over `introspector`.
        introspector: Used only when `extractor` is omitted.
    """

    def __init__(
        self,
        extractor: Optional[Callable[[type], ObjectMetadata]] = None,
        introspector: Optional[Introspector] = None,
    ):
        if extractor is None:
            extractor = MetadataExtractor(introspector)
        self._extractor = extractor
        self._storage: Dict[type, ObjectMetadata] = {}
        self._lock = RLock()
        self._hits = 0
        self._misses = 0

    def get_or_compute(self, cls: type) -> ObjectMetadata:
        """Return the canonical metadata for `cls`, extracting it on first use."""
        with self._lock:
            metadata = self._storage.get(cls)
            if metadata is not None:
                self._hits += 1
                return metadata
            self._misses += 1

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Metadata cache miss for %s", get_type_name(cls, qualname=True))
        computed = self._extractor(cls)

        with self._lock:
            return self._storage.setdefault(cls, computed)

    def __getitem__(self, cls: type) -> ObjectMetadata:
        return self.get_or_compute(cls)

    def get(self, cls: type) -> Optional[ObjectMetadata]:
        """Return cached metadata without computing it."""
        with self._lock:
            return self._storage.get(cls)

    def __contains__(self, cls: object) -> bool:
        with self._lock:
            return cls in self._storage

    def __iter__(self) -> Iterator[type]:
        with self._lock:
            return iter(list(self._storage))

    def __len__(self) -> int:
        with self._lock:
            return len(self._storage)

    def stats(self) -> Dict[str, Any]:
        """Return entry count and hit/miss counters."""
        with self._lock:
            return {
                "entries": len(self._storage),
                "hits": self._hits,
                "misses": self._misses,
            }

    def __repr__(self) -> str:
        return f"<MetadataCache(entries={len(self)})>"


class LazyMetadata:
    """One deferred `ObjectMetadata`, resolved on first `get()`.

    Concurrent first calls may each run `loader`; only the first result is
    kept and returned from then on.
    """

    __slots__ = ("_loader", "_value", "_lock")

    def __init__(self, loader: Callable[[], ObjectMetadata]):
        self._loader = loader
        self._value: Optional[ObjectMetadata] = None
        self._lock = RLock()

    @property
    def is_resolved(self) -> bool:
        return self._value is not None

    def get(self) -> ObjectMetadata:
        value = self._value
        if value is not None:
            return value
        computed = self._loader()
        with self._lock:
            if self._value is None:
                self._value = computed
            return self._value


_shared_cache: Optional[MetadataCache] = None
_shared_lock = RLock()


def get_shared_cache() -> MetadataCache:
    """Return the process-wide cache bound to the default introspector.

    Created on first use and kept for the life of the process.
    """
    global _shared_cache
    with _shared_lock:
        if _shared_cache is None:
            _shared_cache = MetadataCache()
        return _shared_cache
