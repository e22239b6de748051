"""Read-through cache of the catalog's set list.

The set list changes rarely, so it is loaded once per process and reused
until invalidated or, if a TTL is configured, until it goes stale. A failed
load is never cached.
"""

import threading
import time
from typing import Any, Callable, Dict, List, Optional

from deckpress.core.logging import get_logger
from deckpress.errors import FetchError
from deckpress.result import Result

logger = get_logger(__name__)

SetLoader = Callable[[], Result]


class SetCatalog:
    """Cached set list with autocomplete search.

    Args:
        loader: Callable returning a Result whose value is a list of set
            objects (e.g. CatalogClient.all_sets)
        clock: Monotonic clock, injectable for tests
        ttl_seconds: Reload after this many seconds (None caches forever)
    """

    def __init__(
        self,
        loader: SetLoader,
        clock: Callable[[], float] = time.monotonic,
        ttl_seconds: Optional[float] = None,
    ):
        self._loader = loader
        self._clock = clock
        self._ttl = ttl_seconds
        self._lock = threading.Lock()
        self._sets: Optional[List[Dict[str, Any]]] = None
        self._loaded_at: Optional[float] = None

    @property
    def is_loaded(self) -> bool:
        return self._sets is not None and not self._is_stale()

    def _is_stale(self) -> bool:
        if self._ttl is None or self._loaded_at is None:
            return False
        return self._clock() - self._loaded_at >= self._ttl

    def get(self) -> List[Dict[str, Any]]:
        """The set list, loading it on first use.

        Raises:
            FetchError: If the loader fails (nothing is cached)
        """
        with self._lock:
            if self._sets is not None and not self._is_stale():
                return self._sets

            result = self._loader()
            if not result["ok"]:
                raise FetchError(f"Could not load sets: {result['error']}")

            self._sets = list(result["value"] or [])
            self._loaded_at = self._clock()
            logger.debug("Loaded {} sets", len(self._sets))
            return self._sets

    def invalidate(self) -> None:
        with self._lock:
            self._sets = None
            self._loaded_at = None

    def search(self, query: str, limit: int = 20) -> List[Dict[str, Any]]:
        """Sets with cards whose name or code contains query, newest first.

        Examples:
            >>> catalog.search("dominaria")[0]["code"]
            'dmu'
        """
        needle = query.strip().lower()
        candidates = [
            entry
            for entry in self.get()
            if entry.get("card_count", 0) > 0
            and (
                needle in entry.get("name", "").lower()
                or needle in entry.get("code", "").lower()
            )
        ]
        # ISO dates sort lexically; sets without a date go last
        candidates.sort(key=lambda entry: entry.get("released_at") or "", reverse=True)
        return candidates[:limit]
