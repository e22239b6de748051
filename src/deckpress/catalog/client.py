"""Thin card catalog client (Scryfall-compatible REST API).

Every lookup returns a Result instead of raising so callers in a batch can
record the miss and continue. There is no retry and no pacing here; the
batch fetcher owns the delay between calls.
"""

from typing import Any, Dict, Optional

import requests

from deckpress.config import settings as settings_module
from deckpress.core.logging import get_logger
from deckpress.errors import FetchError, NameMismatchError
from deckpress.net.network import build_url, fetch_json
from deckpress.result import Result, failure, from_exception, map_result, success

logger = get_logger(__name__)


class CatalogClient:
    """Card catalog lookups over a shared requests session.

    Args:
        base_url: API root (settings.api_base_url if None)
        session: requests session to reuse connections across lookups
        timeout: Per-request timeout in seconds
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        settings = settings_module.settings
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout if timeout is not None else settings.http_timeout

        self.stats = {
            "requests": 0,
            "errors": 0,
        }

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Result:
        url = build_url(self.base_url, path, params)
        self.stats["requests"] += 1
        try:
            payload = fetch_json(url, session=self.session, timeout=self.timeout)
        except FetchError as error:
            self.stats["errors"] += 1
            logger.debug("Catalog request failed: {}", error)
            return failure(str(error))

        if isinstance(payload, dict) and payload.get("object") == "error":
            self.stats["errors"] += 1
            return failure(payload.get("details") or "Catalog returned an error")
        return success(payload)

    def by_name(self, name: str) -> Result:
        """Fuzzy named lookup ("bolt" finds Lightning Bolt)."""
        return self._get("/cards/named", {"fuzzy": name})

    def by_name_and_set(self, name: str, set_code: str, strict: bool = True) -> Result:
        """Exact named lookup restricted to one set.

        With strict=True a card whose name differs from the request (ignoring
        case) is reported as a NameMismatchError failure.
        """
        result = self._get("/cards/named", {"exact": name, "set": set_code.lower()})
        if not result["ok"] or not strict:
            return result

        actual = result["value"].get("name", "")
        if actual.lower() != name.lower():
            return from_exception(NameMismatchError(name, actual))
        return result

    def by_id(self, card_id: str) -> Result:
        return self._get(f"/cards/{card_id}")

    def search(
        self,
        query: str,
        unique: str = "cards",
        order: str = "name",
        page: int = 1,
    ) -> Result:
        """One page of a full-text search; the value is the raw list object."""
        params = {"q": query, "unique": unique, "order": order, "page": page}
        return self._get("/cards/search", params)

    def all_sets(self) -> Result:
        """Every set known to the catalog (value is a list of set objects)."""
        return map_result(self._get("/sets"), lambda payload: list(payload.get("data", [])))

    def close(self) -> None:
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
