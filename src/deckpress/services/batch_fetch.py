"""Resolve a pasted card list into deck line items, politely.

Requests are processed strictly one after another and every catalog call
after the first waits a fixed delay, whether it is a name lookup, a
preferred-set lookup or a token lookup. Misses are collected, never raised.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Protocol

from deckpress.cancellation import CancelToken, check
from deckpress.config import settings as settings_module
from deckpress.constants import TOKEN_COMPONENT
from deckpress.core.logging import get_logger, log_operation
from deckpress.deck.models import Deck, DeckLineItem, PreferredSet, Printing, TokenRef
from deckpress.deck.parser import CardRequest, format_request_label, total_quantity
from deckpress.errors import ValidationError
from deckpress.progress import ProgressCallback, progress
from deckpress.result import Result

logger = get_logger(__name__)


class CardLookup(Protocol):
    """Catalog capability the fetcher needs; CatalogClient satisfies it."""

    def by_name(self, name: str) -> Result: ...

    def by_name_and_set(self, name: str, set_code: str) -> Result: ...

    def by_id(self, card_id: str) -> Result: ...


@dataclass
class BatchFetchOutcome:
    """Line items that resolved and labels of requests that did not."""

    resolved: List[DeckLineItem] = field(default_factory=list)
    unresolved: List[str] = field(default_factory=list)

    @property
    def resolved_count(self) -> int:
        return sum(item.quantity for item in self.resolved)

    def to_deck(self, name: str, preferred_set: Optional[PreferredSet] = None) -> Deck:
        """Build a deck, merging requests that landed on the same printing."""
        deck = Deck(name=name, preferred_set=preferred_set)
        for item in self.resolved:
            deck = deck.with_line_item(item)
        return deck


class ThrottledBatchFetcher:
    """Sequential, delay-separated catalog resolution of card requests.

    Args:
        lookup: Catalog capability (by_name / by_name_and_set / by_id)
        delay_seconds: Pause before every call but the first
            (settings.request_delay_seconds if None)
        sleep: Replacement for time.sleep, mainly for tests
        image_size: Catalog image size for resolved printings
    """

    def __init__(
        self,
        lookup: CardLookup,
        delay_seconds: Optional[float] = None,
        sleep: Optional[Callable[[float], None]] = None,
        image_size: Optional[str] = None,
    ):
        settings = settings_module.settings
        self.lookup = lookup
        self.delay_seconds = (
            delay_seconds if delay_seconds is not None else settings.request_delay_seconds
        )
        self.image_size = image_size or settings.preferred_image_size
        self._sleep = sleep
        self._calls = 0

    def _pause(self, cancel: Optional[CancelToken]) -> None:
        if self.delay_seconds <= 0:
            return
        if self._sleep is not None:
            self._sleep(self.delay_seconds)
        elif cancel is not None:
            cancel.wait(self.delay_seconds)
        else:
            time.sleep(self.delay_seconds)

    def _call(
        self, operation: Callable[[], Result], cancel: Optional[CancelToken]
    ) -> Result:
        if self._calls > 0:
            self._pause(cancel)
        check(cancel)
        self._calls += 1
        return operation()

    def _in_preferred_set(
        self,
        card: Dict[str, Any],
        preferred_set: Optional[PreferredSet],
        cancel: Optional[CancelToken],
    ) -> Dict[str, Any]:
        """The same card from the preferred set, or the card unchanged."""
        if preferred_set is None:
            return card
        result = self._call(
            lambda: self.lookup.by_name_and_set(card["name"], preferred_set.code), cancel
        )
        if not result["ok"]:
            logger.debug(
                "{} not available in {}: {}", card["name"], preferred_set.code, result["error"]
            )
            return card
        return result["value"]

    def _resolve_tokens(
        self,
        card: Dict[str, Any],
        preferred_set: Optional[PreferredSet],
        cancel: Optional[CancelToken],
    ) -> tuple[TokenRef, ...]:
        parts: Dict[str, Dict[str, Any]] = {}
        for part in card.get("all_parts") or []:
            if part.get("component") != TOKEN_COMPONENT or part.get("id") == card.get("id"):
                continue
            parts.setdefault(part.get("name", ""), part)

        tokens: List[TokenRef] = []
        for token_name, part in parts.items():
            result = self._call(lambda: self.lookup.by_id(part["id"]), cancel)
            if not result["ok"]:
                logger.warning("Token {} for {} not found: {}", token_name, card["name"], result["error"])
                continue
            token_card = self._in_preferred_set(result["value"], preferred_set, cancel)
            try:
                tokens.append(TokenRef(Printing.from_scryfall(token_card, self.image_size)))
            except ValidationError as error:
                logger.warning("Skipping malformed token {}: {}", token_name, error)
        return tuple(tokens)

    def _resolve(
        self,
        request: CardRequest,
        preferred_set: Optional[PreferredSet],
        resolve_tokens: bool,
        cancel: Optional[CancelToken],
    ) -> Optional[DeckLineItem]:
        result = self._call(lambda: self.lookup.by_name(request.name), cancel)
        if not result["ok"]:
            logger.warning("Card not found: {} ({})", request.name, result["error"])
            return None

        original = result["value"]
        card = self._in_preferred_set(original, preferred_set, cancel)
        try:
            printing = Printing.from_scryfall(card, self.image_size)
        except ValidationError as error:
            logger.warning("Malformed catalog entry for {}: {}", request.name, error)
            return None

        tokens: tuple[TokenRef, ...] = ()
        if resolve_tokens:
            # a set printing may not list related parts
            source = card if card.get("all_parts") else original
            tokens = self._resolve_tokens(source, preferred_set, cancel)
        return DeckLineItem(printing=printing, quantity=request.quantity, tokens=tokens)

    def run(
        self,
        requests: List[CardRequest],
        on_progress: Optional[ProgressCallback] = None,
        preferred_set: Optional[PreferredSet] = None,
        resolve_tokens: bool = True,
        cancel: Optional[CancelToken] = None,
    ) -> BatchFetchOutcome:
        """Resolve every request in order.

        Args:
            requests: Parsed card requests
            on_progress: Receives a snapshot after each request, counting quantities
            preferred_set: Collection to prefer when the card exists there
            resolve_tokens: Also look up each card's associated tokens
            cancel: Optional cancellation token

        Returns:
            Outcome with resolved line items and unresolved labels

        Raises:
            OperationCancelledError: If cancel fires mid-run
        """
        self._calls = 0
        outcome = BatchFetchOutcome()

        with log_operation("Batch fetch", requests=len(requests)) as summary:
            with progress("Resolving cards", total_quantity(requests), on_progress) as tracker:
                for request in requests:
                    check(cancel)
                    item = self._resolve(request, preferred_set, resolve_tokens, cancel)
                    if item is None:
                        outcome.unresolved.append(format_request_label(request))
                    else:
                        outcome.resolved.append(item)
                    tracker.update(request.quantity, request.name)
            summary["resolved"] = len(outcome.resolved)
            summary["unresolved"] = len(outcome.unresolved)

        return outcome
