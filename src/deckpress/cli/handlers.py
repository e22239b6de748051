"""CLI command handlers.

Each handler takes plain parameters and returns a Result, so the click
commands in deckpress.cli.main stay thin dispatchers and tests can call the
handlers directly with fakes.
"""

from dataclasses import asdict
from pathlib import Path
from typing import Optional

from deckpress.cancellation import CancelToken
from deckpress.catalog.client import CatalogClient
from deckpress.catalog.sets import SetCatalog
from deckpress.deck.models import PreferredSet
from deckpress.deck.parser import parse_card_list
from deckpress.deck.serialization import dump_deck, load_deck
from deckpress.pdf.layout import PRINT_FORMATS
from deckpress.progress import ProgressCallback
from deckpress.result import Result, try_operation
from deckpress.services.batch_fetch import CardLookup, ThrottledBatchFetcher
from deckpress.services.export import DeckExporter


def handle_import_list(
    list_path: str,
    deck_name: str,
    out_path: str,
    preferred_set: Optional[str] = None,
    resolve_tokens: bool = True,
    on_progress: Optional[ProgressCallback] = None,
    lookup: Optional[CardLookup] = None,
    sleep=None,
    timeout: Optional[float] = None,
) -> Result:
    """Resolve a card list file into a deck JSON file.

    Args:
        list_path: Text file with one "4 Card Name" per line
        deck_name: Name of the new deck
        out_path: Where to write the deck JSON
        preferred_set: Set code to prefer for every card
        resolve_tokens: Also attach each card's tokens
        on_progress: Progress callback
        lookup: Catalog capability (a CatalogClient if None)
        sleep: Throttle sleep override
        timeout: Give up after this many seconds

    Returns:
        Result containing the deck path and the unresolved lines
    """

    def run_import():
        text = Path(list_path).read_text(encoding="utf-8")
        requests = parse_card_list(text)
        preferred = PreferredSet(preferred_set) if preferred_set else None
        fetcher = ThrottledBatchFetcher(lookup or CatalogClient(), sleep=sleep)
        outcome = fetcher.run(
            requests,
            on_progress=on_progress,
            preferred_set=preferred,
            resolve_tokens=resolve_tokens,
            cancel=CancelToken(timeout) if timeout else None,
        )
        deck = outcome.to_deck(deck_name, preferred)
        path = dump_deck(deck, out_path)
        return {
            "deck_path": str(path),
            "cards": deck.total_cards,
            "unresolved": list(outcome.unresolved),
        }

    return try_operation(run_import)


def handle_export_zip(
    deck_path: str,
    output_dir: Optional[str] = None,
    on_progress: Optional[ProgressCallback] = None,
    exporter: Optional[DeckExporter] = None,
    timeout: Optional[float] = None,
) -> Result:
    """Export a saved deck as an image archive.

    Returns:
        Result containing the written path and skipped units
    """

    def run_export():
        deck = load_deck(deck_path, fresh_identity=False)
        artifact = (exporter or DeckExporter()).export_archive(
            deck,
            on_progress=on_progress,
            cancel=CancelToken(timeout) if timeout else None,
        )
        path = artifact.save(output_dir)
        return {"path": str(path), "bytes": artifact.size, "skipped": artifact.skipped}

    return try_operation(run_export)


def handle_export_pdf(
    deck_path: str,
    format_id: Optional[str] = None,
    output_dir: Optional[str] = None,
    on_progress: Optional[ProgressCallback] = None,
    exporter: Optional[DeckExporter] = None,
    timeout: Optional[float] = None,
) -> Result:
    """Export a saved deck as a print-ready A4 PDF."""

    def run_export():
        deck = load_deck(deck_path, fresh_identity=False)
        artifact = (exporter or DeckExporter()).export_document(
            deck,
            format_id=format_id,
            on_progress=on_progress,
            cancel=CancelToken(timeout) if timeout else None,
        )
        path = artifact.save(output_dir)
        return {"path": str(path), "bytes": artifact.size, "skipped": artifact.skipped}

    return try_operation(run_export)


def handle_formats() -> Result:
    return try_operation(lambda: [asdict(fmt) for fmt in PRINT_FORMATS.values()])


def handle_sets(query: str, limit: int = 20, catalog: Optional[SetCatalog] = None) -> Result:
    """Search the set list by name or code, newest first."""

    def run_search():
        sets = catalog or SetCatalog(CatalogClient().all_sets)
        return [
            {
                "code": entry.get("code"),
                "name": entry.get("name"),
                "released_at": entry.get("released_at"),
                "card_count": entry.get("card_count", 0),
            }
            for entry in sets.search(query, limit=limit)
        ]

    return try_operation(run_search)
