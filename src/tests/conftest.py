"""Shared fixtures: in-memory images, printings and a fake catalog."""

from io import BytesIO
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
from PIL import Image

from deckpress.config import settings as settings_module
from deckpress.deck.models import Deck, DeckLineItem, Printing, TokenRef
from deckpress.errors import FetchError
from deckpress.imaging.acquisition import ImageAcquirer
from deckpress.result import failure, success


def make_jpeg(width: int = 40, height: int = 56, color=(200, 30, 30)) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="JPEG")
    return buffer.getvalue()


def make_printing(
    name: str,
    printing_id: Optional[str] = None,
    layout: str = "normal",
    image_uri: Optional[str] = None,
    face_images: tuple = (),
    set_code: str = "tst",
) -> Printing:
    printing_id = printing_id or f"{name.lower().replace(' ', '-')}-{set_code}"
    if image_uri is None and not face_images:
        image_uri = f"https://img.test/{printing_id}.jpg"
    return Printing(
        id=printing_id,
        oracle_id=f"oracle-{name}",
        name=name,
        set_code=set_code,
        layout=layout,
        image_uri=image_uri,
        face_images=face_images,
    )


def make_dual(name: str, printing_id: Optional[str] = None) -> Printing:
    printing_id = printing_id or name.lower().replace(" ", "-")
    return make_printing(
        name,
        printing_id=printing_id,
        layout="transform",
        image_uri=None,
        face_images=(
            f"https://img.test/{printing_id}-front.jpg",
            f"https://img.test/{printing_id}-back.jpg",
        ),
    )


class FakeFetcher:
    """Serves a JPEG for every URL except those marked as failing."""

    def __init__(self, failing: tuple = (), width: int = 40, height: int = 56):
        self.failing = set(failing)
        self.calls: List[str] = []
        self.data = make_jpeg(width, height)

    def __call__(self, url: str) -> bytes:
        self.calls.append(url)
        if url in self.failing:
            raise FetchError(f"404 for {url}")
        return self.data


def card_json(
    name: str,
    card_id: Optional[str] = None,
    set_code: str = "lea",
    parts: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    card_id = card_id or f"{name.lower().replace(' ', '-')}-{set_code}"
    card = {
        "object": "card",
        "id": card_id,
        "oracle_id": f"oracle-{name}",
        "name": name,
        "set": set_code,
        "set_name": set_code.upper(),
        "collector_number": "1",
        "layout": "normal",
        "image_uris": {"normal": f"https://img.test/{card_id}.jpg"},
    }
    if parts is not None:
        card["all_parts"] = parts
    return card


class FakeLookup:
    """In-memory CardLookup recording every call in order."""

    def __init__(self, cards: Dict[str, Dict[str, Any]], by_set=None, by_id=None):
        self.cards = cards
        self.by_set_cards = by_set or {}
        self.by_id_cards = by_id or {}
        self.calls: List[tuple] = []

    def by_name(self, name: str):
        self.calls.append(("name", name))
        card = self.cards.get(name.lower())
        return success(card) if card else failure(f"No card named {name}")

    def by_name_and_set(self, name: str, set_code: str):
        self.calls.append(("set", name, set_code))
        card = self.by_set_cards.get((name.lower(), set_code))
        return success(card) if card else failure(f"{name} not in {set_code}")

    def by_id(self, card_id: str):
        self.calls.append(("id", card_id))
        card = self.by_id_cards.get(card_id)
        return success(card) if card else failure(f"No card {card_id}")


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def acquirer(fetcher) -> ImageAcquirer:
    return ImageAcquirer(fetcher=fetcher)


@pytest.fixture
def sample_deck() -> Deck:
    """Two Bolt printings, one dual-faced card and a token."""
    goblin = TokenRef(make_printing("Goblin", printing_id="goblin-token"))
    return Deck(
        name="Mono Red Test",
        line_items=(
            DeckLineItem(make_printing("Lightning Bolt", set_code="lea"), quantity=3),
            DeckLineItem(make_printing("Lightning Bolt", set_code="m10"), quantity=1),
            DeckLineItem(make_dual("Delver of Secrets"), quantity=2, tokens=(goblin,)),
        ),
    )


@pytest.fixture
def isolated_settings(tmp_path: Path, monkeypatch):
    """Point output and log directories at a temp dir for one test."""
    monkeypatch.setenv("DP_OUTPUT_DIR", str(tmp_path / "out"))
    monkeypatch.setenv("DP_LOGS_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("DP_LOG_TO_FILE", "false")
    monkeypatch.setenv("DP_REQUEST_DELAY_SECONDS", "0")
    settings = settings_module.reload_settings()
    yield settings
    monkeypatch.undo()
    settings_module.reload_settings()
