"""Deck JSON import/export.

The document mirrors the model field names plus a format_version marker.
Importing can assign a fresh id and timestamps so an imported deck never
overwrites the one it was exported from.
"""

import json
from dataclasses import asdict, replace
from pathlib import Path
from typing import Any, Union

from deckpress.core.logging import get_logger
from deckpress.deck.models import (
    Deck,
    DeckLineItem,
    PreferredSet,
    Printing,
    TokenRef,
)
from deckpress.errors import ValidationError

logger = get_logger(__name__)

FORMAT_VERSION = 1


def deck_to_dict(deck: Deck) -> dict[str, Any]:
    data = asdict(deck)
    data["format_version"] = FORMAT_VERSION
    return data


def _printing_from_dict(data: dict[str, Any]) -> Printing:
    try:
        return Printing(
            id=data["id"],
            oracle_id=data.get("oracle_id", ""),
            name=data["name"],
            set_code=data.get("set_code", ""),
            set_name=data.get("set_name", ""),
            collector_number=data.get("collector_number", ""),
            layout=data.get("layout", "normal"),
            image_uri=data.get("image_uri"),
            face_images=tuple(data.get("face_images") or ()),
            type_line=data.get("type_line"),
        )
    except KeyError as error:
        raise ValidationError(f"Printing is missing field {error}") from error


def _line_item_from_dict(data: dict[str, Any]) -> DeckLineItem:
    if "printing" not in data:
        raise ValidationError("Line item is missing 'printing'")
    tokens = tuple(
        TokenRef(_printing_from_dict(token["printing"]), token.get("custom_image"))
        for token in data.get("tokens") or ()
    )
    return DeckLineItem(
        printing=_printing_from_dict(data["printing"]),
        quantity=int(data.get("quantity", 1)),
        tokens=tokens,
        custom_image=data.get("custom_image"),
        custom_back_image=data.get("custom_back_image"),
    )


def deck_from_dict(data: dict[str, Any], fresh_identity: bool = False) -> Deck:
    """Rebuild a Deck from its dict form.

    Args:
        data: Output of deck_to_dict (or an equivalent JSON document)
        fresh_identity: Assign a new id and timestamps

    Raises:
        ValidationError: If the document is not a valid deck
    """
    if not isinstance(data, dict) or not data.get("name"):
        raise ValidationError("Deck document must be an object with a 'name'")

    try:
        line_items = tuple(_line_item_from_dict(item) for item in data.get("line_items") or ())
    except (KeyError, TypeError, ValueError, AttributeError) as error:
        raise ValidationError(f"Malformed line item: {error}") from error

    preferred = data.get("preferred_set")
    preferred_set = None
    if preferred:
        if not isinstance(preferred, dict) or not isinstance(preferred.get("code"), str):
            raise ValidationError("Preferred set must be an object with a 'code'")
        preferred_set = PreferredSet(preferred["code"], preferred.get("name", ""))

    deck = Deck(
        name=data["name"],
        line_items=line_items,
        preferred_set=preferred_set,
        cover_card_id=data.get("cover_card_id"),
    )

    if fresh_identity:
        return deck

    return replace(
        deck,
        id=data.get("id") or deck.id,
        created_at=data.get("created_at") or deck.created_at,
        updated_at=data.get("updated_at") or deck.updated_at,
    )


def dump_deck(deck: Deck, path: Union[str, Path]) -> Path:
    """Write a deck as pretty-printed JSON and return the path written."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(deck_to_dict(deck), indent=2), encoding="utf-8")
    logger.info("Saved deck '{}' to {}", deck.name, target)
    return target


def load_deck(path: Union[str, Path], fresh_identity: bool = True) -> Deck:
    """Read a deck JSON file.

    Raises:
        ValidationError: If the file is not valid JSON or not a deck
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as error:
        raise ValidationError(f"Deck file {path} is not valid JSON: {error}") from error
    return deck_from_dict(data, fresh_identity=fresh_identity)

