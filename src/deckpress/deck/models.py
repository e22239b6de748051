"""Deck data model.

Printings, line items and decks are frozen dataclasses holding tuples, so a
deck snapshot handed to an export run cannot be changed underneath it. Every
"mutation" returns a new Deck.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from deckpress.constants import DUAL_FACED_LAYOUTS, IMAGE_SIZE_PREFERENCE
from deckpress.errors import ValidationError


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def pick_image(image_uris: Optional[dict[str, str]], size: str = "normal") -> Optional[str]:
    """Pick an image URL from a catalog image_uris mapping.

    The requested size wins; otherwise the first available size in
    IMAGE_SIZE_PREFERENCE order is used.
    """
    if not image_uris:
        return None
    if image_uris.get(size):
        return image_uris[size]
    for key in IMAGE_SIZE_PREFERENCE:
        if image_uris.get(key):
            return image_uris[key]
    return None


@dataclass(frozen=True)
class Printing:
    """One concrete version of a card."""

    id: str
    oracle_id: str
    name: str
    set_code: str = ""
    set_name: str = ""
    collector_number: str = ""
    layout: str = "normal"
    image_uri: Optional[str] = None
    face_images: tuple[Optional[str], ...] = ()
    type_line: Optional[str] = None

    @property
    def is_dual_faced(self) -> bool:
        return self.layout in DUAL_FACED_LAYOUTS

    @property
    def back_image_uri(self) -> Optional[str]:
        """Second face artwork, present only for dual-faced layouts."""
        if not self.is_dual_faced or len(self.face_images) < 2:
            return None
        return self.face_images[1]

    @classmethod
    def from_scryfall(cls, card: dict[str, Any], image_size: str = "normal") -> "Printing":
        """Build a Printing from a catalog card object.

        Raises:
            ValidationError: If the object lacks an id or a name
        """
        if not card.get("id") or not card.get("name"):
            raise ValidationError("Card object is missing 'id' or 'name'")

        faces = card.get("card_faces") or []
        face_images = tuple(pick_image(face.get("image_uris"), image_size) for face in faces)

        return cls(
            id=card["id"],
            oracle_id=card.get("oracle_id") or (faces[0].get("oracle_id", "") if faces else ""),
            name=card["name"],
            set_code=(card.get("set") or "").lower(),
            set_name=card.get("set_name") or "",
            collector_number=str(card.get("collector_number") or ""),
            layout=card.get("layout") or "normal",
            image_uri=pick_image(card.get("image_uris"), image_size),
            face_images=face_images,
            type_line=card.get("type_line"),
        )


@dataclass(frozen=True)
class TokenRef:
    """A token printing associated with a line item, with optional custom art."""

    printing: Printing
    custom_image: Optional[str] = None


@dataclass(frozen=True)
class DeckLineItem:
    """One row of a deck: a printing, its quantity, tokens and art overrides."""

    printing: Printing
    quantity: int = 1
    tokens: tuple[TokenRef, ...] = ()
    custom_image: Optional[str] = None
    custom_back_image: Optional[str] = None

    def __post_init__(self):
        if self.quantity < 0:
            raise ValidationError(
                f"Quantity for '{self.printing.name}' cannot be negative"
            )

    @property
    def name(self) -> str:
        return self.printing.name

    def with_quantity(self, quantity: int) -> "DeckLineItem":
        return replace(self, quantity=max(0, quantity))

    def with_tokens(self, tokens: Iterable[TokenRef]) -> "DeckLineItem":
        return replace(self, tokens=tuple(tokens))

    def with_custom_art(
        self, front: Optional[str] = None, back: Optional[str] = None
    ) -> "DeckLineItem":
        return replace(self, custom_image=front, custom_back_image=back)


@dataclass(frozen=True)
class PreferredSet:
    """Collection hint used when importing; code is always lower-case."""

    code: str
    name: str = ""

    def __post_init__(self):
        object.__setattr__(self, "code", self.code.lower())


@dataclass(frozen=True)
class Deck:
    """A named, ordered list of line items, unique by printing id."""

    name: str
    line_items: tuple[DeckLineItem, ...] = ()
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    preferred_set: Optional[PreferredSet] = None
    cover_card_id: Optional[str] = None
    created_at: str = field(default_factory=_utc_now)
    updated_at: str = field(default_factory=_utc_now)

    def __post_init__(self):
        seen: set[str] = set()
        for item in self.line_items:
            if item.printing.id in seen:
                raise ValidationError(
                    f"Deck '{self.name}' lists printing {item.printing.id} twice"
                )
            seen.add(item.printing.id)
        if any(item.quantity == 0 for item in self.line_items):
            object.__setattr__(
                self,
                "line_items",
                tuple(item for item in self.line_items if item.quantity > 0),
            )

    @property
    def total_cards(self) -> int:
        return sum(item.quantity for item in self.line_items)

    def find(self, printing_id: str) -> Optional[DeckLineItem]:
        for item in self.line_items:
            if item.printing.id == printing_id:
                return item
        return None

    def find_by_oracle_id(self, oracle_id: str) -> Optional[DeckLineItem]:
        """First line item of the same conceptual card, any printing."""
        for item in self.line_items:
            if item.printing.oracle_id == oracle_id:
                return item
        return None

    def _touched(self, line_items: Iterable[DeckLineItem]) -> "Deck":
        return replace(self, line_items=tuple(line_items), updated_at=_utc_now())

    def with_line_item(self, line_item: DeckLineItem) -> "Deck":
        """Add a line item, merging quantities when the printing is already present."""
        existing = self.find(line_item.printing.id)
        if existing is None:
            return self._touched((*self.line_items, line_item))

        merged = existing.with_quantity(existing.quantity + line_item.quantity)
        return self._touched(
            merged if item.printing.id == line_item.printing.id else item
            for item in self.line_items
        )

    def replace_line_item(self, printing_id: str, line_item: DeckLineItem) -> "Deck":
        """Swap a line item in place (e.g. a different printing of the same card)."""
        if self.find(printing_id) is None:
            return self
        return self._touched(
            line_item if item.printing.id == printing_id else item
            for item in self.line_items
        )

    def set_quantity(self, printing_id: str, quantity: int) -> "Deck":
        """Set a line item's quantity; zero removes it."""
        if quantity <= 0:
            return self.remove_line_item(printing_id)
        return self._touched(
            item.with_quantity(quantity) if item.printing.id == printing_id else item
            for item in self.line_items
        )

    def remove_line_item(self, printing_id: str) -> "Deck":
        if self.find(printing_id) is None:
            return self
        return self._touched(
            item for item in self.line_items if item.printing.id != printing_id
        )

    def rename(self, name: str) -> "Deck":
        return replace(self, name=name, updated_at=_utc_now())
