"""Group a deck by card name and expand it into per-copy acquisition requests.

Alternate printings that share a display name are told apart by a 1-based
version ordinal; a name with a single printing gets no ordinal. The
ordinals are what keep archive file names from colliding.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Union

from deckpress.deck.models import Deck, DeckLineItem, TokenRef
from deckpress.deck.resolver import resolve_back_image, resolve_front_image


@dataclass(frozen=True)
class ArtifactUnit:
    """One line item (or token) ready for image acquisition."""

    name: str
    front_image: str
    back_image: Optional[str]
    quantity: int
    is_token: bool = False
    version_ordinal: Optional[int] = None
    source: Union[DeckLineItem, TokenRef, None] = None

    @property
    def label(self) -> str:
        """Human readable progress/error label."""
        return f"Token: {self.name}" if self.is_token else self.name

    @property
    def is_dual_faced(self) -> bool:
        return self.back_image is not None


@dataclass(frozen=True)
class CopyRequest:
    """A single physical copy of a unit."""

    unit: ArtifactUnit
    copy_ordinal: Optional[int] = None

    @property
    def name(self) -> str:
        return self.unit.name


def _group_by_name(items: Iterable, name_of) -> dict[str, list]:
    grouped: dict[str, list] = {}
    for item in items:
        grouped.setdefault(name_of(item), []).append(item)
    return grouped


def group_line_items(deck: Deck) -> dict[str, list[DeckLineItem]]:
    """Group line items by printing name, keeping first-encounter order.

    Examples:
        >>> [name for name in group_line_items(deck)]
        ['Lightning Bolt', 'Delver of Secrets']
    """
    return _group_by_name(deck.line_items, lambda item: item.printing.name)


def collect_tokens(deck: Deck) -> dict[str, list[TokenRef]]:
    """Group every token referenced by the deck by token name."""
    all_tokens = [token for item in deck.line_items for token in item.tokens]
    return _group_by_name(all_tokens, lambda token: token.printing.name)


def _ordinal(index: int, group_size: int) -> Optional[int]:
    return index + 1 if group_size > 1 else None


def artifact_units(deck: Deck) -> list[ArtifactUnit]:
    """All cards then all tokens as acquisition units with version ordinals.

    Tokens always count once, however many line items reference them.
    """
    units: list[ArtifactUnit] = []

    for name, items in group_line_items(deck).items():
        for index, item in enumerate(items):
            units.append(
                ArtifactUnit(
                    name=name,
                    front_image=resolve_front_image(item.printing, item.custom_image),
                    back_image=resolve_back_image(item.printing, item.custom_back_image),
                    quantity=item.quantity,
                    version_ordinal=_ordinal(index, len(items)),
                    source=item,
                )
            )

    for name, tokens in collect_tokens(deck).items():
        for index, token in enumerate(tokens):
            units.append(
                ArtifactUnit(
                    name=name,
                    front_image=resolve_front_image(token.printing, token.custom_image),
                    back_image=None,
                    quantity=1,
                    is_token=True,
                    version_ordinal=_ordinal(index, len(tokens)),
                    source=token,
                )
            )

    return units


def expand(unit: ArtifactUnit) -> list[CopyRequest]:
    """One request per copy; copies are numbered only when there is more than one."""
    if unit.quantity == 1:
        return [CopyRequest(unit)]
    return [CopyRequest(unit, copy_ordinal=n) for n in range(1, unit.quantity + 1)]


def expand_all(units: Iterable[ArtifactUnit]) -> list[CopyRequest]:
    return [request for unit in units for request in expand(unit)]
