"""Pasted card list parsing.

Supports:
- Quantity prefix: "4 Lightning Bolt"
- Quantity with an "x": "4x Lightning Bolt" / "4X Lightning Bolt"
- Bare names: "Mountain" (quantity 1)

Blank lines are ignored. Any other line is taken literally as a card name,
so parsing never fails; unknown names surface later as unresolved lookups.
"""

import re
from dataclasses import dataclass
from typing import List

from deckpress.errors import DeckParsingError

LINE_PATTERN = re.compile(r"^(\d+)x?\s+(.+)$", re.IGNORECASE)


@dataclass(frozen=True)
class CardRequest:
    """A requested card name and how many copies of it."""

    quantity: int
    name: str

    def __post_init__(self):
        if self.quantity < 1:
            raise DeckParsingError(f"Quantity for '{self.name}' must be at least 1")
        if not self.name.strip():
            raise DeckParsingError("Card name cannot be blank")


def parse_line(line: str) -> CardRequest:
    """Parse a single non-blank line.

    Examples:
        >>> parse_line("4x Lightning Bolt")
        CardRequest(quantity=4, name='Lightning Bolt')
        >>> parse_line("Mountain")
        CardRequest(quantity=1, name='Mountain')
    """
    stripped = line.strip()
    match = LINE_PATTERN.match(stripped)
    if match and int(match.group(1)) > 0:
        return CardRequest(quantity=int(match.group(1)), name=match.group(2).strip())
    return CardRequest(quantity=1, name=stripped)


def parse_card_list(text: str) -> List[CardRequest]:
    """Parse a pasted list into requests, one per non-blank line.

    Args:
        text: Multi-line card list

    Returns:
        Requests in input order

    Examples:
        >>> parse_card_list("4 Lightning Bolt\\n\\nMountain")
        [CardRequest(quantity=4, name='Lightning Bolt'), CardRequest(quantity=1, name='Mountain')]
    """
    return [parse_line(line) for line in text.splitlines() if line.strip()]


def format_request_label(request: CardRequest) -> str:
    """Display label for an unresolved request ("4x Bolt", or just "Bolt")."""
    if request.quantity > 1:
        return f"{request.quantity}x {request.name}"
    return request.name


def total_quantity(requests: List[CardRequest]) -> int:
    return sum(request.quantity for request in requests)


