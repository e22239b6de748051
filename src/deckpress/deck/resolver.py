"""Pick the artwork reference to display or export for a printing.

Pure functions of their inputs; no network or file access.
"""

from typing import Optional

from deckpress.constants import PLACEHOLDER_IMAGE
from deckpress.deck.models import Printing


def resolve_front_image(printing: Printing, custom_front: Optional[str] = None) -> str:
    """Front artwork: override, single-face image, first face with art, placeholder.

    Examples:
        >>> resolve_front_image(Printing("id", "o", "Bolt", image_uri="https://x/b.jpg"))
        'https://x/b.jpg'
    """
    if custom_front:
        return custom_front
    if printing.image_uri:
        return printing.image_uri
    for face_image in printing.face_images:
        if face_image:
            return face_image
    return PLACEHOLDER_IMAGE


def resolve_back_image(
    printing: Printing, custom_back: Optional[str] = None
) -> Optional[str]:
    """Back artwork for dual-faced layouts only; None for every other printing."""
    if not printing.is_dual_faced:
        return None
    if custom_back:
        return custom_back
    return printing.back_image_uri


def is_placeholder(reference: Optional[str]) -> bool:
    """True when a reference is the local "no artwork" stand-in."""
    return reference == PLACEHOLDER_IMAGE
