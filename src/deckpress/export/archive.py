"""ZIP archive of individual card images.

Entry names are derived from the card name plus ordinals so two different
images never share a name. ArchiveBuilder still guards against collisions
(e.g. two names that snake-case identically) by suffixing a counter.
"""

import zipfile
from io import BytesIO
from typing import Iterable, Optional

from deckpress.constants import IMAGE_EXTENSION, TOKEN_PREFIX
from deckpress.core.logging import get_logger
from deckpress.pdf.utils import to_snake_case

logger = get_logger(__name__)


def file_name(
    name: str,
    is_token: bool = False,
    version_ordinal: Optional[int] = None,
    is_back_face: bool = False,
    copy_ordinal: Optional[int] = None,
) -> str:
    """Archive entry name for one image.

    Examples:
        >>> file_name("Lightning Bolt")
        'lightning_bolt.jpg'
        >>> file_name("Goblin", is_token=True, version_ordinal=2)
        '_token_goblin_version_2.jpg'
        >>> file_name("Delver of Secrets", copy_ordinal=3, is_back_face=True)
        'delver_of_secrets_copy_3_back.jpg'
    """
    stem = to_snake_case(name)
    if is_token:
        stem = f"{TOKEN_PREFIX}{stem}"
    if version_ordinal is not None:
        stem = f"{stem}_version_{version_ordinal}"
    if copy_ordinal is not None:
        stem = f"{stem}_copy_{copy_ordinal}"
    if is_back_face:
        stem = f"{stem}_back"
    return f"{stem}{IMAGE_EXTENSION}"


class ArchiveBuilder:
    """Accumulate named images and emit a deflated ZIP."""

    def __init__(self):
        self._entries: dict[str, bytes] = {}

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def names(self) -> list[str]:
        return list(self._entries)

    def _unique(self, name: str) -> str:
        if name not in self._entries:
            return name
        stem, dot, extension = name.rpartition(".")
        if not dot:
            stem, extension = name, ""
        counter = 2
        while True:
            candidate = f"{stem}_{counter}{dot}{extension}"
            if candidate not in self._entries:
                logger.warning("Archive entry {} already exists, storing as {}", name, candidate)
                return candidate
            counter += 1

    def add(self, name: str, data: bytes) -> str:
        """Add an entry and return the name it was stored under."""
        stored = self._unique(name)
        self._entries[stored] = data
        return stored

    def build(self) -> bytes:
        buffer = BytesIO()
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for name, data in self._entries.items():
                archive.writestr(name, data)
        return buffer.getvalue()


def build_archive(named_images: Iterable[tuple[str, bytes]]) -> bytes:
    builder = ArchiveBuilder()
    for name, data in named_images:
        builder.add(name, data)
    return builder.build()
