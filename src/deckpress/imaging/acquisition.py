"""Turn an image reference into pixels.

A reference is one of:
- an http(s) URL (fetched with a fresh cache-busting token every call)
- a ``data:`` URL holding a user upload (decoded in memory)
- a local file path

The placeholder reference never yields pixels: asking for it is a failure
the caller records like any other.
"""

import base64
import binascii
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import unquote_to_bytes

import requests

from deckpress.cancellation import CancelToken, check
from deckpress.core.logging import get_logger
from deckpress.deck.resolver import is_placeholder
from deckpress.errors import FetchError
from deckpress.imaging.compositor import ImageCompositor, PillowCompositor, PixelImage
from deckpress.net.network import fetch_bytes

logger = get_logger(__name__)

Fetcher = Callable[[str], bytes]


def decode_data_url(reference: str) -> bytes:
    """Decode an RFC 2397 data URL.

    Examples:
        >>> decode_data_url("data:text/plain;base64,aGk=")
        b'hi'
    """
    header, sep, payload = reference.partition(",")
    if not sep:
        raise FetchError("Malformed data URL: missing ','")
    if header.endswith(";base64"):
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as error:
            raise FetchError(f"Malformed data URL: {error}") from error
    return unquote_to_bytes(payload)


class ImageAcquirer:
    """Resolve references to PixelImages and composite dual-faced cards.

    Args:
        compositor: Imaging backend (PillowCompositor by default)
        session: Shared requests session for remote images
        timeout: Per-request timeout in seconds (settings default if None)
        fetcher: Override for remote downloads, mainly for tests
    """

    def __init__(
        self,
        compositor: Optional[ImageCompositor] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        fetcher: Optional[Fetcher] = None,
    ):
        self.compositor = compositor or PillowCompositor()
        self.session = session
        self.timeout = timeout
        self._fetcher = fetcher

    def _download(self, url: str) -> bytes:
        if self._fetcher is not None:
            return self._fetcher(url)
        return fetch_bytes(url, session=self.session, timeout=self.timeout, cache_bust=True)

    def read_bytes(self, reference: str) -> bytes:
        """Raw encoded bytes behind a reference.

        Raises:
            FetchError: For the placeholder, unreadable files and failed downloads
        """
        if not reference or is_placeholder(reference):
            raise FetchError("No artwork available (placeholder image)")
        if reference.startswith(("http://", "https://")):
            return self._download(reference)
        if reference.startswith("data:"):
            return decode_data_url(reference)
        try:
            return Path(reference).expanduser().read_bytes()
        except OSError as error:
            raise FetchError(f"Could not read image file {reference}: {error}") from error

    def acquire(
        self, reference: str, rotate: bool = False, cancel: Optional[CancelToken] = None
    ) -> PixelImage:
        """Load one image, optionally turned a quarter clockwise."""
        check(cancel)
        image = self.compositor.load(self.read_bytes(reference))
        check(cancel)
        if rotate:
            image = self.compositor.rotate90(image)
        return image

    def composite_dual_face(
        self,
        front: str,
        back: str,
        rotate: bool = False,
        cancel: Optional[CancelToken] = None,
    ) -> PixelImage:
        """Stack both faces of a card into one image.

        Both faces are fetched concurrently; if either fails the whole unit
        fails. With rotate=True the stacked W x H card is turned to H x W.
        """
        check(cancel)
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="face") as pool:
            front_future = pool.submit(self.acquire, front, False, cancel)
            back_future = pool.submit(self.acquire, back, False, cancel)
            front_image = front_future.result()
            back_image = back_future.result()

        logger.debug("Compositing {} + {}", front, back)
        composite = self.compositor.stack(front_image, back_image)
        if rotate:
            composite = self.compositor.rotate90(composite)
        return composite

    def encode(self, image: PixelImage, quality: int) -> bytes:
        return self.compositor.encode(image, quality)
