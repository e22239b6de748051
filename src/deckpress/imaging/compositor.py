"""Pixel operations behind a small interface.

The pipeline only ever needs four things from an imaging backend: decode,
rotate a quarter turn clockwise, stack two faces into one card, and encode
as JPEG. PillowCompositor is the shipped implementation; tests can pass a
fake that records calls.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from io import BytesIO
from typing import Any

from PIL import Image, UnidentifiedImageError

from deckpress.errors import FetchError


@dataclass(frozen=True)
class PixelImage:
    """A decoded bitmap and its size in pixels."""

    bitmap: Any
    width: int
    height: int

    @classmethod
    def wrap(cls, bitmap: Image.Image) -> "PixelImage":
        return cls(bitmap=bitmap, width=bitmap.width, height=bitmap.height)

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)


class ImageCompositor(ABC):
    """Backend-neutral image operations used by the export pipeline."""

    @abstractmethod
    def load(self, data: bytes) -> PixelImage:
        """Decode encoded image bytes. Raises FetchError when undecodable."""

    @abstractmethod
    def rotate90(self, image: PixelImage) -> PixelImage:
        """Rotate a quarter turn clockwise (W x H becomes H x W)."""

    @abstractmethod
    def stack(self, front: PixelImage, back: PixelImage) -> PixelImage:
        """Combine two faces into one card-sized image, front on top."""

    @abstractmethod
    def encode(self, image: PixelImage, quality: int) -> bytes:
        """Encode as JPEG at the given quality (1-100)."""


class PillowCompositor(ImageCompositor):
    """ImageCompositor backed by Pillow."""

    background = (255, 255, 255)

    def load(self, data: bytes) -> PixelImage:
        try:
            with Image.open(BytesIO(data)) as image:
                image.load()
                bitmap = image.convert("RGB")
        except (UnidentifiedImageError, OSError) as error:
            raise FetchError(f"Could not decode image: {error}") from error
        return PixelImage.wrap(bitmap)

    def rotate90(self, image: PixelImage) -> PixelImage:
        # ROTATE_270 is counter-clockwise 270, i.e. a clockwise quarter turn
        return PixelImage.wrap(image.bitmap.transpose(Image.Transpose.ROTATE_270))

    def stack(self, front: PixelImage, back: PixelImage) -> PixelImage:
        width, height = front.size
        half = height // 2

        canvas = Image.new("RGB", (width, height), self.background)
        for offset, face in ((0, front), (half, back)):
            # Scale to half x width so the quarter turn yields a width x half strip
            scaled = face.bitmap.resize((half, width), Image.Resampling.LANCZOS)
            strip = scaled.transpose(Image.Transpose.ROTATE_270)
            canvas.paste(strip, (0, offset))

        return PixelImage.wrap(canvas)

    def encode(self, image: PixelImage, quality: int) -> bytes:
        buffer = BytesIO()
        bitmap = image.bitmap
        if bitmap.mode != "RGB":
            bitmap = bitmap.convert("RGB")
        bitmap.save(buffer, format="JPEG", quality=quality)
        return buffer.getvalue()
