"""Image acquisition and pixel compositing."""

from .acquisition import ImageAcquirer
from .compositor import ImageCompositor, PillowCompositor, PixelImage

__all__ = [
    "ImageAcquirer",
    "ImageCompositor",
    "PillowCompositor",
    "PixelImage",
]
