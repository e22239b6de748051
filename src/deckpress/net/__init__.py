"""Network utilities for HTTP requests."""

from .network import (
    build_url,
    fetch_bytes,
    fetch_json,
    with_cache_buster,
)

__all__ = [
    "build_url",
    "fetch_bytes",
    "fetch_json",
    "with_cache_buster",
]
