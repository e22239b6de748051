"""Card catalog access."""

from .client import CatalogClient
from .sets import SetCatalog

__all__ = ["CatalogClient", "SetCatalog"]
