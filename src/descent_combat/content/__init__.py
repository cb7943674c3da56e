"""Content catalog and validation."""

from .catalog import Catalog, CatalogError
from .validators import CatalogValidator, ValidationError, ValidationResult

__all__ = [
    "Catalog",
    "CatalogError",
    "CatalogValidator",
    "ValidationError",
    "ValidationResult",
]
