"""Recipe Utils - Quantity normalization, pantry matching and recipe extraction."""

__version__ = "0.1.0"

from . import database, extraction, ingredients, pantry, recipes

__all__ = ["database", "extraction", "ingredients", "pantry", "recipes"]
