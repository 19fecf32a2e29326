"""SQLite persistence for recipes, pantry items, grocery lists and meal plans."""

from .schema import DDL, create_schema
from .store import RecipeStore, StorageError
from .utils import get_connection, transaction

__all__ = [
    "DDL",
    "create_schema",
    "get_connection",
    "transaction",
    "RecipeStore",
    "StorageError",
]
