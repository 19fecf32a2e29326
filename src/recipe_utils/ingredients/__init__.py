"""Ingredient models and quantity utilities."""

from .models import GroceryItem, GroceryList, Ingredient, IngredientCategory, PantryItem
from .quantity import (
    combine_quantities,
    format_ingredient,
    format_number,
    parse_number,
    scale_quantity,
)

__all__ = [
    "parse_number",
    "format_number",
    "combine_quantities",
    "scale_quantity",
    "format_ingredient",
    "Ingredient",
    "IngredientCategory",
    "PantryItem",
    "GroceryItem",
    "GroceryList",
]
