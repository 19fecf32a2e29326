"""Pantry matching and recipe ranking."""

from .matching import (
    RecipeMatch,
    calculate_recipe_match,
    get_expired,
    get_expiring_soon,
    get_matched_ingredients,
    get_missing_ingredients,
    is_expired,
    is_expiring_soon,
    matches_ingredient,
    rank_recipes_by_pantry,
)

__all__ = [
    "RecipeMatch",
    "matches_ingredient",
    "is_expired",
    "is_expiring_soon",
    "get_expired",
    "get_expiring_soon",
    "calculate_recipe_match",
    "get_missing_ingredients",
    "get_matched_ingredients",
    "rank_recipes_by_pantry",
]
