"""Recipe models, grocery consolidation and serving scaling."""

from .grocery import consolidate_ingredients, merge_grocery_item
from .models import ExtractedIngredient, ExtractedRecipe, MealPlan, MealType, Recipe
from .scaling import scale_ingredients, scale_recipe

__all__ = [
    "Recipe",
    "MealPlan",
    "MealType",
    "ExtractedRecipe",
    "ExtractedIngredient",
    "consolidate_ingredients",
    "merge_grocery_item",
    "scale_ingredients",
    "scale_recipe",
]
