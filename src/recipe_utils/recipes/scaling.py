import dataclasses
from typing import List

from recipe_utils.ingredients.models import Ingredient
from recipe_utils.ingredients.quantity import scale_quantity
from recipe_utils.recipes.models import Recipe


def scale_ingredients(ingredients: List[Ingredient], multiplier: float) -> List[Ingredient]:
    """Return copies of the ingredients with numeric quantities scaled."""
    return [
        dataclasses.replace(
            ingredient,
            quantity=scale_quantity(ingredient.quantity, multiplier)
            if ingredient.quantity
            else ingredient.quantity,
        )
        for ingredient in ingredients
    ]


def scale_recipe(recipe: Recipe, servings: int) -> Recipe:
    """Scale a recipe to a new serving count.

    Free-text quantities ("a pinch") are left untouched. A recipe without a
    serving count, or a non-positive target, comes back unchanged.

    Args:
        recipe: Recipe to scale.
        servings: Desired number of servings.

    Returns:
        A new Recipe; the original is not modified.
    """
    if not recipe.servings or recipe.servings <= 0 or servings <= 0:
        return recipe
    if servings == recipe.servings:
        return recipe

    multiplier = servings / recipe.servings
    return dataclasses.replace(
        recipe,
        servings=servings,
        ingredients=scale_ingredients(recipe.ingredients, multiplier),
    )
