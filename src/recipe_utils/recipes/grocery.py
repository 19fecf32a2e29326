"""Grocery list consolidation."""

import logging
from typing import Dict, Iterable, List, Optional

from recipe_utils.ingredients.models import GroceryItem
from recipe_utils.ingredients.quantity import combine_quantities
from recipe_utils.recipes.models import Recipe

logger = logging.getLogger(__name__)


def _grocery_key(name: str) -> str:
    return name.lower().strip()


def merge_grocery_item(
    item: GroceryItem, quantity: Optional[str], recipe_id: Optional[str]
) -> GroceryItem:
    """Merge one more contribution of the same ingredient into a grocery item.

    Quantities are summed when both are numeric and listed side by side
    otherwise ("a pinch + a dash"). A missing quantity on either side leaves
    the item's quantity as it was.
    """
    if recipe_id is not None:
        item.source_recipe_ids.append(recipe_id)
    if quantity and item.quantity:
        item.quantity = combine_quantities(item.quantity, quantity)
    return item


def consolidate_ingredients(recipes: Iterable[Recipe]) -> List[GroceryItem]:
    """Build a grocery list from recipes, merging duplicate ingredients.

    Ingredients are keyed by their lowercased, trimmed name. The first
    occurrence supplies the display name, unit and category.

    Args:
        recipes: Recipes whose ingredients should be bought.

    Returns:
        Grocery items in first-seen order.
    """
    consolidated: Dict[str, GroceryItem] = {}

    for recipe in recipes:
        for ingredient in recipe.ingredients:
            key = _grocery_key(ingredient.name)
            if not key:
                continue

            if key in consolidated:
                merge_grocery_item(consolidated[key], ingredient.quantity, recipe.id)
            else:
                consolidated[key] = GroceryItem(
                    name=ingredient.name,
                    quantity=ingredient.quantity,
                    unit=ingredient.unit,
                    category=ingredient.category,
                    source_recipe_ids=[recipe.id] if recipe.id is not None else [],
                )

    logger.debug(f"Consolidated ingredients into {len(consolidated)} grocery items")
    return list(consolidated.values())
