"""Pantry matching utilities.

Decides which recipe ingredients are covered by the pantry, scores recipes
by coverage and ranks them. All functions are pure and operate on the
snapshots passed in; callers must not mutate the pantry during a ranking.
"""

import dataclasses
import time
from typing import Iterable, List, Optional, Sequence

from recipe_utils.ingredients.models import Ingredient, PantryItem
from recipe_utils.recipes.models import Recipe

# --- Constants ---

# Modifiers ignored when comparing ingredient names word by word
COMMON_MODIFIERS = frozenset(
    {
        "fresh",
        "large",
        "small",
        "medium",
        "organic",
        "chopped",
        "diced",
        "minced",
        "sliced",
        "crushed",
        "ground",
        "whole",
        "dried",
        "frozen",
        "canned",
        "raw",
        "cooked",
        "boneless",
        "skinless",
        "extra",
        "virgin",
        "light",
        "dark",
        "sweet",
        "unsalted",
        "salted",
        "plain",
        "flavored",
        "ripe",
        "unripe",
    }
)

# Words this short never count as shared keywords
MIN_KEYWORD_LENGTH = 3

EXPIRING_SOON_MS = 3 * 24 * 60 * 60 * 1000


@dataclasses.dataclass
class RecipeMatch:
    recipe: Recipe
    match_percentage: int
    missing_count: int


# --- Functions ---


def _now_ms() -> int:
    return int(time.time() * 1000)


def _keywords(name: str) -> set:
    return {
        word
        for word in name.split()
        if len(word) >= MIN_KEYWORD_LENGTH and word not in COMMON_MODIFIERS
    }


def matches_ingredient(pantry_name: str, ingredient_name: str) -> bool:
    """Check whether a pantry item name matches an ingredient name.

    Tries, in order: exact match, substring match in either direction, and
    a shared keyword once modifiers and very short words are dropped.

    Examples:
        >>> matches_ingredient("tomatoes", "fresh tomatoes")
        True
        >>> matches_ingredient("chicken", "boneless skinless chicken breast")
        True
        >>> matches_ingredient("salt", "pepper")
        False
    """
    pantry = pantry_name.lower().strip()
    ingredient = ingredient_name.lower().strip()

    if pantry == ingredient:
        return True

    if pantry in ingredient or ingredient in pantry:
        return True

    return not _keywords(pantry).isdisjoint(_keywords(ingredient))


def _in_pantry(ingredient: Ingredient, pantry_items: Sequence[PantryItem]) -> bool:
    return any(matches_ingredient(item.name, ingredient.name) for item in pantry_items)


def is_expired(item: PantryItem, now: Optional[int] = None) -> bool:
    """Check if a pantry item's expiration date has passed."""
    if item.expiration_date is None:
        return False
    if now is None:
        now = _now_ms()
    return item.expiration_date < now


def is_expiring_soon(item: PantryItem, now: Optional[int] = None) -> bool:
    """Check if a pantry item expires within the next three days."""
    if item.expiration_date is None:
        return False
    if now is None:
        now = _now_ms()
    if is_expired(item, now):
        return False
    return item.expiration_date <= now + EXPIRING_SOON_MS


def get_expired(
    pantry_items: Iterable[PantryItem], now: Optional[int] = None
) -> List[PantryItem]:
    if now is None:
        now = _now_ms()
    return [item for item in pantry_items if is_expired(item, now)]


def get_expiring_soon(
    pantry_items: Iterable[PantryItem], now: Optional[int] = None
) -> List[PantryItem]:
    if now is None:
        now = _now_ms()
    return [item for item in pantry_items if is_expiring_soon(item, now)]


def calculate_recipe_match(recipe: Recipe, pantry_items: Sequence[PantryItem]) -> int:
    """Calculate the percentage of required ingredients found in the pantry.

    Optional ingredients don't count. A recipe with no ingredients scores 0;
    a recipe whose ingredients are all optional scores 100.

    Args:
        recipe: Recipe with its ingredient list.
        pantry_items: Current pantry snapshot.

    Returns:
        Integer percentage between 0 and 100, rounded half up.
    """
    if not recipe.ingredients:
        return 0

    required = [ingredient for ingredient in recipe.ingredients if not ingredient.is_optional]
    if not required:
        return 100

    matched_count = sum(1 for ingredient in required if _in_pantry(ingredient, pantry_items))
    # round() rounds half to even; add 0.5 and floor instead
    return int(matched_count * 100 / len(required) + 0.5)


def get_missing_ingredients(
    recipe: Recipe, pantry_items: Sequence[PantryItem]
) -> List[Ingredient]:
    """Return required ingredients that have no match in the pantry."""
    return [
        ingredient
        for ingredient in recipe.ingredients
        if not ingredient.is_optional and not _in_pantry(ingredient, pantry_items)
    ]


def get_matched_ingredients(
    recipe: Recipe, pantry_items: Sequence[PantryItem]
) -> List[Ingredient]:
    """Return all ingredients, optional ones included, found in the pantry."""
    return [
        ingredient
        for ingredient in recipe.ingredients
        if _in_pantry(ingredient, pantry_items)
    ]


def rank_recipes_by_pantry(
    recipes: Iterable[Recipe], pantry_items: Sequence[PantryItem]
) -> List[RecipeMatch]:
    """Rank recipes by how much of each can be cooked from the pantry.

    Sorted by match percentage descending, then by missing ingredient count
    ascending. Recipes that tie on both keep their input order.
    """
    matches = [
        RecipeMatch(
            recipe=recipe,
            match_percentage=calculate_recipe_match(recipe, pantry_items),
            missing_count=len(get_missing_ingredients(recipe, pantry_items)),
        )
        for recipe in recipes
    ]
    return sorted(matches, key=lambda match: (-match.match_percentage, match.missing_count))
