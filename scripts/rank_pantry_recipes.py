#!/usr/bin/env python3
"""
Ranks stored recipes by how much of each can be made from the stored pantry.

Usage:
    python rank_pantry_recipes.py --db data/recipes.db
    python rank_pantry_recipes.py --db data/recipes.db --csv ranking.csv --min-match 50
"""

import argparse
import logging
from typing import List

import pandas as pd

from recipe_utils.database import RecipeStore
from recipe_utils.pantry import (
    RecipeMatch,
    get_expiring_soon,
    get_missing_ingredients,
    rank_recipes_by_pantry,
)

logger = logging.getLogger(__name__)


def ranking_dataframe(matches: List[RecipeMatch], pantry_items) -> pd.DataFrame:
    """Build a DataFrame of ranked recipes.

    Columns: title, match_percentage, missing_count, missing_ingredients
    """
    rows = [
        {
            "title": match.recipe.title,
            "match_percentage": match.match_percentage,
            "missing_count": match.missing_count,
            "missing_ingredients": ", ".join(
                ingredient.name
                for ingredient in get_missing_ingredients(match.recipe, pantry_items)
            ),
        }
        for match in matches
    ]
    return pd.DataFrame(
        rows,
        columns=["title", "match_percentage", "missing_count", "missing_ingredients"],
    )


def main():
    """Main function."""
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
    )

    parser = argparse.ArgumentParser(description="Rank recipes by pantry coverage")
    parser.add_argument(
        "--db",
        type=str,
        default="data/recipes.db",
        help="Path to the SQLite database (default: data/recipes.db)",
    )
    parser.add_argument("--csv", type=str, help="Write the ranking to this CSV file")
    parser.add_argument(
        "--min-match",
        type=int,
        default=0,
        help="Only show recipes with at least this match percentage",
    )
    args = parser.parse_args()

    with RecipeStore(args.db) as store:
        recipes = store.list_recipes()
        pantry_items = store.list_pantry_items()

    logger.info(f"Ranking {len(recipes)} recipes against {len(pantry_items)} pantry items")
    matches = [
        match
        for match in rank_recipes_by_pantry(recipes, pantry_items)
        if match.match_percentage >= args.min_match
    ]
    df = ranking_dataframe(matches, pantry_items)

    if df.empty:
        print("No recipes match the pantry")
    else:
        print(df.to_string(index=False))

    expiring = get_expiring_soon(pantry_items)
    if expiring:
        print("\nUse soon: " + ", ".join(item.name for item in expiring))

    if args.csv:
        df.to_csv(args.csv, index=False)
        print(f"\nWrote ranking to {args.csv}")


if __name__ == "__main__":
    main()
