"""SQLite-backed store for recipes, pantry items, grocery lists and meal plans."""

import json
import logging
import sqlite3
import time
import uuid
from functools import wraps
from typing import Any, Callable, Dict, Iterable, List, Optional

from recipe_utils.ingredients.models import (
    GroceryItem,
    GroceryList,
    Ingredient,
    IngredientCategory,
    PantryItem,
)
from recipe_utils.recipes.grocery import consolidate_ingredients
from recipe_utils.recipes.models import ExtractedRecipe, MealPlan, MealType, Recipe

from .schema import create_schema
from .utils import get_connection, transaction

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """A store operation failed."""


def _storage_errors(func: Callable) -> Callable:
    """Re-raise sqlite3 errors from a store method as StorageError."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except sqlite3.Error as e:
            raise StorageError(f"{func.__name__} failed: {e}") from e

    return wrapper


def _now_ms() -> int:
    return int(time.time() * 1000)


def _new_id() -> str:
    return str(uuid.uuid4())


def _category(value: Optional[str]) -> IngredientCategory:
    try:
        return IngredientCategory(value)
    except ValueError:
        return IngredientCategory.from_label(value)


class RecipeStore:
    """List/insert/update/delete access to the recipe database.

    Every write is committed before the method returns, so a read on the
    same store always observes it. Ids are UUID strings assigned on insert
    and written back onto the record passed in.

    Args:
        db_path: Path to the SQLite database file, or ":memory:"
    """

    def __init__(self, db_path: str = ":memory:"):
        self.db_path = db_path
        self.conn = get_connection(db_path)
        create_schema(self.conn)

    def close(self) -> None:
        self.conn.close()

    def __enter__(self) -> "RecipeStore":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # --- Generic row helpers ---

    def _insert_row(self, cur: sqlite3.Cursor, table: str, row: Dict[str, Any]) -> None:
        columns = ", ".join(row)
        placeholders = ", ".join("?" for _ in row)
        cur.execute(
            f"INSERT INTO {table}({columns}) VALUES ({placeholders})",
            tuple(row.values()),
        )

    def _update_row(
        self, cur: sqlite3.Cursor, table: str, row_id: str, row: Dict[str, Any]
    ) -> None:
        assignments = ", ".join(f"{column} = ?" for column in row)
        cur.execute(
            f"UPDATE {table} SET {assignments} WHERE id = ?",
            (*row.values(), row_id),
        )
        if cur.rowcount == 0:
            raise StorageError(f"No {table} with id {row_id}")

    def _delete_row(self, table: str, row_id: str) -> None:
        with transaction(self.conn) as cur:
            cur.execute(f"DELETE FROM {table} WHERE id = ?", (row_id,))
        logger.debug(f"Deleted {table} {row_id}")

    # --- Recipes ---

    @staticmethod
    def _recipe_row(recipe: Recipe) -> Dict[str, Any]:
        return {
            "title": recipe.title,
            "source_url": recipe.source_url,
            "source_type": recipe.source_type,
            "image_url": recipe.image_url,
            "servings": recipe.servings,
            "prep_time": recipe.prep_time,
            "cook_time": recipe.cook_time,
            "instructions": json.dumps(recipe.instructions),
            "notes": recipe.notes,
            "is_in_queue": int(recipe.is_in_queue),
            "date_added": recipe.date_added,
            "date_cooked": recipe.date_cooked,
        }

    def _write_ingredients(self, cur: sqlite3.Cursor, recipe: Recipe) -> None:
        cur.execute("DELETE FROM ingredient WHERE recipe_id = ?", (recipe.id,))
        for position, ingredient in enumerate(recipe.ingredients):
            ingredient.id = ingredient.id or _new_id()
            ingredient.recipe_id = recipe.id
            self._insert_row(
                cur,
                "ingredient",
                {
                    "id": ingredient.id,
                    "recipe_id": recipe.id,
                    "position": position,
                    "name": ingredient.name,
                    "quantity": ingredient.quantity,
                    "unit": ingredient.unit,
                    "category": ingredient.category.value,
                    "is_optional": int(ingredient.is_optional),
                },
            )

    @_storage_errors
    def insert_recipe(self, recipe: Recipe) -> str:
        recipe.id = recipe.id or _new_id()
        if recipe.date_added is None:
            recipe.date_added = _now_ms()
        with transaction(self.conn) as cur:
            self._insert_row(cur, "recipe", {"id": recipe.id, **self._recipe_row(recipe)})
            self._write_ingredients(cur, recipe)
        logger.debug(f"Inserted recipe {recipe.id} ({recipe.title})")
        return recipe.id

    @_storage_errors
    def update_recipe(self, recipe: Recipe) -> None:
        """Replace a stored recipe, including its ingredient list."""
        if recipe.id is None:
            raise StorageError("Cannot update a recipe without an id")
        with transaction(self.conn) as cur:
            self._update_row(cur, "recipe", recipe.id, self._recipe_row(recipe))
            self._write_ingredients(cur, recipe)

    @_storage_errors
    def delete_recipe(self, recipe_id: str) -> None:
        self._delete_row("recipe", recipe_id)

    def _recipe_from_row(self, row: sqlite3.Row) -> Recipe:
        ingredient_rows = self.conn.execute(
            "SELECT * FROM ingredient WHERE recipe_id = ? ORDER BY position",
            (row["id"],),
        ).fetchall()
        return Recipe(
            id=row["id"],
            title=row["title"],
            ingredients=[
                Ingredient(
                    id=ing["id"],
                    recipe_id=ing["recipe_id"],
                    name=ing["name"],
                    quantity=ing["quantity"],
                    unit=ing["unit"],
                    category=_category(ing["category"]),
                    is_optional=bool(ing["is_optional"]),
                )
                for ing in ingredient_rows
            ],
            instructions=json.loads(row["instructions"] or "[]"),
            source_url=row["source_url"],
            source_type=row["source_type"],
            image_url=row["image_url"],
            servings=row["servings"],
            prep_time=row["prep_time"],
            cook_time=row["cook_time"],
            notes=row["notes"],
            is_in_queue=bool(row["is_in_queue"]),
            date_added=row["date_added"],
            date_cooked=row["date_cooked"],
        )

    @_storage_errors
    def get_recipe(self, recipe_id: str) -> Optional[Recipe]:
        row = self.conn.execute(
            "SELECT * FROM recipe WHERE id = ?", (recipe_id,)
        ).fetchone()
        return self._recipe_from_row(row) if row else None

    @_storage_errors
    def list_recipes(self) -> List[Recipe]:
        """Return all recipes with their ingredients, newest first."""
        rows = self.conn.execute(
            "SELECT * FROM recipe ORDER BY date_added DESC, title"
        ).fetchall()
        return [self._recipe_from_row(row) for row in rows]

    def save_extracted_recipe(self, extracted: ExtractedRecipe) -> str:
        """Store an extraction result as a new recipe and return its id."""
        return self.insert_recipe(extracted.to_recipe())

    # --- Pantry ---

    @staticmethod
    def _pantry_row(item: PantryItem) -> Dict[str, Any]:
        return {
            "name": item.name,
            "category": item.category.value,
            "quantity": item.quantity,
            "unit": item.unit,
            "date_added": item.date_added,
            "expiration_date": item.expiration_date,
            "notes": item.notes,
        }

    @_storage_errors
    def insert_pantry_item(self, item: PantryItem) -> str:
        item.id = item.id or _new_id()
        if item.date_added is None:
            item.date_added = _now_ms()
        with transaction(self.conn) as cur:
            self._insert_row(cur, "pantry_item", {"id": item.id, **self._pantry_row(item)})
        return item.id

    @_storage_errors
    def update_pantry_item(self, item: PantryItem) -> None:
        if item.id is None:
            raise StorageError("Cannot update a pantry item without an id")
        with transaction(self.conn) as cur:
            self._update_row(cur, "pantry_item", item.id, self._pantry_row(item))

    @_storage_errors
    def delete_pantry_item(self, item_id: str) -> None:
        self._delete_row("pantry_item", item_id)

    @_storage_errors
    def list_pantry_items(self) -> List[PantryItem]:
        rows = self.conn.execute("SELECT * FROM pantry_item ORDER BY name").fetchall()
        return [
            PantryItem(
                id=row["id"],
                name=row["name"],
                category=_category(row["category"]),
                quantity=row["quantity"],
                unit=row["unit"],
                date_added=row["date_added"],
                expiration_date=row["expiration_date"],
                notes=row["notes"],
            )
            for row in rows
        ]

    # --- Grocery lists ---

    @staticmethod
    def _grocery_item_row(item: GroceryItem) -> Dict[str, Any]:
        return {
            "grocery_list_id": item.grocery_list_id,
            "name": item.name,
            "quantity": item.quantity,
            "unit": item.unit,
            "category": item.category.value,
            "is_checked": int(item.is_checked),
            "source_recipe_ids": json.dumps(item.source_recipe_ids),
        }

    @_storage_errors
    def insert_grocery_list(self, grocery_list: GroceryList) -> str:
        grocery_list.id = grocery_list.id or _new_id()
        if grocery_list.date_created is None:
            grocery_list.date_created = _now_ms()
        with transaction(self.conn) as cur:
            self._insert_row(
                cur,
                "grocery_list",
                {
                    "id": grocery_list.id,
                    "name": grocery_list.name,
                    "date_created": grocery_list.date_created,
                },
            )
            for item in grocery_list.items:
                item.id = item.id or _new_id()
                item.grocery_list_id = grocery_list.id
                self._insert_row(
                    cur, "grocery_item", {"id": item.id, **self._grocery_item_row(item)}
                )
        logger.debug(
            f"Inserted grocery list {grocery_list.id} with {len(grocery_list.items)} items"
        )
        return grocery_list.id

    @_storage_errors
    def update_grocery_item(self, item: GroceryItem) -> None:
        if item.id is None:
            raise StorageError("Cannot update a grocery item without an id")
        with transaction(self.conn) as cur:
            self._update_row(cur, "grocery_item", item.id, self._grocery_item_row(item))

    @_storage_errors
    def delete_grocery_item(self, item_id: str) -> None:
        self._delete_row("grocery_item", item_id)

    @_storage_errors
    def delete_grocery_list(self, list_id: str) -> None:
        self._delete_row("grocery_list", list_id)

    @_storage_errors
    def list_grocery_lists(self) -> List[GroceryList]:
        """Return all grocery lists with their items, newest first."""
        lists = []
        for row in self.conn.execute(
            "SELECT * FROM grocery_list ORDER BY date_created DESC"
        ).fetchall():
            item_rows = self.conn.execute(
                "SELECT * FROM grocery_item WHERE grocery_list_id = ? ORDER BY rowid",
                (row["id"],),
            ).fetchall()
            items = [
                GroceryItem(
                    id=item["id"],
                    grocery_list_id=item["grocery_list_id"],
                    name=item["name"],
                    quantity=item["quantity"],
                    unit=item["unit"],
                    category=_category(item["category"]),
                    is_checked=bool(item["is_checked"]),
                    source_recipe_ids=json.loads(item["source_recipe_ids"] or "[]"),
                )
                for item in item_rows
            ]
            lists.append(
                GroceryList(
                    id=row["id"],
                    name=row["name"],
                    date_created=row["date_created"],
                    items=items,
                )
            )
        return lists

    def create_grocery_list_from_recipes(
        self, recipes: Iterable[Recipe], name: str = "Shopping List"
    ) -> GroceryList:
        """Consolidate the recipes' ingredients into a new stored grocery list."""
        grocery_list = GroceryList(name=name, items=consolidate_ingredients(recipes))
        self.insert_grocery_list(grocery_list)
        return grocery_list

    # --- Meal plans ---

    @staticmethod
    def _meal_plan_row(plan: MealPlan) -> Dict[str, Any]:
        return {
            "date": plan.date,
            "meal_type": plan.meal_type.value,
            "recipe_id": plan.recipe_id,
            "recipe_name": plan.recipe_name,
            "notes": plan.notes,
            "is_completed": int(plan.is_completed),
            "reminder": int(plan.reminder),
            "reminder_time": plan.reminder_time,
        }

    @_storage_errors
    def insert_meal_plan(self, plan: MealPlan) -> str:
        plan.id = plan.id or _new_id()
        with transaction(self.conn) as cur:
            self._insert_row(cur, "meal_plan", {"id": plan.id, **self._meal_plan_row(plan)})
        return plan.id

    @_storage_errors
    def update_meal_plan(self, plan: MealPlan) -> None:
        if plan.id is None:
            raise StorageError("Cannot update a meal plan without an id")
        with transaction(self.conn) as cur:
            self._update_row(cur, "meal_plan", plan.id, self._meal_plan_row(plan))

    @_storage_errors
    def delete_meal_plan(self, plan_id: str) -> None:
        self._delete_row("meal_plan", plan_id)

    @_storage_errors
    def list_meal_plans(self) -> List[MealPlan]:
        rows = self.conn.execute("SELECT * FROM meal_plan ORDER BY date").fetchall()
        return [
            MealPlan(
                id=row["id"],
                date=row["date"],
                meal_type=MealType(row["meal_type"]),
                recipe_id=row["recipe_id"],
                recipe_name=row["recipe_name"],
                notes=row["notes"],
                is_completed=bool(row["is_completed"]),
                reminder=bool(row["reminder"]),
                reminder_time=row["reminder_time"],
            )
            for row in rows
        ]
