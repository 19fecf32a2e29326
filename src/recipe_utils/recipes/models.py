"""Recipe, meal plan and extraction result models."""

import dataclasses
import enum
from typing import Any, Dict, List, Optional

from recipe_utils.ingredients.models import Ingredient, IngredientCategory


class MealType(enum.Enum):
    BREAKFAST = "Breakfast"
    LUNCH = "Lunch"
    DINNER = "Dinner"
    SNACK = "Snack"


@dataclasses.dataclass
class Recipe:
    """A stored recipe together with its ingredient list."""

    title: str
    ingredients: List[Ingredient] = dataclasses.field(default_factory=list)
    instructions: List[str] = dataclasses.field(default_factory=list)
    source_url: Optional[str] = None
    source_type: str = "manual"
    image_url: Optional[str] = None
    servings: Optional[int] = None
    prep_time: Optional[str] = None
    cook_time: Optional[str] = None
    notes: Optional[str] = None
    is_in_queue: bool = False
    date_added: Optional[int] = None  # epoch millis
    date_cooked: Optional[int] = None  # epoch millis
    id: Optional[str] = None


@dataclasses.dataclass
class MealPlan:
    date: int  # epoch millis
    meal_type: MealType
    recipe_id: Optional[str] = None
    recipe_name: Optional[str] = None
    notes: Optional[str] = None
    is_completed: bool = False
    reminder: bool = False
    reminder_time: Optional[int] = None  # epoch millis
    id: Optional[str] = None


@dataclasses.dataclass
class ExtractedIngredient:
    name: str
    quantity: Optional[str] = None
    unit: Optional[str] = None
    category: IngredientCategory = IngredientCategory.OTHER

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExtractedIngredient":
        quantity = data.get("quantity")
        return cls(
            name=str(data.get("name") or "").strip(),
            quantity=str(quantity) if quantity is not None else None,
            unit=data.get("unit") or None,
            category=IngredientCategory.from_label(data.get("category")),
        )


@dataclasses.dataclass
class ExtractedRecipe:
    """Structured recipe returned by the extraction endpoint.

    Field names on the wire are camelCase (``prepTime``, ``imageURL``);
    ``from_dict`` maps them onto this dataclass.
    """

    title: str
    source_url: str
    source_type: str = "url"
    servings: Optional[int] = None
    prep_time: Optional[str] = None
    cook_time: Optional[str] = None
    ingredients: List[ExtractedIngredient] = dataclasses.field(default_factory=list)
    instructions: List[str] = dataclasses.field(default_factory=list)
    image_url: Optional[str] = None

    @classmethod
    def from_dict(
        cls, data: Dict[str, Any], fallback_url: str = ""
    ) -> "ExtractedRecipe":
        servings = data.get("servings")
        try:
            servings = int(servings) if servings is not None else None
        except (TypeError, ValueError):
            servings = None

        ingredients = [
            ExtractedIngredient.from_dict(item)
            for item in data.get("ingredients") or []
            if isinstance(item, dict) and item.get("name")
        ]
        steps = data.get("instructions") or []
        if isinstance(steps, str):
            steps = [steps]
        instructions = [str(step) for step in steps if str(step).strip()]

        return cls(
            title=str(data.get("title") or "Untitled Recipe"),
            source_url=data.get("sourceURL") or fallback_url,
            source_type=data.get("sourceType") or "url",
            servings=servings,
            prep_time=data.get("prepTime"),
            cook_time=data.get("cookTime"),
            ingredients=ingredients,
            instructions=instructions,
            image_url=data.get("imageURL"),
        )

    def to_recipe(self) -> Recipe:
        """Convert to a Recipe ready to be stored."""
        return Recipe(
            title=self.title,
            ingredients=[
                Ingredient(
                    name=item.name,
                    quantity=item.quantity,
                    unit=item.unit,
                    category=item.category,
                )
                for item in self.ingredients
            ],
            instructions=list(self.instructions),
            source_url=self.source_url,
            source_type=self.source_type,
            image_url=self.image_url,
            servings=self.servings,
            prep_time=self.prep_time,
            cook_time=self.cook_time,
        )
