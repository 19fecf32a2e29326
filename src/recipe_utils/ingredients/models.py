import dataclasses
import enum
from typing import List, Optional


class IngredientCategory(enum.Enum):
    PRODUCE = "Produce"
    MEAT_SEAFOOD = "Meat & Seafood"
    DAIRY_EGGS = "Dairy & Eggs"
    BAKERY = "Bakery"
    PANTRY = "Pantry"
    FROZEN = "Frozen"
    BEVERAGES = "Beverages"
    CONDIMENTS = "Condiments & Sauces"
    SPICES = "Spices & Seasonings"
    OTHER = "Other"

    @classmethod
    def from_label(cls, label: Optional[str]) -> "IngredientCategory":
        """Map a display label or an extraction label ("meat", "spices") to a category."""
        if not label:
            return cls.OTHER
        key = label.strip().lower()
        for category in cls:
            if category.value.lower() == key:
                return category
        return _SHORT_LABELS.get(key, cls.OTHER)


# Lowercase labels returned by the extraction endpoint
_SHORT_LABELS = {
    "produce": IngredientCategory.PRODUCE,
    "meat": IngredientCategory.MEAT_SEAFOOD,
    "seafood": IngredientCategory.MEAT_SEAFOOD,
    "dairy": IngredientCategory.DAIRY_EGGS,
    "eggs": IngredientCategory.DAIRY_EGGS,
    "bakery": IngredientCategory.BAKERY,
    "pantry": IngredientCategory.PANTRY,
    "frozen": IngredientCategory.FROZEN,
    "beverages": IngredientCategory.BEVERAGES,
    "condiments": IngredientCategory.CONDIMENTS,
    "spices": IngredientCategory.SPICES,
    "other": IngredientCategory.OTHER,
}


@dataclasses.dataclass
class Ingredient:
    name: str
    quantity: Optional[str] = None
    unit: Optional[str] = None
    category: IngredientCategory = IngredientCategory.OTHER
    is_optional: bool = False
    id: Optional[str] = None
    recipe_id: Optional[str] = None


@dataclasses.dataclass
class PantryItem:
    name: str
    category: IngredientCategory = IngredientCategory.OTHER
    quantity: Optional[str] = None
    unit: Optional[str] = None
    expiration_date: Optional[int] = None  # epoch millis
    date_added: Optional[int] = None  # epoch millis
    notes: Optional[str] = None
    id: Optional[str] = None


@dataclasses.dataclass
class GroceryItem:
    name: str
    quantity: Optional[str] = None
    unit: Optional[str] = None
    category: IngredientCategory = IngredientCategory.OTHER
    is_checked: bool = False
    source_recipe_ids: List[str] = dataclasses.field(default_factory=list)
    id: Optional[str] = None
    grocery_list_id: Optional[str] = None


@dataclasses.dataclass
class GroceryList:
    name: str
    items: List[GroceryItem] = dataclasses.field(default_factory=list)
    date_created: Optional[int] = None  # epoch millis
    id: Optional[str] = None
