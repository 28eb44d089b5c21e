"""Domain models for the ingredient pantry."""

from dataclasses import dataclass
from enum import Enum
from uuid import UUID


class IngredientCategory(str, Enum):
    """Fixed set of pantry categories."""

    PROTEINS = "proteins"
    GRAINS = "grains"
    VEGETABLES = "vegetables"
    FRUITS = "fruits"
    DAIRY = "dairy"
    FATS = "fats"
    LEGUMES = "legumes"
    NUTS = "nuts"
    CONDIMENTS = "condiments"
    BEVERAGES = "beverages"


@dataclass(frozen=True)
class Ingredient:
    """Pantry ingredient with per-serving macros."""

    id: UUID
    user_id: UUID | None
    name: str
    emoji: str | None
    category: IngredientCategory
    serving_size: float
    serving_unit: str
    calories: float
    protein: float
    carbs: float
    fat: float
    is_default: bool = False
