"""Domain models for logged meals."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import UUID


class MealType(str, Enum):
    """Meal slot of a food entry."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


@dataclass(frozen=True)
class EntryIngredient:
    """Ingredient breakdown row of a quick-add entry."""

    ingredient_id: UUID
    quantity: float


@dataclass(frozen=True)
class FoodEntry:
    """Logged meal with macros snapshotted at logging time."""

    id: UUID
    user_id: UUID
    meal_type: MealType
    recipe_id: UUID | None
    servings: float
    calories: float
    protein: float
    carbs: float
    fat: float
    notes: str | None
    logged_at: datetime


@dataclass(frozen=True)
class FoodEntryDetail:
    """Food entry with its ingredient breakdown, if any."""

    entry: FoodEntry
    ingredients: list[EntryIngredient]


@dataclass(frozen=True)
class FoodEntryDraft:
    """Payload handed to persistence when a meal is logged."""

    meal_type: MealType
    recipe_id: UUID | None
    servings: float
    calories: float
    protein: float
    carbs: float
    fat: float
    notes: str | None = None
    ingredients: list[EntryIngredient] = field(default_factory=list)
