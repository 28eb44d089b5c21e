"""Domain models for recipes."""

from dataclasses import dataclass
from uuid import UUID

from nutrition_journal.domain.pantry import Ingredient


@dataclass(frozen=True)
class Recipe:
    """Recipe row with pre-computed totals across all its ingredients."""

    id: UUID
    user_id: UUID
    name: str
    emoji: str | None
    description: str | None
    instructions: str | None
    servings: int
    prep_time: int | None
    cook_time: int | None
    total_calories: float
    total_protein: float
    total_carbs: float
    total_fat: float
    is_favorite: bool = False


@dataclass(frozen=True)
class RecipeIngredient:
    """Ingredient used by a recipe; quantity multiplies its serving size."""

    ingredient: Ingredient
    quantity: float


@dataclass(frozen=True)
class RecipeDetail:
    """Recipe with its ingredient list."""

    recipe: Recipe
    ingredients: list[RecipeIngredient]
