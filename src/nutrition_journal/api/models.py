"""Pydantic request models for the journal API."""

from datetime import datetime
from typing import Annotated, Literal
from uuid import UUID

from pydantic import BaseModel, Field

from nutrition_journal.domain.entries import MealType
from nutrition_journal.domain.pantry import IngredientCategory
from nutrition_journal.domain.wizard import LogSource

NonNegative = Annotated[float, Field(ge=0)]


class IngredientCreate(BaseModel):
    """New pantry ingredient."""

    name: str = Field(min_length=1)
    emoji: str | None = None
    category: IngredientCategory
    serving_size: float = Field(gt=0)
    serving_unit: str = "serving"
    calories: NonNegative = 0.0
    protein: NonNegative = 0.0
    carbs: NonNegative = 0.0
    fat: NonNegative = 0.0


class IngredientUpdate(BaseModel):
    """Partial ingredient update."""

    name: str | None = Field(default=None, min_length=1)
    emoji: str | None = None
    category: IngredientCategory | None = None
    serving_size: float | None = Field(default=None, gt=0)
    serving_unit: str | None = None
    calories: NonNegative | None = None
    protein: NonNegative | None = None
    carbs: NonNegative | None = None
    fat: NonNegative | None = None


class RecipeIngredientInput(BaseModel):
    """Ingredient reference inside a recipe payload."""

    ingredient_id: UUID
    quantity: float = Field(default=1.0, gt=0)


class RecipeCreate(BaseModel):
    """New recipe; totals are computed server-side."""

    name: str
    emoji: str | None = None
    description: str | None = None
    instructions: str | None = None
    servings: int = 1
    prep_time: int | None = Field(default=None, ge=0)
    cook_time: int | None = Field(default=None, ge=0)
    is_favorite: bool = False
    ingredients: list[RecipeIngredientInput]


class RecipeUpdate(BaseModel):
    """Partial recipe update; a new ingredient list replaces the old one."""

    name: str | None = None
    emoji: str | None = None
    description: str | None = None
    instructions: str | None = None
    servings: int | None = None
    prep_time: int | None = Field(default=None, ge=0)
    cook_time: int | None = Field(default=None, ge=0)
    ingredients: list[RecipeIngredientInput] | None = None


class FavoriteUpdate(BaseModel):
    """Favorite flag toggle."""

    is_favorite: bool


class EntryIngredientInput(BaseModel):
    """Ingredient breakdown row of a quick-add entry."""

    ingredient_id: UUID
    quantity: float = Field(gt=0)


class FoodEntryCreate(BaseModel):
    """Food entry logged without the wizard."""

    meal_type: MealType
    recipe_id: UUID | None = None
    servings: float = Field(default=1.0, gt=0)
    calories: NonNegative
    protein: NonNegative
    carbs: NonNegative
    fat: NonNegative
    notes: str | None = None
    logged_at: datetime | None = None
    ingredients: list[EntryIngredientInput] = Field(default_factory=list)


class FoodEntryUpdate(BaseModel):
    """Partial food entry update."""

    meal_type: MealType | None = None
    servings: float | None = Field(default=None, gt=0)
    calories: NonNegative | None = None
    protein: NonNegative | None = None
    carbs: NonNegative | None = None
    fat: NonNegative | None = None
    notes: str | None = None
    logged_at: datetime | None = None


class GoalsUpdate(BaseModel):
    """Daily macro goals."""

    calories: float = Field(gt=0)
    protein: float = Field(gt=0)
    carbs: float = Field(gt=0)
    fat: float = Field(gt=0)


class StoreCreate(BaseModel):
    """New store."""

    name: str = Field(min_length=1)
    emoji: str | None = None


class StoreUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    emoji: str | None = None


class PurchaseCreate(BaseModel):
    """Grocery purchase; the price is for the whole quantity."""

    ingredient_id: UUID
    store_id: UUID | None = None
    quantity: float = Field(default=1.0, gt=0)
    unit: str = "g"
    price: NonNegative
    purchased_at: datetime | None = None
    notes: str | None = None


class InventoryCreate(BaseModel):
    ingredient_id: UUID
    quantity_on_hand: NonNegative
    threshold_quantity: NonNegative = 0.0
    unit: str


class InventoryUpdate(BaseModel):
    quantity_on_hand: NonNegative | None = None
    threshold_quantity: NonNegative | None = None
    unit: str | None = None


class ShoppingItemCreate(BaseModel):
    ingredient_id: UUID
    quantity_needed: float = Field(default=1.0, gt=0)


class PurchasedUpdate(BaseModel):
    is_purchased: bool


class MealTypeEvent(BaseModel):
    type: Literal["meal_type"]
    meal_type: MealType


class SourceEvent(BaseModel):
    type: Literal["source"]
    source: LogSource


class RecipeEvent(BaseModel):
    type: Literal["recipe"]
    recipe_id: UUID


class AddIngredientEvent(BaseModel):
    type: Literal["add_ingredient"]
    ingredient_id: UUID
    quantity: float = Field(default=1.0, gt=0)


class AdjustIngredientEvent(BaseModel):
    type: Literal["adjust_ingredient"]
    ingredient_id: UUID
    direction: Literal["increment", "decrement"]


class SetIngredientQuantityEvent(BaseModel):
    type: Literal["set_ingredient_quantity"]
    ingredient_id: UUID
    quantity: float


class RemoveIngredientEvent(BaseModel):
    type: Literal["remove_ingredient"]
    ingredient_id: UUID


class ServingsEvent(BaseModel):
    type: Literal["servings"]
    servings: float


class NotesEvent(BaseModel):
    type: Literal["notes"]
    notes: str


class AdvanceEvent(BaseModel):
    type: Literal["advance"]


class BackEvent(BaseModel):
    type: Literal["back"]


WizardEvent = (
    MealTypeEvent
    | SourceEvent
    | RecipeEvent
    | AddIngredientEvent
    | AdjustIngredientEvent
    | SetIngredientQuantityEvent
    | RemoveIngredientEvent
    | ServingsEvent
    | NotesEvent
    | AdvanceEvent
    | BackEvent
)
