"""Domain models for the meal-logging wizard."""

from dataclasses import dataclass
from enum import Enum

from nutrition_journal.domain.entries import MealType
from nutrition_journal.domain.nutrition import MacroTotals
from nutrition_journal.domain.pantry import Ingredient
from nutrition_journal.domain.recipes import Recipe


class WizardStep(str, Enum):
    """Steps of the logging flow in forward order."""

    MEAL_TYPE = "meal-type"
    SOURCE = "source"
    RECIPE = "recipe"
    INGREDIENTS = "ingredients"
    SERVINGS = "servings"
    PREVIEW = "preview"


class LogSource(str, Enum):
    """Where the logged macros come from."""

    RECIPE = "recipe"
    QUICK_ADD = "quick-add"


@dataclass(frozen=True)
class SelectedIngredient:
    """Ingredient picked during quick-add."""

    ingredient: Ingredient
    quantity: float


@dataclass(frozen=True)
class WizardState:
    """Transient state of one logging session. Never persisted."""

    step: WizardStep = WizardStep.MEAL_TYPE
    meal_type: MealType | None = None
    source: LogSource | None = None
    recipe: Recipe | None = None
    ingredients: tuple[SelectedIngredient, ...] = ()
    servings: float = 1.0
    notes: str = ""
    totals: MacroTotals = MacroTotals.zero()
