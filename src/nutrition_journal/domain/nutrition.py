"""Nutrition domain models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class MacroTotals:
    """Calories plus protein, carbs and fat in grams."""

    calories: float
    protein: float
    carbs: float
    fat: float

    @classmethod
    def zero(cls) -> "MacroTotals":
        """Return the zero record."""
        return cls(calories=0.0, protein=0.0, carbs=0.0, fat=0.0)


@dataclass(frozen=True)
class MacroSplit:
    """Share of macro-derived calories per macronutrient, in whole percent."""

    protein: int
    carbs: int
    fat: int


@dataclass(frozen=True)
class MacroGoals:
    """Daily macro goals for a user."""

    calories: float
    protein: float
    carbs: float
    fat: float


DEFAULT_GOALS = MacroGoals(calories=2000, protein=150, carbs=250, fat=65)
