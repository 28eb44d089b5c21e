"""Macro aggregation over ingredients, recipes and logged entries."""

import math
from collections.abc import Iterable
from typing import Literal

from nutrition_journal.domain.entries import FoodEntry
from nutrition_journal.domain.nutrition import MacroSplit, MacroTotals
from nutrition_journal.domain.pantry import Ingredient
from nutrition_journal.domain.recipes import Recipe

KCAL_PER_GRAM_PROTEIN = 4
KCAL_PER_GRAM_CARBS = 4
KCAL_PER_GRAM_FAT = 9

GOAL_UNDER_RATIO = 0.8
GOAL_OVER_RATIO = 1.1

_FALLBACK_SPLIT = MacroSplit(protein=33, carbs=33, fat=34)

ProgressStatus = Literal["under", "good", "over"]


def scale_ingredient(ingredient: Ingredient, quantity: float) -> MacroTotals:
    """Return the ingredient's per-serving macros multiplied by quantity."""
    return MacroTotals(
        calories=ingredient.calories * quantity,
        protein=ingredient.protein * quantity,
        carbs=ingredient.carbs * quantity,
        fat=ingredient.fat * quantity,
    )


def sum_ingredients(pairs: Iterable[tuple[Ingredient, float]]) -> MacroTotals:
    """Sum scaled macros over (ingredient, quantity) pairs."""
    total = MacroTotals.zero()
    for ingredient, quantity in pairs:
        total = add_totals(total, scale_ingredient(ingredient, quantity))
    return total


def scale_recipe(recipe: Recipe, servings: float) -> MacroTotals:
    """Return the recipe's stored totals for the requested number of servings.

    The stored totals cover the whole recipe, so they are divided by the
    recipe's own serving count first. Recipes are validated to have at least
    one serving when they are saved.
    """
    per_serving = recipe.servings
    return MacroTotals(
        calories=recipe.total_calories / per_serving * servings,
        protein=recipe.total_protein / per_serving * servings,
        carbs=recipe.total_carbs / per_serving * servings,
        fat=recipe.total_fat / per_serving * servings,
    )


def sum_daily_totals(entries: Iterable[FoodEntry]) -> MacroTotals:
    """Sum the snapshotted macros stored on each entry."""
    total = MacroTotals.zero()
    for entry in entries:
        total = MacroTotals(
            calories=total.calories + entry.calories,
            protein=total.protein + entry.protein,
            carbs=total.carbs + entry.carbs,
            fat=total.fat + entry.fat,
        )
    return total


def add_totals(left: MacroTotals, right: MacroTotals) -> MacroTotals:
    """Return the field-wise sum of two totals."""
    return MacroTotals(
        calories=left.calories + right.calories,
        protein=left.protein + right.protein,
        carbs=left.carbs + right.carbs,
        fat=left.fat + right.fat,
    )


def macro_percentages_of_calories(totals: MacroTotals) -> MacroSplit:
    """Return each macro's share of macro-derived calories.

    The denominator is the calories implied by the gram values, not
    ``totals.calories``. Each share is rounded on its own, so the three values
    can add up to 99 or 101.
    """
    protein_kcal = totals.protein * KCAL_PER_GRAM_PROTEIN
    carbs_kcal = totals.carbs * KCAL_PER_GRAM_CARBS
    fat_kcal = totals.fat * KCAL_PER_GRAM_FAT
    total_kcal = protein_kcal + carbs_kcal + fat_kcal
    if total_kcal == 0:
        return _FALLBACK_SPLIT
    return MacroSplit(
        protein=_round_half_up(protein_kcal / total_kcal * 100),
        carbs=_round_half_up(carbs_kcal / total_kcal * 100),
        fat=_round_half_up(fat_kcal / total_kcal * 100),
    )


def goal_progress(current: float, goal: float) -> ProgressStatus:
    """Classify progress toward a goal; up to 110% still counts as good."""
    if current < goal * GOAL_UNDER_RATIO:
        return "under"
    if current <= goal * GOAL_OVER_RATIO:
        return "good"
    return "over"


def percent_of_goal(current: float, goal: float) -> float:
    """Return current as a percentage of goal, or 0 for a non-positive goal."""
    if goal <= 0:
        return 0.0
    return current / goal * 100


def is_within_goal(current: float, goal: float, tolerance: float = 0.1) -> bool:
    """Return True when current does not exceed goal plus tolerance."""
    return current <= goal * (1 + tolerance)


def round_totals(totals: MacroTotals) -> MacroTotals:
    """Round calories to whole numbers and grams to one decimal."""
    return MacroTotals(
        calories=float(round(totals.calories)),
        protein=round(totals.protein, 1),
        carbs=round(totals.carbs, 1),
        fat=round(totals.fat, 1),
    )


def format_nutrition_value(value: float, unit: str = "g") -> str:
    """Format a macro value for display."""
    if unit in {"kcal", "cal"}:
        return str(_round_half_up(value))
    rounded = _round_half_up(value * 10) / 10
    if rounded.is_integer():
        return f"{int(rounded)}{unit}"
    return f"{rounded}{unit}"


def _round_half_up(value: float) -> int:
    # round() would send 12.5 to 12
    return math.floor(value + 0.5)
