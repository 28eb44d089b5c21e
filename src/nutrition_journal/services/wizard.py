"""State machine for the step-by-step meal logging flow.

Transitions are pure functions from one ``WizardState`` to the next. A guard
that does not hold returns the state unchanged instead of raising, so callers
can feed user actions straight through and re-render whatever comes back.
"""

import asyncio
import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

from nutrition_journal.domain.entries import (
    EntryIngredient,
    FoodEntry,
    FoodEntryDraft,
    MealType,
)
from nutrition_journal.domain.nutrition import MacroGoals, MacroSplit, MacroTotals
from nutrition_journal.domain.pantry import Ingredient
from nutrition_journal.domain.recipes import Recipe
from nutrition_journal.domain.wizard import (
    LogSource,
    SelectedIngredient,
    WizardState,
    WizardStep,
)
from nutrition_journal.services.entries import FoodEntryService
from nutrition_journal.services.nutrition import (
    macro_percentages_of_calories,
    percent_of_goal,
    scale_recipe,
    sum_ingredients,
)
from nutrition_journal.services.pantry import PantryService
from nutrition_journal.services.recipes import RecipeService

QUANTITY_STEP = 0.5
MIN_QUANTITY = 0.5
DEFAULT_SUBMISSION_TIMEOUT_SECONDS = 10.0
DEFAULT_WIZARD_IDLE_SECONDS = 3600

_logger = logging.getLogger(__name__)

# Inserts keep running after a timed-out request; see MealLogWizard._settle.
_submit_executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="meal-submit")

_BACK_TARGETS = {
    WizardStep.SOURCE: WizardStep.MEAL_TYPE,
    WizardStep.RECIPE: WizardStep.SOURCE,
    WizardStep.INGREDIENTS: WizardStep.SOURCE,
    WizardStep.PREVIEW: WizardStep.SERVINGS,
}


class WizardError(Exception):
    """Base error for the logging flow."""


class WizardNotReadyError(WizardError):
    """Raised when a draft is requested before the preview step."""


class SubmissionInProgressError(WizardError):
    """Raised when a submission is already running for the wizard."""


class SubmissionFailedError(WizardError):
    """Raised when persisting the entry failed; the wizard keeps its state."""


class UnknownWizardError(WizardError):
    """Raised when no open wizard matches an id."""


def initial_state() -> WizardState:
    """Return the state of a freshly opened wizard."""
    return WizardState()


def reset(_state: WizardState | None = None) -> WizardState:
    """Discard every selection."""
    return initial_state()


def select_meal_type(state: WizardState, meal_type: MealType) -> WizardState:
    """Store the meal type and move on to choosing a source."""
    if state.step is not WizardStep.MEAL_TYPE:
        return state
    return replace(state, meal_type=meal_type, step=WizardStep.SOURCE)


def select_source(state: WizardState, source: LogSource) -> WizardState:
    """Store the source and branch to recipe or ingredient selection."""
    if state.step is not WizardStep.SOURCE:
        return state
    if source is LogSource.RECIPE:
        next_step = WizardStep.RECIPE
    else:
        next_step = WizardStep.INGREDIENTS
    if source is state.source:
        return replace(state, step=next_step)
    # a different source drops the other path's selections
    return replace(
        state,
        source=source,
        step=next_step,
        recipe=None,
        ingredients=(),
        servings=1.0,
        totals=MacroTotals.zero(),
    )


def select_recipe(state: WizardState, recipe: Recipe) -> WizardState:
    """Store the recipe and seed totals with one serving of it."""
    if state.step is not WizardStep.RECIPE:
        return state
    return replace(
        state,
        recipe=recipe,
        servings=1.0,
        totals=scale_recipe(recipe, 1),
        step=WizardStep.SERVINGS,
    )


def add_ingredient(
    state: WizardState, ingredient: Ingredient, quantity: float = 1.0
) -> WizardState:
    """Add an ingredient, merging with an existing row for the same id."""
    if state.step is not WizardStep.INGREDIENTS or quantity <= 0:
        return state
    selected = list(state.ingredients)
    for index, item in enumerate(selected):
        if item.ingredient.id == ingredient.id:
            selected[index] = replace(item, quantity=item.quantity + quantity)
            break
    else:
        selected.append(SelectedIngredient(ingredient=ingredient, quantity=quantity))
    return _with_ingredients(state, selected)


def adjust_ingredient_quantity(
    state: WizardState, ingredient_id: UUID, delta: float
) -> WizardState:
    """Step a selected quantity up or down, never below the floor.

    A quantity already set under the floor is left alone by a step down.
    """
    if state.step is not WizardStep.INGREDIENTS:
        return state
    return _map_ingredient(
        state,
        ingredient_id,
        lambda item: _stepped(item.quantity, delta),
    )


def increment_ingredient(state: WizardState, ingredient_id: UUID) -> WizardState:
    """Add half a serving to a selected ingredient."""
    return adjust_ingredient_quantity(state, ingredient_id, QUANTITY_STEP)


def decrement_ingredient(state: WizardState, ingredient_id: UUID) -> WizardState:
    """Remove half a serving from a selected ingredient."""
    return adjust_ingredient_quantity(state, ingredient_id, -QUANTITY_STEP)


def set_ingredient_quantity(
    state: WizardState, ingredient_id: UUID, quantity: float
) -> WizardState:
    """Set an explicit quantity for a selected ingredient."""
    if state.step is not WizardStep.INGREDIENTS or quantity <= 0:
        return state
    return _map_ingredient(state, ingredient_id, lambda _item: quantity)


def remove_ingredient(state: WizardState, ingredient_id: UUID) -> WizardState:
    """Drop a selected ingredient."""
    if state.step is not WizardStep.INGREDIENTS:
        return state
    remaining = [item for item in state.ingredients if item.ingredient.id != ingredient_id]
    return _with_ingredients(state, remaining)


def set_servings(state: WizardState, servings: float) -> WizardState:
    """Change servings; only recipe-sourced totals scale with it."""
    if state.step is not WizardStep.SERVINGS or servings <= 0:
        return state
    if state.source is LogSource.RECIPE and state.recipe is not None:
        return replace(state, servings=servings, totals=scale_recipe(state.recipe, servings))
    return replace(state, servings=servings)


def set_notes(state: WizardState, notes: str) -> WizardState:
    """Store free-text notes for the entry."""
    return replace(state, notes=notes)


def can_advance(state: WizardState) -> bool:
    """Return True when the continue action is allowed."""
    if state.step is WizardStep.INGREDIENTS:
        return len(state.ingredients) > 0
    if state.step is WizardStep.SERVINGS:
        return state.servings > 0
    return False


def advance(state: WizardState) -> WizardState:
    """Continue from ingredients or servings when the guard holds."""
    if not can_advance(state):
        return state
    if state.step is WizardStep.INGREDIENTS:
        return replace(state, step=WizardStep.SERVINGS)
    return replace(state, step=WizardStep.PREVIEW)


def go_back(state: WizardState) -> WizardState:
    """Return to the previous step, branching on source from servings."""
    if state.step is WizardStep.SERVINGS:
        if state.source is LogSource.RECIPE:
            return replace(state, step=WizardStep.RECIPE)
        return replace(state, step=WizardStep.INGREDIENTS)
    target = _BACK_TARGETS.get(state.step)
    if target is None:
        return state
    return replace(state, step=target)


def build_draft(state: WizardState) -> FoodEntryDraft:
    """Assemble the entry payload from a wizard in the preview step."""
    if state.step is not WizardStep.PREVIEW or state.meal_type is None:
        raise WizardNotReadyError(f"Cannot submit from step {state.step.value}")
    notes = state.notes.strip() or None
    if state.source is LogSource.RECIPE:
        if state.recipe is None:
            raise WizardNotReadyError("No recipe selected")
        return FoodEntryDraft(
            meal_type=state.meal_type,
            recipe_id=state.recipe.id,
            servings=state.servings,
            calories=state.totals.calories,
            protein=state.totals.protein,
            carbs=state.totals.carbs,
            fat=state.totals.fat,
            notes=notes,
        )
    return FoodEntryDraft(
        meal_type=state.meal_type,
        recipe_id=None,
        servings=state.servings,
        calories=state.totals.calories,
        protein=state.totals.protein,
        carbs=state.totals.carbs,
        fat=state.totals.fat,
        notes=notes,
        ingredients=[
            EntryIngredient(ingredient_id=item.ingredient.id, quantity=item.quantity)
            for item in state.ingredients
        ],
    )


@dataclass(frozen=True)
class PreviewSummary:
    """Totals of the pending entry measured against the daily goals."""

    totals: MacroTotals
    goals: MacroGoals
    percent_of_goal: MacroTotals
    split: MacroSplit


def build_preview(state: WizardState, goals: MacroGoals) -> PreviewSummary:
    """Return what the preview step shows for the current totals."""
    totals = state.totals
    return PreviewSummary(
        totals=totals,
        goals=goals,
        percent_of_goal=MacroTotals(
            calories=percent_of_goal(totals.calories, goals.calories),
            protein=percent_of_goal(totals.protein, goals.protein),
            carbs=percent_of_goal(totals.carbs, goals.carbs),
            fat=percent_of_goal(totals.fat, goals.fat),
        ),
        split=macro_percentages_of_calories(totals),
    )


def _with_ingredients(
    state: WizardState, selected: list[SelectedIngredient]
) -> WizardState:
    totals = sum_ingredients((item.ingredient, item.quantity) for item in selected)
    return replace(state, ingredients=tuple(selected), totals=totals)


def _stepped(quantity: float, delta: float) -> float:
    stepped = quantity + delta
    if stepped < MIN_QUANTITY:
        return min(quantity, MIN_QUANTITY)
    return stepped


def _map_ingredient(
    state: WizardState,
    ingredient_id: UUID,
    quantity_for: Callable[[SelectedIngredient], float],
) -> WizardState:
    selected = [
        replace(item, quantity=quantity_for(item))
        if item.ingredient.id == ingredient_id
        else item
        for item in state.ingredients
    ]
    return _with_ingredients(state, selected)


@dataclass
class MealLogWizard:
    """One open logging session for one user.

    ``submitting`` stays set until the insert has really finished, even when
    the caller stopped waiting for it, so a retry cannot store the meal twice.
    """

    id: UUID
    user_id: UUID
    entry_service: FoodEntryService
    submission_timeout_seconds: float = DEFAULT_SUBMISSION_TIMEOUT_SECONDS
    state: WizardState = field(default_factory=initial_state)
    submitting: bool = False
    touched_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))

    def touch(self) -> None:
        """Mark the wizard as used now."""
        self.touched_at = datetime.now(tz=UTC)

    def apply(self, transition: Callable[..., WizardState], *args: object) -> WizardState:
        """Run a transition against the current state and keep the result."""
        if self.submitting:
            return self.state
        self.state = transition(self.state, *args)
        return self.state

    def cancel(self) -> WizardState:
        """Discard all selections."""
        self.state = reset()
        return self.state

    async def submit(self) -> FoodEntry:
        """Persist the assembled entry and reset on success."""
        if self.submitting:
            raise SubmissionInProgressError("A submission is already in flight")
        draft = build_draft(self.state)
        self.submitting = True
        work = _submit_executor.submit(
            self.entry_service.create_entry, self.user_id, draft
        )
        work.add_done_callback(self._settle)
        try:
            return await asyncio.wait_for(
                asyncio.wrap_future(work), timeout=self.submission_timeout_seconds
            )
        except Exception as exc:
            _logger.exception(
                "Failed to log meal", extra={"wizard_id": str(self.id)}
            )
            raise SubmissionFailedError("Failed to log meal") from exc

    def _settle(self, work: Future[FoodEntry]) -> None:
        # Runs on the worker thread once the insert is done or was never started.
        if not work.cancelled() and work.exception() is None:
            self.state = reset()
            _logger.info(
                "Logged meal %s", work.result().id, extra={"wizard_id": str(self.id)}
            )
        self.submitting = False


@dataclass
class WizardService:
    """Registry of open logging wizards plus catalog lookups for their events."""

    entry_service: FoodEntryService
    pantry_service: PantryService
    recipe_service: RecipeService
    submission_timeout_seconds: float = DEFAULT_SUBMISSION_TIMEOUT_SECONDS
    idle_seconds: int = DEFAULT_WIZARD_IDLE_SECONDS
    _wizards: dict[UUID, MealLogWizard] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def open(self, user_id: UUID) -> MealLogWizard:
        """Open a new wizard for a user."""
        self.evict_idle()
        wizard = MealLogWizard(
            id=uuid4(),
            user_id=user_id,
            entry_service=self.entry_service,
            submission_timeout_seconds=self.submission_timeout_seconds,
        )
        with self._lock:
            self._wizards[wizard.id] = wizard
        return wizard

    def get(self, wizard_id: UUID, user_id: UUID) -> MealLogWizard:
        """Return an open wizard owned by the user."""
        self.evict_idle()
        with self._lock:
            wizard = self._wizards.get(wizard_id)
        if wizard is None or wizard.user_id != user_id:
            raise UnknownWizardError(str(wizard_id))
        wizard.touch()
        return wizard

    def open_count(self) -> int:
        """Return how many wizards are open."""
        with self._lock:
            return len(self._wizards)

    def evict_idle(self) -> int:
        """Drop wizards untouched for longer than the idle window."""
        cutoff = datetime.now(tz=UTC) - timedelta(seconds=self.idle_seconds)
        with self._lock:
            idle = [
                wizard_id
                for wizard_id, wizard in self._wizards.items()
                if wizard.touched_at < cutoff and not wizard.submitting
            ]
            for wizard_id in idle:
                del self._wizards[wizard_id]
        if idle:
            _logger.info("Evicted %s idle wizards", len(idle))
        return len(idle)

    def close(self, wizard_id: UUID, user_id: UUID) -> None:
        """Close a wizard, discarding its state."""
        wizard = self.get(wizard_id, user_id)
        wizard.cancel()
        with self._lock:
            self._wizards.pop(wizard_id, None)

    def close_all(self) -> None:
        """Close every open wizard."""
        with self._lock:
            self._wizards.clear()

    async def submit(self, wizard_id: UUID, user_id: UUID) -> FoodEntry:
        """Submit a wizard and close it once the entry is stored."""
        wizard = self.get(wizard_id, user_id)
        entry = await wizard.submit()
        with self._lock:
            self._wizards.pop(wizard_id, None)
        return entry

    def resolve_ingredient(self, user_id: UUID, ingredient_id: UUID) -> Ingredient | None:
        """Look up an ingredient the user can see, for an add event."""
        return self.pantry_service.get_ingredient(user_id, ingredient_id)

    def resolve_recipe(self, user_id: UUID, recipe_id: UUID) -> Recipe | None:
        """Look up one of the user's recipes, for a select event."""
        detail = self.recipe_service.get_recipe(user_id, recipe_id)
        return detail.recipe if detail else None
