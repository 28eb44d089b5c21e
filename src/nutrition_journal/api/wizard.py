"""Endpoints driving the step-by-step meal logging wizard."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Body, Depends, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder

from nutrition_journal.api.auth import current_user_id, get_container, require_api_token
from nutrition_journal.api.models import (
    AddIngredientEvent,
    AdjustIngredientEvent,
    AdvanceEvent,
    BackEvent,
    MealTypeEvent,
    NotesEvent,
    RecipeEvent,
    RemoveIngredientEvent,
    ServingsEvent,
    SetIngredientQuantityEvent,
    SourceEvent,
    WizardEvent,
)
from nutrition_journal.containers import AppContainer
from nutrition_journal.services import wizard as transitions
from nutrition_journal.services.wizard import MealLogWizard

router = APIRouter(
    prefix="/wizard",
    tags=["wizard"],
    dependencies=[Depends(require_api_token)],
)


@router.post("", status_code=status.HTTP_201_CREATED)
def open_wizard(
    request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Open a new logging wizard."""
    container = get_container(request)
    wizard = container.wizard_service.open(user_id)
    return _view(container, wizard)


@router.get("/{wizard_id}")
def get_wizard(
    wizard_id: UUID, request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Return the current step and selections."""
    container = get_container(request)
    return _view(container, container.wizard_service.get(wizard_id, user_id))


@router.post("/{wizard_id}/events")
def apply_event(
    wizard_id: UUID,
    event: Annotated[WizardEvent, Body(discriminator="type")],
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Apply one user action; actions the current step ignores leave it unchanged."""
    container = get_container(request)
    wizard = container.wizard_service.get(wizard_id, user_id)
    _dispatch(container, wizard, event)
    return _view(container, wizard)


@router.post("/{wizard_id}/submit", status_code=status.HTTP_201_CREATED)
async def submit_wizard(
    wizard_id: UUID, request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Persist the previewed entry and close the wizard."""
    entry = await get_container(request).wizard_service.submit(wizard_id, user_id)
    return jsonable_encoder(entry)


@router.delete("/{wizard_id}", status_code=status.HTTP_204_NO_CONTENT)
def close_wizard(
    wizard_id: UUID, request: Request, user_id: UUID = Depends(current_user_id)
) -> None:
    """Cancel the wizard and discard its selections."""
    get_container(request).wizard_service.close(wizard_id, user_id)


def _dispatch(container: AppContainer, wizard: MealLogWizard, event: WizardEvent) -> None:
    service = container.wizard_service
    if isinstance(event, MealTypeEvent):
        wizard.apply(transitions.select_meal_type, event.meal_type)
    elif isinstance(event, SourceEvent):
        wizard.apply(transitions.select_source, event.source)
    elif isinstance(event, RecipeEvent):
        recipe = service.resolve_recipe(wizard.user_id, event.recipe_id)
        if recipe is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown recipe")
        wizard.apply(transitions.select_recipe, recipe)
    elif isinstance(event, AddIngredientEvent):
        ingredient = service.resolve_ingredient(wizard.user_id, event.ingredient_id)
        if ingredient is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Unknown ingredient"
            )
        wizard.apply(transitions.add_ingredient, ingredient, event.quantity)
    elif isinstance(event, AdjustIngredientEvent):
        if event.direction == "increment":
            wizard.apply(transitions.increment_ingredient, event.ingredient_id)
        else:
            wizard.apply(transitions.decrement_ingredient, event.ingredient_id)
    elif isinstance(event, SetIngredientQuantityEvent):
        wizard.apply(transitions.set_ingredient_quantity, event.ingredient_id, event.quantity)
    elif isinstance(event, RemoveIngredientEvent):
        wizard.apply(transitions.remove_ingredient, event.ingredient_id)
    elif isinstance(event, ServingsEvent):
        wizard.apply(transitions.set_servings, event.servings)
    elif isinstance(event, NotesEvent):
        wizard.apply(transitions.set_notes, event.notes)
    elif isinstance(event, AdvanceEvent):
        wizard.apply(transitions.advance)
    elif isinstance(event, BackEvent):
        wizard.apply(transitions.go_back)


def _view(container: AppContainer, wizard: MealLogWizard) -> dict[str, object]:
    state = wizard.state
    goals = container.user_settings_service.get_goals(wizard.user_id)
    return {
        "id": str(wizard.id),
        "step": state.step.value,
        "can_advance": transitions.can_advance(state),
        "submitting": wizard.submitting,
        "state": jsonable_encoder(state),
        "preview": jsonable_encoder(transitions.build_preview(state, goals)),
    }
