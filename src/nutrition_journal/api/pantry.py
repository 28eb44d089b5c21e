"""Pantry ingredient endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder

from nutrition_journal.api.auth import current_user_id, get_container, require_api_token
from nutrition_journal.api.models import IngredientCreate, IngredientUpdate
from nutrition_journal.domain.pantry import IngredientCategory

router = APIRouter(
    prefix="/ingredients",
    tags=["pantry"],
    dependencies=[Depends(require_api_token)],
)


@router.get("")
def list_ingredients(
    request: Request,
    category: IngredientCategory | None = None,
    q: str | None = None,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Return the user's pantry, filtered by category or a name search."""
    pantry = get_container(request).pantry_service
    if q:
        ingredients = pantry.search(user_id, q)
    else:
        ingredients = pantry.list_ingredients(user_id, category)
    return {"ingredients": jsonable_encoder(ingredients)}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_ingredient(
    body: IngredientCreate,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Create a pantry ingredient."""
    ingredient = get_container(request).pantry_service.create_ingredient(
        user_id, body.model_dump(mode="json")
    )
    return jsonable_encoder(ingredient)


@router.get("/{ingredient_id}")
def get_ingredient(
    ingredient_id: UUID, request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Return one of the user's ingredients or a shared default."""
    ingredient = get_container(request).pantry_service.get_ingredient(
        user_id, ingredient_id
    )
    if ingredient is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return jsonable_encoder(ingredient)


@router.patch("/{ingredient_id}")
def update_ingredient(
    ingredient_id: UUID,
    body: IngredientUpdate,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Update one of the user's ingredients."""
    ingredient = get_container(request).pantry_service.update_ingredient(
        user_id, ingredient_id, body.model_dump(mode="json", exclude_unset=True)
    )
    if ingredient is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return jsonable_encoder(ingredient)


@router.delete("/{ingredient_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_ingredient(
    ingredient_id: UUID, request: Request, user_id: UUID = Depends(current_user_id)
) -> None:
    """Delete one of the user's ingredients."""
    if not get_container(request).pantry_service.delete_ingredient(user_id, ingredient_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
