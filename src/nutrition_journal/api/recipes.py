"""Recipe endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder

from nutrition_journal.api.auth import current_user_id, get_container, require_api_token
from nutrition_journal.api.models import FavoriteUpdate, RecipeCreate, RecipeUpdate
from nutrition_journal.domain.recipes import RecipeDetail
from nutrition_journal.services.recipes import RecipeService

router = APIRouter(
    prefix="/recipes",
    tags=["recipes"],
    dependencies=[Depends(require_api_token)],
)


@router.get("")
def list_recipes(
    request: Request,
    favorites: bool = False,
    q: str | None = None,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Return the user's recipes."""
    recipes_service = get_container(request).recipe_service
    if q:
        recipes = recipes_service.search(user_id, q)
    else:
        recipes = recipes_service.list_recipes(user_id, favorites_only=favorites)
    return {"recipes": jsonable_encoder(recipes)}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_recipe(
    body: RecipeCreate,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Create a recipe and compute its totals."""
    detail = get_container(request).recipe_service.create_recipe(
        user_id,
        body.model_dump(exclude={"ingredients"}),
        [(item.ingredient_id, item.quantity) for item in body.ingredients],
    )
    return _serialize_detail(detail)


@router.get("/{recipe_id}")
def get_recipe(
    recipe_id: UUID, request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Return a recipe with ingredients and per-serving macros."""
    detail = get_container(request).recipe_service.get_recipe(user_id, recipe_id)
    if detail is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return _serialize_detail(detail)


@router.patch("/{recipe_id}")
def update_recipe(
    recipe_id: UUID,
    body: RecipeUpdate,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Update a recipe; sending ingredients recomputes its totals."""
    ingredients = None
    if body.ingredients is not None:
        ingredients = [(item.ingredient_id, item.quantity) for item in body.ingredients]
    recipe = get_container(request).recipe_service.update_recipe(
        user_id,
        recipe_id,
        body.model_dump(exclude={"ingredients"}, exclude_unset=True),
        ingredients,
    )
    if recipe is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return jsonable_encoder(recipe)


@router.post("/{recipe_id}/favorite")
def toggle_favorite(
    recipe_id: UUID,
    body: FavoriteUpdate,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Set the favorite flag of a recipe."""
    recipe = get_container(request).recipe_service.toggle_favorite(
        user_id, recipe_id, body.is_favorite
    )
    if recipe is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return jsonable_encoder(recipe)


@router.delete("/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_recipe(
    recipe_id: UUID, request: Request, user_id: UUID = Depends(current_user_id)
) -> None:
    """Delete a recipe."""
    if not get_container(request).recipe_service.delete_recipe(user_id, recipe_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)


def _serialize_detail(detail: RecipeDetail) -> dict[str, object]:
    return {
        **jsonable_encoder(detail.recipe),
        "ingredients": jsonable_encoder(detail.ingredients),
        "per_serving": jsonable_encoder(RecipeService.per_serving(detail.recipe)),
    }
