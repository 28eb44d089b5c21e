"""Recipe management service."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from nutrition_journal.domain.nutrition import MacroTotals
from nutrition_journal.domain.recipes import Recipe, RecipeDetail, RecipeIngredient
from nutrition_journal.services.cache import QueryCache
from nutrition_journal.services.nutrition import scale_recipe, sum_ingredients
from nutrition_journal.services.pantry import PantryService

RECIPES_KEY = "recipes"
MIN_SERVINGS = 1
MIN_SEARCH_LENGTH = 2
SEARCH_LIMIT = 20

_logger = logging.getLogger(__name__)


class InvalidRecipeError(ValueError):
    """Raised when a recipe fails validation before it is stored."""

    def __init__(self, errors: dict[str, str]) -> None:
        super().__init__("; ".join(f"{field}: {msg}" for field, msg in errors.items()))
        self.errors = errors


class RecipeRepository(Protocol):
    """Persistence interface for recipes."""

    def list_recipes(self, user_id: UUID, favorites_only: bool) -> list[Recipe]:
        """Return recipes for a user, newest first."""

    def get_recipe(self, user_id: UUID, recipe_id: UUID) -> RecipeDetail | None:
        """Return one of the user's recipes with its ingredients, if present."""

    def search_recipes(self, user_id: UUID, query: str, limit: int) -> list[Recipe]:
        """Search recipes by name."""

    def create_recipe(self, user_id: UUID, payload: dict[str, object]) -> Recipe:
        """Create a recipe row and return it."""

    def update_recipe(
        self, user_id: UUID, recipe_id: UUID, payload: dict[str, object]
    ) -> Recipe | None:
        """Update one of the user's recipe rows; None when it is not theirs."""

    def replace_recipe_ingredients(
        self, recipe_id: UUID, ingredients: list[tuple[UUID, float]]
    ) -> None:
        """Replace the recipe's (ingredient id, quantity) rows."""

    def delete_recipe(self, user_id: UUID, recipe_id: UUID) -> bool:
        """Delete one of the user's recipes; False when nothing matched."""


@dataclass
class RecipeService:
    """Application service for recipe operations."""

    repository: RecipeRepository
    pantry_service: PantryService
    queries: QueryCache

    def list_recipes(self, user_id: UUID, favorites_only: bool = False) -> list[Recipe]:
        """Return the user's recipes."""
        return self.queries.fetch(
            f"{RECIPES_KEY}:{user_id}:{'favorites' if favorites_only else 'all'}",
            lambda: self.repository.list_recipes(user_id, favorites_only),
        )

    def get_recipe(self, user_id: UUID, recipe_id: UUID) -> RecipeDetail | None:
        """Return one of the user's recipes with ingredients."""
        return self.queries.fetch(
            f"{RECIPES_KEY}:id:{user_id}:{recipe_id}",
            lambda: self.repository.get_recipe(user_id, recipe_id),
        )

    def search(self, user_id: UUID, query: str) -> list[Recipe]:
        """Search recipes by name once the query is long enough."""
        cleaned = query.strip()
        if len(cleaned) < MIN_SEARCH_LENGTH:
            return []
        return self.repository.search_recipes(user_id, cleaned, SEARCH_LIMIT)

    def create_recipe(
        self,
        user_id: UUID,
        payload: dict[str, object],
        ingredients: list[tuple[UUID, float]],
    ) -> RecipeDetail:
        """Validate, compute totals and store a recipe with its ingredients."""
        resolved = self._resolve_ingredients(user_id, ingredients)
        _validate(payload, resolved, require_name=True)
        totals = sum_ingredients(
            (item.ingredient, item.quantity) for item in resolved
        )
        recipe = self.repository.create_recipe(
            user_id, {"servings": MIN_SERVINGS, **payload, **_totals_payload(totals)}
        )
        self.repository.replace_recipe_ingredients(
            recipe.id, [(item.ingredient.id, item.quantity) for item in resolved]
        )
        self.queries.invalidate(RECIPES_KEY)
        _logger.info("Created recipe %s with %s ingredients", recipe.id, len(resolved))
        return RecipeDetail(recipe=recipe, ingredients=resolved)

    def update_recipe(
        self,
        user_id: UUID,
        recipe_id: UUID,
        payload: dict[str, object],
        ingredients: list[tuple[UUID, float]] | None = None,
    ) -> Recipe | None:
        """Update a recipe; a new ingredient list replaces the old and its totals.

        Returns None when the recipe does not belong to the user.
        """
        update = dict(payload)
        resolved: list[RecipeIngredient] | None = None
        if ingredients is not None:
            resolved = self._resolve_ingredients(user_id, ingredients)
        _validate(update, resolved, require_name=False)
        if resolved is not None:
            totals = sum_ingredients(
                (item.ingredient, item.quantity) for item in resolved
            )
            update.update(_totals_payload(totals))
        recipe = self.repository.update_recipe(user_id, recipe_id, update)
        if recipe is None:
            return None
        if resolved is not None:
            self.repository.replace_recipe_ingredients(
                recipe_id, [(item.ingredient.id, item.quantity) for item in resolved]
            )
        self.queries.invalidate(RECIPES_KEY)
        return recipe

    def toggle_favorite(
        self, user_id: UUID, recipe_id: UUID, is_favorite: bool
    ) -> Recipe | None:
        """Mark or unmark one of the user's recipes as favorite."""
        recipe = self.repository.update_recipe(
            user_id, recipe_id, {"is_favorite": is_favorite}
        )
        self.queries.invalidate(RECIPES_KEY)
        return recipe

    def delete_recipe(self, user_id: UUID, recipe_id: UUID) -> bool:
        """Delete one of the user's recipes."""
        deleted = self.repository.delete_recipe(user_id, recipe_id)
        self.queries.invalidate(RECIPES_KEY)
        return deleted

    @staticmethod
    def per_serving(recipe: Recipe) -> MacroTotals:
        """Return the macros of a single serving."""
        return scale_recipe(recipe, 1)

    def _resolve_ingredients(
        self, user_id: UUID, ingredients: list[tuple[UUID, float]]
    ) -> list[RecipeIngredient]:
        found = self.pantry_service.get_ingredients(
            user_id, [item[0] for item in ingredients]
        )
        missing = [str(item[0]) for item in ingredients if item[0] not in found]
        if missing:
            raise InvalidRecipeError(
                {"ingredients": f"Unknown ingredients: {', '.join(missing)}"}
            )
        return [
            RecipeIngredient(ingredient=found[ingredient_id], quantity=quantity)
            for ingredient_id, quantity in ingredients
        ]


def _validate(
    payload: dict[str, object],
    ingredients: list[RecipeIngredient] | None,
    *,
    require_name: bool,
) -> None:
    errors: dict[str, str] = {}
    if require_name or "name" in payload:
        name = payload.get("name")
        if not isinstance(name, str) or not name.strip():
            errors["name"] = "Recipe name is required"
    if ingredients is not None:
        if not ingredients:
            errors["ingredients"] = "Add at least one ingredient"
        elif any(item.quantity <= 0 for item in ingredients):
            errors["ingredients"] = "Quantities must be positive"
    if "servings" in payload:
        servings = payload.get("servings")
        if not isinstance(servings, int | float) or servings < MIN_SERVINGS:
            errors["servings"] = "Servings must be at least 1"
    if errors:
        raise InvalidRecipeError(errors)


def _totals_payload(totals: MacroTotals) -> dict[str, object]:
    return {
        "total_calories": totals.calories,
        "total_protein": totals.protein,
        "total_carbs": totals.carbs,
        "total_fat": totals.fat,
    }
