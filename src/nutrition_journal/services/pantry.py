"""Services for managing the ingredient pantry."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from nutrition_journal.domain.pantry import Ingredient, IngredientCategory
from nutrition_journal.services.cache import QueryCache

INGREDIENTS_KEY = "ingredients"
MIN_SEARCH_LENGTH = 2
SEARCH_LIMIT = 20


class IngredientRepository(Protocol):
    """Persistence interface for pantry ingredients."""

    def list_ingredients(
        self, user_id: UUID, category: IngredientCategory | None
    ) -> list[Ingredient]:
        """Return ingredients visible to the user, ordered by name."""

    def get_ingredient(self, user_id: UUID, ingredient_id: UUID) -> Ingredient | None:
        """Return an ingredient the user can see, if present."""

    def get_ingredients(
        self, user_id: UUID, ingredient_ids: list[UUID]
    ) -> list[Ingredient]:
        """Return the visible ingredients with the given ids."""

    def search_ingredients(self, user_id: UUID, query: str, limit: int) -> list[Ingredient]:
        """Search ingredients by name."""

    def create_ingredient(
        self, user_id: UUID, payload: dict[str, object]
    ) -> Ingredient:
        """Create an ingredient and return it."""

    def update_ingredient(
        self, user_id: UUID, ingredient_id: UUID, payload: dict[str, object]
    ) -> Ingredient | None:
        """Update one of the user's ingredients; None when it is not theirs."""

    def delete_ingredient(self, user_id: UUID, ingredient_id: UUID) -> bool:
        """Delete one of the user's ingredients; False when nothing matched."""


@dataclass
class PantryService:
    """Application service for pantry operations."""

    repository: IngredientRepository
    queries: QueryCache

    def list_ingredients(
        self, user_id: UUID, category: IngredientCategory | None = None
    ) -> list[Ingredient]:
        """Return the user's ingredients, optionally for one category."""
        key = f"{INGREDIENTS_KEY}:{user_id}:{category.value if category else 'all'}"
        return self.queries.fetch(
            key, lambda: self.repository.list_ingredients(user_id, category)
        )

    def get_ingredient(self, user_id: UUID, ingredient_id: UUID) -> Ingredient | None:
        """Return one of the user's ingredients or a shared default."""
        return self.queries.fetch(
            f"{INGREDIENTS_KEY}:id:{user_id}:{ingredient_id}",
            lambda: self.repository.get_ingredient(user_id, ingredient_id),
        )

    def get_ingredients(
        self, user_id: UUID, ingredient_ids: list[UUID]
    ) -> dict[UUID, Ingredient]:
        """Return visible ingredients keyed by id; unknown ids are left out."""
        if not ingredient_ids:
            return {}
        found = self.repository.get_ingredients(
            user_id, list(dict.fromkeys(ingredient_ids))
        )
        return {ingredient.id: ingredient for ingredient in found}

    def search(self, user_id: UUID, query: str) -> list[Ingredient]:
        """Search by name once the query is long enough."""
        cleaned = query.strip()
        if len(cleaned) < MIN_SEARCH_LENGTH:
            return []
        return self.queries.fetch(
            f"{INGREDIENTS_KEY}:search:{user_id}:{cleaned.lower()}",
            lambda: self.repository.search_ingredients(user_id, cleaned, SEARCH_LIMIT),
        )

    def create_ingredient(
        self, user_id: UUID, payload: dict[str, object]
    ) -> Ingredient:
        """Create an ingredient for the user."""
        ingredient = self.repository.create_ingredient(user_id, payload)
        self.queries.invalidate(INGREDIENTS_KEY)
        return ingredient

    def update_ingredient(
        self, user_id: UUID, ingredient_id: UUID, payload: dict[str, object]
    ) -> Ingredient | None:
        """Update one of the user's ingredients in place.

        Recipes keep their stored totals and entries keep their snapshots; only
        later recipe saves and new log entries see the new values.
        """
        ingredient = self.repository.update_ingredient(user_id, ingredient_id, payload)
        self.queries.invalidate(INGREDIENTS_KEY)
        return ingredient

    def delete_ingredient(self, user_id: UUID, ingredient_id: UUID) -> bool:
        """Delete one of the user's ingredients."""
        deleted = self.repository.delete_ingredient(user_id, ingredient_id)
        self.queries.invalidate(INGREDIENTS_KEY)
        return deleted
