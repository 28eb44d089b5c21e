"""Supabase implementation for pantry ingredients."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from nutrition_journal.domain.pantry import Ingredient, IngredientCategory
from nutrition_journal.services.pantry import IngredientRepository


@dataclass
class SupabaseIngredientRepository(IngredientRepository):
    """Supabase-backed repository for ingredients."""

    client: Client

    def list_ingredients(
        self, user_id: UUID, category: IngredientCategory | None
    ) -> list[Ingredient]:
        """Return the user's and the shared default ingredients."""
        query = (
            self.client.table("ingredients")
            .select("*")
            .or_(_visible_to(user_id))
        )
        if category is not None:
            query = query.eq("category", category.value)
        response = query.order("name").execute()
        return [parse_ingredient(row) for row in response.data or []]

    def get_ingredient(self, user_id: UUID, ingredient_id: UUID) -> Ingredient | None:
        """Return an ingredient the user owns or a shared default."""
        response = (
            self.client.table("ingredients")
            .select("*")
            .eq("id", str(ingredient_id))
            .or_(_visible_to(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_ingredient(response.data[0])

    def get_ingredients(
        self, user_id: UUID, ingredient_ids: list[UUID]
    ) -> list[Ingredient]:
        """Return the visible ingredients for a list of ids."""
        response = (
            self.client.table("ingredients")
            .select("*")
            .in_("id", [str(ingredient_id) for ingredient_id in ingredient_ids])
            .or_(_visible_to(user_id))
            .execute()
        )
        return [parse_ingredient(row) for row in response.data or []]

    def search_ingredients(
        self, user_id: UUID, query: str, limit: int
    ) -> list[Ingredient]:
        """Search ingredients by name."""
        response = (
            self.client.table("ingredients")
            .select("*")
            .or_(_visible_to(user_id))
            .ilike("name", f"%{query}%")
            .order("name")
            .limit(limit)
            .execute()
        )
        return [parse_ingredient(row) for row in response.data or []]

    def create_ingredient(
        self, user_id: UUID, payload: dict[str, object]
    ) -> Ingredient:
        """Create an ingredient and return it."""
        response = (
            self.client.table("ingredients")
            .insert({"user_id": str(user_id), **_serialize(payload)})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create ingredient")
        return parse_ingredient(response.data[0])

    def update_ingredient(
        self, user_id: UUID, ingredient_id: UUID, payload: dict[str, object]
    ) -> Ingredient | None:
        """Update one of the user's ingredients and return it."""
        response = (
            self.client.table("ingredients")
            .update(_serialize(payload))
            .eq("id", str(ingredient_id))
            .eq("user_id", str(user_id))
            .execute()
        )
        if not response.data:
            return None
        return parse_ingredient(response.data[0])

    def delete_ingredient(self, user_id: UUID, ingredient_id: UUID) -> bool:
        """Delete one of the user's ingredients."""
        response = (
            self.client.table("ingredients")
            .delete()
            .eq("id", str(ingredient_id))
            .eq("user_id", str(user_id))
            .execute()
        )
        return bool(response.data)


def parse_ingredient(row: dict[str, object]) -> Ingredient:
    """Parse an ingredient row into a domain model."""
    user_id = row.get("user_id")
    return Ingredient(
        id=UUID(str(row["id"])),
        user_id=UUID(str(user_id)) if user_id else None,
        name=str(row.get("name", "")),
        emoji=row.get("emoji"),
        category=IngredientCategory(row.get("category", "proteins")),
        serving_size=float(row.get("serving_size", 1.0)),
        serving_unit=str(row.get("serving_unit", "serving")),
        calories=float(row.get("calories", 0.0)),
        protein=float(row.get("protein", 0.0)),
        carbs=float(row.get("carbs", 0.0)),
        fat=float(row.get("fat", 0.0)),
        is_default=bool(row.get("is_default", False)),
    )


def _visible_to(user_id: UUID) -> str:
    return f"user_id.eq.{user_id},is_default.eq.true"


def _serialize(payload: dict[str, object]) -> dict[str, object]:
    category = payload.get("category")
    if isinstance(category, IngredientCategory):
        return {**payload, "category": category.value}
    return payload
