"""Supabase repository for recipes."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from nutrition_journal.adapters.supabase_ingredient_repository import parse_ingredient
from nutrition_journal.domain.recipes import Recipe, RecipeDetail, RecipeIngredient
from nutrition_journal.services.recipes import RecipeRepository

_DETAIL_SELECT = "*, recipe_ingredients (*, ingredient:ingredients (*))"


@dataclass
class SupabaseRecipeRepository(RecipeRepository):
    """Supabase implementation for recipes."""

    client: Client

    def list_recipes(self, user_id: UUID, favorites_only: bool) -> list[Recipe]:
        """Return recipes for a user, newest first."""
        query = self.client.table("recipes").select("*").eq("user_id", str(user_id))
        if favorites_only:
            query = query.eq("is_favorite", True)
        response = query.order("created_at", desc=True).execute()
        return [_parse_recipe(row) for row in response.data or []]

    def get_recipe(self, user_id: UUID, recipe_id: UUID) -> RecipeDetail | None:
        """Return one of the user's recipes with nested ingredient rows."""
        response = (
            self.client.table("recipes")
            .select(_DETAIL_SELECT)
            .eq("id", str(recipe_id))
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        ingredients = [
            RecipeIngredient(
                ingredient=parse_ingredient(item["ingredient"]),
                quantity=float(item.get("quantity", 1.0)),
            )
            for item in row.get("recipe_ingredients") or []
            if item.get("ingredient")
        ]
        return RecipeDetail(recipe=_parse_recipe(row), ingredients=ingredients)

    def search_recipes(self, user_id: UUID, query: str, limit: int) -> list[Recipe]:
        """Search recipes by name."""
        response = (
            self.client.table("recipes")
            .select("*")
            .eq("user_id", str(user_id))
            .ilike("name", f"%{query}%")
            .order("name")
            .limit(limit)
            .execute()
        )
        return [_parse_recipe(row) for row in response.data or []]

    def create_recipe(self, user_id: UUID, payload: dict[str, object]) -> Recipe:
        """Create a recipe row and return it."""
        response = (
            self.client.table("recipes")
            .insert({"user_id": str(user_id), **payload})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create recipe")
        return _parse_recipe(response.data[0])

    def update_recipe(
        self, user_id: UUID, recipe_id: UUID, payload: dict[str, object]
    ) -> Recipe | None:
        """Update one of the user's recipe rows and return it."""
        response = (
            self.client.table("recipes")
            .update(payload)
            .eq("id", str(recipe_id))
            .eq("user_id", str(user_id))
            .execute()
        )
        if not response.data:
            return None
        return _parse_recipe(response.data[0])

    def replace_recipe_ingredients(
        self, recipe_id: UUID, ingredients: list[tuple[UUID, float]]
    ) -> None:
        """Delete and re-insert the ingredient rows of a recipe."""
        self.client.table("recipe_ingredients").delete().eq(
            "recipe_id", str(recipe_id)
        ).execute()
        if not ingredients:
            return
        self.client.table("recipe_ingredients").insert(
            [
                {
                    "recipe_id": str(recipe_id),
                    "ingredient_id": str(ingredient_id),
                    "quantity": quantity,
                }
                for ingredient_id, quantity in ingredients
            ]
        ).execute()

    def delete_recipe(self, user_id: UUID, recipe_id: UUID) -> bool:
        """Delete one of the user's recipes."""
        response = (
            self.client.table("recipes")
            .delete()
            .eq("id", str(recipe_id))
            .eq("user_id", str(user_id))
            .execute()
        )
        return bool(response.data)


def _parse_recipe(row: dict[str, object]) -> Recipe:
    return Recipe(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        name=str(row.get("name", "")),
        emoji=row.get("emoji"),
        description=row.get("description"),
        instructions=row.get("instructions"),
        servings=int(row.get("servings", 1)),
        prep_time=row.get("prep_time"),
        cook_time=row.get("cook_time"),
        total_calories=float(row.get("total_calories", 0.0)),
        total_protein=float(row.get("total_protein", 0.0)),
        total_carbs=float(row.get("total_carbs", 0.0)),
        total_fat=float(row.get("total_fat", 0.0)),
        is_favorite=bool(row.get("is_favorite", False)),
    )
