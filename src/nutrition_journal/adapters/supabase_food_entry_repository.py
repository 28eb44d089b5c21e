"""Supabase repository for food entries."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from nutrition_journal.domain.entries import (
    EntryIngredient,
    FoodEntry,
    FoodEntryDetail,
    MealType,
)
from nutrition_journal.services.entries import FoodEntryRepository


@dataclass
class SupabaseFoodEntryRepository(FoodEntryRepository):
    """Supabase implementation for food entries."""

    client: Client

    def create_entry(self, user_id: UUID, payload: dict[str, object]) -> FoodEntry:
        """Create a food entry row and return it."""
        response = (
            self.client.table("food_entries")
            .insert({"user_id": str(user_id), **payload})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create food entry")
        return _parse_entry(response.data[0])

    def create_entry_ingredients(
        self, entry_id: UUID, ingredients: list[EntryIngredient]
    ) -> None:
        """Create ingredient breakdown rows."""
        payload = [
            {
                "food_entry_id": str(entry_id),
                "ingredient_id": str(item.ingredient_id),
                "quantity": item.quantity,
            }
            for item in ingredients
        ]
        if payload:
            self.client.table("food_entry_ingredients").insert(payload).execute()

    def list_entries(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[FoodEntry]:
        """Return entries in the time range."""
        response = (
            self.client.table("food_entries")
            .select("*")
            .eq("user_id", str(user_id))
            .gte("logged_at", start.isoformat())
            .lt("logged_at", end.isoformat())
            .order("logged_at", desc=False)
            .execute()
        )
        return [_parse_entry(row) for row in response.data or []]

    def get_entry(self, user_id: UUID, entry_id: UUID) -> FoodEntryDetail | None:
        """Return one of the user's entries with its ingredient rows."""
        response = (
            self.client.table("food_entries")
            .select("*, food_entry_ingredients (*)")
            .eq("id", str(entry_id))
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        ingredients = [
            EntryIngredient(
                ingredient_id=UUID(str(item["ingredient_id"])),
                quantity=float(item.get("quantity", 1.0)),
            )
            for item in row.get("food_entry_ingredients") or []
        ]
        return FoodEntryDetail(entry=_parse_entry(row), ingredients=ingredients)

    def update_entry(
        self, user_id: UUID, entry_id: UUID, payload: dict[str, object]
    ) -> FoodEntry | None:
        """Update one of the user's entries and return it."""
        update = dict(payload)
        if isinstance(update.get("meal_type"), MealType):
            update["meal_type"] = update["meal_type"].value
        if isinstance(update.get("logged_at"), datetime):
            update["logged_at"] = update["logged_at"].isoformat()
        response = (
            self.client.table("food_entries")
            .update(update)
            .eq("id", str(entry_id))
            .eq("user_id", str(user_id))
            .execute()
        )
        if not response.data:
            return None
        return _parse_entry(response.data[0])

    def delete_entry(self, user_id: UUID, entry_id: UUID) -> bool:
        """Delete one of the user's entries."""
        response = (
            self.client.table("food_entries")
            .delete()
            .eq("id", str(entry_id))
            .eq("user_id", str(user_id))
            .execute()
        )
        return bool(response.data)


def _parse_entry(row: dict[str, object]) -> FoodEntry:
    recipe_id = row.get("recipe_id")
    return FoodEntry(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        meal_type=MealType(row.get("meal_type", "snack")),
        recipe_id=UUID(str(recipe_id)) if recipe_id else None,
        servings=float(row.get("servings", 1.0)),
        calories=float(row.get("calories", 0.0)),
        protein=float(row.get("protein", 0.0)),
        carbs=float(row.get("carbs", 0.0)),
        fat=float(row.get("fat", 0.0)),
        notes=row.get("notes"),
        logged_at=datetime.fromisoformat(str(row["logged_at"])),
    )
