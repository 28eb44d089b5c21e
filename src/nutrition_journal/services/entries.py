"""Food entry service for the meal journal."""

import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import Protocol
from uuid import UUID
from zoneinfo import ZoneInfo

from nutrition_journal.domain.entries import (
    EntryIngredient,
    FoodEntry,
    FoodEntryDetail,
    FoodEntryDraft,
)
from nutrition_journal.services.user_settings import StreakService

_logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = {
    "meal_type",
    "servings",
    "calories",
    "protein",
    "carbs",
    "fat",
    "notes",
    "logged_at",
}


class FoodEntryRepository(Protocol):
    """Persistence interface for food entries."""

    def create_entry(self, user_id: UUID, payload: dict[str, object]) -> FoodEntry:
        """Create a food entry row and return it."""

    def create_entry_ingredients(
        self, entry_id: UUID, ingredients: list[EntryIngredient]
    ) -> None:
        """Create the ingredient breakdown rows for an entry."""

    def list_entries(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[FoodEntry]:
        """Return entries logged in [start, end), oldest first."""

    def get_entry(self, user_id: UUID, entry_id: UUID) -> FoodEntryDetail | None:
        """Return one of the user's entries with its ingredient breakdown."""

    def update_entry(
        self, user_id: UUID, entry_id: UUID, payload: dict[str, object]
    ) -> FoodEntry | None:
        """Update one of the user's entries; None when it is not theirs."""

    def delete_entry(self, user_id: UUID, entry_id: UUID) -> bool:
        """Delete one of the user's entries; False when nothing matched."""


@dataclass
class FoodEntryService:
    """Service that persists and queries logged meals."""

    repository: FoodEntryRepository
    streak_service: StreakService
    timezone_name: str = "UTC"

    def create_entry(
        self,
        user_id: UUID,
        draft: FoodEntryDraft,
        logged_at: datetime | None = None,
    ) -> FoodEntry:
        """Persist a draft as-is; its macros are the stored snapshot."""
        logged = logged_at or datetime.now(tz=UTC)
        entry = self.repository.create_entry(
            user_id,
            {
                "meal_type": draft.meal_type.value,
                "recipe_id": str(draft.recipe_id) if draft.recipe_id else None,
                "servings": draft.servings,
                "calories": draft.calories,
                "protein": draft.protein,
                "carbs": draft.carbs,
                "fat": draft.fat,
                "notes": draft.notes,
                "logged_at": logged.isoformat(),
            },
        )
        if draft.ingredients:
            self.repository.create_entry_ingredients(entry.id, draft.ingredients)
        local_day = logged.astimezone(ZoneInfo(self.timezone_name)).date()
        self.streak_service.record_log(user_id, local_day)
        _logger.info(
            "Logged %s entry %s for user %s", draft.meal_type.value, entry.id, user_id
        )
        return entry

    def list_entries_for_day(
        self, user_id: UUID, day: date, timezone_name: str | None = None
    ) -> list[FoodEntry]:
        """Return entries logged on a local calendar day."""
        tz = ZoneInfo(timezone_name or self.timezone_name)
        start = datetime(day.year, day.month, day.day, tzinfo=tz)
        end = start + timedelta(days=1)
        return self.list_entries_between(user_id, start, end)

    def list_entries_between(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[FoodEntry]:
        """Return entries logged between two instants."""
        return self.repository.list_entries(
            user_id, start.astimezone(UTC), end.astimezone(UTC)
        )

    def get_entry(self, user_id: UUID, entry_id: UUID) -> FoodEntryDetail | None:
        """Return one of the user's entries with its ingredient breakdown."""
        return self.repository.get_entry(user_id, entry_id)

    def update_entry(
        self, user_id: UUID, entry_id: UUID, payload: dict[str, object]
    ) -> FoodEntry | None:
        """Update editable fields; macros are never re-derived from the recipe."""
        update = {key: value for key, value in payload.items() if key in _UPDATABLE_FIELDS}
        return self.repository.update_entry(user_id, entry_id, update)

    def delete_entry(self, user_id: UUID, entry_id: UUID) -> bool:
        """Delete one of the user's entries."""
        return self.repository.delete_entry(user_id, entry_id)
