"""Supabase repositories for user settings and streaks."""

from dataclasses import dataclass
from datetime import UTC, date, datetime
from uuid import UUID

from supabase import Client

from nutrition_journal.domain.nutrition import MacroGoals
from nutrition_journal.domain.stats import UserStreak
from nutrition_journal.services.user_settings import (
    StreakRepository,
    UserSettingsRepository,
)


@dataclass
class SupabaseUserSettingsRepository(UserSettingsRepository):
    """Supabase implementation for user settings."""

    client: Client

    def get_goals(self, user_id: UUID) -> MacroGoals | None:
        """Return the stored goals for a user."""
        response = (
            self.client.table("user_settings")
            .select(
                "daily_calorie_goal, daily_protein_goal, daily_carbs_goal, "
                "daily_fat_goal"
            )
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return MacroGoals(
            calories=float(row["daily_calorie_goal"]),
            protein=float(row["daily_protein_goal"]),
            carbs=float(row["daily_carbs_goal"]),
            fat=float(row["daily_fat_goal"]),
        )

    def upsert_goals(self, user_id: UUID, goals: MacroGoals) -> None:
        """Store the user's goals."""
        self.client.table("user_settings").upsert(
            {
                "user_id": str(user_id),
                "daily_calorie_goal": goals.calories,
                "daily_protein_goal": goals.protein,
                "daily_carbs_goal": goals.carbs,
                "daily_fat_goal": goals.fat,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="user_id",
        ).execute()


@dataclass
class SupabaseStreakRepository(StreakRepository):
    """Supabase implementation for logging streaks."""

    client: Client

    def get_streak(self, user_id: UUID) -> UserStreak | None:
        """Return the streak row for a user."""
        response = (
            self.client.table("user_streaks")
            .select("current_streak, longest_streak, last_logged_date")
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        last_raw = row.get("last_logged_date")
        return UserStreak(
            current_streak=int(row.get("current_streak", 0)),
            longest_streak=int(row.get("longest_streak", 0)),
            last_logged_date=(
                date.fromisoformat(last_raw)
                if isinstance(last_raw, str) and last_raw
                else None
            ),
        )

    def upsert_streak(self, user_id: UUID, streak: UserStreak) -> None:
        """Store the streak row for a user."""
        self.client.table("user_streaks").upsert(
            {
                "user_id": str(user_id),
                "current_streak": streak.current_streak,
                "longest_streak": streak.longest_streak,
                "last_logged_date": (
                    streak.last_logged_date.isoformat()
                    if streak.last_logged_date
                    else None
                ),
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="user_id",
        ).execute()
