"""User settings and streak services."""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Protocol
from uuid import UUID

from nutrition_journal.domain.nutrition import DEFAULT_GOALS, MacroGoals
from nutrition_journal.domain.stats import UserStreak


class UserSettingsRepository(Protocol):
    """Persistence interface for user settings."""

    def get_goals(self, user_id: UUID) -> MacroGoals | None:
        """Return the user's goals if a settings row exists."""

    def upsert_goals(self, user_id: UUID, goals: MacroGoals) -> None:
        """Store the user's goals."""


class StreakRepository(Protocol):
    """Persistence interface for logging streaks."""

    def get_streak(self, user_id: UUID) -> UserStreak | None:
        """Return the user's streak row, if present."""

    def upsert_streak(self, user_id: UUID, streak: UserStreak) -> None:
        """Store the user's streak."""


@dataclass
class UserSettingsService:
    """Service for user goals."""

    repository: UserSettingsRepository

    def get_goals(self, user_id: UUID) -> MacroGoals:
        """Return the user's goals or the defaults if unset."""
        return self.repository.get_goals(user_id) or DEFAULT_GOALS

    def update_goals(self, user_id: UUID, goals: MacroGoals) -> MacroGoals:
        """Persist new goals."""
        self.repository.upsert_goals(user_id, goals)
        return goals


@dataclass
class StreakService:
    """Service tracking consecutive days with a logged meal."""

    repository: StreakRepository

    def get_streak(self, user_id: UUID) -> UserStreak:
        """Return the streak, or an empty one for new users."""
        return self.repository.get_streak(user_id) or UserStreak(0, 0, None)

    def record_log(self, user_id: UUID, day: date) -> UserStreak:
        """Count a logged meal on a local day."""
        current = self.get_streak(user_id)
        last = current.last_logged_date
        if last is not None and day <= last:
            return current
        if last is not None and day - last == timedelta(days=1):
            length = current.current_streak + 1
        else:
            length = 1
        updated = UserStreak(
            current_streak=length,
            longest_streak=max(current.longest_streak, length),
            last_logged_date=day,
        )
        self.repository.upsert_streak(user_id, updated)
        return updated
