"""Domain models for statistics."""

from dataclasses import dataclass
from datetime import date

from nutrition_journal.domain.nutrition import MacroTotals


@dataclass(frozen=True)
class DailyTotals:
    """Macro totals for a single day."""

    day: date
    totals: MacroTotals


@dataclass(frozen=True)
class UserStreak:
    """Consecutive logging days for a user."""

    current_streak: int
    longest_streak: int
    last_logged_date: date | None
