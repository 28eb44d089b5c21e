"""Progress and statistics over logged meals."""

from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from uuid import UUID
from zoneinfo import ZoneInfo

from nutrition_journal.domain.entries import FoodEntry
from nutrition_journal.domain.nutrition import MacroGoals, MacroSplit, MacroTotals
from nutrition_journal.domain.stats import DailyTotals
from nutrition_journal.services.entries import FoodEntryService
from nutrition_journal.services.nutrition import (
    ProgressStatus,
    goal_progress,
    macro_percentages_of_calories,
    percent_of_goal,
    sum_daily_totals,
)
from nutrition_journal.services.user_settings import UserSettingsService


@dataclass(frozen=True)
class MacroProgress:
    """Progress of one macro toward its goal."""

    current: float
    goal: float
    percent: float
    status: ProgressStatus


@dataclass(frozen=True)
class DayProgress:
    """Totals, goals and macro split for one day."""

    day: date
    totals: MacroTotals
    goals: MacroGoals
    calories: MacroProgress
    protein: MacroProgress
    carbs: MacroProgress
    fat: MacroProgress
    split: MacroSplit
    entries: list[FoodEntry]


@dataclass
class PeriodSummary:
    """Aggregated totals for a period."""

    daily: list[DailyTotals]
    average: MacroTotals
    days_logged: int


@dataclass
class StatsService:
    """Service for computing progress in the user's timezone."""

    entry_service: FoodEntryService
    settings_service: UserSettingsService

    def get_day(self, user_id: UUID, day: date, timezone_name: str) -> DayProgress:
        """Return progress for a local calendar day."""
        entries = self.entry_service.list_entries_for_day(user_id, day, timezone_name)
        totals = sum_daily_totals(entries)
        goals = self.settings_service.get_goals(user_id)
        return DayProgress(
            day=day,
            totals=totals,
            goals=goals,
            calories=_progress(totals.calories, goals.calories),
            protein=_progress(totals.protein, goals.protein),
            carbs=_progress(totals.carbs, goals.carbs),
            fat=_progress(totals.fat, goals.fat),
            split=macro_percentages_of_calories(totals),
            entries=entries,
        )

    def get_today(self, user_id: UUID, timezone_name: str) -> DayProgress:
        """Return today's progress in the user's timezone."""
        today = datetime.now(tz=ZoneInfo(timezone_name)).date()
        return self.get_day(user_id, today, timezone_name)

    def get_week(self, user_id: UUID, timezone_name: str) -> PeriodSummary:
        """Return totals for the current Sunday-to-Saturday week."""
        today = datetime.now(tz=ZoneInfo(timezone_name)).date()
        start = today - timedelta(days=(today.weekday() + 1) % 7)
        return self._period(user_id, start, 7, timezone_name)

    def get_recent_days(
        self, user_id: UUID, days: int, timezone_name: str
    ) -> PeriodSummary:
        """Return totals for the last N days including today."""
        today = datetime.now(tz=ZoneInfo(timezone_name)).date()
        return self._period(user_id, today - timedelta(days=days - 1), days, timezone_name)

    def _period(
        self, user_id: UUID, start: date, days: int, timezone_name: str
    ) -> PeriodSummary:
        tz = ZoneInfo(timezone_name)
        start_at = datetime(start.year, start.month, start.day, tzinfo=tz)
        entries = self.entry_service.list_entries_between(
            user_id, start_at, start_at + timedelta(days=days)
        )
        return _aggregate_period(start, days, entries, tz)


def _progress(current: float, goal: float) -> MacroProgress:
    return MacroProgress(
        current=current,
        goal=goal,
        percent=percent_of_goal(current, goal),
        status=goal_progress(current, goal),
    )


def _aggregate_period(
    start: date, days: int, entries: list[FoodEntry], tz: ZoneInfo
) -> PeriodSummary:
    by_day: dict[date, list[FoodEntry]] = {}
    for entry in entries:
        logged_at = entry.logged_at
        if logged_at.tzinfo is None:
            logged_at = logged_at.replace(tzinfo=UTC)
        by_day.setdefault(logged_at.astimezone(tz).date(), []).append(entry)

    daily = []
    for offset in range(days):
        day = start + timedelta(days=offset)
        daily.append(DailyTotals(day=day, totals=sum_daily_totals(by_day.get(day, []))))

    logged_days = [entry for entry in daily if entry.totals.calories > 0]
    total_days = max(len(logged_days), 1)
    overall = MacroTotals.zero()
    for entry in logged_days:
        overall = MacroTotals(
            calories=overall.calories + entry.totals.calories,
            protein=overall.protein + entry.totals.protein,
            carbs=overall.carbs + entry.totals.carbs,
            fat=overall.fat + entry.totals.fat,
        )
    return PeriodSummary(
        daily=daily,
        average=MacroTotals(
            calories=overall.calories / total_days,
            protein=overall.protein / total_days,
            carbs=overall.carbs / total_days,
            fat=overall.fat / total_days,
        ),
        days_logged=len(logged_days),
    )
