"""Tests for food entries and logging streaks."""

from datetime import UTC, date, datetime
from uuid import uuid4

from nutrition_journal.domain.entries import EntryIngredient, FoodEntryDraft, MealType
from nutrition_journal.domain.stats import UserStreak
from nutrition_journal.services.entries import FoodEntryService
from nutrition_journal.services.user_settings import StreakService
from tests.conftest import InMemoryFoodEntryRepository, InMemoryStreakRepository


def _draft(**overrides: object) -> FoodEntryDraft:
    values: dict[str, object] = {
        "meal_type": MealType.LUNCH,
        "recipe_id": None,
        "servings": 1,
        "calories": 420,
        "protein": 30,
        "carbs": 40,
        "fat": 12,
    }
    values.update(overrides)
    return FoodEntryDraft(**values)  # type: ignore[arg-type]


def test_create_entry_stores_snapshot(
    entry_service: FoodEntryService,
    entry_repository: InMemoryFoodEntryRepository,
) -> None:
    user_id = uuid4()
    ingredient_id = uuid4()
    logged_at = datetime(2024, 3, 5, 12, 30, tzinfo=UTC)

    entry = entry_service.create_entry(
        user_id,
        _draft(
            notes="with salsa",
            ingredients=[EntryIngredient(ingredient_id=ingredient_id, quantity=1.5)],
        ),
        logged_at=logged_at,
    )

    payload = entry_repository.payloads[0]
    assert payload["meal_type"] == "lunch"
    assert payload["recipe_id"] is None
    assert payload["logged_at"] == logged_at.isoformat()
    assert entry.calories == 420
    assert entry.notes == "with salsa"
    assert entry_repository.entry_ingredients[entry.id] == [
        EntryIngredient(ingredient_id=ingredient_id, quantity=1.5)
    ]


def test_recipe_entry_has_no_ingredient_rows(
    entry_service: FoodEntryService,
    entry_repository: InMemoryFoodEntryRepository,
) -> None:
    recipe_id = uuid4()

    entry = entry_service.create_entry(uuid4(), _draft(recipe_id=recipe_id, servings=2))

    assert entry.recipe_id == recipe_id
    assert entry.id not in entry_repository.entry_ingredients


def test_list_entries_for_local_day(
    entry_repository: InMemoryFoodEntryRepository,
    streak_service: StreakService,
) -> None:
    service = FoodEntryService(
        repository=entry_repository, streak_service=streak_service
    )
    user_id = uuid4()
    # 23:30 in Los Angeles on March 4 is 07:30 UTC on March 5
    late = service.create_entry(
        user_id, _draft(), logged_at=datetime(2024, 3, 5, 7, 30, tzinfo=UTC)
    )
    service.create_entry(
        user_id, _draft(), logged_at=datetime(2024, 3, 5, 20, 0, tzinfo=UTC)
    )

    entries = service.list_entries_for_day(
        user_id, date(2024, 3, 4), "America/Los_Angeles"
    )

    assert [entry.id for entry in entries] == [late.id]


def test_update_entry_only_touches_editable_fields(
    entry_service: FoodEntryService,
) -> None:
    user_id = uuid4()
    entry = entry_service.create_entry(user_id, _draft())

    updated = entry_service.update_entry(
        user_id,
        entry.id,
        {"meal_type": MealType.DINNER, "calories": 380, "user_id": uuid4()},
    )

    assert updated.meal_type is MealType.DINNER
    assert updated.calories == 380
    assert updated.user_id == entry.user_id


def test_delete_entry(entry_service: FoodEntryService) -> None:
    user_id = uuid4()
    entry = entry_service.create_entry(user_id, _draft())

    assert entry_service.delete_entry(user_id, entry.id)

    assert entry_service.get_entry(user_id, entry.id) is None
    assert not entry_service.delete_entry(user_id, entry.id)


def test_entries_are_scoped_to_their_owner(entry_service: FoodEntryService) -> None:
    owner = uuid4()
    stranger = uuid4()
    entry = entry_service.create_entry(owner, _draft())

    assert entry_service.get_entry(stranger, entry.id) is None
    assert entry_service.update_entry(stranger, entry.id, {"calories": 1}) is None
    assert not entry_service.delete_entry(stranger, entry.id)
    assert entry_service.get_entry(owner, entry.id).entry == entry


def test_streak_counts_consecutive_days(streak_service: StreakService) -> None:
    user_id = uuid4()

    streak_service.record_log(user_id, date(2024, 3, 1))
    streak_service.record_log(user_id, date(2024, 3, 2))
    streak = streak_service.record_log(user_id, date(2024, 3, 3))

    assert streak == UserStreak(3, 3, date(2024, 3, 3))


def test_streak_same_day_is_unchanged(streak_service: StreakService) -> None:
    user_id = uuid4()
    first = streak_service.record_log(user_id, date(2024, 3, 1))

    assert streak_service.record_log(user_id, date(2024, 3, 1)) == first


def test_streak_resets_after_gap_and_keeps_longest(
    streak_service: StreakService,
    streak_repository: InMemoryStreakRepository,
) -> None:
    user_id = uuid4()
    streak_repository.streaks[user_id] = UserStreak(5, 7, date(2024, 3, 1))

    streak = streak_service.record_log(user_id, date(2024, 3, 4))

    assert streak == UserStreak(1, 7, date(2024, 3, 4))


def test_new_user_has_empty_streak(streak_service: StreakService) -> None:
    assert streak_service.get_streak(uuid4()) == UserStreak(0, 0, None)


def test_entry_logging_updates_streak_in_service_timezone(
    entry_repository: InMemoryFoodEntryRepository,
    streak_service: StreakService,
    streak_repository: InMemoryStreakRepository,
) -> None:
    service = FoodEntryService(
        repository=entry_repository,
        streak_service=streak_service,
        timezone_name="Asia/Tokyo",
    )
    user_id = uuid4()

    service.create_entry(
        user_id, _draft(), logged_at=datetime(2024, 3, 5, 20, 0, tzinfo=UTC)
    )

    assert streak_repository.streaks[user_id].last_logged_date == date(2024, 3, 6)
