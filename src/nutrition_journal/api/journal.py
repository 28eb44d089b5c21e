"""Food entry, progress and goal endpoints."""

from datetime import date, datetime
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.encoders import jsonable_encoder

from nutrition_journal.api.auth import current_user_id, get_container, require_api_token
from nutrition_journal.api.models import FoodEntryCreate, FoodEntryUpdate, GoalsUpdate
from nutrition_journal.domain.entries import EntryIngredient, FoodEntryDraft
from nutrition_journal.domain.nutrition import MacroGoals

router = APIRouter(tags=["journal"], dependencies=[Depends(require_api_token)])


def _timezone(request: Request, tz: str | None = Query(default=None)) -> str:
    name = tz or get_container(request).settings.default_timezone
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unknown timezone {name}"
        ) from exc
    return name


@router.post("/entries", status_code=status.HTTP_201_CREATED)
def create_entry(
    body: FoodEntryCreate,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Log a food entry with precomputed macros."""
    draft = FoodEntryDraft(
        meal_type=body.meal_type,
        recipe_id=body.recipe_id,
        servings=body.servings,
        calories=body.calories,
        protein=body.protein,
        carbs=body.carbs,
        fat=body.fat,
        notes=body.notes,
        ingredients=[
            EntryIngredient(ingredient_id=item.ingredient_id, quantity=item.quantity)
            for item in body.ingredients
        ],
    )
    entry = get_container(request).entry_service.create_entry(
        user_id, draft, logged_at=body.logged_at
    )
    return jsonable_encoder(entry)


@router.get("/entries")
def list_entries(
    request: Request,
    day: date | None = None,
    timezone_name: str = Depends(_timezone),
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Return the entries of a local day, today by default."""
    if day is None:
        day = datetime.now(tz=ZoneInfo(timezone_name)).date()
    entries = get_container(request).entry_service.list_entries_for_day(
        user_id, day, timezone_name
    )
    return {"entries": jsonable_encoder(entries)}


@router.get("/entries/{entry_id}")
def get_entry(
    entry_id: UUID, request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Return an entry with its ingredient breakdown."""
    detail = get_container(request).entry_service.get_entry(user_id, entry_id)
    if detail is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return {
        **jsonable_encoder(detail.entry),
        "ingredients": jsonable_encoder(detail.ingredients),
    }


@router.patch("/entries/{entry_id}")
def update_entry(
    entry_id: UUID,
    body: FoodEntryUpdate,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Edit an entry."""
    entry = get_container(request).entry_service.update_entry(
        user_id, entry_id, body.model_dump(exclude_unset=True)
    )
    if entry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return jsonable_encoder(entry)


@router.delete("/entries/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_entry(
    entry_id: UUID, request: Request, user_id: UUID = Depends(current_user_id)
) -> None:
    """Delete an entry."""
    if not get_container(request).entry_service.delete_entry(user_id, entry_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)


@router.get("/progress/today")
def progress_today(
    request: Request,
    timezone_name: str = Depends(_timezone),
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Return today's totals against the user's goals."""
    progress = get_container(request).stats_service.get_today(user_id, timezone_name)
    return jsonable_encoder(progress)


@router.get("/progress/day/{day}")
def progress_day(
    day: date,
    request: Request,
    timezone_name: str = Depends(_timezone),
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Return a past day's totals against the user's goals."""
    progress = get_container(request).stats_service.get_day(user_id, day, timezone_name)
    return jsonable_encoder(progress)


@router.get("/progress/week")
def progress_week(
    request: Request,
    days: int | None = Query(default=None, ge=1, le=90),
    timezone_name: str = Depends(_timezone),
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Return the current week, or the last N days when ``days`` is given."""
    stats = get_container(request).stats_service
    if days is None:
        summary = stats.get_week(user_id, timezone_name)
    else:
        summary = stats.get_recent_days(user_id, days, timezone_name)
    return jsonable_encoder(summary)


@router.get("/streak")
def get_streak(
    request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Return the user's logging streak."""
    return jsonable_encoder(get_container(request).streak_service.get_streak(user_id))


@router.get("/settings/goals")
def get_goals(
    request: Request, user_id: UUID = Depends(current_user_id)
) -> dict[str, object]:
    """Return the user's daily goals."""
    return jsonable_encoder(get_container(request).user_settings_service.get_goals(user_id))


@router.put("/settings/goals")
def update_goals(
    body: GoalsUpdate,
    request: Request,
    user_id: UUID = Depends(current_user_id),
) -> dict[str, object]:
    """Replace the user's daily goals."""
    goals = get_container(request).user_settings_service.update_goals(
        user_id, MacroGoals(**body.model_dump())
    )
    return jsonable_encoder(goals)
