"""Tests for the wizard endpoints."""

from uuid import uuid4

from fastapi.testclient import TestClient

from nutrition_journal.api.app import create_app
from tests.conftest import API_TOKEN, make_ingredient, make_recipe


def _headers(user_id) -> dict[str, str]:  # type: ignore[no-untyped-def]
    return {"X-Api-Token": API_TOKEN, "X-User-Id": str(user_id)}


def test_quick_add_wizard_flow(container, ingredient_repository, entry_repository) -> None:
    client = TestClient(create_app(container))
    user_id = uuid4()
    banana = ingredient_repository.add(
        make_ingredient(name="Banana", calories=105, protein=1.3, carbs=27, fat=0.4)
    )

    opened = client.post("/wizard", headers=_headers(user_id))
    assert opened.status_code == 201
    wizard_id = opened.json()["id"]
    assert opened.json()["step"] == "meal-type"

    def send(event: dict[str, object]) -> dict[str, object]:
        response = client.post(
            f"/wizard/{wizard_id}/events", json=event, headers=_headers(user_id)
        )
        assert response.status_code == 200
        return response.json()

    assert send({"type": "meal_type", "meal_type": "snack"})["step"] == "source"
    view = send({"type": "source", "source": "quick-add"})
    assert view["step"] == "ingredients"
    assert view["can_advance"] is False

    view = send({"type": "add_ingredient", "ingredient_id": str(banana.id)})
    view = send(
        {
            "type": "adjust_ingredient",
            "ingredient_id": str(banana.id),
            "direction": "increment",
        }
    )
    assert view["state"]["totals"]["calories"] == 157.5
    assert view["can_advance"] is True

    assert send({"type": "advance"})["step"] == "servings"
    view = send({"type": "advance"})
    assert view["step"] == "preview"
    assert view["preview"]["totals"]["calories"] == 157.5

    submitted = client.post(f"/wizard/{wizard_id}/submit", headers=_headers(user_id))
    assert submitted.status_code == 201
    assert submitted.json()["recipe_id"] is None
    assert len(entry_repository.entries) == 1

    gone = client.get(f"/wizard/{wizard_id}", headers=_headers(user_id))
    assert gone.status_code == 404


def test_recipe_wizard_back_navigation(container, recipe_repository) -> None:
    client = TestClient(create_app(container))
    user_id = uuid4()
    recipe = recipe_repository.add(make_recipe(servings=2, user_id=user_id))
    wizard_id = client.post("/wizard", headers=_headers(user_id)).json()["id"]

    def send(event: dict[str, object]) -> dict[str, object]:
        return client.post(
            f"/wizard/{wizard_id}/events", json=event, headers=_headers(user_id)
        ).json()

    send({"type": "meal_type", "meal_type": "dinner"})
    send({"type": "source", "source": "recipe"})
    view = send({"type": "recipe", "recipe_id": str(recipe.id)})
    assert view["step"] == "servings"
    assert view["state"]["totals"]["calories"] == 300

    view = send({"type": "servings", "servings": 2})
    assert view["state"]["totals"]["calories"] == 600

    assert send({"type": "back"})["step"] == "recipe"


def test_wizard_errors(container) -> None:
    client = TestClient(create_app(container))
    user_id = uuid4()
    wizard_id = client.post("/wizard", headers=_headers(user_id)).json()["id"]

    not_ready = client.post(f"/wizard/{wizard_id}/submit", headers=_headers(user_id))
    assert not_ready.status_code == 409

    other_user = client.get(f"/wizard/{wizard_id}", headers=_headers(uuid4()))
    assert other_user.status_code == 404

    client.post(
        f"/wizard/{wizard_id}/events",
        json={"type": "meal_type", "meal_type": "lunch"},
        headers=_headers(user_id),
    )
    client.post(
        f"/wizard/{wizard_id}/events",
        json={"type": "source", "source": "quick-add"},
        headers=_headers(user_id),
    )
    unknown = client.post(
        f"/wizard/{wizard_id}/events",
        json={"type": "add_ingredient", "ingredient_id": str(uuid4())},
        headers=_headers(user_id),
    )
    assert unknown.status_code == 404

    bad_event = client.post(
        f"/wizard/{wizard_id}/events",
        json={"type": "teleport"},
        headers=_headers(user_id),
    )
    assert bad_event.status_code == 422

    closed = client.delete(f"/wizard/{wizard_id}", headers=_headers(user_id))
    assert closed.status_code == 204


def test_failed_submission_returns_bad_gateway(
    container, ingredient_repository, entry_repository
) -> None:
    client = TestClient(create_app(container))
    user_id = uuid4()
    egg = ingredient_repository.add(make_ingredient())
    wizard_id = client.post("/wizard", headers=_headers(user_id)).json()["id"]
    for event in (
        {"type": "meal_type", "meal_type": "breakfast"},
        {"type": "source", "source": "quick-add"},
        {"type": "add_ingredient", "ingredient_id": str(egg.id), "quantity": 2},
        {"type": "advance"},
        {"type": "advance"},
    ):
        client.post(
            f"/wizard/{wizard_id}/events", json=event, headers=_headers(user_id)
        )
    entry_repository.fail_with = RuntimeError("insert failed")

    response = client.post(f"/wizard/{wizard_id}/submit", headers=_headers(user_id))

    assert response.status_code == 502
    view = client.get(f"/wizard/{wizard_id}", headers=_headers(user_id)).json()
    assert view["step"] == "preview"
    assert view["state"]["totals"]["calories"] == 140


def test_wizard_only_sees_the_users_catalog(
    container, ingredient_repository, recipe_repository
) -> None:
    client = TestClient(create_app(container))
    user_id = uuid4()
    other_recipe = recipe_repository.add(make_recipe(user_id=uuid4()))
    other_ingredient = ingredient_repository.add(make_ingredient(user_id=uuid4()))
    shared = ingredient_repository.add(make_ingredient(name="Rice"))

    def open_at(source: str) -> str:
        wizard_id = client.post("/wizard", headers=_headers(user_id)).json()["id"]
        for event in (
            {"type": "meal_type", "meal_type": "lunch"},
            {"type": "source", "source": source},
        ):
            client.post(
                f"/wizard/{wizard_id}/events", json=event, headers=_headers(user_id)
            )
        return wizard_id

    recipe_wizard = open_at("recipe")
    foreign_recipe = client.post(
        f"/wizard/{recipe_wizard}/events",
        json={"type": "recipe", "recipe_id": str(other_recipe.id)},
        headers=_headers(user_id),
    )
    assert foreign_recipe.status_code == 404

    quick_wizard = open_at("quick-add")
    foreign_ingredient = client.post(
        f"/wizard/{quick_wizard}/events",
        json={"type": "add_ingredient", "ingredient_id": str(other_ingredient.id)},
        headers=_headers(user_id),
    )
    assert foreign_ingredient.status_code == 404

    added = client.post(
        f"/wizard/{quick_wizard}/events",
        json={"type": "add_ingredient", "ingredient_id": str(shared.id)},
        headers=_headers(user_id),
    )
    assert added.status_code == 200
    assert added.json()["state"]["ingredients"][0]["ingredient"]["id"] == str(shared.id)
