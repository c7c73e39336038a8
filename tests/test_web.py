"""Tests for the web API (dependencies overridden, no network)."""

import pytest
from conftest import NOT_FOOD_RESPONSE, FakeGenerator
from fastapi.testclient import TestClient

from dinner_planner import __version__
from dinner_planner.ai.cache import DishCacheService
from dinner_planner.db.scopes import COUPLE_SCOPE, HOLIDAY_SCOPE
from dinner_planner.errors import PersistenceError
from dinner_planner.services.access import Caller
from dinner_planner.services.dish_ingredients import DishIngredientResolver
from dinner_planner.services.tasks import TaskRegistry
from dinner_planner.web.app import app
from dinner_planner.web.auth import get_current_user
from dinner_planner.web.dependencies import get_registry, get_repository, get_resolver


@pytest.fixture
def registry():
    return TaskRegistry()


@pytest.fixture
def client(mock_repo, cache_store, generator, caller, registry):
    async def create_dish(scope, record):
        return {"id": "dish-1", **record}

    mock_repo.create_dish.side_effect = create_dish
    resolver = DishIngredientResolver(mock_repo, DishCacheService(cache_store, generator))

    app.dependency_overrides[get_current_user] = lambda: caller
    app.dependency_overrides[get_repository] = lambda: mock_repo
    app.dependency_overrides[get_resolver] = lambda: resolver
    app.dependency_overrides[get_registry] = lambda: registry

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "version": __version__}


class TestAuth:
    def test_missing_header(self, mock_repo):
        app.dependency_overrides[get_repository] = lambda: mock_repo
        try:
            response = TestClient(app).get("/api/me")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 401

    def test_bad_format(self, mock_repo):
        app.dependency_overrides[get_repository] = lambda: mock_repo
        try:
            response = TestClient(app).get("/api/me", headers={"Authorization": "Token abc"})
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid authorization format"

    def test_me(self, client):
        response = client.get("/api/me")
        assert response.json() == {"telegram_id": 111, "couple_id": "couple-1", "first_name": "Anna"}


class TestShoppingListRoutes:
    def test_shopping_list(self, client, mock_repo):
        mock_repo.list_dishes.return_value = [
            {
                "id": "d1",
                "name": "Soup",
                "status": "selected",
                "dish_date": None,
                "ingredients": [{"id": "i1", "name": "Молоко", "amount": "1,5", "unit": "л", "dish_id": "d1"}],
            }
        ]
        mock_repo.list_manual_ingredients.return_value = []

        response = client.get("/api/shopping-list")

        assert response.status_code == 200
        categories = response.json()["categories"]
        assert len(categories) == 8
        assert categories["dairy"][0]["name"] == "Молоко"
        assert categories["dairy"][0]["amount"] == 1.5
        assert categories["dairy"][0]["dish_names"] == ["Soup"]
        assert categories["other"] == []

    def test_holiday_forbidden(self, client, mock_repo):
        mock_repo.is_holiday_member.return_value = False

        response = client.get("/api/holiday/holiday-1/shopping-list")

        assert response.status_code == 403
        assert "not a member" in response.json()["error"]

    def test_persistence_error_is_generic(self, client, mock_repo):
        mock_repo.list_dishes.side_effect = PersistenceError("Database error during list_dishes")

        response = client.get("/api/shopping-list")

        assert response.status_code == 500
        assert response.json() == {"error": "Something went wrong. Please try again."}

    def test_set_purchased(self, client, mock_repo):
        mock_repo.get_ingredient_group_ids.return_value = {"couple-1"}

        response = client.post("/api/ingredients/purchased", json={"ids": ["i1"], "is_purchased": True})

        assert response.status_code == 200
        mock_repo.set_ingredients_purchased.assert_awaited_once()


class TestDishRoutes:
    """Tests for adding and managing dishes over HTTP."""

    def test_add_dish(self, client, generator):
        response = client.post("/api/dishes", json={"name": "Борщ", "lang": "ru"})

        assert response.status_code == 200
        body = response.json()
        assert body["dish"]["name"] == "Борщ"
        assert body["generation"]["status"] == "generated"
        assert len(body["generation"]["ingredients"]) == 3
        assert generator.calls == 1

    def test_add_dish_rejected(self, client, mock_repo, cache_store):
        resolver = DishIngredientResolver(mock_repo, DishCacheService(cache_store, FakeGenerator(NOT_FOOD_RESPONSE)))
        app.dependency_overrides[get_resolver] = lambda: resolver

        response = client.post("/api/dishes", json={"name": "Кирпич", "lang": "ru"})

        assert response.status_code == 422
        assert response.json() == {"error": "Это не похоже на блюдо."}
        mock_repo.delete_dish.assert_awaited_once()

    def test_add_dish_bad_name(self, client, mock_repo):
        response = client.post("/api/dishes", json={"name": "?", "lang": "en"})

        assert response.status_code == 422
        assert "error" in response.json()
        mock_repo.create_dish.assert_not_called()

    def test_add_dish_ai_disabled(self, client, mock_repo, generator):
        mock_repo.get_group_preferences.return_value = {"useAI": False}

        response = client.post("/api/dishes", json={"name": "Борщ"})

        assert response.json()["generation"]["status"] == "skipped"
        assert generator.calls == 0

    def test_add_dish_in_background(self, client, registry):
        response = client.post("/api/dishes", json={"name": "Борщ", "background": True})

        assert response.status_code == 200
        task = response.json()["task"]
        assert task["dish_id"] == "dish-1"
        assert task["state"] in ("pending", "running", "complete")

        status = client.get(f"/api/generation/{task['id']}")
        assert status.status_code == 200
        assert status.json()["id"] == task["id"]

    def test_generation_of_other_user(self, client, registry):
        response = client.post("/api/dishes", json={"name": "Борщ", "background": True})
        task_id = response.json()["task"]["id"]

        app.dependency_overrides[get_current_user] = lambda: Caller(telegram_id=999, couple_id="couple-9")

        assert client.get(f"/api/generation/{task_id}").status_code == 404
        assert client.delete(f"/api/generation/{task_id}").status_code == 404

    def test_unknown_generation(self, client):
        assert client.get("/api/generation/nope").status_code == 404

    def test_select_own_dish_forbidden(self, client, mock_repo):
        mock_repo.get_dish.return_value = {"id": "dish-1", "couple_id": "couple-1", "created_by": 111}

        response = client.post("/api/dishes/dish-1/selection", json={"selected": True})

        assert response.status_code == 403

    def test_delete_holiday_dish(self, client, mock_repo):
        response = client.delete("/api/holiday/holiday-1/dishes/dish-1")

        assert response.status_code == 200
        assert mock_repo.delete_dish.await_args.args[1:] == ("dish-1", "holiday-1")


class TestManualIngredientRoutes:
    def test_list(self, client, mock_repo):
        mock_repo.list_manual_ingredients.return_value = [{"id": "m1", "name": "Bread"}]

        response = client.get("/api/manual-ingredients")

        assert response.json() == {"items": [{"id": "m1", "name": "Bread"}]}

    def test_add_requires_name(self, client):
        response = client.post("/api/manual-ingredients", json={"name": " "})
        assert response.status_code == 422

    def test_update(self, client, mock_repo):
        response = client.patch("/api/manual-ingredients/m1", json={"is_purchased": True})

        assert response.status_code == 200
        mock_repo.update_manual_ingredient.assert_awaited_once_with("couple-1", "m1", {"is_purchased": True})

    def test_no_couple(self, client):
        app.dependency_overrides[get_current_user] = lambda: Caller(telegram_id=5)

        response = client.get("/api/manual-ingredients")

        assert response.status_code == 403


class TestHolidayDishRoutes:
    @pytest.fixture(autouse=True)
    def holiday_dish(self, mock_repo):
        mock_repo.get_dish.return_value = {"id": "h1", "holiday_group_id": "holiday-1", "created_by": 222}

    def test_approve(self, client, mock_repo):
        response = client.post("/api/holiday/holiday-1/dishes/h1/approval")

        assert response.json() == {"success": True, "already_approved": False}
        mock_repo.add_holiday_approval.assert_awaited_once_with("h1", 111)

    def test_approve_again(self, client, mock_repo):
        mock_repo.has_holiday_approval.return_value = True

        response = client.post("/api/holiday/holiday-1/dishes/h1/approval")

        assert response.json() == {"success": True, "already_approved": True}

    def test_approve_non_member(self, client, mock_repo):
        mock_repo.is_holiday_member.return_value = False

        response = client.post("/api/holiday/holiday-1/dishes/h1/approval")

        assert response.status_code == 403

    def test_remove_approval(self, client, mock_repo):
        response = client.delete("/api/holiday/holiday-1/dishes/h1/approval")

        assert response.status_code == 200
        mock_repo.remove_holiday_approval.assert_awaited_once_with("h1", 111)

    def test_edit_recipe(self, client, mock_repo):
        response = client.patch("/api/holiday/holiday-1/dishes/h1", json={"recipe": "Slice and serve."})

        assert response.status_code == 200
        mock_repo.update_dish.assert_awaited_once_with(
            HOLIDAY_SCOPE, "h1", {"recipe": "Slice and serve."}, group_id="holiday-1"
        )


class TestDishIngredientRoutes:
    def test_add(self, client, mock_repo):
        mock_repo.get_dish.return_value = {"id": "dish-1", "couple_id": "couple-1"}
        mock_repo.add_dish_ingredient.return_value = {"id": "i1", "name": "Dill"}

        response = client.post("/api/dishes/dish-1/ingredients", json={"name": "Dill", "amount": "1", "unit": "bunch"})

        assert response.json() == {"item": {"id": "i1", "name": "Dill"}}
        mock_repo.add_dish_ingredient.assert_awaited_once_with(COUPLE_SCOPE, "dish-1", "Dill", "1", "bunch")

    def test_add_to_foreign_dish(self, client, mock_repo):
        mock_repo.get_dish.return_value = {"id": "dish-1", "couple_id": "couple-9"}

        response = client.post("/api/dishes/dish-1/ingredients", json={"name": "Dill"})

        assert response.status_code == 403

    def test_update(self, client, mock_repo):
        mock_repo.get_ingredient_group_ids.return_value = {"couple-1"}

        response = client.patch("/api/ingredients/i1", json={"amount": "3"})

        assert response.status_code == 200
        mock_repo.update_dish_ingredient.assert_awaited_once_with(COUPLE_SCOPE, "i1", {"amount": "3"})

    def test_delete(self, client, mock_repo):
        mock_repo.get_ingredient_group_ids.return_value = {"couple-1"}

        response = client.delete("/api/ingredients/i1")

        assert response.status_code == 200
        mock_repo.delete_dish_ingredient.assert_awaited_once_with(COUPLE_SCOPE, "i1")

    def test_delete_unknown(self, client, mock_repo):
        mock_repo.get_ingredient_group_ids.return_value = set()

        response = client.delete("/api/ingredients/i1")

        assert response.status_code == 422

    def test_holiday_add(self, client, mock_repo):
        mock_repo.get_dish.return_value = {"id": "h1", "holiday_group_id": "holiday-1"}
        mock_repo.add_dish_ingredient.return_value = {"id": "i2", "name": "Olives"}

        response = client.post("/api/holiday/holiday-1/dishes/h1/ingredients", json={"name": "Olives"})

        assert response.status_code == 200
        mock_repo.add_dish_ingredient.assert_awaited_once_with(HOLIDAY_SCOPE, "h1", "Olives", "", "")

    def test_holiday_delete(self, client, mock_repo):
        mock_repo.get_ingredient_group_ids.return_value = {"holiday-1"}

        response = client.delete("/api/holiday/holiday-1/ingredients/i1")

        assert response.status_code == 200
        mock_repo.delete_dish_ingredient.assert_awaited_once_with(HOLIDAY_SCOPE, "i1")


class TestPreferenceRoutes:
    def test_turn_ai_off(self, client, mock_repo):
        mock_repo.get_group_preferences.return_value = {"theme": "light"}

        response = client.patch("/api/preferences", json={"useAI": False})

        assert response.json() == {"preferences": {"theme": "light", "useAI": False}}
        mock_repo.update_group_preferences.assert_awaited_once_with(
            COUPLE_SCOPE, "couple-1", {"theme": "light", "useAI": False}
        )

    def test_bad_theme(self, client, mock_repo):
        response = client.patch("/api/preferences", json={"theme": "pink"})

        assert response.status_code == 422
        mock_repo.update_group_preferences.assert_not_called()

    def test_get(self, client, mock_repo):
        mock_repo.get_group_preferences.return_value = {"useAI": True}

        assert client.get("/api/preferences").json() == {"preferences": {"useAI": True}}

    def test_holiday_preferences(self, client, mock_repo):
        response = client.patch("/api/holiday/holiday-1/preferences", json={"useAI": False})

        assert response.status_code == 200
        mock_repo.update_group_preferences.assert_awaited_once_with(HOLIDAY_SCOPE, "holiday-1", {"useAI": False})

    def test_ai_off_then_add_dish_skips_generation(self, client, mock_repo, generator):
        stored = {}

        async def get_prefs(scope, group_id):
            return dict(stored)

        async def set_prefs(scope, group_id, preferences):
            stored.update(preferences)

        mock_repo.get_group_preferences.side_effect = get_prefs
        mock_repo.update_group_preferences.side_effect = set_prefs

        client.patch("/api/preferences", json={"useAI": False})
        response = client.post("/api/dishes", json={"name": "Борщ", "lang": "ru"})

        assert response.status_code == 200
        assert generator.calls == 0
