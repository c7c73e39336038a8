"""
Dinner Planner - Supabase Client.

Low-level database access. All queries go through here. Failed queries
raise PersistenceError; "not found" is reported as None or an empty list.
"""

import logging
from typing import Any

from postgrest.exceptions import APIError
from supabase import Client, create_client

from dinner_planner.ai.cache import CacheEntry
from dinner_planner.ai.parsing import Generated, GeneratedIngredient
from dinner_planner.config import Language, settings
from dinner_planner.db.scopes import DishScope
from dinner_planner.errors import PersistenceError

logger = logging.getLogger(__name__)

# Singleton client instances
_service_client: Client | None = None


def get_service_client() -> Client:
    """
    Get the Supabase client with the service role key.

    Used server-side only: every query that touches group data filters on
    the group id the caller was authorized for.
    """
    global _service_client

    if _service_client is None:
        _service_client = create_client(settings.supabase_url, settings.supabase_service_role_key)

    return _service_client


def _execute(query, action: str):
    """Run a query builder, translating PostgREST errors."""
    try:
        return query.execute()
    except APIError as e:
        logger.error(f"Supabase {action} failed: {e}")
        raise PersistenceError(f"Database error during {action}") from e


def _single(query, action: str) -> dict | None:
    result = _execute(query.maybe_single(), action)
    if result is None:
        return None
    return result.data


class PlannerRepository:
    """Reads and writes for users, groups, dishes and ingredients."""

    def __init__(self, client: Client | None = None):
        self.client = client or get_service_client()

    # =========================================================================
    # Users & Groups
    # =========================================================================

    async def get_user(self, telegram_id: int) -> dict | None:
        """Get a user row by Telegram id."""
        query = self.client.table("users").select("*").eq("telegram_id", telegram_id)
        return _single(query, "get_user")

    async def count_couple_members(self, couple_id: str) -> int:
        """Number of users paired into a couple."""
        result = _execute(
            self.client.table("users")
            .select("telegram_id", count="exact")
            .eq("couple_id", couple_id),
            "count_couple_members",
        )
        if result.count is not None:
            return result.count
        return len(result.data or [])

    async def get_group_preferences(self, scope: DishScope, group_id: str) -> dict:
        """Group preferences (e.g. {"useAI": false}); empty when unset."""
        row = _single(
            self.client.table(scope.group_table).select("preferences").eq("id", group_id),
            "get_group_preferences",
        )
        return (row or {}).get("preferences") or {}

    async def update_group_preferences(self, scope: DishScope, group_id: str, preferences: dict) -> None:
        """Replace the preferences object of a couple or holiday group."""
        _execute(
            self.client.table(scope.group_table).update({"preferences": preferences}).eq("id", group_id),
            "update_group_preferences",
        )

    async def get_user_preferences(self, telegram_id: int) -> dict:
        """Food preferences of a user, used for idea suggestions."""
        row = _single(
            self.client.table("users").select("preferences").eq("telegram_id", telegram_id),
            "get_user_preferences",
        )
        return (row or {}).get("preferences") or {}

    async def is_holiday_member(self, group_id: str, telegram_id: int) -> bool:
        row = _single(
            self.client.table("holiday_members")
            .select("id")
            .eq("holiday_group_id", group_id)
            .eq("telegram_id", telegram_id),
            "is_holiday_member",
        )
        return row is not None

    async def list_holiday_member_ids(self, group_id: str) -> set[int]:
        result = _execute(
            self.client.table("holiday_members").select("telegram_id").eq("holiday_group_id", group_id),
            "list_holiday_member_ids",
        )
        return {row["telegram_id"] for row in result.data or []}

    async def list_holiday_approvals(self, dish_ids: list[str]) -> dict[str, set[int]]:
        """Approving Telegram ids per holiday dish id."""
        if not dish_ids:
            return {}

        result = _execute(
            self.client.table("holiday_dish_approvals")
            .select("holiday_dish_id, telegram_id")
            .in_("holiday_dish_id", dish_ids),
            "list_holiday_approvals",
        )
        approvals: dict[str, set[int]] = {}
        for row in result.data or []:
            approvals.setdefault(str(row["holiday_dish_id"]), set()).add(row["telegram_id"])
        return approvals

    async def has_holiday_approval(self, dish_id: str, telegram_id: int) -> bool:
        row = _single(
            self.client.table("holiday_dish_approvals")
            .select("id")
            .eq("holiday_dish_id", dish_id)
            .eq("telegram_id", telegram_id),
            "has_holiday_approval",
        )
        return row is not None

    async def add_holiday_approval(self, dish_id: str, telegram_id: int) -> None:
        _execute(
            self.client.table("holiday_dish_approvals").insert(
                {"holiday_dish_id": dish_id, "telegram_id": telegram_id}
            ),
            "add_holiday_approval",
        )

    async def remove_holiday_approval(self, dish_id: str, telegram_id: int) -> None:
        _execute(
            self.client.table("holiday_dish_approvals")
            .delete()
            .eq("holiday_dish_id", dish_id)
            .eq("telegram_id", telegram_id),
            "remove_holiday_approval",
        )

    # =========================================================================
    # Dishes
    # =========================================================================

    async def list_dishes(
        self,
        scope: DishScope,
        group_id: str,
        start_date: str | None = None,
    ) -> list[dict]:
        """
        Get a group's dishes with their ingredient rows.

        With start_date, only undated dishes and dishes on/after that date.
        """
        query = (
            self.client.table(scope.dishes_table)
            .select(f"*, {scope.ingredients_table}(*)")
            .eq(scope.group_fk, group_id)
        )
        if start_date:
            query = query.or_(f"dish_date.gte.{start_date},dish_date.is.null")

        result = _execute(query.order("created_at", desc=True), "list_dishes")
        return result.data or []

    async def get_dish(self, scope: DishScope, dish_id: str) -> dict | None:
        query = self.client.table(scope.dishes_table).select("*").eq("id", dish_id)
        return _single(query, "get_dish")

    async def create_dish(self, scope: DishScope, record: dict[str, Any]) -> dict:
        """Insert a dish row and return it."""
        result = _execute(self.client.table(scope.dishes_table).insert(record), "create_dish")
        if not result.data:
            raise PersistenceError("Database error during create_dish")
        return result.data[0]

    async def update_dish(
        self,
        scope: DishScope,
        dish_id: str,
        fields: dict[str, Any],
        group_id: str | None = None,
    ) -> None:
        """Partial update; with group_id the dish must belong to that group."""
        query = self.client.table(scope.dishes_table).update(fields).eq("id", dish_id)
        if group_id is not None:
            query = query.eq(scope.group_fk, group_id)
        _execute(query, "update_dish")

    async def delete_dish(self, scope: DishScope, dish_id: str, group_id: str) -> None:
        _execute(
            self.client.table(scope.dishes_table)
            .delete()
            .eq("id", dish_id)
            .eq(scope.group_fk, group_id),
            "delete_dish",
        )

    async def insert_dish_ingredients(
        self,
        scope: DishScope,
        dish_id: str,
        ingredients: list[GeneratedIngredient],
    ) -> None:
        rows = [
            {
                scope.dish_fk: dish_id,
                "name": ing.name,
                "amount": ing.amount,
                "unit": ing.unit,
            }
            for ing in ingredients
        ]
        if rows:
            _execute(self.client.table(scope.ingredients_table).insert(rows), "insert_dish_ingredients")

    async def set_ingredients_purchased(
        self,
        scope: DishScope,
        ingredient_ids: list[str],
        is_purchased: bool,
    ) -> None:
        if not ingredient_ids:
            return
        _execute(
            self.client.table(scope.ingredients_table)
            .update({"is_purchased": is_purchased})
            .in_("id", ingredient_ids),
            "set_ingredients_purchased",
        )

    async def get_ingredient_group_ids(self, scope: DishScope, ingredient_ids: list[str]) -> set[str]:
        """Group ids owning the given ingredient rows (through their dishes)."""
        if not ingredient_ids:
            return set()

        result = _execute(
            self.client.table(scope.ingredients_table)
            .select(f"id, {scope.dishes_table}!inner({scope.group_fk})")
            .in_("id", ingredient_ids),
            "get_ingredient_group_ids",
        )
        group_ids = set()
        for row in result.data or []:
            dish = row.get(scope.dishes_table) or {}
            if isinstance(dish, list):
                dish = dish[0] if dish else {}
            if dish.get(scope.group_fk):
                group_ids.add(str(dish[scope.group_fk]))
        return group_ids

    async def add_dish_ingredient(
        self,
        scope: DishScope,
        dish_id: str,
        name: str,
        amount: str,
        unit: str,
    ) -> dict:
        result = _execute(
            self.client.table(scope.ingredients_table).insert(
                {
                    scope.dish_fk: dish_id,
                    "name": name,
                    "amount": amount,
                    "unit": unit,
                    "is_purchased": False,
                }
            ),
            "add_dish_ingredient",
        )
        if not result.data:
            raise PersistenceError("Database error during add_dish_ingredient")
        return result.data[0]

    async def update_dish_ingredient(self, scope: DishScope, ingredient_id: str, updates: dict[str, Any]) -> None:
        if not updates:
            return
        _execute(
            self.client.table(scope.ingredients_table).update(updates).eq("id", ingredient_id),
            "update_dish_ingredient",
        )

    async def delete_dish_ingredient(self, scope: DishScope, ingredient_id: str) -> None:
        _execute(
            self.client.table(scope.ingredients_table).delete().eq("id", ingredient_id),
            "delete_dish_ingredient",
        )

    # =========================================================================
    # Manual Ingredients (couples only)
    # =========================================================================

    async def list_manual_ingredients(self, couple_id: str) -> list[dict]:
        result = _execute(
            self.client.table("manual_ingredients")
            .select("*")
            .eq("couple_id", couple_id)
            .order("created_at", desc=True),
            "list_manual_ingredients",
        )
        return result.data or []

    async def add_manual_ingredient(self, couple_id: str, name: str, amount: str, unit: str) -> dict:
        result = _execute(
            self.client.table("manual_ingredients").insert(
                {
                    "couple_id": couple_id,
                    "name": name,
                    "amount": amount,
                    "unit": unit,
                    "is_purchased": False,
                }
            ),
            "add_manual_ingredient",
        )
        if not result.data:
            raise PersistenceError("Database error during add_manual_ingredient")
        return result.data[0]

    async def update_manual_ingredient(self, couple_id: str, ingredient_id: str, updates: dict[str, Any]) -> None:
        if not updates:
            return
        _execute(
            self.client.table("manual_ingredients")
            .update(updates)
            .eq("id", ingredient_id)
            .eq("couple_id", couple_id),
            "update_manual_ingredient",
        )

    async def delete_manual_ingredient(self, couple_id: str, ingredient_id: str) -> None:
        _execute(
            self.client.table("manual_ingredients")
            .delete()
            .eq("id", ingredient_id)
            .eq("couple_id", couple_id),
            "delete_manual_ingredient",
        )


class SupabaseDishCacheStore:
    """DishCacheStore over the dish_cache / dish_cache_ingredients tables."""

    def __init__(self, client: Client | None = None):
        self.client = client or get_service_client()

    async def get_entry(self, dish_name_lower: str, lang: Language) -> CacheEntry | None:
        row = _single(
            self.client.table("dish_cache")
            .select("*, dish_cache_ingredients(name, amount, unit)")
            .eq("dish_name_lower", dish_name_lower)
            .eq("lang", lang),
            "get_cache_entry",
        )
        if not row:
            return None
        return CacheEntry.from_record(row)

    async def set_usage_count(self, entry_id: str, usage_count: int) -> None:
        _execute(
            self.client.table("dish_cache").update({"usage_count": usage_count}).eq("id", entry_id),
            "set_usage_count",
        )

    async def save_entry(
        self,
        dish_name: str,
        dish_name_lower: str,
        lang: Language,
        generated: Generated,
    ) -> None:
        """Upsert the cache row, then replace its ingredient rows wholesale."""
        result = _execute(
            self.client.table("dish_cache").upsert(
                {
                    "dish_name": dish_name,
                    "dish_name_lower": dish_name_lower,
                    "lang": lang,
                    "recipe": generated.recipe or None,
                    **generated.nutrition.model_dump(),
                    "usage_count": 1,
                },
                on_conflict="dish_name_lower,lang",
            ),
            "upsert_cache_entry",
        )
        if not result.data:
            raise PersistenceError("Database error during upsert_cache_entry")

        cache_id = result.data[0]["id"]
        _execute(
            self.client.table("dish_cache_ingredients").delete().eq("cache_id", cache_id),
            "delete_cache_ingredients",
        )
        rows = [
            {"cache_id": cache_id, "name": ing.name, "amount": ing.amount, "unit": ing.unit}
            for ing in generated.ingredients
        ]
        if rows:
            _execute(self.client.table("dish_cache_ingredients").insert(rows), "insert_cache_ingredients")
