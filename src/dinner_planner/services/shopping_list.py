"""
Dinner Planner - Shopping list flows.

Fetches a group's dishes and manual ingredients, then hands them to the
pure shopping engine. Couples see selected dishes of the coming week;
holiday groups see dishes every member approved.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any

from dinner_planner.db.client import PlannerRepository
from dinner_planner.db.scopes import COUPLE_SCOPE, HOLIDAY_SCOPE, DishScope
from dinner_planner.errors import AuthorizationError, ValidationError
from dinner_planner.services.access import Caller, require_couple, require_group, require_holiday_member
from dinner_planner.shopping.aggregator import DishFilter, aggregate
from dinner_planner.shopping.categories import group_by_category
from dinner_planner.shopping.models import (
    AggregatedIngredient,
    CategorizedIngredient,
    Dish,
    IngredientCategory,
    ManualIngredient,
)

logger = logging.getLogger(__name__)

PLAN_DAYS = 7


@dataclass
class ShoppingList:
    rows: list[AggregatedIngredient] = field(default_factory=list)
    categories: dict[IngredientCategory, list[CategorizedIngredient]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            category.value: [
                {
                    "name": item.name,
                    "amount": item.amount,
                    "unit": item.unit,
                    "is_purchased": item.is_purchased,
                    "ids": list(item.ids),
                    "dish_ids": list(item.dish_ids),
                    "dish_names": list(item.dish_names),
                    "is_manual": item.is_manual,
                    "manual_id": item.manual_id,
                }
                for item in items
            ]
            for category, items in self.categories.items()
        }


def build_shopping_list(
    dishes: list[Dish],
    manual_ingredients: list[ManualIngredient] = (),
    include: DishFilter | None = None,
) -> ShoppingList:
    rows = aggregate(dishes, manual_ingredients, include)
    logger.debug(f"Aggregated {len(rows)} rows from {len(dishes)} dishes and {len(manual_ingredients)} manual ingredients")
    return ShoppingList(rows=rows, categories=group_by_category(rows))


def approved_by_all(member_ids: set[int], approvals: dict[str, set[int]]) -> DishFilter:
    """Dish filter: every member of the group approved the dish."""

    def include(dish: Dish) -> bool:
        return bool(member_ids) and approvals.get(dish.id, set()) == member_ids

    return include


def in_plan_window(record: dict, today: date) -> bool:
    """Undated dishes, or dishes dated within the next PLAN_DAYS days."""
    raw = record.get("dish_date")
    if not raw:
        return True
    try:
        dish_date = date.fromisoformat(str(raw)[:10])
    except ValueError:
        return False
    return today <= dish_date <= today + timedelta(days=PLAN_DAYS - 1)


async def load_couple_list(
    repo: PlannerRepository,
    couple_id: str,
    today: date | None = None,
) -> ShoppingList:
    """Selected dishes of the coming week plus manual ingredients. No access check."""
    today = today or date.today()

    records = await repo.list_dishes(COUPLE_SCOPE, couple_id, start_date=today.isoformat())
    dishes = [Dish.from_record(r) for r in records if in_plan_window(r, today)]
    manual = [ManualIngredient.from_record(r) for r in await repo.list_manual_ingredients(couple_id)]

    return build_shopping_list(dishes, manual)


async def load_holiday_list(repo: PlannerRepository, group_id: str) -> ShoppingList:
    """Dishes approved by every member of the group. No access check."""
    records = await repo.list_dishes(HOLIDAY_SCOPE, group_id)
    dishes = [
        Dish.from_record(r, HOLIDAY_SCOPE.ingredients_table, HOLIDAY_SCOPE.dish_fk)
        for r in records
    ]
    member_ids = await repo.list_holiday_member_ids(group_id)
    approvals = await repo.list_holiday_approvals([dish.id for dish in dishes])

    return build_shopping_list(dishes, include=approved_by_all(member_ids, approvals))


async def couple_shopping_list(
    repo: PlannerRepository,
    caller: Caller,
    today: date | None = None,
) -> ShoppingList:
    return await load_couple_list(repo, require_couple(caller), today)


async def holiday_shopping_list(repo: PlannerRepository, caller: Caller, group_id: str) -> ShoppingList:
    await require_holiday_member(repo, caller, group_id)
    return await load_holiday_list(repo, group_id)


async def set_ingredients_purchased(
    repo: PlannerRepository,
    caller: Caller,
    ingredient_ids: list[str],
    is_purchased: bool,
    *,
    scope: DishScope = COUPLE_SCOPE,
    group_id: str | None = None,
) -> None:
    """Tick or untick every ingredient row behind a shopping list row."""
    group_id = await require_group(repo, caller, scope, group_id)
    if not ingredient_ids:
        return

    owners = await repo.get_ingredient_group_ids(scope, ingredient_ids)
    if owners - {group_id}:
        raise AuthorizationError("Ingredients belong to another group")

    await repo.set_ingredients_purchased(scope, ingredient_ids, is_purchased)


# =============================================================================
# Manual Ingredients
# =============================================================================


async def add_manual_ingredient(
    repo: PlannerRepository,
    caller: Caller,
    name: str,
    amount: str | None = None,
    unit: str | None = None,
) -> dict:
    couple_id = require_couple(caller)
    name = (name or "").strip()
    if not name:
        raise ValidationError("Ingredient name is required")
    return await repo.add_manual_ingredient(couple_id, name, amount or "", unit or "")


async def update_manual_ingredient(
    repo: PlannerRepository,
    caller: Caller,
    ingredient_id: str,
    *,
    name: str | None = None,
    amount: str | None = None,
    unit: str | None = None,
    is_purchased: bool | None = None,
) -> None:
    couple_id = require_couple(caller)

    updates: dict[str, Any] = {}
    if name is not None:
        if not name.strip():
            raise ValidationError("Ingredient name is required")
        updates["name"] = name.strip()
    if amount is not None:
        updates["amount"] = amount
    if unit is not None:
        updates["unit"] = unit
    if is_purchased is not None:
        updates["is_purchased"] = is_purchased

    await repo.update_manual_ingredient(couple_id, ingredient_id, updates)


async def delete_manual_ingredient(repo: PlannerRepository, caller: Caller, ingredient_id: str) -> None:
    couple_id = require_couple(caller)
    await repo.delete_manual_ingredient(couple_id, ingredient_id)
