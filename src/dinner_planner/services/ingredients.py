"""
Dinner Planner - Dish ingredient editing.

Manual edits to the ingredient rows of a dish, after (or instead of)
generation. Rows are checked against the caller's group through their dish.
"""

import logging
from typing import Any

from dinner_planner.db.client import PlannerRepository
from dinner_planner.db.scopes import COUPLE_SCOPE, DishScope
from dinner_planner.errors import AuthorizationError, ValidationError
from dinner_planner.services.access import Caller, require_group

logger = logging.getLogger(__name__)


async def _require_ingredient(repo: PlannerRepository, scope: DishScope, group_id: str, ingredient_id: str) -> None:
    owners = await repo.get_ingredient_group_ids(scope, [ingredient_id])
    if not owners:
        raise ValidationError("Ingredient not found")
    if owners != {group_id}:
        raise AuthorizationError("Ingredient belongs to another group")


async def add_dish_ingredient(
    repo: PlannerRepository,
    caller: Caller,
    dish_id: str,
    name: str,
    amount: str | None = None,
    unit: str | None = None,
    *,
    scope: DishScope = COUPLE_SCOPE,
    group_id: str | None = None,
) -> dict:
    """Add an ingredient row to a dish of the caller's group."""
    group_id = await require_group(repo, caller, scope, group_id)

    name = (name or "").strip()
    if not name:
        raise ValidationError("Ingredient name is required")

    dish = await repo.get_dish(scope, dish_id)
    if not dish or str(dish.get(scope.group_fk)) != group_id:
        raise AuthorizationError("Dish not found or unauthorized")

    row = await repo.add_dish_ingredient(scope, dish_id, name, amount or "", unit or "")
    logger.info(f"Added ingredient '{name}' to {scope.name} dish {dish_id}")
    return row


async def update_dish_ingredient(
    repo: PlannerRepository,
    caller: Caller,
    ingredient_id: str,
    *,
    name: str | None = None,
    amount: str | None = None,
    unit: str | None = None,
    scope: DishScope = COUPLE_SCOPE,
    group_id: str | None = None,
) -> None:
    group_id = await require_group(repo, caller, scope, group_id)

    updates: dict[str, Any] = {}
    if name is not None:
        if not name.strip():
            raise ValidationError("Ingredient name is required")
        updates["name"] = name.strip()
    if amount is not None:
        updates["amount"] = amount
    if unit is not None:
        updates["unit"] = unit
    if not updates:
        return

    await _require_ingredient(repo, scope, group_id, ingredient_id)
    await repo.update_dish_ingredient(scope, ingredient_id, updates)


async def delete_dish_ingredient(
    repo: PlannerRepository,
    caller: Caller,
    ingredient_id: str,
    *,
    scope: DishScope = COUPLE_SCOPE,
    group_id: str | None = None,
) -> None:
    group_id = await require_group(repo, caller, scope, group_id)
    await _require_ingredient(repo, scope, group_id, ingredient_id)
    await repo.delete_dish_ingredient(scope, ingredient_id)
