"""
Dinner Planner - Dish lifecycle.

Adding a dish creates a placeholder row first and then resolves its AI
content. When the name is rejected as not food, the placeholder is deleted
and the ValidationError reaches the caller.
"""

import logging
from datetime import date
from typing import Any

from dinner_planner.config import Language
from dinner_planner.db.client import PlannerRepository
from dinner_planner.db.scopes import COUPLE_SCOPE, HOLIDAY_SCOPE, DishScope
from dinner_planner.errors import AuthorizationError, PersistenceError, ValidationError
from dinner_planner.services.access import Caller, require_couple, require_group, require_holiday_member
from dinner_planner.services.dish_ingredients import DishIngredientResolver, ResolutionOutcome
from dinner_planner.services.tasks import GenerationTask, TaskRegistry
from dinner_planner.shopping.models import DishStatus
from dinner_planner.validation import validate_dish_name

logger = logging.getLogger(__name__)

HOLIDAY_DISH_CATEGORIES = (
    "cold_appetizers",
    "hot_dishes",
    "salads",
    "alcohol",
    "desserts",
    "drinks",
    "other",
)


def _dish_record(
    scope: DishScope,
    group_id: str,
    name: str,
    caller: Caller,
    dish_date: date | None,
    category: str | None,
) -> dict[str, Any]:
    record: dict[str, Any] = {
        scope.group_fk: group_id,
        "name": name,
        "created_by": caller.telegram_id,
    }
    if scope == HOLIDAY_SCOPE:
        category = category or "other"
        if category not in HOLIDAY_DISH_CATEGORIES:
            raise ValidationError(f"Unknown holiday dish category: {category}")
        record["category"] = category
    else:
        record["status"] = DishStatus.PROPOSED.value
        record["dish_date"] = (dish_date or date.today()).isoformat()
    return record


async def create_dish(
    repo: PlannerRepository,
    caller: Caller,
    name: str,
    lang: Language,
    *,
    scope: DishScope = COUPLE_SCOPE,
    group_id: str | None = None,
    dish_date: date | None = None,
    category: str | None = None,
) -> tuple[str, dict]:
    """
    Authorize, validate and insert a placeholder dish.

    Returns:
        (group_id, dish row)
    """
    group_id = await require_group(repo, caller, scope, group_id)
    name = validate_dish_name(name, lang)
    dish = await repo.create_dish(scope, _dish_record(scope, group_id, name, caller, dish_date, category))
    logger.info(f"Created {scope.name} dish {dish['id']} ('{name}') in group {group_id}")
    return group_id, dish


async def generate_for_dish(
    repo: PlannerRepository,
    resolver: DishIngredientResolver,
    scope: DishScope,
    group_id: str,
    dish: dict,
    lang: Language,
) -> ResolutionOutcome:
    """Resolve AI content for a dish; delete the dish if its name is rejected."""
    try:
        return await resolver.resolve(scope, group_id, str(dish["id"]), dish["name"], lang)
    except ValidationError:
        logger.info(f"Removing rejected {scope.name} dish {dish['id']} ('{dish['name']}')")
        try:
            await repo.delete_dish(scope, str(dish["id"]), group_id)
        except PersistenceError as e:
            logger.error(f"Failed to remove rejected {scope.name} dish {dish['id']}: {e}")
        raise


async def add_dish(
    repo: PlannerRepository,
    resolver: DishIngredientResolver,
    caller: Caller,
    name: str,
    lang: Language,
    *,
    scope: DishScope = COUPLE_SCOPE,
    group_id: str | None = None,
    dish_date: date | None = None,
    category: str | None = None,
) -> tuple[dict, ResolutionOutcome]:
    """
    Add a dish and fill in its ingredients, recipe and nutrition.

    Raises:
        AuthorizationError: caller not in the group
        ValidationError: bad name, or rejected as not food (dish removed)
        PersistenceError: the dish row could not be created
    """
    group_id, dish = await create_dish(
        repo, caller, name, lang,
        scope=scope, group_id=group_id, dish_date=dish_date, category=category,
    )
    outcome = await generate_for_dish(repo, resolver, scope, group_id, dish, lang)
    return dish, outcome


async def add_dish_in_background(
    repo: PlannerRepository,
    resolver: DishIngredientResolver,
    registry: TaskRegistry,
    caller: Caller,
    name: str,
    lang: Language,
    *,
    scope: DishScope = COUPLE_SCOPE,
    group_id: str | None = None,
    dish_date: date | None = None,
    category: str | None = None,
) -> tuple[dict, GenerationTask]:
    """Create the dish now, resolve its AI content as a background task."""
    group_id, dish = await create_dish(
        repo, caller, name, lang,
        scope=scope, group_id=group_id, dish_date=dish_date, category=category,
    )
    task = registry.start(
        str(dish["id"]),
        generate_for_dish(repo, resolver, scope, group_id, dish, lang),
        owner_id=caller.telegram_id,
    )
    return dish, task


async def select_dish(repo: PlannerRepository, caller: Caller, dish_id: str, selected: bool) -> None:
    """
    Approve (or un-approve) a couple dish.

    Once a partner has joined, nobody can approve their own dish.
    """
    couple_id = require_couple(caller)

    dish = await repo.get_dish(COUPLE_SCOPE, dish_id)
    if not dish or str(dish.get("couple_id")) != couple_id:
        raise ValidationError("Dish not found")

    if dish.get("created_by") == caller.telegram_id and await repo.count_couple_members(couple_id) > 1:
        raise AuthorizationError("You cannot approve your own dish. Only your partner can approve it.")

    status = DishStatus.SELECTED if selected else DishStatus.PROPOSED
    await repo.update_dish(COUPLE_SCOPE, dish_id, {"status": status.value}, group_id=couple_id)


async def update_dish(
    repo: PlannerRepository,
    caller: Caller,
    dish_id: str,
    *,
    dish_date: date | None = None,
    recipe: str | None = None,
) -> None:
    """Move a couple dish to another day and/or replace its recipe."""
    couple_id = require_couple(caller)

    fields: dict[str, Any] = {}
    if dish_date is not None:
        fields["dish_date"] = dish_date.isoformat()
    if recipe is not None:
        fields["recipe"] = recipe
    if not fields:
        return

    await repo.update_dish(COUPLE_SCOPE, dish_id, fields, group_id=couple_id)


async def remove_dish(
    repo: PlannerRepository,
    caller: Caller,
    dish_id: str,
    *,
    scope: DishScope = COUPLE_SCOPE,
    group_id: str | None = None,
) -> None:
    group_id = await require_group(repo, caller, scope, group_id)
    await repo.delete_dish(scope, dish_id, group_id)


# =============================================================================
# Holiday Dishes
# =============================================================================


async def _holiday_dish(repo: PlannerRepository, caller: Caller, group_id: str, dish_id: str) -> dict:
    await require_holiday_member(repo, caller, group_id)
    dish = await repo.get_dish(HOLIDAY_SCOPE, dish_id)
    if not dish or str(dish.get(HOLIDAY_SCOPE.group_fk)) != group_id:
        raise ValidationError("Dish not found")
    return dish


async def approve_holiday_dish(repo: PlannerRepository, caller: Caller, group_id: str, dish_id: str) -> bool:
    """
    Record the caller's approval of a holiday dish.

    A dish reaches the group's shopping list once every member approved it.
    Members may approve their own dishes.

    Returns:
        False when the caller had already approved it
    """
    await _holiday_dish(repo, caller, group_id, dish_id)

    if await repo.has_holiday_approval(dish_id, caller.telegram_id):
        return False

    await repo.add_holiday_approval(dish_id, caller.telegram_id)
    logger.info(f"User {caller.telegram_id} approved holiday dish {dish_id} in group {group_id}")
    return True


async def remove_holiday_approval(repo: PlannerRepository, caller: Caller, group_id: str, dish_id: str) -> None:
    await _holiday_dish(repo, caller, group_id, dish_id)
    await repo.remove_holiday_approval(dish_id, caller.telegram_id)


async def update_holiday_recipe(
    repo: PlannerRepository,
    caller: Caller,
    group_id: str,
    dish_id: str,
    recipe: str,
) -> None:
    await _holiday_dish(repo, caller, group_id, dish_id)
    await repo.update_dish(HOLIDAY_SCOPE, dish_id, {"recipe": recipe}, group_id=group_id)
