"""API endpoints for dishes, shopping lists and ideas."""

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from dinner_planner.ai.ideas import generate_ideas
from dinner_planner.config import Language, settings
from dinner_planner.db.client import PlannerRepository
from dinner_planner.db.scopes import COUPLE_SCOPE, HOLIDAY_SCOPE
from dinner_planner.services import dishes, groups, ingredients, shopping_list
from dinner_planner.services.access import Caller, require_couple
from dinner_planner.services.dish_ingredients import DishIngredientResolver
from dinner_planner.services.tasks import TaskRegistry
from dinner_planner.web.auth import get_current_user
from dinner_planner.web.dependencies import get_registry, get_repository, get_resolver

logger = logging.getLogger(__name__)

router = APIRouter(tags=["planner"])


# =============================================================================
# Request Models
# =============================================================================


class AddDishRequest(BaseModel):
    name: str
    dish_date: date | None = None
    lang: Language | None = None
    background: bool = False  # return at once, poll /generation/{task_id}


class AddHolidayDishRequest(BaseModel):
    name: str
    category: str = "other"
    lang: Language | None = None
    background: bool = False


class SelectionRequest(BaseModel):
    selected: bool


class UpdateDishRequest(BaseModel):
    dish_date: date | None = None
    recipe: str | None = None


class PurchasedRequest(BaseModel):
    ids: list[str]
    is_purchased: bool
    holiday_group_id: str | None = None


class ManualIngredientRequest(BaseModel):
    name: str
    amount: str | None = None
    unit: str | None = None


class ManualIngredientUpdate(BaseModel):
    name: str | None = None
    amount: str | None = None
    unit: str | None = None
    is_purchased: bool | None = None


class HolidayRecipeRequest(BaseModel):
    recipe: str


class IngredientRequest(BaseModel):
    name: str
    amount: str | None = None
    unit: str | None = None


class IngredientUpdate(BaseModel):
    name: str | None = None
    amount: str | None = None
    unit: str | None = None


class IdeasRequest(BaseModel):
    lang: Language | None = None


def _lang(lang: Language | None) -> Language:
    return lang or settings.default_lang


# =============================================================================
# User
# =============================================================================


@router.get("/me")
async def get_me(user: Caller = Depends(get_current_user)):
    """Get current user info."""
    return user.model_dump()


# =============================================================================
# Shopping List
# =============================================================================


@router.get("/shopping-list")
async def get_shopping_list(
    user: Caller = Depends(get_current_user),
    repo: PlannerRepository = Depends(get_repository),
):
    """Categorized shopping list for the couple's selected dishes this week."""
    result = await shopping_list.couple_shopping_list(repo, user)
    return {"categories": result.to_dict()}


@router.get("/holiday/{group_id}/shopping-list")
async def get_holiday_shopping_list(
    group_id: str,
    user: Caller = Depends(get_current_user),
    repo: PlannerRepository = Depends(get_repository),
):
    """Categorized shopping list for dishes approved by the whole group."""
    result = await shopping_list.holiday_shopping_list(repo, user, group_id)
    return {"categories": result.to_dict()}


@router.post("/ingredients/purchased")
async def set_purchased(
    req: PurchasedRequest,
    user: Caller = Depends(get_current_user),
    repo: PlannerRepository = Depends(get_repository),
):
    scope = HOLIDAY_SCOPE if req.holiday_group_id else COUPLE_SCOPE
    await shopping_list.set_ingredients_purchased(
        repo, user, req.ids, req.is_purchased, scope=scope, group_id=req.holiday_group_id
    )
    return {"success": True}


# =============================================================================
# Dishes
# =============================================================================


@router.post("/dishes")
async def add_dish(
    req: AddDishRequest,
    user: Caller = Depends(get_current_user),
    repo: PlannerRepository = Depends(get_repository),
    resolver: DishIngredientResolver = Depends(get_resolver),
    registry: TaskRegistry = Depends(get_registry),
):
    """
    Add a dish to the couple's plan and generate its ingredients.

    A name rejected as not food returns 422 with a localized message and
    the dish is not kept.
    """
    lang = _lang(req.lang)
    if req.background:
        dish, task = await dishes.add_dish_in_background(
            repo, resolver, registry, user, req.name, lang, dish_date=req.dish_date
        )
        return {"dish": dish, "task": task.to_dict()}

    dish, outcome = await dishes.add_dish(repo, resolver, user, req.name, lang, dish_date=req.dish_date)
    return {"dish": dish, "generation": outcome.to_dict()}


@router.post("/holiday/{group_id}/dishes")
async def add_holiday_dish(
    group_id: str,
    req: AddHolidayDishRequest,
    user: Caller = Depends(get_current_user),
    repo: PlannerRepository = Depends(get_repository),
    resolver: DishIngredientResolver = Depends(get_resolver),
    registry: TaskRegistry = Depends(get_registry),
):
    lang = _lang(req.lang)
    if req.background:
        dish, task = await dishes.add_dish_in_background(
            repo, resolver, registry, user, req.name, lang,
            scope=HOLIDAY_SCOPE, group_id=group_id, category=req.category,
        )
        return {"dish": dish, "task": task.to_dict()}

    dish, outcome = await dishes.add_dish(
        repo, resolver, user, req.name, lang,
        scope=HOLIDAY_SCOPE, group_id=group_id, category=req.category,
    )
    return {"dish": dish, "generation": outcome.to_dict()}


@router.get("/generation/{task_id}")
async def get_generation(
    task_id: str,
    user: Caller = Depends(get_current_user),
    registry: TaskRegistry = Depends(get_registry),
):
    """State of a background generation started by this user."""
    task = registry.get(task_id)
    if task is None or task.owner_id != user.telegram_id:
        raise HTTPException(status_code=404, detail="Generation task not found")
    return task.to_dict()


@router.delete("/generation/{task_id}")
async def cancel_generation(
    task_id: str,
    user: Caller = Depends(get_current_user),
    registry: TaskRegistry = Depends(get_registry),
):
    task = registry.get(task_id)
    if task is None or task.owner_id != user.telegram_id:
        raise HTTPException(status_code=404, detail="Generation task not found")
    return {"cancelled": task.cancel()}


@router.post("/dishes/{dish_id}/selection")
async def select_dish(
    dish_id: str,
    req: SelectionRequest,
    user: Caller = Depends(get_current_user),
    repo: PlannerRepository = Depends(get_repository),
):
    await dishes.select_dish(repo, user, dish_id, req.selected)
    return {"success": True}


@router.patch("/dishes/{dish_id}")
async def update_dish(
    dish_id: str,
    req: UpdateDishRequest,
    user: Caller = Depends(get_current_user),
    repo: PlannerRepository = Depends(get_repository),
):
    await dishes.update_dish(repo, user, dish_id, dish_date=req.dish_date, recipe=req.recipe)
    return {"success": True}


@router.delete("/dishes/{dish_id}")
async def delete_dish(
    dish_id: str,
    user: Caller = Depends(get_current_user),
    repo: PlannerRepository = Depends(get_repository),
):
    await dishes.remove_dish(repo, user, dish_id)
    return {"success": True}


@router.delete("/holiday/{group_id}/dishes/{dish_id}")
async def delete_holiday_dish(
    group_id: str,
    dish_id: str,
    user: Caller = Depends(get_current_user),
    repo: PlannerRepository = Depends(get_repository),
):
    await dishes.remove_dish(repo, user, dish_id, scope=HOLIDAY_SCOPE, group_id=group_id)
    return {"success": True}


# =============================================================================
# Holiday Dishes
# =============================================================================


@router.patch("/holiday/{group_id}/dishes/{dish_id}")
async def update_holiday_dish(
    group_id: str,
    dish_id: str,
    req: HolidayRecipeRequest,
    user: Caller = Depends(get_current_user),
    repo: PlannerRepository = Depends(get_repository),
):
    await dishes.update_holiday_recipe(repo, user, group_id, dish_id, req.recipe)
    return {"success": True}


@router.post("/holiday/{group_id}/dishes/{dish_id}/approval")
async def approve_holiday_dish(
    group_id: str,
    dish_id: str,
    user: Caller = Depends(get_current_user),
    repo: PlannerRepository = Depends(get_repository),
):
    """Approve a holiday dish. Dishes approved by everyone go on the shopping list."""
    added = await dishes.approve_holiday_dish(repo, user, group_id, dish_id)
    return {"success": True, "already_approved": not added}


@router.delete("/holiday/{group_id}/dishes/{dish_id}/approval")
async def remove_holiday_approval(
    group_id: str,
    dish_id: str,
    user: Caller = Depends(get_current_user),
    repo: PlannerRepository = Depends(get_repository),
):
    await dishes.remove_holiday_approval(repo, user, group_id, dish_id)
    return {"success": True}


# =============================================================================
# Manual Ingredients
# =============================================================================


@router.get("/manual-ingredients")
async def list_manual_ingredients(
    user: Caller = Depends(get_current_user),
    repo: PlannerRepository = Depends(get_repository),
):
    couple_id = require_couple(user)
    return {"items": await repo.list_manual_ingredients(couple_id)}


@router.post("/manual-ingredients")
async def add_manual_ingredient(
    req: ManualIngredientRequest,
    user: Caller = Depends(get_current_user),
    repo: PlannerRepository = Depends(get_repository),
):
    item = await shopping_list.add_manual_ingredient(repo, user, req.name, req.amount, req.unit)
    return {"item": item}


@router.patch("/manual-ingredients/{ingredient_id}")
async def update_manual_ingredient(
    ingredient_id: str,
    req: ManualIngredientUpdate,
    user: Caller = Depends(get_current_user),
    repo: PlannerRepository = Depends(get_repository),
):
    await shopping_list.update_manual_ingredient(
        repo, user, ingredient_id,
        name=req.name, amount=req.amount, unit=req.unit, is_purchased=req.is_purchased,
    )
    return {"success": True}


@router.delete("/manual-ingredients/{ingredient_id}")
async def delete_manual_ingredient(
    ingredient_id: str,
    user: Caller = Depends(get_current_user),
    repo: PlannerRepository = Depends(get_repository),
):
    await shopping_list.delete_manual_ingredient(repo, user, ingredient_id)
    return {"success": True}


# =============================================================================
# Ideas
# =============================================================================


@router.post("/ideas")
async def suggest_ideas(
    req: IdeasRequest,
    user: Caller = Depends(get_current_user),
    repo: PlannerRepository = Depends(get_repository),
):
    """Four dinner ideas from the user's food preferences."""
    preferences = await repo.get_user_preferences(user.telegram_id)
    return {"ideas": await generate_ideas(preferences, _lang(req.lang))}


# =============================================================================
# Dish Ingredients
# =============================================================================


@router.post("/dishes/{dish_id}/ingredients")
async def add_dish_ingredient(
    dish_id: str,
    req: IngredientRequest,
    user: Caller = Depends(get_current_user),
    repo: PlannerRepository = Depends(get_repository),
):
    item = await ingredients.add_dish_ingredient(repo, user, dish_id, req.name, req.amount, req.unit)
    return {"item": item}


@router.patch("/ingredients/{ingredient_id}")
async def update_dish_ingredient(
    ingredient_id: str,
    req: IngredientUpdate,
    user: Caller = Depends(get_current_user),
    repo: PlannerRepository = Depends(get_repository),
):
    await ingredients.update_dish_ingredient(
        repo, user, ingredient_id, name=req.name, amount=req.amount, unit=req.unit
    )
    return {"success": True}


@router.delete("/ingredients/{ingredient_id}")
async def delete_dish_ingredient(
    ingredient_id: str,
    user: Caller = Depends(get_current_user),
    repo: PlannerRepository = Depends(get_repository),
):
    await ingredients.delete_dish_ingredient(repo, user, ingredient_id)
    return {"success": True}


@router.post("/holiday/{group_id}/dishes/{dish_id}/ingredients")
async def add_holiday_dish_ingredient(
    group_id: str,
    dish_id: str,
    req: IngredientRequest,
    user: Caller = Depends(get_current_user),
    repo: PlannerRepository = Depends(get_repository),
):
    item = await ingredients.add_dish_ingredient(
        repo, user, dish_id, req.name, req.amount, req.unit,
        scope=HOLIDAY_SCOPE, group_id=group_id,
    )
    return {"item": item}


@router.patch("/holiday/{group_id}/ingredients/{ingredient_id}")
async def update_holiday_dish_ingredient(
    group_id: str,
    ingredient_id: str,
    req: IngredientUpdate,
    user: Caller = Depends(get_current_user),
    repo: PlannerRepository = Depends(get_repository),
):
    await ingredients.update_dish_ingredient(
        repo, user, ingredient_id,
        name=req.name, amount=req.amount, unit=req.unit,
        scope=HOLIDAY_SCOPE, group_id=group_id,
    )
    return {"success": True}


@router.delete("/holiday/{group_id}/ingredients/{ingredient_id}")
async def delete_holiday_dish_ingredient(
    group_id: str,
    ingredient_id: str,
    user: Caller = Depends(get_current_user),
    repo: PlannerRepository = Depends(get_repository),
):
    await ingredients.delete_dish_ingredient(repo, user, ingredient_id, scope=HOLIDAY_SCOPE, group_id=group_id)
    return {"success": True}


# =============================================================================
# Preferences
# =============================================================================


@router.get("/preferences")
async def get_preferences(
    user: Caller = Depends(get_current_user),
    repo: PlannerRepository = Depends(get_repository),
):
    return {"preferences": await groups.get_preferences(repo, user)}


@router.patch("/preferences")
async def update_preferences(
    req: groups.GroupPreferences,
    user: Caller = Depends(get_current_user),
    repo: PlannerRepository = Depends(get_repository),
):
    """Update couple preferences, e.g. {"useAI": false} to stop generation."""
    return {"preferences": await groups.update_preferences(repo, user, req)}


@router.get("/holiday/{group_id}/preferences")
async def get_holiday_preferences(
    group_id: str,
    user: Caller = Depends(get_current_user),
    repo: PlannerRepository = Depends(get_repository),
):
    preferences = await groups.get_preferences(repo, user, scope=HOLIDAY_SCOPE, group_id=group_id)
    return {"preferences": preferences}


@router.patch("/holiday/{group_id}/preferences")
async def update_holiday_preferences(
    group_id: str,
    req: groups.GroupPreferences,
    user: Caller = Depends(get_current_user),
    repo: PlannerRepository = Depends(get_repository),
):
    preferences = await groups.update_preferences(repo, user, req, scope=HOLIDAY_SCOPE, group_id=group_id)
    return {"preferences": preferences}
