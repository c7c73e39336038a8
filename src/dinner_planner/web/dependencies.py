"""
FastAPI dependencies for repositories and services.

Tests replace these through `app.dependency_overrides`.
"""

from fastapi import Depends

from dinner_planner.ai.cache import DishCacheService
from dinner_planner.db.client import PlannerRepository, SupabaseDishCacheStore, get_service_client
from dinner_planner.services.dish_ingredients import DishIngredientResolver
from dinner_planner.services.tasks import TaskRegistry

# One registry per process; tasks never cross processes
_registry = TaskRegistry()


def get_repository() -> PlannerRepository:
    return PlannerRepository(get_service_client())


def get_resolver(repo: PlannerRepository = Depends(get_repository)) -> DishIngredientResolver:
    cache = DishCacheService(SupabaseDishCacheStore(repo.client))
    return DishIngredientResolver(repo, cache)


def get_registry() -> TaskRegistry:
    return _registry
