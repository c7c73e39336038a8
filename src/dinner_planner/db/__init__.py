"""
Dinner Planner - Database access.

All Supabase queries go through PlannerRepository and SupabaseDishCacheStore.
"""

from dinner_planner.db.client import (
    PlannerRepository,
    SupabaseDishCacheStore,
    get_service_client,
)
from dinner_planner.db.scopes import COUPLE_SCOPE, HOLIDAY_SCOPE, DishScope

__all__ = [
    "PlannerRepository",
    "SupabaseDishCacheStore",
    "get_service_client",
    "COUPLE_SCOPE",
    "HOLIDAY_SCOPE",
    "DishScope",
]
