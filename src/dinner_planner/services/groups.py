"""
Dinner Planner - Group preferences.

Couples and holiday groups keep a small preferences object. `useAI: false`
turns off ingredient generation for new dishes of the group.
"""

import logging
from typing import Literal

from pydantic import BaseModel

from dinner_planner.db.client import PlannerRepository
from dinner_planner.db.scopes import COUPLE_SCOPE, DishScope
from dinner_planner.services.access import Caller, require_group

logger = logging.getLogger(__name__)


class GroupPreferences(BaseModel):
    """Known preference keys. Unset fields leave the stored value alone."""

    useAI: bool | None = None
    theme: Literal["light", "dark"] | None = None
    language: Literal["en", "ru", "auto"] | None = None


async def get_preferences(
    repo: PlannerRepository,
    caller: Caller,
    *,
    scope: DishScope = COUPLE_SCOPE,
    group_id: str | None = None,
) -> dict:
    group_id = await require_group(repo, caller, scope, group_id)
    return await repo.get_group_preferences(scope, group_id)


async def update_preferences(
    repo: PlannerRepository,
    caller: Caller,
    changes: GroupPreferences,
    *,
    scope: DishScope = COUPLE_SCOPE,
    group_id: str | None = None,
) -> dict:
    """Merge the given preferences into the stored ones and return the result."""
    group_id = await require_group(repo, caller, scope, group_id)

    current = await repo.get_group_preferences(scope, group_id)
    merged = {**current, **changes.model_dump(exclude_none=True)}
    await repo.update_group_preferences(scope, group_id, merged)

    logger.info(f"Updated preferences of {scope.name} group {group_id}: {sorted(merged)}")
    return merged
