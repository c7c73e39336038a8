"""
Dinner Planner - Group access checks.

A caller works either inside their couple or inside a holiday group they
are a member of.
"""

from pydantic import BaseModel

from dinner_planner.db.client import PlannerRepository
from dinner_planner.db.scopes import COUPLE_SCOPE, DishScope
from dinner_planner.errors import AuthorizationError


class Caller(BaseModel):
    """The authenticated user behind a request."""

    telegram_id: int
    couple_id: str | None = None
    first_name: str | None = None


def require_couple(caller: Caller | None) -> str:
    """Return the caller's couple id."""
    if caller is None:
        raise AuthorizationError("Unauthorized: Please log in")
    if not caller.couple_id:
        raise AuthorizationError("Unauthorized: Please create or join a couple first")
    return caller.couple_id


async def require_holiday_member(repo: PlannerRepository, caller: Caller | None, group_id: str) -> str:
    """Return group_id once the caller is confirmed as a member."""
    if caller is None:
        raise AuthorizationError("Unauthorized: Please log in")
    if not await repo.is_holiday_member(group_id, caller.telegram_id):
        raise AuthorizationError("You are not a member of this holiday group")
    return group_id


async def require_group(
    repo: PlannerRepository,
    caller: Caller | None,
    scope: DishScope,
    group_id: str | None = None,
) -> str:
    """Resolve and authorize the group a request works in."""
    if scope == COUPLE_SCOPE:
        return require_couple(caller)
    if not group_id:
        raise AuthorizationError("Holiday group is required")
    return await require_holiday_member(repo, caller, group_id)
