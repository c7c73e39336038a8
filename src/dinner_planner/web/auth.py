"""
Authentication utilities for FastAPI routes.

Session tokens are issued elsewhere (Telegram login); here they are only
validated through Supabase auth and mapped to the app's user row.
"""

import logging

from fastapi import Depends, Header, HTTPException

from dinner_planner.db.client import PlannerRepository, get_service_client
from dinner_planner.services.access import Caller
from dinner_planner.web.dependencies import get_repository

logger = logging.getLogger(__name__)


def _telegram_id_from_token(access_token: str) -> int:
    """Validate the token and read the Telegram id from its user metadata."""
    try:
        client = get_service_client()
        user_response = client.auth.get_user(access_token)
    except Exception as e:
        logger.warning(f"Auth validation failed: {e}")
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    if not user_response or not user_response.user:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    metadata = user_response.user.user_metadata or {}
    try:
        return int(metadata["telegram_id"])
    except (KeyError, TypeError, ValueError):
        logger.warning(f"Token for user {user_response.user.id} has no telegram_id")
        raise HTTPException(status_code=401, detail="Invalid or expired token")


async def get_current_user(
    authorization: str = Header(None),
    repo: PlannerRepository = Depends(get_repository),
) -> Caller:
    """
    Resolve the caller from the Authorization header.

    Expects Authorization header: "Bearer <access_token>"
    """
    if not authorization:
        raise HTTPException(status_code=401, detail="Missing authorization header")

    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid authorization format")

    telegram_id = _telegram_id_from_token(authorization[7:])

    user = await repo.get_user(telegram_id)
    if not user:
        raise HTTPException(status_code=401, detail="Unknown user")

    couple_id = user.get("couple_id")
    return Caller(
        telegram_id=telegram_id,
        couple_id=str(couple_id) if couple_id else None,
        first_name=user.get("first_name"),
    )
