"""
FastAPI dependencies for database sessions and the calling user.

Authentication is handled upstream; the gateway forwards the authenticated
user id in the X-User-ID header and the admin flag in X-User-Role.
"""

import uuid
from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from lessoncore.config import Settings, get_settings
from lessoncore.database import get_db
from lessoncore.engines.checkpoint.scheduler import CheckpointScheduler


DbSession = Annotated[AsyncSession, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_settings)]


async def get_current_user_id(
    x_user_id: Annotated[Optional[str], Header()] = None,
) -> uuid.UUID:
    """Authenticated user id or raise 401."""
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    try:
        return uuid.UUID(x_user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user identity",
        )


CurrentUserId = Annotated[uuid.UUID, Depends(get_current_user_id)]


async def require_admin(
    user_id: CurrentUserId,
    x_user_role: Annotated[Optional[str], Header()] = None,
) -> uuid.UUID:
    """Require the current user to be an admin."""
    if (x_user_role or "").lower() != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return user_id


AdminUserId = Annotated[uuid.UUID, Depends(require_admin)]


def get_scheduler(settings: AppSettings) -> CheckpointScheduler:
    return CheckpointScheduler.from_settings(settings)


Scheduler = Annotated[CheckpointScheduler, Depends(get_scheduler)]
