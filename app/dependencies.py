"""
Market Registry Backend — Shared Route Dependencies
=====================================================

What:  Resolves per-request context for route handlers: the running app's
       Settings and the acting user.

Acting user:
    The browser client keeps the logged-in user in local storage and sends
    its id in the X-User-ID header. No header → anonymous (None). A header
    naming a user that does not exist → 401.
"""

from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.database import get_db_session
from app.exceptions import AuthenticationError
from app.models.user import User
from app.services.auth_service import auth_service


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_actor(
    x_user_id: Optional[int] = Header(default=None, alias="X-User-ID"),
    db: AsyncSession = Depends(get_db_session),
) -> Optional[User]:
    if x_user_id is None:
        return None
    user = await auth_service.get_user(db, x_user_id)
    if user is None:
        raise AuthenticationError(
            message="Unknown acting user",
            context={"user_id": x_user_id},
        )
    return user
