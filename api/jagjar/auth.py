"""Session-based caller resolution.

Login lives in the account service; it stores `user_id` in the signed
session cookie. Everything here only reads it.
"""
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from jagjar.db.database import get_db
from jagjar.errors import AuthorizationError
from jagjar.models.user import User


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> User:
    user_id = request.session.get('user_id')
    if not user_id:
        raise AuthorizationError('Unauthorized', status_code=401)

    user = await db.get(User, int(user_id))
    if not user:
        raise AuthorizationError('Unauthorized', status_code=401)
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    """Single admin capability check, attached at router level."""
    if not user.is_admin:
        raise AuthorizationError('Forbidden: Admin access required', status_code=403)
    return user
