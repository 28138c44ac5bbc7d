from collections.abc import AsyncGenerator
from datetime import date

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from policydesk.common.enums import UserRole
from policydesk.common.exceptions import NotAuthenticatedError, PermissionDeniedError
from policydesk.db.models.user import User
from policydesk.db.session import async_session_factory

SESSION_USER_KEY = "user_id"


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_today() -> date:
    """Calendar date used for expiry classification; overridable in tests."""
    return date.today()


async def get_current_user(request: Request, db: AsyncSession = Depends(get_db)) -> User:
    user_id = request.session.get(SESSION_USER_KEY)
    if not user_id:
        raise NotAuthenticatedError()

    user = await db.get(User, int(user_id))
    if not user:
        request.session.clear()
        raise NotAuthenticatedError("Session is no longer valid")
    return user


def require_role(*roles: UserRole):
    async def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in [r.value for r in roles]:
            raise PermissionDeniedError(
                f"This action requires one of the following roles: {', '.join(r.value for r in roles)}"
            )
        return current_user

    return role_checker
