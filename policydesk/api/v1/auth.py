from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from policydesk.api.deps import SESSION_USER_KEY, get_current_user, get_db
from policydesk.common.exceptions import (
    NotAuthenticatedError,
    TooManyRequestsError,
    ValidationError,
)
from policydesk.common.logging import get_logger
from policydesk.common.throttle import login_throttle
from policydesk.core.users.schemas import LoginRequest, UserResponse
from policydesk.core.users.service import UserService
from policydesk.db.models.user import User

router = APIRouter(prefix="/auth", tags=["Authentication"])

logger = get_logger("api.auth")


# ---------- Schemas ----------


class LoginResponse(BaseModel):
    message: str
    user: UserResponse


class MessageResponse(BaseModel):
    message: str


# ---------- Endpoints ----------


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, request: Request, db: AsyncSession = Depends(get_db)):
    if not body.username or not body.password:
        raise ValidationError("Missing credentials")

    client = request.client.host if request.client else "unknown"
    if login_throttle.is_blocked(client, body.username):
        logger.warning("Login throttled for '%s' from %s", body.username, client)
        raise TooManyRequestsError("Too many login attempts, please try again later")

    user = await UserService(db).authenticate(body.username, body.password)
    if not user:
        login_throttle.record_failure(client, body.username)
        logger.info("Failed login for '%s'", body.username)
        raise NotAuthenticatedError("Invalid credentials")

    request.session.clear()
    request.session[SESSION_USER_KEY] = user.id
    return LoginResponse(message="Login successful", user=UserResponse.model_validate(user))


@router.post("/logout", response_model=MessageResponse)
async def logout(request: Request):
    request.session.clear()
    return MessageResponse(message="Logout successful")


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    return current_user
