from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from policydesk.api.deps import get_current_user, get_db, require_role
from policydesk.common.enums import UserRole
from policydesk.core.users.schemas import ProfileUpdate, UserCreate, UserResponse, UserUpdate
from policydesk.core.users.service import UserService
from policydesk.db.models.user import User

router = APIRouter(tags=["Users"])


# ---------- User management ----------


@router.get("/users", response_model=list[UserResponse])
async def list_users(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await UserService(db).list_users()


@router.post("/users", response_model=UserResponse, status_code=201)
async def create_user(
    body: UserCreate,
    current_user: User = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    return await UserService(db).create_user(body)


@router.put("/users/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    body: UserUpdate,
    current_user: User = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    return await UserService(db).update_user(user_id, body)


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: int,
    current_user: User = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    await UserService(db).delete_user(user_id, current_user)
    return {"message": "User deleted"}


# ---------- Self-service profile ----------


@router.get("/profile", response_model=UserResponse)
async def get_profile(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/profile", response_model=UserResponse)
async def update_profile(
    body: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await UserService(db).update_profile(current_user, body)
