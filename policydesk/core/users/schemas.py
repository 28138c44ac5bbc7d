from pydantic import BaseModel, Field

from policydesk.common.enums import UserRole


class LoginRequest(BaseModel):
    username: str = ""
    password: str = ""


class UserCreate(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    role: UserRole = UserRole.VIEWER
    full_name: str | None = None


class UserUpdate(BaseModel):
    username: str = Field(min_length=1)
    role: UserRole
    full_name: str | None = None
    password: str | None = None


class ProfileUpdate(BaseModel):
    full_name: str | None = None
    phone: str | None = None
    email: str | None = None
    password: str | None = None


class UserResponse(BaseModel):
    id: int
    username: str = ""
    role: str
    is_admin: bool
    full_name: str | None
    phone: str | None
    email: str | None

    model_config = {"from_attributes": True}
