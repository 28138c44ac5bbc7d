from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from policydesk.common.enums import UserRole
from policydesk.common.exceptions import ConflictError, NotFoundError, ValidationError
from policydesk.common.logging import get_logger
from policydesk.common.security import get_password_hash, verify_password
from policydesk.config import settings
from policydesk.core.users.schemas import ProfileUpdate, UserCreate, UserUpdate
from policydesk.db.models.user import User

logger = get_logger("users.service")


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def authenticate(self, username: str, password: str) -> User | None:
        result = await self.db.execute(select(User).where(User.username == username))
        user = result.scalar_one_or_none()
        if user is None or not verify_password(password, user.hashed_password):
            return None
        return user

    async def ensure_default_admin(self) -> User | None:
        """Create the bootstrap admin when no users exist yet."""
        count = (await self.db.execute(select(func.count(User.id)))).scalar() or 0
        if count:
            return None

        admin = User(
            username=settings.DEFAULT_ADMIN_USERNAME,
            hashed_password=get_password_hash(settings.DEFAULT_ADMIN_PASSWORD),
            role=UserRole.ADMIN.value,
        )
        self.db.add(admin)
        await self.db.flush()
        logger.warning("Seeded default admin user '%s'; change its password", admin.username)
        return admin

    async def list_users(self) -> list[User]:
        result = await self.db.execute(select(User).order_by(User.username.asc()))
        return list(result.scalars().all())

    async def get_user(self, user_id: int) -> User:
        user = await self.db.get(User, user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    async def create_user(self, body: UserCreate) -> User:
        await self._ensure_username_free(body.username)
        user = User(
            username=body.username,
            hashed_password=get_password_hash(body.password),
            role=body.role.value,
            full_name=body.full_name,
        )
        self.db.add(user)
        await self.db.flush()
        logger.info("User %s created with role %s", user.username, user.role)
        return user

    async def update_user(self, user_id: int, body: UserUpdate) -> User:
        user = await self.get_user(user_id)
        await self._ensure_username_free(body.username, exclude_id=user_id)

        user.username = body.username
        user.role = body.role.value
        user.full_name = body.full_name
        if body.password and body.password.strip():
            user.hashed_password = get_password_hash(body.password)
        await self.db.flush()
        return user

    async def delete_user(self, user_id: int, current_user: User) -> None:
        if user_id == current_user.id:
            raise ValidationError("Cannot delete yourself")
        user = await self.get_user(user_id)
        await self.db.delete(user)
        await self.db.flush()
        logger.info("User %s deleted by %s", user.username, current_user.username)

    async def update_profile(self, user: User, body: ProfileUpdate) -> User:
        user.full_name = body.full_name
        user.phone = body.phone
        user.email = body.email
        if body.password and body.password.strip():
            user.hashed_password = get_password_hash(body.password)
        await self.db.flush()
        return user

    async def _ensure_username_free(self, username: str, exclude_id: int | None = None) -> None:
        query = select(User.id).where(User.username == username)
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        if (await self.db.execute(query)).first():
            raise ConflictError(f"Username '{username}' is already taken")
