from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from policydesk.common.enums import UserRole
from policydesk.db.base import BaseModel


class User(BaseModel):
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    username: Mapped[str] = mapped_column(String(150), unique=True, index=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(String(20), nullable=False, default=UserRole.VIEWER.value)
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value
