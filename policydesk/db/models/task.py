from datetime import date, datetime

from sqlalchemy import JSON, Date, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from policydesk.common.enums import TaskStatus
from policydesk.db.base import BaseModel, UTCDateTime


class Task(BaseModel):
    __tablename__ = "tasks"
    __table_args__ = {"sqlite_autoincrement": True}

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    assigned_to: Mapped[str | None] = mapped_column(String(150), nullable=True, index=True)
    created_by: Mapped[str] = mapped_column(String(150), nullable=False)
    status: Mapped[TaskStatus] = mapped_column(
        String(20), nullable=False, default=TaskStatus.PENDING.value
    )
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    comments: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    completed_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
