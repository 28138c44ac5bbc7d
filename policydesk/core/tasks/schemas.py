from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator

from policydesk.common.enums import TaskStatus


class TaskCreate(BaseModel):
    title: str = Field(min_length=1)
    description: str | None = None
    assigned_to: str | None = None
    due_date: date | None = None


class TaskUpdate(BaseModel):
    title: str | None = Field(None, min_length=1)
    description: str | None = None
    assigned_to: str | None = None
    due_date: date | None = None

    @field_validator("title")
    @classmethod
    def _title_not_null(cls, value: str | None) -> str:
        # Omit the key to keep the title; null cannot clear it
        if value is None:
            raise ValueError("title cannot be null")
        return value


class TaskStatusUpdate(BaseModel):
    status: TaskStatus


class CommentCreate(BaseModel):
    text: str = ""


class TaskComment(BaseModel):
    id: str
    text: str
    author: str
    timestamp: datetime


class TaskResponse(BaseModel):
    id: int
    title: str
    description: str | None
    assigned_to: str | None
    created_by: str
    status: TaskStatus
    due_date: date | None
    created_at: datetime
    comments: list[TaskComment]
    completed_at: datetime | None

    model_config = {"from_attributes": True}
