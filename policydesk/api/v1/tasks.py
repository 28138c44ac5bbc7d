from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from policydesk.api.deps import get_current_user, get_db, require_role
from policydesk.common.enums import UserRole
from policydesk.core.tasks.schemas import (
    CommentCreate,
    TaskComment,
    TaskCreate,
    TaskResponse,
    TaskStatusUpdate,
    TaskUpdate,
)
from policydesk.core.tasks.service import TaskService
from policydesk.db.models.user import User

router = APIRouter(prefix="/tasks", tags=["Tasks"])


class CommentResponse(BaseModel):
    message: str
    comment: TaskComment


# ---------- Endpoints ----------


@router.get("", response_model=list[TaskResponse])
async def list_tasks(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await TaskService(db).list_tasks(current_user)


@router.post("", response_model=TaskResponse, status_code=201)
async def create_task(
    body: TaskCreate,
    current_user: User = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    return await TaskService(db).create_task(body, current_user)


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: int,
    body: TaskUpdate,
    current_user: User = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    return await TaskService(db).update_task(task_id, body)


@router.patch("/{task_id}/status", response_model=TaskResponse)
async def set_task_status(
    task_id: int,
    body: TaskStatusUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await TaskService(db).set_status(task_id, body.status, current_user)


@router.post("/{task_id}/comments", response_model=CommentResponse)
async def add_comment(
    task_id: int,
    body: CommentCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    comment = await TaskService(db).add_comment(task_id, body.text, current_user)
    return CommentResponse(message="Comment added", comment=comment)


@router.delete("/{task_id}")
async def delete_task(
    task_id: int,
    current_user: User = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
):
    await TaskService(db).delete_task(task_id)
    return {"message": "Task deleted"}
