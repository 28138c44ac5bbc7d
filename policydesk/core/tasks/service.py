import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy import case, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from policydesk.common.enums import TaskStatus, UserRole
from policydesk.common.exceptions import NotFoundError, PermissionDeniedError, ValidationError
from policydesk.common.logging import get_logger
from policydesk.config import settings
from policydesk.core.tasks.schemas import TaskCreate, TaskUpdate
from policydesk.db.models.task import Task
from policydesk.db.models.user import User

logger = get_logger("tasks.service")


def _is_admin(user: User) -> bool:
    return user.role == UserRole.ADMIN.value


class TaskService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def purge_completed(self, now: datetime | None = None) -> int:
        """Drop completed tasks older than the retention window."""
        now = now or datetime.now(timezone.utc)
        cutoff = now - timedelta(days=settings.TASK_RETENTION_DAYS)
        result = await self.db.execute(
            delete(Task)
            .where(Task.status == TaskStatus.COMPLETED.value, Task.completed_at < cutoff)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount:
            logger.info("Purged %d completed tasks older than %s", result.rowcount, cutoff.date())
        return result.rowcount or 0

    async def list_tasks(self, user: User) -> list[Task]:
        await self.purge_completed()

        query = select(Task).order_by(
            case((Task.status == TaskStatus.COMPLETED.value, 1), else_=0),
            Task.due_date.asc(),
            Task.id.asc(),
        )
        if not _is_admin(user):
            query = query.where(Task.assigned_to == user.username)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_task(self, task_id: int) -> Task:
        task = await self.db.get(Task, task_id)
        if task is None:
            raise NotFoundError("Task", task_id)
        return task

    async def create_task(self, body: TaskCreate, creator: User) -> Task:
        task = Task(
            title=body.title,
            description=body.description,
            assigned_to=body.assigned_to,
            created_by=creator.username,
            due_date=body.due_date,
            status=TaskStatus.PENDING.value,
            created_at=datetime.now(timezone.utc),
            comments=[],
        )
        self.db.add(task)
        await self.db.flush()
        logger.info("Task %s created by %s for %s", task.id, creator.username, task.assigned_to)
        return task

    async def update_task(self, task_id: int, body: TaskUpdate) -> Task:
        task = await self.get_task(task_id)
        for field, value in body.model_dump(exclude_unset=True).items():
            setattr(task, field, value)
        await self.db.flush()
        return task

    async def set_status(self, task_id: int, status: TaskStatus, user: User) -> Task:
        task = await self.get_task(task_id)
        self._ensure_participant(task, user)

        task.status = status.value
        task.completed_at = datetime.now(timezone.utc) if status == TaskStatus.COMPLETED else None
        await self.db.flush()
        return task

    async def add_comment(self, task_id: int, text: str, user: User) -> dict:
        if not text or not text.strip():
            raise ValidationError("Comment text required")

        task = await self.get_task(task_id)
        self._ensure_participant(task, user)

        comment = {
            "id": uuid.uuid4().hex,
            "text": text.strip(),
            "author": user.full_name or user.username,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        task.comments = [*(task.comments or []), comment]
        await self.db.flush()
        return comment

    async def delete_task(self, task_id: int) -> None:
        task = await self.get_task(task_id)
        await self.db.delete(task)
        await self.db.flush()

    def _ensure_participant(self, task: Task, user: User) -> None:
        if not _is_admin(user) and task.assigned_to != user.username:
            raise PermissionDeniedError("Not authorized to modify this task")
