import logging
from datetime import datetime, timezone

from sqlalchemy import DateTime, case, delete, func, literal, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.errors import Forbidden, NotFound
from app.core.telemetry import emit
from app.models import (
    Task,
    TaskCreate,
    TaskPriority,
    TaskStats,
    TaskStatus,
    TaskUpdate,
)

logger = logging.getLogger(__name__)

# HIGH sorts first when ordering by rank descending
PRIORITY_RANK = case(
    (Task.priority == TaskPriority.HIGH.value, 3),
    (Task.priority == TaskPriority.MEDIUM.value, 2),
    else_=1,
)


def _owned(task_id: str, owner_id: str):
    return (Task.id == task_id) & (Task.user_id == owner_id)


class TaskService:
    @staticmethod
    async def create_task(owner_id: str, task_data: TaskCreate, db: AsyncSession) -> Task:
        task = Task(
            title=task_data.title,
            description=task_data.description,
            priority=TaskPriority(task_data.priority).value,
            status=TaskStatus.PENDING.value,
            user_id=owner_id,
        )
        db.add(task)
        await db.commit()
        await db.refresh(task)

        logger.info(f"Task created: {task.id} - {task.title!r} for user {owner_id}")
        emit("task.created", task_id=task.id, user_id=owner_id, priority=task.priority)
        return task

    @staticmethod
    async def get_all_tasks(
        owner_id: str,
        db: AsyncSession,
        status: TaskStatus | None = None,
        priority: TaskPriority | None = None,
    ) -> list[Task]:
        query = select(Task).where(Task.user_id == owner_id)
        if status:
            query = query.where(Task.status == TaskStatus(status).value)
        if priority:
            query = query.where(Task.priority == TaskPriority(priority).value)
        query = query.order_by(PRIORITY_RANK.desc(), Task.created_at.desc())

        result = await db.exec(query)
        tasks = list(result.all())
        logger.debug(
            f"Found {len(tasks)} task(s) for user {owner_id} "
            f"(status={status or 'all'}, priority={priority or 'all'})"
        )
        return tasks

    @staticmethod
    async def get_owned_task(task_id: str, requester_id: str, db: AsyncSession) -> Task:
        task = await db.get(Task, task_id)
        if not task:
            logger.warning(f"Task not found: {task_id} for user {requester_id}")
            raise NotFound(f"Task with ID {task_id} not found")
        if task.user_id != requester_id:
            logger.warning(
                f"Access denied: user {requester_id} attempted to access task {task_id} "
                f"owned by {task.user_id}"
            )
            raise Forbidden("You do not have access to this task")
        return task

    @staticmethod
    async def update_task(
        task_id: str, requester_id: str, task_data: TaskUpdate, db: AsyncSession
    ) -> Task:
        task = await TaskService.get_owned_task(task_id, requester_id, db)

        update_data = task_data.model_dump(exclude_unset=True, exclude_none=True)
        if "priority" in update_data:
            update_data["priority"] = TaskPriority(update_data["priority"]).value
        values = {**update_data, "updated_at": datetime.now(timezone.utc)}

        await TaskService._conditional_write(
            update(Task).where(_owned(task_id, requester_id)).values(**values),
            task_id,
            db,
        )
        await db.refresh(task)

        logger.info(f"Task {task_id} updated by user {requester_id}: fields={sorted(update_data)}")
        return task

    @staticmethod
    async def toggle_complete(task_id: str, requester_id: str, db: AsyncSession) -> Task:
        task = await TaskService.get_owned_task(task_id, requester_id, db)
        now = datetime.now(timezone.utc)

        # Both SET expressions read the pre-update status
        was_pending = Task.status == TaskStatus.PENDING.value
        stmt = (
            update(Task)
            .where(_owned(task_id, requester_id))
            .values(
                status=case(
                    (was_pending, TaskStatus.COMPLETED.value),
                    else_=TaskStatus.PENDING.value,
                ),
                completed_at=case(
                    (was_pending, literal(now, DateTime(timezone=True))), else_=None
                ),
                updated_at=now,
            )
        )
        await TaskService._conditional_write(stmt, task_id, db)
        await db.refresh(task)

        logger.info(f"Task {task_id} status toggled to {task.status} by user {requester_id}")
        emit("task.toggled", task_id=task_id, user_id=requester_id, status=task.status)
        return task

    @staticmethod
    async def delete_task(task_id: str, requester_id: str, db: AsyncSession) -> None:
        task = await TaskService.get_owned_task(task_id, requester_id, db)
        await TaskService._conditional_write(
            delete(Task).where(_owned(task_id, requester_id)), task_id, db
        )
        db.expunge(task)

        logger.info(f"Task {task_id} deleted by user {requester_id}")
        emit("task.deleted", task_id=task_id, user_id=requester_id)

    @staticmethod
    async def get_stats(owner_id: str, db: AsyncSession) -> TaskStats:
        pending = Task.status == TaskStatus.PENDING.value
        completed = Task.status == TaskStatus.COMPLETED.value
        high = Task.priority == TaskPriority.HIGH.value

        # One statement, so every count comes from the same snapshot
        query = select(
            func.count(Task.id),
            func.coalesce(func.sum(case((completed, 1), else_=0)), 0),
            func.coalesce(func.sum(case((pending, 1), else_=0)), 0),
            func.coalesce(func.sum(case((pending & high, 1), else_=0)), 0),
        ).where(Task.user_id == owner_id)

        result = await db.exec(query)
        total, n_completed, n_pending, n_high = result.one()
        stats = TaskStats(
            total=total,
            completed=n_completed,
            pending=n_pending,
            highPriority=n_high,
        )
        logger.debug(f"Stats for user {owner_id}: {stats.model_dump()}")
        return stats

    @staticmethod
    async def _conditional_write(stmt, task_id: str, db: AsyncSession) -> None:
        """Run an ownership-filtered UPDATE/DELETE; zero rows means the task is gone."""
        result = await db.execute(stmt.execution_options(synchronize_session=False))
        if result.rowcount == 0:
            await db.rollback()
            logger.warning(f"Task {task_id} disappeared before the write")
            raise NotFound(f"Task with ID {task_id} not found")
        await db.commit()
