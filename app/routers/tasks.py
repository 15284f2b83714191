from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from app.database import get_db
from app.dependencies import CurrentUser
from app.models import (
    TaskCreate,
    TaskPriority,
    TaskResponse,
    TaskStats,
    TaskStatus,
    TaskUpdate,
)

from app.services.task_service import TaskService

router = APIRouter(prefix="/task", tags=["tasks"])


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_data: TaskCreate, user: CurrentUser, db: AsyncSession = Depends(get_db)
):
    """Create a new task"""
    return await TaskService.create_task(user.id, task_data, db)


@router.get("", response_model=list[TaskResponse])
async def get_tasks(
    user: CurrentUser,
    status: TaskStatus | None = Query(default=None),
    priority: TaskPriority | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
):
    """List the caller's tasks, highest priority and newest first"""
    return await TaskService.get_all_tasks(user.id, db, status, priority)


@router.get("/stats", response_model=TaskStats)
async def get_stats(user: CurrentUser, db: AsyncSession = Depends(get_db)):
    return await TaskService.get_stats(user.id, db)


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(task_id: str, user: CurrentUser, db: AsyncSession = Depends(get_db)):
    """Get a specific task by ID"""
    return await TaskService.get_owned_task(task_id, user.id, db)


@router.patch("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: str,
    task_data: TaskUpdate,
    user: CurrentUser,
    db: AsyncSession = Depends(get_db),
):
    return await TaskService.update_task(task_id, user.id, task_data, db)


@router.patch("/{task_id}/toggle", response_model=TaskResponse)
async def toggle_task(task_id: str, user: CurrentUser, db: AsyncSession = Depends(get_db)):
    """Flip a task between pending and completed"""
    return await TaskService.toggle_complete(task_id, user.id, db)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(task_id: str, user: CurrentUser, db: AsyncSession = Depends(get_db)):
    """Delete a task"""
    await TaskService.delete_task(task_id, user.id, db)
