"""
Task router - API endpoints for tasks and their assignments.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from tasktracker.core.dependencies import get_current_actor, get_db
from tasktracker.core.identity import Identity
from tasktracker.schemas.task import TaskCreate, TaskRead, TaskUpdate
from tasktracker.schemas.user import UserSummary
from tasktracker.services.assignment_service import AssignmentService
from tasktracker.services.task_service import TaskService

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


@router.get("", response_model=List[TaskRead])
async def list_tasks(
    db: AsyncSession = Depends(get_db),
    actor: Identity = Depends(get_current_actor),
):
    """List all tasks, newest first."""
    return await TaskService(db).list_tasks(actor)


@router.get("/me", response_model=List[TaskRead])
async def list_my_tasks(
    db: AsyncSession = Depends(get_db),
    actor: Identity = Depends(get_current_actor),
):
    """List tasks the current user created or is assigned to."""
    return await TaskService(db).list_my_tasks(actor)


@router.get("/{task_id}", response_model=TaskRead)
async def get_task(
    task_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Identity = Depends(get_current_actor),
):
    """Get a task by ID."""
    return await TaskService(db).view(actor, task_id)


@router.post("", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
async def create_task(
    data: TaskCreate,
    db: AsyncSession = Depends(get_db),
    actor: Identity = Depends(get_current_actor),
):
    """Create a new task owned by the current user."""
    return await TaskService(db).create(actor, data)


@router.put("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_task(
    task_id: UUID,
    data: TaskUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Identity = Depends(get_current_actor),
):
    """
    Update a task.

    Fields the current user may not change are ignored.
    """
    await TaskService(db).update(actor, task_id, data)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Identity = Depends(get_current_actor),
):
    """Delete a task (admins only)."""
    await TaskService(db).delete(actor, task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Self assignment

@router.post("/{task_id}/assign", status_code=status.HTTP_204_NO_CONTENT)
async def assign_to_task(
    task_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Identity = Depends(get_current_actor),
):
    """Assign the current user to a task. Repeating the call is a no-op."""
    await AssignmentService(db).assign_self(task_id, actor)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{task_id}/unassign", status_code=status.HTTP_204_NO_CONTENT)
async def unassign_from_task(
    task_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Identity = Depends(get_current_actor),
):
    """Remove the current user from a task. Repeating the call is a no-op."""
    await AssignmentService(db).unassign_self(task_id, actor)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Admin-directed assignment

@router.post("/{task_id}/assign/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def assign_user_to_task(
    task_id: UUID,
    user_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Identity = Depends(get_current_actor),
):
    """Assign any user to a task (admins, or the user themselves)."""
    await AssignmentService(db).assign(task_id, user_id, actor)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{task_id}/unassign/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def unassign_user_from_task(
    task_id: UUID,
    user_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Identity = Depends(get_current_actor),
):
    """Remove any user from a task (admins, or the user themselves)."""
    await AssignmentService(db).unassign(task_id, user_id, actor)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{task_id}/assigned-users", response_model=List[UserSummary])
async def get_assigned_users(
    task_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Identity = Depends(get_current_actor),
):
    """List users assigned to a task."""
    return await AssignmentService(db).list_assigned_users(task_id)


@router.get("/{task_id}/can-edit", response_model=bool)
async def can_current_user_edit(
    task_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Identity = Depends(get_current_actor),
):
    """Whether the current user may edit this task's title, description and progress."""
    return await TaskService(db).can_edit(actor, task_id)
