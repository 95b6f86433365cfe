"""
Task business logic service.
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from tasktracker.core.identity import Identity, actor_id
from tasktracker.core.permissions import (
    Operation,
    TaskSnapshot,
    check_can_edit,
    check_is_assignee,
    editable_fields,
    raise_if_not_allowed,
)
from tasktracker.errors import NotFound, Unauthorized, ValidationError
from tasktracker.models.task import Task
from tasktracker.repositories.task_repository import TaskRepository
from tasktracker.schemas.task import TaskCreate, TaskRead, TaskUpdate
from tasktracker.schemas.user import UserSummary
from tasktracker.utils.ids import parse_uuid
from tasktracker.utils.time import utc_now

logger = logging.getLogger(__name__)

# Columns that cannot hold NULL; an explicit null in a patch leaves them as they are
NON_NULLABLE_FIELDS = frozenset({"title", "description", "status", "priority", "progress"})


def snapshot_of(task: Task) -> TaskSnapshot:
    return TaskSnapshot.of(task.created_by_id, task.assignee_ids)


def _require_actor(actor: Optional[Identity]) -> UUID:
    user_id = parse_uuid(actor_id(actor))
    if user_id is None:
        raise Unauthorized("Authentication required")
    return user_id


def _clean_title(title: Optional[str]) -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        raise ValidationError("Title is required", field="title")
    return cleaned


class TaskService:
    """Service for task business logic."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repository = TaskRepository(db)

    def to_read(self, task: Task, actor: Optional[Identity]) -> TaskRead:
        """Representation of a task as seen by this actor."""
        snapshot = snapshot_of(task)
        creator = task.created_by
        return TaskRead(
            id=task.id,
            title=task.title,
            description=task.description,
            status=task.status,
            priority=task.priority,
            progress=task.progress,
            due_date=task.due_date,
            created_at=task.created_at,
            created_by_id=task.created_by_id,
            created_by_display_name=creator.display_name if creator else "Unknown",
            is_assigned_to_current_user=check_is_assignee(actor, snapshot),
            can_edit=check_can_edit(actor, snapshot),
            assigned_users=[
                UserSummary.model_validate(a.user) for a in task.assignments if a.user is not None
            ],
        )

    async def _get_or_404(self, task_id, for_update: bool = False) -> Task:
        task_uuid = parse_uuid(task_id)
        task = await self.repository.get_by_id(task_uuid, for_update=for_update) if task_uuid else None
        if task is None:
            raise NotFound(f"Task {task_id} not found")
        return task

    async def list_tasks(self, actor: Optional[Identity]) -> List[TaskRead]:
        """List all tasks, newest first."""
        _require_actor(actor)
        tasks = await self.repository.list_all()
        return [self.to_read(t, actor) for t in tasks]

    async def list_my_tasks(self, actor: Optional[Identity]) -> List[TaskRead]:
        """List tasks the actor created or is assigned to."""
        user_id = _require_actor(actor)
        tasks = await self.repository.list_for_user(user_id)
        return [self.to_read(t, actor) for t in tasks]

    async def view(self, actor: Optional[Identity], task_id: UUID) -> TaskRead:
        """Get a task by ID with the viewer's flags attached."""
        _require_actor(actor)
        task = await self._get_or_404(task_id)
        return self.to_read(task, actor)

    async def can_edit(self, actor: Optional[Identity], task_id: UUID) -> bool:
        _require_actor(actor)
        task = await self._get_or_404(task_id)
        return check_can_edit(actor, snapshot_of(task))

    async def create(self, actor: Optional[Identity], data: TaskCreate) -> TaskRead:
        """Create a new task owned by the actor, in the NotStarted state."""
        creator_id = _require_actor(actor)
        title = _clean_title(data.title)

        task = await self.repository.create(
            created_by_id=creator_id,
            title=title,
            description=(data.description or "").strip(),
            priority=data.priority,
            progress=data.progress,
            due_date=data.due_date,
            created_at=utc_now(),
        )
        await self.db.commit()
        logger.info("Task %s created by %s", task.id, creator_id)
        return self.to_read(task, actor)

    async def update(self, actor: Optional[Identity], task_id: UUID, data: TaskUpdate) -> TaskRead:
        """
        Apply the permitted part of a patch.

        Fields the actor may not change are dropped, not rejected: a
        non-admin sending a new status keeps the current one. Unauthorized
        is raised only when the actor may change nothing at all.
        """
        _require_actor(actor)
        task = await self._get_or_404(task_id, for_update=True)

        allowed = editable_fields(actor, snapshot_of(task))
        if not allowed:
            logger.warning("Actor %s may not edit task %s", actor_id(actor), task.id)
            raise Unauthorized("Only the creator, an assignee or an admin can edit this task")

        patch = data.model_dump(exclude_unset=True)
        ignored = sorted(set(patch) - allowed)
        if ignored:
            logger.debug("Ignoring fields %s from actor %s on task %s", ignored, actor_id(actor), task.id)

        values = {}
        for field, value in patch.items():
            if field not in allowed:
                continue
            if value is None and field in NON_NULLABLE_FIELDS:
                if field == "title":
                    raise ValidationError("Title is required", field="title")
                continue
            values[field] = value

        if "title" in values:
            values["title"] = _clean_title(values["title"])
        if "description" in values:
            values["description"] = values["description"].strip()

        if "status" in values and values["status"] != task.status:
            logger.info(
                "Task %s status set manually from %s to %s by %s",
                task.id, task.status.value, values["status"].value, actor_id(actor),
            )

        await self.repository.update_fields(task, values)
        await self.db.commit()

        task = await self._get_or_404(task.id)
        return self.to_read(task, actor)

    async def delete(self, actor: Optional[Identity], task_id: UUID) -> None:
        """Delete a task and its assignments (admins only)."""
        _require_actor(actor)
        raise_if_not_allowed(actor, Operation.DELETE, action="delete tasks")
        task = await self._get_or_404(task_id, for_update=True)
        await self.repository.delete(task)
        await self.db.commit()
        logger.info("Task %s deleted by %s", task_id, actor_id(actor))
