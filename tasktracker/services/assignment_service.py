"""
Assignment business logic: who works on which task.

Task status follows the assignment count:
    NotStarted -> InProgress   when the first user is assigned
    InProgress -> NotStarted   when the last user is removed
Any other status was set by an admin and is left alone.

Adding an existing pair or removing a missing one succeeds without
changes (AssignmentChange.CONFLICT_IGNORED).
"""

import enum
import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from tasktracker.core.identity import Identity, actor_id
from tasktracker.core.permissions import can_assign
from tasktracker.errors import NotFound, Unauthorized
from tasktracker.models.task import Task, TaskStatus
from tasktracker.models.user import User
from tasktracker.repositories.task_assignment_repository import TaskAssignmentRepository
from tasktracker.repositories.task_repository import TaskRepository
from tasktracker.repositories.user_repository import UserRepository
from tasktracker.utils.ids import parse_uuid

logger = logging.getLogger(__name__)


class AssignmentChange(str, enum.Enum):
    APPLIED = "applied"
    CONFLICT_IGNORED = "conflict_ignored"


class AssignmentService:
    """Add/remove assignments and drive the automatic status transitions."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.tasks = TaskRepository(db)
        self.assignments = TaskAssignmentRepository(db)
        self.users = UserRepository(db)

    def _authorize(self, actor: Optional[Identity], user_id) -> None:
        if actor_id(actor) is None:
            raise Unauthorized("Authentication required")
        if not can_assign(actor, user_id):
            logger.warning(
                "Actor %s tried to change assignment of user %s", actor_id(actor), user_id
            )
            raise Unauthorized("Only admins can assign or unassign other users")

    async def _load_task_for_update(self, task_id) -> Task:
        task_uuid = parse_uuid(task_id)
        task = await self.tasks.get_by_id(task_uuid, for_update=True) if task_uuid else None
        if task is None:
            raise NotFound(f"Task {task_id} not found")
        return task

    async def _load_user(self, user_id) -> User:
        user_uuid = parse_uuid(user_id)
        user = await self.users.get_by_id(user_uuid) if user_uuid else None
        if user is None:
            raise NotFound(f"User {user_id} not found")
        return user

    async def assign(self, task_id, user_id, actor: Optional[Identity]) -> AssignmentChange:
        """
        Assign a user to a task.

        Args:
            task_id: Task to assign to
            user_id: User being assigned (the actor for self-assignment)
            actor: Who is asking; must be an admin unless user_id is themselves

        Returns:
            APPLIED if a new assignment was created, CONFLICT_IGNORED if it existed

        Raises:
            Unauthorized: assigning someone else without the Admin role
            NotFound: task or user does not exist
        """
        self._authorize(actor, user_id)
        task = await self._load_task_for_update(task_id)
        user = await self._load_user(user_id)

        if await self.assignments.get(task.id, user.id) is not None:
            logger.debug("User %s already assigned to task %s", user.id, task.id)
            return AssignmentChange.CONFLICT_IGNORED

        await self.assignments.add(task.id, user.id)
        if task.status == TaskStatus.NOT_STARTED:
            task.status = TaskStatus.IN_PROGRESS
            logger.info("Task %s moved to %s on first assignment", task.id, task.status.value)

        await self.db.commit()
        logger.info("Assigned user %s to task %s (by %s)", user.id, task.id, actor_id(actor))
        return AssignmentChange.APPLIED

    async def unassign(self, task_id, user_id, actor: Optional[Identity]) -> AssignmentChange:
        """
        Remove a user from a task.

        Returns:
            APPLIED if an assignment was removed, CONFLICT_IGNORED if there was none

        Raises:
            Unauthorized: unassigning someone else without the Admin role
            NotFound: task does not exist
        """
        self._authorize(actor, user_id)
        task = await self._load_task_for_update(task_id)

        user_uuid = parse_uuid(user_id)
        assignment = await self.assignments.get(task.id, user_uuid) if user_uuid else None
        if assignment is None:
            logger.debug("User %s not assigned to task %s, nothing to remove", user_id, task.id)
            return AssignmentChange.CONFLICT_IGNORED

        await self.assignments.remove(assignment)
        remaining = await self.assignments.count_for_task(task.id)
        if remaining == 0 and task.status == TaskStatus.IN_PROGRESS:
            task.status = TaskStatus.NOT_STARTED
            logger.info("Task %s moved back to %s, no assignees left", task.id, task.status.value)

        await self.db.commit()
        logger.info("Unassigned user %s from task %s (by %s)", user_uuid, task.id, actor_id(actor))
        return AssignmentChange.APPLIED

    async def assign_self(self, task_id, actor: Optional[Identity]) -> AssignmentChange:
        if actor_id(actor) is None:
            raise Unauthorized("Authentication required")
        return await self.assign(task_id, actor.id, actor)

    async def unassign_self(self, task_id, actor: Optional[Identity]) -> AssignmentChange:
        if actor_id(actor) is None:
            raise Unauthorized("Authentication required")
        return await self.unassign(task_id, actor.id, actor)

    async def list_assigned_users(self, task_id: UUID) -> List[User]:
        """Users currently assigned to a task."""
        task_uuid = parse_uuid(task_id)
        if task_uuid is None or not await self.tasks.exists(task_uuid):
            raise NotFound(f"Task {task_id} not found")
        return await self.assignments.list_users(task_uuid)
