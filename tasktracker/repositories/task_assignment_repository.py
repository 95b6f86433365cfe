"""
TaskAssignment repository - database operations for TaskAssignment.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from tasktracker.models.task_assignment import TaskAssignment
from tasktracker.models.user import User
from tasktracker.utils.time import utc_now


class TaskAssignmentRepository:
    """Repository for TaskAssignment database operations."""
    
    def __init__(self, db: AsyncSession):
        self.db = db
    
    async def get(self, task_id: UUID, user_id: UUID) -> Optional[TaskAssignment]:
        """Get the assignment for a (task, user) pair, if any."""
        result = await self.db.execute(
            select(TaskAssignment).where(
                TaskAssignment.task_id == task_id,
                TaskAssignment.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()
    
    async def add(self, task_id: UUID, user_id: UUID) -> TaskAssignment:
        """
        Insert an assignment.
        
        Callers hold the task row lock and have checked the pair is absent;
        uq_task_assignment_pair backs this up at the database level.
        """
        assignment = TaskAssignment(task_id=task_id, user_id=user_id, assigned_at=utc_now())
        self.db.add(assignment)
        await self.db.flush()
        return assignment
    
    async def remove(self, assignment: TaskAssignment) -> None:
        await self.db.delete(assignment)
        await self.db.flush()
    
    async def count_for_task(self, task_id: UUID) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(TaskAssignment).where(TaskAssignment.task_id == task_id)
        )
        return int(result.scalar_one())
    
    async def list_users(self, task_id: UUID) -> List[User]:
        """Users assigned to a task, in assignment order."""
        result = await self.db.execute(
            select(User)
            .join(TaskAssignment, TaskAssignment.user_id == User.id)
            .where(TaskAssignment.task_id == task_id)
            .order_by(TaskAssignment.assigned_at.asc())
        )
        return list(result.scalars().all())
