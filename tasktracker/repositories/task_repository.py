"""
Task repository - database operations for Task.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tasktracker.models.task import Task, TaskStatus, TaskPriority
from tasktracker.models.task_assignment import TaskAssignment


def _with_relations(query):
    return query.options(
        selectinload(Task.created_by),
        selectinload(Task.assignments).selectinload(TaskAssignment.user),
    )


class TaskRepository:
    """Repository for Task database operations."""
    
    def __init__(self, db: AsyncSession):
        self.db = db
    
    async def list_all(self) -> List[Task]:
        """List every task, newest first."""
        query = _with_relations(select(Task)).order_by(Task.created_at.desc())
        result = await self.db.execute(query)
        return list(result.scalars().all())
    
    async def list_for_user(self, user_id: UUID) -> List[Task]:
        """List tasks the user created or is assigned to, newest first."""
        assigned = select(TaskAssignment.task_id).where(TaskAssignment.user_id == user_id)
        query = (
            _with_relations(select(Task))
            .where(or_(Task.created_by_id == user_id, Task.id.in_(assigned)))
            .order_by(Task.created_at.desc())
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())
    
    async def get_by_id(self, task_id: UUID, for_update: bool = False) -> Optional[Task]:
        """
        Get a task by ID with creator and assignments freshly loaded.
        
        With for_update=True the task row is locked until the surrounding
        transaction ends, which serializes status read-modify-write per task.
        """
        query = (
            _with_relations(select(Task))
            .where(Task.id == task_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            query = query.with_for_update(of=Task)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()
    
    async def exists(self, task_id: UUID) -> bool:
        result = await self.db.execute(select(Task.id).where(Task.id == task_id))
        return result.scalar_one_or_none() is not None
    
    async def create(
        self,
        created_by_id: UUID,
        title: str,
        description: str,
        priority: TaskPriority,
        progress: int,
        due_date: Optional[datetime],
        created_at: datetime,
    ) -> Task:
        """Create a new task in the NotStarted state."""
        task = Task(
            title=title,
            description=description,
            status=TaskStatus.NOT_STARTED,
            priority=priority,
            progress=progress,
            due_date=due_date,
            created_by_id=created_by_id,
            created_at=created_at,
        )
        self.db.add(task)
        await self.db.flush()
        return await self.get_by_id(task.id)
    
    async def update_fields(self, task: Task, values: dict) -> None:
        for field, value in values.items():
            setattr(task, field, value)
        await self.db.flush()
    
    async def delete(self, task: Task) -> None:
        """Delete a task; its assignments go with it."""
        await self.db.delete(task)
        await self.db.flush()
