"""
Task model.

Represents a unit of work that users can pick up. Status follows the
assignment count automatically (see AssignmentService) unless an admin
overrides it.
"""

import enum
import uuid
from datetime import datetime
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import String, Text, DateTime, Integer, Enum, ForeignKey, CheckConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tasktracker.models.base_model import IdentifiedModel

if TYPE_CHECKING:
    from tasktracker.models.user import User
    from tasktracker.models.task_assignment import TaskAssignment


class TaskStatus(str, enum.Enum):
    NOT_STARTED = "NotStarted"
    IN_PROGRESS = "InProgress"
    UNDER_REVIEW = "UnderReview"
    COMPLETED = "Completed"
    ARCHIVED = "Archived"


class TaskPriority(str, enum.Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class Task(IdentifiedModel):
    """
    Tasks table.
    """
    
    __tablename__ = "tasks"
    
    title: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
    )
    
    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
    )
    
    status: Mapped[TaskStatus] = mapped_column(
        Enum(TaskStatus, native_enum=False, length=20, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=TaskStatus.NOT_STARTED,
    )
    
    priority: Mapped[TaskPriority] = mapped_column(
        Enum(TaskPriority, native_enum=False, length=20, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=TaskPriority.MEDIUM,
    )
    
    progress: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )
    
    due_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    
    created_by_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    
    created_by: Mapped[Optional["User"]] = relationship(lazy="selectin")
    
    assignments: Mapped[List["TaskAssignment"]] = relationship(
        back_populates="task",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by="TaskAssignment.assigned_at",
    )
    
    __table_args__ = (
        CheckConstraint("progress >= 0 AND progress <= 100", name="ck_task_progress_range"),
    )
    
    @property
    def assignee_ids(self) -> frozenset:
        return frozenset(a.user_id for a in self.assignments)
