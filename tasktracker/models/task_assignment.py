"""
TaskAssignment model.

Links a user to a task. At most one row per (task, user) pair; removing
either side removes the link.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, UniqueConstraint, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tasktracker.models.base_model import IdentifiedModel
from tasktracker.utils.time import utc_now

if TYPE_CHECKING:
    from tasktracker.models.task import Task
    from tasktracker.models.user import User


class TaskAssignment(IdentifiedModel):
    """Assignment of a single user to a single task."""

    __tablename__ = "task_assignments"

    task_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )

    task: Mapped["Task"] = relationship(back_populates="assignments")
    user: Mapped["User"] = relationship(back_populates="assignments", lazy="selectin")

    __table_args__ = (
        UniqueConstraint("task_id", "user_id", name="uq_task_assignment_pair"),
        Index("ix_task_assignments_task", "task_id"),
    )
