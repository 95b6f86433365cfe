"""
User model.

A person who can sign in, create tasks and be assigned to them.
Password material lives only as a bcrypt hash.
"""

from typing import List, TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tasktracker.models.base_model import IdentifiedModel

if TYPE_CHECKING:
    from tasktracker.models.user_role import UserRole
    from tasktracker.models.task_assignment import TaskAssignment


class User(IdentifiedModel):
    """
    Users table - login identity plus display information.
    """
    
    __tablename__ = "users"
    
    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
    )
    
    display_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
    )
    
    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    
    roles: Mapped[List["UserRole"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )
    
    assignments: Mapped[List["TaskAssignment"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    
    @property
    def role_names(self) -> frozenset:
        return frozenset(r.role for r in self.roles)
