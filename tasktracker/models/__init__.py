"""
Models package.

Import all models here so they are registered with SQLAlchemy.
This file also makes it easy to import models from one place.
"""

from tasktracker.models.user import User
from tasktracker.models.user_role import UserRole
from tasktracker.models.task import Task, TaskStatus, TaskPriority
from tasktracker.models.task_assignment import TaskAssignment

# Export all models
__all__ = [
    "User",
    "UserRole",
    "Task",
    "TaskStatus",
    "TaskPriority",
    "TaskAssignment",
]
