"""
Task Pydantic schemas.
"""

from typing import List, Optional
from uuid import UUID
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from tasktracker.models.task import TaskStatus, TaskPriority
from tasktracker.schemas.user import UserSummary


class TaskCreate(BaseModel):
    """Schema for creating a new task. Status always starts as NotStarted."""
    
    title: str = Field(max_length=200)
    description: str = Field("", max_length=1000)
    priority: TaskPriority = TaskPriority.MEDIUM
    progress: int = Field(0, ge=0, le=100)
    due_date: Optional[datetime] = None


class TaskUpdate(BaseModel):
    """
    Schema for updating a task. All fields optional.
    
    Only fields explicitly present in the request are considered; fields the
    caller is not allowed to change are dropped by TaskService.
    """
    
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    progress: Optional[int] = Field(None, ge=0, le=100)
    due_date: Optional[datetime] = None


class TaskRead(BaseModel):
    """
    Schema for reading task data (API response).
    
    can_edit and is_assigned_to_current_user are computed for the viewer
    on every read and never stored.
    """
    
    id: UUID
    title: str
    description: str
    status: TaskStatus
    priority: TaskPriority
    progress: int
    due_date: Optional[datetime] = None
    created_at: datetime
    created_by_id: UUID
    created_by_display_name: str
    is_assigned_to_current_user: bool = False
    can_edit: bool = False
    assigned_users: List[UserSummary] = []
    
    model_config = ConfigDict(from_attributes=True)
