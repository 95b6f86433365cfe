"""
Base model with common fields.

Every table inherits from this to get:
- id (UUID primary key)
- created_at (when the record was created)
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from tasktracker.db.base import Base
from tasktracker.utils.time import utc_now


class IdentifiedModel(Base):
    """
    Abstract base class for all models.
    
    This is not a real table - it's a template that other models inherit from.
    """
    
    __abstract__ = True  # This means: don't create a table for this class
    
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
