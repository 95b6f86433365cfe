"""
User and authentication Pydantic schemas.
"""

from typing import List
from uuid import UUID

from pydantic import BaseModel, EmailStr, ConfigDict, Field


class UserSummary(BaseModel):
    """Public view of a user, e.g. in a task's assignee list."""
    
    id: UUID
    display_name: str
    email: str
    
    model_config = ConfigDict(from_attributes=True)


class UserRead(UserSummary):
    """Schema for reading user data (API response)."""
    
    roles: List[str] = []


class RegisterRequest(BaseModel):
    """Schema for self-registration."""
    
    email: EmailStr
    display_name: str = Field(min_length=1, max_length=100)
    password: str
    confirm_password: str


class LoginRequest(BaseModel):
    """Schema for login request."""
    
    email: EmailStr
    password: str


class AuthResponse(BaseModel):
    """Schema for login/registration response."""
    
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    display_name: str
    email: str
