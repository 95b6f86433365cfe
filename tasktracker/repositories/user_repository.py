"""
User repository - database operations for User.
"""

from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from tasktracker.models.user import User
from tasktracker.models.user_role import UserRole


class UserRepository:
    """Repository for User database operations."""
    
    def __init__(self, db: AsyncSession):
        self.db = db
    
    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get a user by ID."""
        result = await self.db.execute(
            select(User).where(User.id == user_id)
        )
        return result.scalar_one_or_none()
    
    async def get_by_email(self, email: str) -> Optional[User]:
        """Get a user by email (case-insensitive email)."""
        if not email or not email.strip():
            return None
        email_clean = email.strip().lower()
        result = await self.db.execute(
            select(User).where(func.lower(User.email) == email_clean)
        )
        return result.scalar_one_or_none()
    
    async def display_name_exists(self, display_name: str) -> bool:
        result = await self.db.execute(
            select(User.id).where(User.display_name == display_name).limit(1)
        )
        return result.scalar_one_or_none() is not None
    
    async def create(
        self,
        email: str,
        display_name: str,
        hashed_password: str,
        roles: Iterable[str] = (),
    ) -> User:
        """Create a new user with the given role names."""
        user = User(
            email=email.strip().lower(),
            display_name=display_name,
            hashed_password=hashed_password,
            roles=[UserRole(role=role) for role in roles],
        )
        self.db.add(user)
        await self.db.flush()
        return user
    
    async def add_role(self, user: User, role: str) -> None:
        """Grant a role if the user does not have it yet."""
        if role in user.role_names:
            return
        user.roles.append(UserRole(role=role))
        await self.db.flush()
    
    async def roles_of(self, user_id: UUID) -> frozenset:
        result = await self.db.execute(
            select(UserRole.role).where(UserRole.user_id == user_id)
        )
        return frozenset(result.scalars().all())
    
    async def list_all(self) -> List[User]:
        """Get all users ordered by display name."""
        result = await self.db.execute(
            select(User).order_by(User.display_name.asc())
        )
        return list(result.scalars().all())
