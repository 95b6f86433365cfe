"""
Users router.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tasktracker.core.dependencies import get_current_actor, get_db
from tasktracker.core.identity import Identity
from tasktracker.repositories.user_repository import UserRepository
from tasktracker.schemas.user import UserRead

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("", response_model=List[UserRead])
async def list_users(
    db: AsyncSession = Depends(get_db),
    actor: Identity = Depends(get_current_actor),
):
    """List all users ordered by display name (e.g. to pick an assignee)."""
    users = await UserRepository(db).list_all()
    return [
        UserRead(
            id=u.id,
            display_name=u.display_name,
            email=u.email,
            roles=sorted(u.role_names),
        )
        for u in users
    ]
