"""
Authentication router for login and registration.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tasktracker.core.dependencies import get_db
from tasktracker.core.jwt import TokenCodec, get_token_codec
from tasktracker.schemas.user import AuthResponse, LoginRequest, RegisterRequest
from tasktracker.services.auth_service import AuthService

router = APIRouter(prefix="/api/token", tags=["Authentication"])


@router.post("/login", response_model=AuthResponse)
async def login(
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db),
    codec: TokenCodec = Depends(get_token_codec),
):
    """
    Authenticate user and return a bearer token valid for one hour.
    """
    return await AuthService(db, codec).login(credentials)


@router.post("/register", response_model=AuthResponse)
async def register(
    data: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    codec: TokenCodec = Depends(get_token_codec),
):
    """
    Register a new user (role User) and return a bearer token.
    """
    return await AuthService(db, codec).register(data)
