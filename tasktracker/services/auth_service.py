"""
Authentication service for registration, login and token issuance.

Also serves as the user/credential store the rest of the core talks to:
find_by_email, verify_password and roles_of.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from tasktracker.core.config import settings
from tasktracker.core.identity import Identity
from tasktracker.core.jwt import TokenCodec
from tasktracker.core.permissions import Roles
from tasktracker.core import security
from tasktracker.errors import AuthenticationFailed, Conflict, ValidationError
from tasktracker.models.user import User
from tasktracker.repositories.user_repository import UserRepository
from tasktracker.schemas.user import AuthResponse, LoginRequest, RegisterRequest
from tasktracker.utils.ids import parse_uuid

logger = logging.getLogger(__name__)


def identity_for(user: User) -> Identity:
    """Identity snapshot of a user record, as embedded in tokens."""
    return Identity(
        id=str(user.id),
        display_name=user.display_name,
        email=user.email,
        roles=user.role_names,
    )


class AuthService:
    """Service for authentication operations."""

    def __init__(self, db: AsyncSession, codec: Optional[TokenCodec] = None):
        self.db = db
        self.user_repository = UserRepository(db)
        self.codec = codec or TokenCodec()

    async def find_by_email(self, email: str) -> Optional[Identity]:
        user = await self.user_repository.get_by_email(email)
        return identity_for(user) if user else None

    async def verify_password(self, identity: Identity, password: str) -> bool:
        user_id = parse_uuid(identity.id)
        user = await self.user_repository.get_by_id(user_id) if user_id else None
        if user is None:
            return False
        return security.verify_password(password, user.hashed_password)

    async def roles_of(self, identity: Identity) -> frozenset:
        user_id = parse_uuid(identity.id)
        if user_id is None:
            return frozenset()
        return await self.user_repository.roles_of(user_id)

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """
        Authenticate a user by email and password.

        Args:
            email: User email
            password: Plain text password

        Returns:
            User object if authentication successful, None otherwise
        """
        user = await self.user_repository.get_by_email(email)

        if not user:
            return None

        if not security.verify_password(password, user.hashed_password):
            return None

        return user

    def create_token_for_user(self, user: User) -> str:
        """Create a signed session token for a user."""
        return self.codec.issue(identity_for(user))

    def _auth_response(self, user: User) -> AuthResponse:
        return AuthResponse(
            access_token=self.create_token_for_user(user),
            token_type="bearer",
            expires_in=self.codec.expires_in,
            display_name=user.display_name,
            email=user.email,
        )

    async def login(self, credentials: LoginRequest) -> AuthResponse:
        """
        Perform user login.

        Raises:
            AuthenticationFailed: unknown email or wrong password
        """
        user = await self.authenticate_user(credentials.email, credentials.password)
        if not user:
            logger.warning("Failed login attempt")
            raise AuthenticationFailed()

        logger.info("User %s logged in", user.id)
        return self._auth_response(user)

    async def register(self, data: RegisterRequest) -> AuthResponse:
        """
        Register a new user with the User role and sign them in.

        Raises:
            ValidationError: passwords differ or are too short
            Conflict: display name or email already in use
        """
        display_name = data.display_name.strip()
        if not display_name:
            raise ValidationError("Display name is required", field="display_name")
        if len(data.password) < settings.PASSWORD_MIN_LENGTH:
            raise ValidationError(
                f"Password must be at least {settings.PASSWORD_MIN_LENGTH} characters",
                field="password",
            )
        if data.password != data.confirm_password:
            raise ValidationError(
                "Passwords do not match. Please verify that they match exactly.",
                field="confirm_password",
            )
        if await self.user_repository.display_name_exists(display_name):
            raise Conflict(
                "Display name is already taken. Please choose another one.",
                field="display_name",
            )
        if await self.user_repository.get_by_email(data.email):
            raise Conflict(
                "Email is already registered. Try logging in instead.",
                field="email",
            )

        user = await self.user_repository.create(
            email=data.email,
            display_name=display_name,
            hashed_password=security.hash_password(data.password),
            roles=[Roles.USER],
        )
        await self.db.commit()
        logger.info("Registered user %s", user.id)
        return self._auth_response(user)

    async def ensure_admin(
        self,
        email: Optional[str] = None,
        password: Optional[str] = None,
        display_name: Optional[str] = None,
    ) -> User:
        """Create the bootstrap admin if missing; make sure it holds Admin."""
        email = email or settings.ADMIN_EMAIL
        user = await self.user_repository.get_by_email(email)
        if user is None:
            user = await self.user_repository.create(
                email=email,
                display_name=display_name or settings.ADMIN_DISPLAY_NAME,
                hashed_password=security.hash_password(password or settings.ADMIN_PASSWORD),
                roles=[Roles.ADMIN],
            )
            logger.info("Created admin user %s", email)
        else:
            await self.user_repository.add_role(user, Roles.ADMIN)
        await self.db.commit()
        return user
