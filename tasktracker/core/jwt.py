"""
Session token issuance and validation.

Tokens are HS256-signed JWTs carrying:
    sub          user id
    name         login name (the email)
    email        email
    DisplayName  display name
    role         list of role names (zero or more)
    iat / exp    issued-at / expiry, ACCESS_TOKEN_EXPIRE_HOURS apart
    iss / aud    TOKEN_ISSUER / TOKEN_AUDIENCE

Changing SECRET_KEY invalidates all previously issued tokens.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, Optional

import jwt

from tasktracker.core.config import settings
from tasktracker.core.identity import Identity
from tasktracker.errors import InvalidToken
from tasktracker.utils.time import utc_now

logger = logging.getLogger(__name__)

# Claim types that carry role names, compared case-insensitively
ROLE_CLAIM_ALIASES = frozenset({"role", "roles"})

# Claim types usable as a presentation name, in order of preference
NAME_CLAIM_ALIASES = ("displayname", "name", "email", "sub")

REQUIRED_CLAIMS = ["sub", "iat", "exp"]


def _lookup(claims: Dict[str, Any], alias: str) -> Optional[Any]:
    for key, value in claims.items():
        if key.lower() == alias:
            return value
    return None


def extract_roles(claims: Dict[str, Any]) -> frozenset:
    """Collect role names from every role-like claim into one set."""
    roles = set()
    for key, value in claims.items():
        if key.lower() not in ROLE_CLAIM_ALIASES:
            continue
        if isinstance(value, str):
            values: Iterable[Any] = [value]
        elif isinstance(value, (list, tuple)):
            values = value
        else:
            continue
        roles.update(str(v) for v in values if v)
    return frozenset(roles)


def extract_display_name(claims: Dict[str, Any]) -> str:
    for alias in NAME_CLAIM_ALIASES:
        value = _lookup(claims, alias)
        if value:
            return str(value)
    return ""


def identity_from_claims(claims: Dict[str, Any]) -> Identity:
    """Build an Identity from decoded claims, normalizing role claims."""
    return Identity(
        id=str(claims.get("sub") or ""),
        display_name=extract_display_name(claims),
        email=str(_lookup(claims, "email") or ""),
        roles=extract_roles(claims),
    )


class TokenCodec:
    """Encode identities into signed tokens and decode them back."""

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: Optional[str] = None,
        issuer: Optional[str] = None,
        audience: Optional[str] = None,
        lifetime: Optional[timedelta] = None,
        leeway_seconds: Optional[int] = None,
    ):
        self.secret_key = secret_key or settings.SECRET_KEY
        self.algorithm = algorithm or settings.ALGORITHM
        self.issuer = issuer or settings.TOKEN_ISSUER
        self.audience = audience or settings.TOKEN_AUDIENCE
        self.lifetime = lifetime or timedelta(hours=settings.ACCESS_TOKEN_EXPIRE_HOURS)
        self.leeway_seconds = settings.TOKEN_LEEWAY_SECONDS if leeway_seconds is None else leeway_seconds

    @property
    def expires_in(self) -> int:
        """Token lifetime in seconds."""
        return int(self.lifetime.total_seconds())

    def issue(self, identity: Identity, now: Optional[datetime] = None) -> str:
        """
        Create a signed token for an identity.

        Args:
            identity: Who the token is for
            now: Issuance time, defaults to the current UTC time

        Returns:
            Encoded JWT string
        """
        issued_at = now or utc_now()
        payload = {
            "sub": identity.id,
            "name": identity.email,
            "email": identity.email,
            "DisplayName": identity.display_name,
            "role": sorted(identity.roles),
            "iat": issued_at,
            "exp": issued_at + self.lifetime,
            "iss": self.issuer,
            "aud": self.audience,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def decode(self, token: str) -> Identity:
        """
        Validate a token and return the identity it carries.

        Raises:
            InvalidToken: malformed, bad signature, wrong issuer/audience,
                missing required claims, or expired
        """
        if not token:
            raise InvalidToken("Missing token")
        try:
            claims = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
                leeway=self.leeway_seconds,
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError:
            raise InvalidToken("Token has expired")
        except jwt.InvalidTokenError as exc:
            logger.debug("Rejected token: %s", exc)
            raise InvalidToken()

        identity = identity_from_claims(claims)
        if not identity.id:
            raise InvalidToken("Token subject is empty")
        return identity

    def read_unverified(self, token: str, now: Optional[datetime] = None) -> Optional[Identity]:
        """
        Read a token the way a client does: no signature check.

        Returns None when the token cannot be parsed or its expiry has
        passed, in which case the holder should discard it.
        """
        if not token:
            return None
        try:
            claims = jwt.decode(token, options={"verify_signature": False})
        except jwt.InvalidTokenError:
            return None

        exp = claims.get("exp")
        if not isinstance(exp, (int, float)):
            return None
        current = now or utc_now()
        if exp <= current.timestamp():
            return None

        identity = identity_from_claims(claims)
        return identity if identity.id else None


def get_token_codec() -> TokenCodec:
    """Codec built from current settings (FastAPI dependency)."""
    return TokenCodec()
