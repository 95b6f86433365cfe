"""
FastAPI dependencies for the application.
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from tasktracker.core.identity import Identity
from tasktracker.core.jwt import TokenCodec, get_token_codec
from tasktracker.db.session import get_db
from tasktracker.errors import InvalidToken

# Security scheme for JWT bearer tokens; missing headers are reported as
# invalid_token by get_current_actor rather than FastAPI's default 403
security = HTTPBearer(auto_error=False)

__all__ = ["get_db", "get_current_actor"]


async def get_current_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    codec: TokenCodec = Depends(get_token_codec),
) -> Identity:
    """
    Get the current actor from the bearer token.
    
    Identity and roles come from the token claims; the user store is not
    consulted per request.
    
    Raises:
        InvalidToken (401): header missing, token invalid or expired
    """
    if credentials is None or not credentials.credentials:
        raise InvalidToken("Not authenticated")
    return codec.decode(credentials.credentials)
