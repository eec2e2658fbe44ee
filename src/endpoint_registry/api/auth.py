"""Authentication for the API.

Bearer tokens are JWTs signed with the secret key from configuration. The
token subject is the caller's user id; the caller's role comes from the
role store, never from the token.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from fastapi import Depends, Request  # type: ignore[import-untyped]
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer  # type: ignore[import-untyped]
from jose import JWTError, jwt  # type: ignore[import-untyped]

from endpoint_registry.api.dependencies import get_service
from endpoint_registry.core.authorization import Caller, resolve_caller
from endpoint_registry.core.config import ConfigManager
from endpoint_registry.core.service import RegistryService

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"

# Missing credentials are allowed through; operations decide what they need
security = HTTPBearer(auto_error=False)


def create_access_token(
    data: dict[str, Any], secret_key: str, expires_delta: Optional[timedelta] = None
) -> str:
    """Create a JWT access token.

    Args:
        data: Data to encode in the token
        secret_key: Secret key for encoding
        expires_delta: Optional expiration time delta

    Returns:
        Encoded JWT token string

    Example:
        >>> token = create_access_token(
        ...     data={"sub": "user-1"},
        ...     secret_key="your-secret-key",
        ...     expires_delta=timedelta(hours=24)
        ... )
    """
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(hours=24))
    to_encode.update({"exp": expire, "iat": now})

    encoded_jwt: str = jwt.encode(to_encode, secret_key, algorithm=ALGORITHM)
    return encoded_jwt


class TokenIdentityProvider:
    """Resolves bearer tokens to user ids."""

    def __init__(self, secret_key: str):
        self.secret_key = secret_key

    def resolve(self, token: Optional[str]) -> Optional[str]:
        """Get the user id a token was issued for.

        Returns:
            The token subject, or None if the token is missing, invalid or
            expired
        """
        if not token:
            return None
        try:
            payload: dict[str, Any] = jwt.decode(token, self.secret_key, algorithms=[ALGORITHM])
        except JWTError as e:
            logger.debug(f"Rejected bearer token: {e}")
            return None
        subject = payload.get("sub")
        return str(subject) if subject else None


def get_caller(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    service: RegistryService = Depends(get_service),
) -> Caller:
    """Classify the caller of the current request.

    Note:
        This is a dependency function for FastAPI endpoints. It never fails:
        an absent or bad token yields an unauthenticated caller, and the
        service raises if the operation needs more.
    """
    token = credentials.credentials if credentials else None
    provider = TokenIdentityProvider(request.app.state.secret_key)
    return resolve_caller(token, provider, service.roles)


def get_token_expiry_seconds(config: ConfigManager) -> int:
    """Get token expiry time in seconds from config."""
    hours: int = config.get("api.authentication.token_expiry_hours", 24)
    return hours * 3600


def create_token_for_user(
    config: ConfigManager, user_id: str, expires_delta: Optional[timedelta] = None
) -> dict[str, Any]:
    """Create a complete token response.

    Args:
        config: Configuration manager
        user_id: User identifier for the token subject
        expires_delta: Override of the configured expiry

    Returns:
        Dictionary with access_token, token_type, and expires_in

    Example:
        >>> token_data = create_token_for_user(config, "alice")
        >>> print(token_data["access_token"])
    """
    secret_key = config.ensure_api_secret_key()

    if expires_delta is None:
        expires_delta = timedelta(seconds=get_token_expiry_seconds(config))

    access_token = create_access_token(
        data={"sub": user_id}, secret_key=secret_key, expires_delta=expires_delta
    )

    return {
        "access_token": access_token,
        "token_type": "bearer",
        "expires_in": int(expires_delta.total_seconds()),
    }
