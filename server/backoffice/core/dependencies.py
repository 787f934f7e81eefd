"""FastAPI dependencies for authentication, the role gate and file storage."""

from typing import Optional

import jwt
import structlog
from fastapi import Depends, Header
from jwt import PyJWTError

from .config import settings
from .exceptions import AuthenticationError, AuthorizationError
from ..services.image_storage import ImageStorage

# Roles allowed to browse the trash, restore and permanently delete
ELEVATED_ROLES = ("ADMIN", "SUPERADMIN")


async def get_current_user(
    authorization: Optional[str] = Header(None, alias="Authorization")
) -> dict:
    """
    Authentication dependency that validates HS256 Bearer tokens.

    Args:
        authorization: Authorization header with Bearer token

    Returns:
        dict: ``user_id`` (int, from ``sub``), ``username`` and ``roles``

    Raises:
        AuthenticationError: If the token is missing, malformed or invalid
    """
    if not authorization:
        raise AuthenticationError("Authorization header missing")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise AuthenticationError("Invalid authorization header format")

    try:
        # PyJWT rejects expired tokens when an exp claim is present
        payload = jwt.decode(token, settings.bearer_token_secret, algorithms=["HS256"])
    except PyJWTError as e:
        raise AuthenticationError(f"Token validation failed: {e}")

    try:
        user_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise AuthenticationError("Invalid token payload")

    structlog.contextvars.bind_contextvars(actor_id=user_id)
    return {
        "user_id": user_id,
        "username": payload.get("username"),
        "roles": [str(role).upper() for role in payload.get("roles", [])],
    }


def require_roles(*roles: str):
    """Build a dependency admitting only users holding one of ``roles``."""
    allowed = {role.upper() for role in roles}

    async def _guard(user: dict = Depends(get_current_user)) -> dict:
        if not allowed.intersection(user["roles"]):
            raise AuthorizationError(required_roles=sorted(allowed))
        return user

    return _guard


def get_image_storage() -> ImageStorage:
    """Image storage rooted at the configured public directory."""
    return ImageStorage(settings.storage_root)


RequiredAuth = Depends(get_current_user)
ElevatedAuth = Depends(require_roles(*ELEVATED_ROLES))
Storage = Depends(get_image_storage)
