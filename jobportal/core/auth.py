"""
Authentication Utility - resolves the calling actor from a JWT.

Tokens are issued by the identity provider; this module verifies them and
loads the user document behind the `sub` claim. create_access_token() signs
with the same settings and is kept for minting tokens locally (test suites,
development against a local database).

Provides:
- JWT token creation/verification
- FastAPI dependencies for protected routes
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from fastapi import Cookie, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from jobportal.core.config import get_settings
from jobportal.core.errors import AuthenticationError, ForbiddenError
from jobportal.schemas.schemas import ActorIdentity, Role
from jobportal.services.mongo_service import UserProfileService, get_profile_service

# Bearer token extractor (the `token` cookie is accepted as a fallback)
bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT signed like the identity provider's, for local use."""
    settings = get_settings()
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    settings = get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def get_current_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    token: Optional[str] = Cookie(None),
    profiles: UserProfileService = Depends(get_profile_service),
) -> ActorIdentity:
    """
    FastAPI dependency - Get current authenticated actor.

    Usage:
        @router.get("/protected")
        def route(actor: ActorIdentity = Depends(get_current_actor)):
            return actor
    """
    raw_token = credentials.credentials if credentials else token
    if not raw_token:
        raise AuthenticationError("User is not authenticated.")

    payload = decode_token(raw_token)
    if not payload or not payload.get("sub"):
        raise AuthenticationError("Invalid or expired token.")

    actor = profiles.get_identity(payload["sub"])
    if actor is None:
        raise AuthenticationError("User is not authenticated.")
    return actor


def require_role(role: Role):
    """Dependency factory - only lets `role` through."""
    def dependency(actor: ActorIdentity = Depends(get_current_actor)) -> ActorIdentity:
        if actor.role != role:
            raise ForbiddenError(f"{actor.role.value} not allowed to access this resource.")
        return actor
    return dependency


get_current_job_seeker = require_role(Role.job_seeker)
get_current_employer = require_role(Role.employer)
