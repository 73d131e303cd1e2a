"""
Authentication Utility - passwords, JWT and one-time tokens.

Provides:
- Password hashing with bcrypt
- JWT session token creation/verification (7 day expiry)
- Single-use email-verification and password-reset tokens
- FastAPI dependencies for protected routes (authenticate / authorize)
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from passlib.context import CryptContext

from careerguide.core.config import Settings, get_app_settings, get_settings
from careerguide.core.errors import APIError
from careerguide.db import COLLECTIONS, DocumentStore, get_store
from careerguide.utils.helpers import parse_iso, utc_now

# Password hashing
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Bearer token extractor (we raise our own 401 when missing)
bearer_scheme = HTTPBearer(auto_error=False)


class InvalidToken(Exception):
    """Session token failed signature or expiry verification."""


def hash_password(password: str) -> str:
    """Hash password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against hash. Malformed hashes never verify."""
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        return False


def create_access_token(
    data: dict, expires_delta: Optional[timedelta] = None, settings: Optional[Settings] = None
) -> str:
    """Create JWT access token. Uses the environment settings unless ``settings`` is given."""
    settings = settings or get_settings()
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str, settings: Optional[Settings] = None) -> dict:
    """Decode and verify JWT token. Raises InvalidToken."""
    settings = settings or get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        raise InvalidToken(str(e)) from e


def generate_one_time_token(hours: int) -> Tuple[str, str]:
    """Random URL-safe token plus its ISO expiry timestamp."""
    token = secrets.token_urlsafe(32)
    expires = utc_now() + timedelta(hours=hours)
    return token, expires.isoformat()


def is_expired(expires_at: Optional[str]) -> bool:
    """Missing or unparseable expiries count as expired."""
    expires = parse_iso(expires_at)
    return expires is None or expires <= utc_now()


async def authenticate(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    store: DocumentStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
) -> dict:
    """
    FastAPI dependency - resolve the bearer token to an active user document.

    Usage:
        @router.get("/protected")
        async def route(user: dict = Depends(authenticate)):
            return user
    """
    headers = {"WWW-Authenticate": "Bearer"}
    if credentials is None or not credentials.credentials:
        raise APIError(401, "Access denied. No token provided.", headers=headers)

    try:
        payload = decode_token(credentials.credentials, settings)
    except InvalidToken:
        raise APIError(401, "Invalid or expired token", headers=headers)

    user_id = payload.get("sub") or payload.get("id")
    if not user_id:
        raise APIError(401, "Invalid or expired token", headers=headers)

    user = await store.get(COLLECTIONS["users"], user_id)
    if not user:
        raise APIError(401, "Invalid token. User not found.", headers=headers)

    if user.get("status") == "pending":
        raise APIError(401, "Your account is pending approval. Please wait for an administrator.", headers=headers)
    if user.get("status") != "active":
        raise APIError(401, "Your account is suspended. Please contact support.", headers=headers)

    return user


def authorize(*roles: str):
    """
    Dependency factory - require one of ``roles``. Runs authenticate first.

    Usage:
        @router.get("/admin-only")
        async def route(user: dict = Depends(authorize("admin"))):
            ...
    """
    async def checker(user: dict = Depends(authenticate)) -> dict:
        if user.get("role") not in roles:
            raise APIError(403, f"Access denied. Required roles: {', '.join(roles)}")
        return user

    return checker


get_current_student = authorize("student")
get_current_company = authorize("company")
get_current_institution = authorize("institution")
get_current_admin = authorize("admin")
