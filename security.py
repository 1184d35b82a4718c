"""
Admin authentication: password hashing, JWT access tokens, reset tokens.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, Header, HTTPException
from jose import JWTError, jwt
from passlib.context import CryptContext

from config import Settings, get_settings
from repositories import AdminRepository, get_admin_repository

logger = logging.getLogger(__name__)

# Use pbkdf2_sha256 to avoid external bcrypt dependency issues
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(
    data: dict,
    settings: Optional[Settings] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    settings = settings or get_settings()
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def create_reset_token(settings: Optional[Settings] = None):
    """Return a random token and the moment it stops being valid."""
    settings = settings or get_settings()
    expires_at = datetime.now(timezone.utc) + timedelta(
        minutes=settings.reset_token_expire_minutes
    )
    return secrets.token_hex(32), expires_at


def seed_admin(admins: AdminRepository, settings: Optional[Settings] = None) -> bool:
    """Create the configured admin account when none exists yet."""
    settings = settings or get_settings()
    password_hash = settings.admin_password_hash or hash_password(settings.admin_password)
    created = admins.ensure_seeded(settings.admin_email, password_hash)
    if created:
        logger.info("Default admin created for %s", settings.admin_email)
    return created


def get_current_admin(
    authorization: Optional[str] = Header(None),
    admins: AdminRepository = Depends(get_admin_repository),
) -> Dict[str, Any]:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Not authenticated")
    token = authorization.split(" ", 1)[1].strip()
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token")
    if payload.get("role") != "admin" or not payload.get("sub"):
        raise HTTPException(status_code=401, detail="Invalid token")
    admin = admins.by_id(payload["sub"])
    if admin is None:
        raise HTTPException(status_code=401, detail="Invalid token")
    return admin
