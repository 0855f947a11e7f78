"""
Authentication utilities for JWT tokens and password hashing.

This module provides secure authentication functions using bcrypt for password
hashing and JWT for token-based authentication.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from fastapi import Request
from jose import JWTError, jwt  # type: ignore
from passlib.context import CryptContext  # type: ignore

from bmvt.core.config import settings

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

TOKEN_COOKIE_NAME = "token"
ACCESS_TOKEN_HEADER = "x-access-token"


@dataclass(frozen=True)
class Identity:
    """Caller identity decoded from a verified token."""

    id: int
    email: str
    role: str


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plaintext password against its hash.

    Args:
        plain_password: The plaintext password to verify
        hashed_password: The hashed password from database

    Returns:
        True if password matches, False otherwise
    """
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


def get_password_hash(password: str) -> str:
    """
    Hash a plaintext password.

    Args:
        password: The plaintext password to hash

    Returns:
        The hashed password string
    """
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Claims to encode, typically ``{"id", "email", "role"}``
        expires_delta: Optional custom expiration time

    Returns:
        JWT access token string
    """
    to_encode = data.copy()
    if "id" in to_encode and "sub" not in to_encode:
        to_encode["sub"] = str(to_encode["id"])
    if expires_delta:
        expire = datetime.now(UTC) + expires_delta
    else:
        expire = datetime.now(UTC) + timedelta(minutes=settings.jwt_access_token_expire_minutes)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Identity | None:
    """
    Verify a token and return the identity it carries.

    Returns None when the signature, expiry or claims are invalid.
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None

    try:
        return Identity(
            id=int(payload.get("id", payload.get("sub"))),
            email=str(payload.get("email") or ""),
            role=str(payload.get("role") or ""),
        )
    except (TypeError, ValueError):
        return None


def extract_token(request: Request) -> str | None:
    """
    Find the bearer credential on a request.

    Priority: ``Authorization: Bearer``, ``token`` cookie, ``x-access-token``.
    """
    auth = request.headers.get("authorization", "")
    if auth.startswith("Bearer "):
        token = auth[7:].strip()
        if token:
            return token

    cookie_token = request.cookies.get(TOKEN_COOKIE_NAME)
    if cookie_token:
        return cookie_token

    header_token = request.headers.get(ACCESS_TOKEN_HEADER)
    if header_token:
        return header_token.strip()

    return None
