"""
FastAPI dependency functions for authentication and authorization.

These dependencies provide reusable access control without using *args, **kwargs,
ensuring FastAPI can properly introspect function signatures for OpenAPI generation.
"""

from collections.abc import Callable

from fastapi import Depends, Request

from bmvt.core.errors import AuthError, AuthorizationError
from bmvt.core.security import Identity, decode_access_token, extract_token
from bmvt.db.models import UserRole


def require_auth(request: Request) -> Identity:
    """
    Dependency that verifies the caller's token.

    Attaches the decoded identity to ``request.state.user``.

    Raises:
        AuthError: 401 when the token is missing, invalid or expired
    """
    token = extract_token(request)
    if not token:
        raise AuthError("Token manquant")

    identity = decode_access_token(token)
    if identity is None:
        raise AuthError("Token invalide ou expiré")

    request.state.user = identity
    return identity


def get_optional_identity(request: Request) -> Identity | None:
    """Identity of the caller when a valid token is present, else None."""
    token = extract_token(request)
    identity = decode_access_token(token) if token else None
    if identity is not None:
        request.state.user = identity
    return identity


def require_role(*roles: UserRole | str) -> Callable[..., Identity]:
    """
    Build a dependency that only lets the given roles through.

    Must run after ``require_auth``: it depends on it, and also reports 401
    when no identity ended up attached to the request.

    Usage:
        @router.delete("/{user_id}")
        async def delete_user(admin: Identity = Depends(require_role(UserRole.ADMIN))):
            ...
    """
    allowed = {r.value if isinstance(r, UserRole) else str(r) for r in roles}

    def role_guard(request: Request, _: Identity = Depends(require_auth)) -> Identity:
        identity = getattr(request.state, "user", None)
        if identity is None:
            raise AuthError("Non authentifié")
        if identity.role not in allowed:
            raise AuthorizationError("Accès refusé : rôle non autorisé")
        return identity

    return role_guard


def is_manager(identity: Identity | None) -> bool:
    """Admin and Superviseur may act on any account."""
    return identity is not None and identity.role in (
        UserRole.ADMIN.value,
        UserRole.SUPERVISEUR.value,
    )
