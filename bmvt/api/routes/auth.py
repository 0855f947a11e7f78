"""
Authentication routes: register, login, logout and current identity.

Tokens are returned in the body and also set as an httponly ``token``
cookie, so browser clients and API clients can use either.
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from bmvt.core.config import settings
from bmvt.core.dependencies import get_optional_identity, require_auth
from bmvt.core.responses import created_response, message_response, success_response
from bmvt.core.security import TOKEN_COOKIE_NAME, Identity
from bmvt.db.executor import QueryExecutor, get_executor
from bmvt.schemas.common import dump
from bmvt.schemas.user import LoginRequest, RegisterRequest, UserPublic
from bmvt.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def set_token_cookie(response: JSONResponse, token: str) -> JSONResponse:
    response.set_cookie(
        key=TOKEN_COOKIE_NAME,
        value=token,
        max_age=settings.jwt_access_token_expire_minutes * 60,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )
    return response


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    summary="Register Account",
    description="""
Create a back-office account and log it in.

**ROLES:**
- Without a token the account is an `Agent`
- Any other role (`Admin`, `Superviseur`) requires an Admin bearer token

**RESPONSE:** `{user, token}` and a `token` cookie.
    """,
)
def register(
    data: RegisterRequest,
    caller: Identity | None = Depends(get_optional_identity),
    db: QueryExecutor = Depends(get_executor),
):
    service = UserService(db)
    user = service.create_user(data, caller)
    token = service.issue_token(user)
    response = created_response({"user": dump(UserPublic, user), "token": token})
    return set_token_cookie(response, token)


@router.post("/login", summary="Login", description="Check credentials and issue a token.")
def login(data: LoginRequest, db: QueryExecutor = Depends(get_executor)):
    service = UserService(db)
    user = service.authenticate(data)
    token = service.issue_token(user)
    response = success_response({"user": dump(UserPublic, user), "token": token})
    return set_token_cookie(response, token)


@router.post("/logout", summary="Logout")
def logout():
    """Clear the token cookie. Bearer tokens simply expire."""
    response = message_response("Déconnecté")
    response.delete_cookie(TOKEN_COOKIE_NAME)
    return response


@router.get("/me", summary="Current Identity")
def me(identity: Identity = Depends(require_auth)):
    return success_response({"id": identity.id, "email": identity.email, "role": identity.role})
