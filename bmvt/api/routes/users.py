"""
User account management routes.

Listing and reading are open to any authenticated role. Creating and
editing accounts is reserved to Admin and Superviseur, deleting to Admin.
Password changes are open to everyone for their own account.
"""

from fastapi import APIRouter, Depends, Query, status

from bmvt.core.dependencies import require_auth, require_role
from bmvt.core.responses import created_response, list_response, message_response, success_response
from bmvt.core.security import Identity
from bmvt.db.executor import QueryExecutor, get_executor
from bmvt.db.models import UserRole
from bmvt.schemas.common import dump, dump_all
from bmvt.schemas.user import PasswordChange, RegisterRequest, UserOut, UserUpdate
from bmvt.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])

require_manager = require_role(UserRole.ADMIN, UserRole.SUPERVISEUR)


@router.get("", summary="List Users")
def list_users(
    search: str | None = Query(None, description="Match on name, email or role"),
    db: QueryExecutor = Depends(get_executor),
):
    return list_response(dump_all(UserOut, UserService(db).list_users(search)))


@router.get("/{user_id}", summary="Get User")
def get_user(user_id: int, db: QueryExecutor = Depends(get_executor)):
    return success_response(dump(UserOut, UserService(db).get_user(user_id)))


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Create User (Admin/Superviseur)",
    description="""
Create an account on behalf of someone.

**AUTHENTICATION:**
- Admin or Superviseur
- Only an Admin may create `Admin` or `Superviseur` accounts
    """,
)
def create_user(
    data: RegisterRequest,
    caller: Identity = Depends(require_manager),
    db: QueryExecutor = Depends(get_executor),
):
    user = UserService(db).create_user(data, caller)
    return created_response(dump(UserOut, user))


@router.put("/{user_id}", summary="Update User (Admin/Superviseur)")
def update_user(
    user_id: int,
    data: UserUpdate,
    _: Identity = Depends(require_manager),
    db: QueryExecutor = Depends(get_executor),
):
    return success_response(dump(UserOut, UserService(db).update_user(user_id, data)))


@router.put(
    "/{user_id}/password",
    summary="Change Password",
    description="""
Change an account password.

Admin and Superviseur may reset any password. Other users may only change
their own and must send `oldPassword`.
    """,
)
def change_password(
    user_id: int,
    data: PasswordChange,
    caller: Identity = Depends(require_auth),
    db: QueryExecutor = Depends(get_executor),
):
    UserService(db).change_password(user_id, data, caller)
    return message_response("Mot de passe mis à jour")


@router.delete("/{user_id}", summary="Delete User (Admin)")
def delete_user(
    user_id: int,
    _: Identity = Depends(require_role(UserRole.ADMIN)),
    db: QueryExecutor = Depends(get_executor),
):
    UserService(db).delete_user(user_id)
    return message_response("Supprimé")
