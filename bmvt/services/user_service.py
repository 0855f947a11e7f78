"""
User account service: registration, login and account management.
"""

import logging

from bmvt.core.dependencies import is_manager
from bmvt.core.errors import (
    AuthError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    UniqueViolationError,
    ValidationError,
)
from bmvt.core.security import Identity, create_access_token, get_password_hash, verify_password
from bmvt.db.executor import QueryExecutor
from bmvt.db.models import UserRole
from bmvt.schemas.user import LoginRequest, PasswordChange, RegisterRequest, UserUpdate
from bmvt.services.common import build_insert, like_pattern

logger = logging.getLogger(__name__)

USER_COLUMNS = "id, name, email, role, last_login_at, created_at, updated_at"


class UserService:
    """Service for managing back-office accounts."""

    def __init__(self, db: QueryExecutor):
        """Initialize the service with a Query Executor."""
        self.db = db

    def get_user(self, user_id: int) -> dict:
        user = self.db.fetch_one(f"SELECT {USER_COLUMNS} FROM users WHERE id = ?", [user_id])
        if not user:
            raise NotFoundError("Utilisateur introuvable")
        return user

    def _get_with_hash(self, column: str, value) -> dict | None:
        return self.db.fetch_one(
            f"SELECT {USER_COLUMNS}, password_hash FROM users WHERE {column} = ?", [value]
        )

    def list_users(self, search: str | None = None) -> list[dict]:
        sql = f"SELECT {USER_COLUMNS} FROM users"
        args: list = []
        if search:
            sql += " WHERE name LIKE ? OR email LIKE ? OR role LIKE ?"
            args = [like_pattern(search)] * 3
        sql += " ORDER BY created_at DESC, id DESC"
        return self.db.fetch_all(sql, args)

    def create_user(self, data: RegisterRequest, caller: Identity | None = None) -> dict:
        """
        Create an account.

        Anyone may create an ``Agent``; other roles require an Admin caller.

        Raises:
            AuthorizationError: a non-Admin asked for a privileged role
            ConflictError: email already registered
        """
        role = data.role or UserRole.AGENT.value
        if role != UserRole.AGENT.value and (caller is None or caller.role != UserRole.ADMIN.value):
            raise AuthorizationError("Accès refusé : rôle non autorisé")

        if self._get_with_hash("email", data.email):
            raise ConflictError("Un compte existe déjà avec cet email")

        sql, args = build_insert(
            "users",
            {
                "name": data.name,
                "email": data.email,
                "password_hash": get_password_hash(data.password),
                "role": role,
            },
        )
        try:
            result = self.db.execute(sql, args)
            self.db.commit()
        except UniqueViolationError:
            raise ConflictError("Un compte existe déjà avec cet email")

        logger.info(f"User account created: {data.email} ({role})")
        return self.get_user(result.insert_id)

    def authenticate(self, data: LoginRequest) -> dict:
        """
        Check credentials and record the login time.

        Raises:
            AuthError: unknown email or wrong password
        """
        user = self._get_with_hash("email", data.email)
        if not user or not verify_password(data.password, user["password_hash"]):
            logger.warning(f"Failed login attempt for {data.email}")
            raise AuthError("Identifiants invalides")

        self.db.execute(
            "UPDATE users SET last_login_at = CURRENT_TIMESTAMP WHERE id = ?", [user["id"]]
        )
        self.db.commit()
        logger.info(f"User logged in: {data.email}")
        return self.get_user(user["id"])

    @staticmethod
    def issue_token(user: dict) -> str:
        return create_access_token({"id": user["id"], "email": user["email"], "role": user["role"]})

    def update_user(self, user_id: int, data: UserUpdate) -> dict:
        self.get_user(user_id)

        clash = self.db.fetch_one(
            "SELECT id FROM users WHERE email = ? AND id <> ?", [data.email, user_id]
        )
        if clash:
            raise ConflictError("Email déjà utilisé")

        assignments = ["name = ?", "email = ?", "role = ?"]
        args: list = [data.name, data.email, data.role]
        if data.password:
            assignments.append("password_hash = ?")
            args.append(get_password_hash(data.password))
        assignments.append("updated_at = CURRENT_TIMESTAMP")
        args.append(user_id)

        try:
            self.db.execute(f"UPDATE users SET {', '.join(assignments)} WHERE id = ?", args)
            self.db.commit()
        except UniqueViolationError:
            raise ConflictError("Email déjà utilisé")
        return self.get_user(user_id)

    def change_password(self, user_id: int, data: PasswordChange, caller: Identity) -> None:
        """
        Admin and Superviseur may reset anyone's password; other users only
        their own, and only with the current password.
        """
        user = self._get_with_hash("id", user_id)
        if not user:
            raise NotFoundError("Utilisateur introuvable")

        if not is_manager(caller):
            if caller.id != user["id"]:
                raise AuthorizationError("Accès refusé.")
            if not data.old_password:
                raise ValidationError("Ancien mot de passe requis.")
            if not verify_password(data.old_password, user["password_hash"]):
                raise ValidationError("Ancien mot de passe incorrect.")

        self.db.execute(
            "UPDATE users SET password_hash = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            [get_password_hash(data.new_password), user_id],
        )
        self.db.commit()
        logger.info(f"Password changed for user {user_id} by user {caller.id}")

    def delete_user(self, user_id: int) -> None:
        self.get_user(user_id)
        self.db.execute("DELETE FROM users WHERE id = ?", [user_id])
        self.db.commit()
        logger.info(f"User {user_id} deleted")
