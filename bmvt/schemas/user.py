"""
Pydantic schemas for authentication and user accounts.
"""

from datetime import datetime

from pydantic import AliasChoices, Field, field_validator, model_validator

from bmvt.core.validation import ValidationUtils
from bmvt.db.models import UserRole
from bmvt.schemas.common import CamelRowModel, InputModel

MIN_PASSWORD_LENGTH = 8
ROLES = [role.value for role in UserRole]


def _normalize_email(value: str | None) -> str | None:
    return value.lower() if value else value


def _check_role(value: str | None) -> str | None:
    if value is not None and value not in ROLES:
        raise ValueError("Rôle invalide")
    return value


class RegisterRequest(InputModel):
    """Self-registration (or Admin-driven account creation)."""

    name: str | None = None
    email: str | None = None
    password: str | None = None
    role: str | None = None

    @model_validator(mode="after")
    def check_required(self):
        if not self.name or not self.email or not self.password:
            raise ValueError("Champs requis manquants")
        self.email = _normalize_email(self.email)
        if not ValidationUtils.is_valid_email(self.email):
            raise ValueError("Email invalide")
        if len(self.password) < MIN_PASSWORD_LENGTH:
            raise ValueError("Mot de passe trop court (min 8 caractères).")
        _check_role(self.role)
        return self


class LoginRequest(InputModel):
    email: str | None = None
    password: str | None = None

    @model_validator(mode="after")
    def check_required(self):
        if not self.email or not self.password:
            raise ValueError("Email et mot de passe requis")
        self.email = _normalize_email(self.email)
        return self


class UserUpdate(InputModel):
    """Profile edit by an Admin or Superviseur; ``password`` is optional."""

    name: str | None = None
    email: str | None = None
    role: str | None = None
    password: str | None = None

    @model_validator(mode="after")
    def check_fields(self):
        if not self.name:
            raise ValueError("Le nom est obligatoire")
        self.email = _normalize_email(self.email)
        if not self.email or not ValidationUtils.is_valid_email(self.email):
            raise ValueError("Email invalide")
        if not self.role:
            raise ValueError("Rôle invalide")
        _check_role(self.role)
        if self.password is not None and len(self.password) < MIN_PASSWORD_LENGTH:
            raise ValueError("Mot de passe trop court (min 8 caractères).")
        return self


class PasswordChange(InputModel):
    new_password: str | None = Field(
        None, validation_alias=AliasChoices("newPassword", "new_password")
    )
    old_password: str | None = Field(
        None, validation_alias=AliasChoices("oldPassword", "old_password")
    )

    @field_validator("new_password")
    @classmethod
    def check_new_password(cls, v: str | None) -> str | None:
        if not v or len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError("Nouveau mot de passe invalide (min 8 caractères).")
        return v

    @model_validator(mode="after")
    def require_new_password(self):
        if not self.new_password:
            raise ValueError("Nouveau mot de passe invalide (min 8 caractères).")
        return self


class UserPublic(CamelRowModel):
    """Compact user returned with a token."""

    id: int
    name: str
    email: str
    role: str


class UserOut(UserPublic):
    """User listing entry."""

    last_login_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
