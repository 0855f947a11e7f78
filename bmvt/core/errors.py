"""
Application error taxonomy.

Every error raised on purpose by a service or a guard derives from
``ApplicationError`` and carries the HTTP status it maps to. The global
handlers registered in ``main.py`` turn them into ``{message, detail?}``
JSON bodies.
"""

from typing import Any

from fastapi import status


class ApplicationError(Exception):
    """Base exception class for application errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Erreur serveur"

    def __init__(self, message: str | None = None, detail: Any = None):
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)


class ValidationError(ApplicationError):
    """Malformed or missing input."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Requête invalide"


class AuthError(ApplicationError):
    """Missing or invalid credential."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Non authentifié"


class AuthorizationError(ApplicationError):
    """Caller role not permitted."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Accès refusé"


class NotFoundError(ApplicationError):
    """Referenced entity absent."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Introuvable"


class ConflictError(ApplicationError):
    """Uniqueness violation."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflit"


class DatabaseError(ApplicationError):
    """Driver-level failure, carries the original message."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Erreur base de données"


class UniqueViolationError(DatabaseError):
    """Integrity constraint rejected the statement."""
