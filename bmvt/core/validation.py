"""
Input normalization and validation helpers.

Shared by the pydantic schemas (which raise ``ValueError``) and by the
route layer that has to read either multipart forms or JSON bodies.
"""

import json
import re
from typing import Any

from email_validator import EmailNotValidError, validate_email
from fastapi import Request
from pydantic import ValidationError as PydanticValidationError
from starlette.datastructures import UploadFile

from bmvt.core.errors import ValidationError

PASSPORT_MESSAGE = "Le champ 'passeport' doit contenir 5 à 15 caractères alphanumériques."
IATA_MESSAGE = "Codes IATA invalides (ex: DSS, JED)."


class ValidationUtils:
    """Utility class for common validation operations."""

    PASSPORT_PATTERN = re.compile(r"^[A-Z0-9]{5,15}$")
    IATA_PATTERN = re.compile(r"^[A-Z]{3}$")

    @staticmethod
    def normalize_passport(value: Any) -> str:
        """Trim and upper-case a passport number."""
        return str(value or "").strip().upper()

    @staticmethod
    def validate_passport(value: Any, message: str = PASSPORT_MESSAGE) -> str:
        """Normalize and check ``[A-Z0-9]{5,15}``."""
        passport = ValidationUtils.normalize_passport(value)
        if not ValidationUtils.PASSPORT_PATTERN.match(passport):
            raise ValueError(message)
        return passport

    @staticmethod
    def validate_iata(value: Any) -> str:
        code = str(value or "").strip().upper()
        if not ValidationUtils.IATA_PATTERN.match(code):
            raise ValueError(IATA_MESSAGE)
        return code

    @staticmethod
    def is_valid_email(value: str) -> bool:
        """Syntax check only, as pydantic's ``EmailStr`` does."""
        try:
            validate_email(value or "", check_deliverability=False)
        except EmailNotValidError:
            return False
        return True


def blank_to_none(value: Any) -> Any:
    """Strip strings and map empty ones to None."""
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def parse_bool(value: Any) -> bool:
    """Interpret form/query flags such as ``true``, ``1``, ``on``."""
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in ("1", "true", "yes", "on")


def first_error_message(exc: PydanticValidationError | Any) -> str:
    """
    Human-readable message for the first error of a pydantic validation.

    Errors raised with ``ValueError`` inside validators keep their message
    verbatim; missing fields read ``Champ requis manquant : <field>``.
    """
    errors = exc.errors() if hasattr(exc, "errors") else []
    if not errors:
        return "Requête invalide"

    error = errors[0]
    loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
    field = ".".join(loc)
    ctx = error.get("ctx") or {}

    if "error" in ctx:
        return str(ctx["error"])
    if error.get("type") == "missing":
        return f"Champ requis manquant : {field}" if field else "Champs requis manquants."
    if field:
        return f"Champ '{field}' invalide : {error.get('msg')}"
    return str(error.get("msg") or "Requête invalide")


async def read_payload(request: Request) -> tuple[dict[str, Any], dict[str, list[UploadFile]]]:
    """
    Read a request body sent either as a form (multipart or urlencoded) or as JSON.

    Returns:
        ``(fields, files)`` where ``files`` maps a form field name to the
        uploaded parts carrying a filename. ``files[]`` is folded into ``files``.
    """
    content_type = request.headers.get("content-type", "")

    if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        form = await request.form()
        fields: dict[str, Any] = {}
        files: dict[str, list[UploadFile]] = {}
        for key, value in form.multi_items():
            name = key[:-2] if key.endswith("[]") else key
            if isinstance(value, UploadFile):
                if value.filename:
                    files.setdefault(name, []).append(value)
            else:
                fields[name] = value
        return fields, files

    body = await request.body()
    if not body:
        return {}, {}
    try:
        data = json.loads(body)
    except (ValueError, UnicodeDecodeError):
        raise ValidationError("Corps JSON invalide")
    if not isinstance(data, dict):
        raise ValidationError("Corps JSON invalide")
    return data, {}
