"""
Response helpers shared by route handlers and exception handlers.

Error bodies always follow the format:
{
    "message": str,
    "detail": Any   # optional
}
Success bodies keep the shapes the frontend already consumes
({items, total}, a bare item, or {message, item}).
"""

from typing import Any

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def error_response(
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
    message: str = "Erreur serveur",
    detail: Any = None,
) -> JSONResponse:
    """
    Create a standardized error response.

    Args:
        status_code: HTTP error status code
        message: Human-readable error message
        detail: Optional extra information (omitted when None)

    Returns:
        JSONResponse with ``{message, detail?}``
    """
    content: dict[str, Any] = {"message": message}
    if detail is not None:
        content["detail"] = detail
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))


def success_response(data: Any, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    """Serialize ``data`` as a JSON response."""
    return JSONResponse(status_code=status_code, content=jsonable_encoder(data))


def created_response(data: Any) -> JSONResponse:
    """Convenience method for 201 Created responses."""
    return success_response(data, status_code=status.HTTP_201_CREATED)


def list_response(items: list, total: int | None = None) -> JSONResponse:
    """``{items, total}`` listing body; total defaults to ``len(items)``."""
    return success_response({"items": items, "total": len(items) if total is None else total})


def message_response(message: str, **extra: Any) -> JSONResponse:
    """``{message, ...}`` acknowledgement body."""
    return success_response({"message": message, **extra})
