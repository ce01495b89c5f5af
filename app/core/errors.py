"""
➡️ But : Une seule taxonomie d'erreurs pour toute l'API.

Les services lèvent directement ces exceptions (ce sont des HTTPException),
les handlers enregistrés dans main.py les transforment en enveloppe uniforme :

{success: false, statusCode, message, data: null, errors: [...]}

🔹 Avantages :

Un seul chemin de décodage côté client (succès comme erreur).

Aucun détail interne ne fuit en production.
"""

import logging
import traceback
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.security.cookies import apply_pending_renewal
from app.utils.ids import positive_db_id

logger = logging.getLogger(__name__)


class ApiError(HTTPException):
    status_code_default: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message_default: str = "Something went wrong"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        errors: Optional[List[Dict[str, Any]]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.message = message or self.message_default
        self.errors = errors or []
        super().__init__(status_code=self.status_code_default, detail=self.message, headers=headers)


class InvalidArgument(ApiError):
    status_code_default = status.HTTP_400_BAD_REQUEST
    message_default = "Invalid argument"

class Unauthorized(ApiError):
    status_code_default = status.HTTP_401_UNAUTHORIZED
    message_default = "Unauthorized"

class Forbidden(ApiError):
    status_code_default = status.HTTP_403_FORBIDDEN
    message_default = "Forbidden"

class NotFound(ApiError):
    status_code_default = status.HTTP_404_NOT_FOUND
    message_default = "Not found"

class Conflict(ApiError):
    status_code_default = status.HTTP_409_CONFLICT
    message_default = "Conflict"

    def __init__(self, message: Optional[str] = None, *, field: Optional[str] = None, **kwargs):
        if field and "errors" not in kwargs:
            kwargs["errors"] = [{"field": field}]
        super().__init__(message, **kwargs)

class Internal(ApiError):
    status_code_default = status.HTTP_500_INTERNAL_SERVER_ERROR
    message_default = "Internal server error"


def parse_id(value: Any, name: str) -> int:
    """Identifiant entier strictement positif, sinon InvalidArgument (avant toute requête)."""
    parsed = positive_db_id(value)
    if parsed is None:
        raise InvalidArgument(f"Invalid {name}")
    return parsed


# -----------------------------
# Enveloppe d'erreur
# -----------------------------
def _envelope(status_code: int, message: str, errors: List[Any], exc: Optional[BaseException] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "success": False,
        "statusCode": status_code,
        "message": message,
        "data": None,
        "errors": errors,
    }
    if exc is not None and not settings.is_production:
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return body


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if isinstance(exc, ApiError):
        message, errors = exc.message, exc.errors
    else:
        message, errors = str(exc.detail), []
    response = JSONResponse(
        status_code=exc.status_code,
        content=_envelope(exc.status_code, message, errors, exc),
        headers=getattr(exc, "headers", None),
    )
    return apply_pending_renewal(request, response)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"field": ".".join(str(p) for p in err.get("loc", ()) if p != "body"), "message": err.get("msg")}
        for err in exc.errors()
    ]
    response = JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_envelope(status.HTTP_400_BAD_REQUEST, "Invalid request", errors, exc),
    )
    return apply_pending_renewal(request, response)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    response = JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, Internal.message_default, [], exc),
    )
    return apply_pending_renewal(request, response)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
