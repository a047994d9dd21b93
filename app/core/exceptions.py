"""
Exceptions HTTP de l'API cbc-lite et handlers associés.

Chaque erreur est une ``HTTPException`` FastAPI rendue au format
``{error, message?, detail?}``. Les handlers sont installés par
``setup_exception_handlers(app)`` au démarrage.

Example:
    ```python
    raise NotFoundError(
        message=f"Patient {patient_id} not found",
        resource_type="patient",
        resource_id=patient_id,
    )
    ```
"""

import logging
from http import HTTPStatus
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.infrastructure.satusehat.exceptions import (
    SatuSehatAuthError,
    SatuSehatAuthTimeoutError,
    SatuSehatConfigurationError,
    SatuSehatError,
    SatuSehatRegistryError,
    SatuSehatRegistryTimeoutError,
    SatuSehatValidationError,
)
from app.schemas.responses import ErrorResponse

logger = logging.getLogger(__name__)


class ApiError(HTTPException):
    """
    Erreur applicative renvoyée au client.

    Attributes:
        status_code: Code HTTP de la réponse
        error: Intitulé court (phrase HTTP par défaut)
        message: Message lisible
        extra: Détails complémentaires sérialisés dans ``detail``
    """

    default_status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        detail: Any = None,
        error: str | None = None,
        headers: dict[str, str] | None = None,
    ):
        status_code = self.default_status_code
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.error = error or HTTPStatus(status_code).phrase
        self.message = message
        self.extra = detail

    def to_payload(self) -> dict[str, Any]:
        """Construit le corps JSON de la réponse."""
        return build_error_payload(self.error, self.message, self.extra)


class NotFoundError(ApiError):
    """Ressource introuvable (404)."""

    default_status_code = 404

    def __init__(
        self,
        message: str | None = None,
        resource_type: str | None = None,
        resource_id: int | str | None = None,
    ):
        detail = None
        if resource_type is not None:
            detail = {"resource_type": resource_type, "resource_id": resource_id}
        super().__init__(message=message, detail=detail)
        self.resource_type = resource_type
        self.resource_id = resource_id


class ConflictError(ApiError):
    default_status_code = 409


def build_error_payload(error: str, message: str | None = None, detail: Any = None) -> dict:
    """Sérialise une erreur en omettant les champs vides."""
    return ErrorResponse(
        error=error,
        message=message,
        detail=jsonable_encoder(detail) if detail is not None else None,
    ).model_dump(exclude_none=True)


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_payload(),
        headers=exc.headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Rend les HTTPException standards (404 de routage, 405, etc.)."""
    message = exc.detail if isinstance(exc.detail, str) else None
    detail = None if isinstance(exc.detail, str) else exc.detail
    return JSONResponse(
        status_code=exc.status_code,
        content=build_error_payload(HTTPStatus(exc.status_code).phrase, message, detail),
        headers=getattr(exc, "headers", None),
    )


async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Les erreurs de validation du corps de requête sont renvoyées en 400."""
    return JSONResponse(
        status_code=400,
        content=build_error_payload(
            "Validation failed",
            "Request body or parameters are invalid",
            exc.errors(),
        ),
    )


# Ordre significatif: les sous-classes timeout avant leurs parents
SATUSEHAT_ERROR_STATUS: tuple[tuple[type[SatuSehatError], int], ...] = (
    (SatuSehatConfigurationError, 412),
    (SatuSehatValidationError, 422),
    (SatuSehatAuthTimeoutError, 504),
    (SatuSehatRegistryTimeoutError, 504),
    (SatuSehatAuthError, 502),
    (SatuSehatRegistryError, 502),
)


def satusehat_status_code(exc: SatuSehatError) -> int:
    """Code HTTP renvoyé pour une erreur du registre Satu Sehat."""
    for error_type, status_code in SATUSEHAT_ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code
    return 502


async def satusehat_error_handler(request: Request, exc: SatuSehatError) -> JSONResponse:
    """Traduit les erreurs Satu Sehat (412, 422, 502, 504)."""
    status_code = satusehat_status_code(exc)
    logger.warning(f"Erreur Satu Sehat sur {request.url.path} ({status_code}): {exc.message}")
    return JSONResponse(
        status_code=status_code,
        content=build_error_payload(HTTPStatus(status_code).phrase, exc.message, exc.details),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Erreur non gérée sur {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content=build_error_payload(
            "Internal Server Error",
            str(exc) if settings.DEBUG else "An unexpected error occurred",
        ),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Installe les handlers d'erreurs sur l'application."""
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(SatuSehatError, satusehat_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = [
    "ApiError",
    "ConflictError",
    "NotFoundError",
    "build_error_payload",
    "satusehat_status_code",
    "setup_exception_handlers",
]
