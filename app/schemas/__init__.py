"""Schemas Pydantic pour validation des donnees."""

from app.schemas.responses import (
    COMMON_RESPONSES,
    ErrorResponse,
    build_responses,
    create_responses,
    delete_responses,
    read_responses,
    sync_responses,
    update_responses,
)

__all__ = [
    "COMMON_RESPONSES",
    "ErrorResponse",
    "build_responses",
    "create_responses",
    "delete_responses",
    "read_responses",
    "sync_responses",
    "update_responses",
]
