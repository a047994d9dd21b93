"""Satu Sehat (Kemenkes) registry integration package."""

from app.infrastructure.satusehat.auth import TokenManager
from app.infrastructure.satusehat.client import SatuSehatClient
from app.infrastructure.satusehat.config import satusehat_settings
from app.infrastructure.satusehat.mappers import build_fhir_patient_payload
from app.infrastructure.satusehat.token_store import (
    InMemoryTokenStorage,
    RedisTokenStorage,
    TokenStore,
)

__all__ = [
    "InMemoryTokenStorage",
    "RedisTokenStorage",
    "SatuSehatClient",
    "TokenManager",
    "TokenStore",
    "build_fhir_patient_payload",
    "satusehat_settings",
]
