"""Configuration for the Satu Sehat (Kemenkes) registry connection."""

from typing import Literal

from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings


class SatuSehatSettings(BaseSettings):
    """Satu Sehat registry configuration settings.

    Defaults target the staging (sandbox) environment. Settings can be
    overridden via environment variables.
    """

    SATUSEHAT_AUTH_URL: AnyHttpUrl = "https://api-satusehat-stg.dto.kemkes.go.id/oauth2/v1/accesstoken"
    SATUSEHAT_FHIR_BASE_URL: AnyHttpUrl = "https://api-satusehat-stg.dto.kemkes.go.id/fhir-r4/v1"
    SATUSEHAT_TIMEOUT: float = 30.0

    # Optional seed credentials, used only when storage holds none
    SATUSEHAT_CLIENT_ID: str | None = None
    SATUSEHAT_CLIENT_SECRET: str | None = None

    SATUSEHAT_STORAGE_BACKEND: Literal["memory", "redis"] = "redis"
    SATUSEHAT_STORAGE_PREFIX: str = "cbc:satusehat"

    model_config = {
        "env_prefix": "",
        "case_sensitive": True,
        "env_file": ".env",
        "extra": "ignore",
    }


satusehat_settings = SatuSehatSettings()
