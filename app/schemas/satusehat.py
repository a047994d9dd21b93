"""Schémas Pydantic pour la configuration et la synchronisation Satu Sehat."""

from pydantic import BaseModel, Field

from app.schemas.utils import NonEmptyStr, PatientId


class CredentialsUpdate(BaseModel):
    """Remplacement des credentials OAuth2 Satu Sehat."""

    client_id: NonEmptyStr = Field(..., description="Client ID fourni par Satu Sehat")
    client_secret: NonEmptyStr = Field(..., description="Client secret fourni par Satu Sehat")


class CredentialsStatus(BaseModel):
    """État de la configuration Satu Sehat. Le secret n'est jamais renvoyé."""

    client_id: str | None = Field(None, description="Client ID configuré")
    client_secret_set: bool = Field(..., description="Un client secret est configuré")
    token_cached: bool = Field(..., description="Un token d'accès valide est en cache")


class SyncResult(BaseModel):
    """Résultat d'une synchronisation patient."""

    patient_id: PatientId
    satusehat_id: str = Field(..., description="ID de la ressource Patient chez Satu Sehat")
