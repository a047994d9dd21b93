"""Schémas Pydantic pour ConsentForm."""

from datetime import datetime

from pydantic import BaseModel, Field

from app.schemas.patient import PatientSummary
from app.schemas.utils import NonEmptyStr, PatientId


class ConsentCreate(BaseModel):
    """Schéma pour enregistrer un consentement.

    ``consent_date`` n'est pas accepté: il est posé par le serveur.
    """

    patient_id: PatientId
    consent_type: NonEmptyStr = Field(
        ...,
        max_length=100,
        description="Type de consentement (Treatment, Data Sharing, Research, Other)",
        examples=["Treatment"],
    )
    signature_data: str | None = Field(
        None,
        description="Signature manuscrite en data URL base64",
        examples=["data:image/png;base64,iVBORw0KGgo="],
    )


class ConsentResponse(BaseModel):
    """Schéma de réponse pour un consentement, avec le résumé du patient."""

    id: int
    patient_id: int
    consent_type: str
    signature_data: str | None
    consent_date: datetime
    created_at: datetime
    updated_at: datetime
    patient: PatientSummary

    model_config = {"from_attributes": True}
