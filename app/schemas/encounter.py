"""Schémas Pydantic pour Encounter."""

import datetime as dt

from pydantic import BaseModel, Field

from app.schemas.patient import PatientSummary
from app.schemas.utils import Description, NonEmptyStr, PatientId


class EncounterCreate(BaseModel):
    """Schéma pour créer une rencontre."""

    patient_id: PatientId
    date: dt.date = Field(..., description="Date de la rencontre", examples=["2024-03-01"])
    type: NonEmptyStr = Field(
        ...,
        max_length=100,
        description="Type de rencontre (Rawat Jalan, Rawat Inap, UGD, Lainnya)",
        examples=["Rawat Jalan"],
    )
    description: Description | None = None


class EncounterUpdate(BaseModel):
    """Schéma pour mettre à jour une rencontre (mise à jour partielle)."""

    patient_id: PatientId | None = None
    date: dt.date | None = None
    type: NonEmptyStr | None = Field(None, max_length=100)
    description: Description | None = None


class EncounterResponse(BaseModel):
    """Schéma de réponse pour une rencontre, avec le résumé du patient."""

    id: int
    patient_id: int
    date: dt.date
    type: str
    description: str | None
    created_at: dt.datetime
    updated_at: dt.datetime
    patient: PatientSummary

    model_config = {"from_attributes": True}
