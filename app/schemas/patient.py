"""Schémas Pydantic pour Patient.

Ce module définit les schémas de validation pour les opérations CRUD
sur les patients ainsi que ``PatientRecord``, la vue interne transmise
au builder de payload FHIR lors de la synchronisation Satu Sehat.

Note: le NIK est validé ici (avant stockage local) puis à nouveau par le
builder Satu Sehat (avant envoi au registre), indépendamment.
"""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from app.schemas.utils import NonEmptyStr, Nik, PatientId, PhoneNumber


def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v


class PatientBase(BaseModel):
    """Schéma de base partagé pour Patient."""

    name: NonEmptyStr = Field(
        ..., max_length=255, description="Nom complet du patient", examples=["Budi Santoso"]
    )
    nik: Nik
    birth_date: date = Field(..., description="Date de naissance", examples=["1990-05-15"])
    gender: Literal["male", "female"] = Field(..., description="Sexe administratif")
    phone: PhoneNumber | None = Field(None, description="Téléphone mobile")

    @field_validator("phone", mode="before")
    @classmethod
    def empty_phone_is_none(cls, v):
        """Un téléphone vide est traité comme absent."""
        return _blank_to_none(v)

    @field_validator("birth_date")
    @classmethod
    def validate_birth_date(cls, v: date) -> date:
        """Valide que la date de naissance est cohérente."""
        if v > date.today():
            raise ValueError("La date de naissance ne peut pas être dans le futur")
        return v


class PatientCreate(PatientBase):
    """Schéma pour créer un nouveau patient."""

    pass


class PatientUpdate(BaseModel):
    """Schéma pour mettre à jour un patient existant.

    Tous les champs sont optionnels pour permettre des mises à jour partielles.
    """

    name: NonEmptyStr | None = Field(None, max_length=255)
    nik: Nik | None = None
    birth_date: date | None = None
    gender: Literal["male", "female"] | None = None
    phone: PhoneNumber | None = None

    @field_validator("phone", mode="before")
    @classmethod
    def empty_phone_is_none(cls, v):
        return _blank_to_none(v)

    @field_validator("birth_date")
    @classmethod
    def validate_birth_date(cls, v: date | None) -> date | None:
        if v is not None and v > date.today():
            raise ValueError("La date de naissance ne peut pas être dans le futur")
        return v


class PatientResponse(BaseModel):
    """Schéma de réponse pour un patient."""

    id: PatientId
    name: str
    nik: str
    birth_date: date
    gender: str
    phone: str | None
    satusehat_id: str | None = Field(
        None, description="Identifiant de la ressource Patient chez Satu Sehat"
    )
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PatientSummary(BaseModel):
    """Résumé patient intégré aux rencontres et consentements."""

    id: PatientId
    name: str
    nik: str

    model_config = {"from_attributes": True}


class PatientRecord(BaseModel):
    """Vue interne d'un patient transmise au builder FHIR.

    Les champs ne sont pas contraints ici: le builder applique ses propres
    règles et signale tous les champs manquants ou invalides.
    """

    id: int | None = None
    name: str | None = None
    nik: str | None = None
    birth_date: datetime | date | str | None = None
    gender: str | None = None
    phone: str | None = None
    satusehat_id: str | None = None

    model_config = {"from_attributes": True}
