"""Endpoints API pour la gestion des patients.

Ce module définit les endpoints REST CRUD sur les patients ainsi que
l'envoi d'un patient au registre national Satu Sehat.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_session
from app.core.dependencies import get_satusehat_client
from app.core.exceptions import ConflictError, NotFoundError
from app.infrastructure.satusehat.client import SatuSehatClient
from app.schemas.patient import PatientCreate, PatientResponse, PatientUpdate
from app.schemas.responses import (
    create_responses,
    delete_responses,
    read_responses,
    sync_responses,
    update_responses,
)
from app.schemas.satusehat import SyncResult
from app.services import patient_service, satusehat_service

router = APIRouter()

DUPLICATE_NIK_MESSAGE = "NIK is already registered in the system. Please enter a different NIK."


def _patient_not_found(patient_id: int) -> NotFoundError:
    return NotFoundError(
        message=f"Patient {patient_id} not found",
        resource_type="patient",
        resource_id=patient_id,
    )


@router.get(
    "/",
    response_model=list[PatientResponse],
    summary="Lister les patients",
    description="Liste tous les patients, les plus récents en premier",
)
async def list_patients(db: AsyncSession = Depends(get_session)) -> list[PatientResponse]:
    patients = await patient_service.list_patients(db)
    return [PatientResponse.model_validate(patient) for patient in patients]


@router.post(
    "/",
    response_model=PatientResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Créer un nouveau patient",
    responses=create_responses,
)
async def create_patient(
    patient: PatientCreate,
    db: AsyncSession = Depends(get_session),
) -> PatientResponse:
    """
    Crée un nouveau patient.

    Le NIK doit comporter exactement 16 chiffres et être unique.
    """
    try:
        created_patient = await patient_service.create_patient(db=db, patient_data=patient)
    except IntegrityError:
        raise ConflictError(message=DUPLICATE_NIK_MESSAGE) from None
    return PatientResponse.model_validate(created_patient)


@router.get(
    "/{patient_id}",
    response_model=PatientResponse,
    summary="Récupérer un patient par ID",
    responses=read_responses,
)
async def get_patient(
    patient_id: int,
    db: AsyncSession = Depends(get_session),
) -> PatientResponse:
    patient = await patient_service.get_patient(db=db, patient_id=patient_id)
    if not patient:
        raise _patient_not_found(patient_id)
    return PatientResponse.model_validate(patient)


@router.put(
    "/{patient_id}",
    response_model=PatientResponse,
    summary="Mettre à jour un patient",
    description="Mise à jour partielle: seuls les champs fournis sont modifiés",
    responses=update_responses,
)
async def update_patient(
    patient_id: int,
    patient_update: PatientUpdate,
    db: AsyncSession = Depends(get_session),
) -> PatientResponse:
    try:
        updated_patient = await patient_service.update_patient(
            db=db, patient_id=patient_id, patient_data=patient_update
        )
    except IntegrityError:
        raise ConflictError(
            message="NIK is already registered for another patient. Please enter a different NIK."
        ) from None
    if not updated_patient:
        raise _patient_not_found(patient_id)
    return PatientResponse.model_validate(updated_patient)


@router.delete(
    "/{patient_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Supprimer un patient",
    description="Supprime le patient ainsi que ses rencontres et consentements",
    responses=delete_responses,
)
async def delete_patient(
    patient_id: int,
    db: AsyncSession = Depends(get_session),
) -> None:
    deleted = await patient_service.delete_patient(db=db, patient_id=patient_id)
    if not deleted:
        raise _patient_not_found(patient_id)


@router.post(
    "/{patient_id}/satusehat-sync",
    response_model=SyncResult,
    summary="Synchroniser un patient avec Satu Sehat",
    description=(
        "Crée la ressource Patient chez Satu Sehat et enregistre l'identifiant renvoyé. "
        "Un patient déjà synchronisé n'est jamais renvoyé (409)."
    ),
    responses=sync_responses,
)
async def sync_patient(
    patient_id: int,
    db: AsyncSession = Depends(get_session),
    client: SatuSehatClient = Depends(get_satusehat_client),
) -> SyncResult:
    patient = await satusehat_service.sync_patient(db=db, client=client, patient_id=patient_id)
    return SyncResult(patient_id=patient.id, satusehat_id=patient.satusehat_id)
