"""Endpoints API pour la gestion des rencontres (encounters)."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_session
from app.core.exceptions import NotFoundError
from app.schemas.encounter import EncounterCreate, EncounterResponse, EncounterUpdate
from app.schemas.responses import build_responses, delete_responses, read_responses
from app.services import encounter_service

router = APIRouter()


def _encounter_not_found(encounter_id: int) -> NotFoundError:
    return NotFoundError(
        message=f"Encounter {encounter_id} not found",
        resource_type="encounter",
        resource_id=encounter_id,
    )


@router.get(
    "/",
    response_model=list[EncounterResponse],
    summary="Lister les rencontres",
    description="Liste toutes les rencontres avec le résumé du patient, les plus récentes en premier",
)
async def list_encounters(db: AsyncSession = Depends(get_session)) -> list[EncounterResponse]:
    encounters = await encounter_service.list_encounters(db)
    return [EncounterResponse.model_validate(encounter) for encounter in encounters]


@router.post(
    "/",
    response_model=EncounterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Créer une rencontre",
    responses=build_responses(400, 404),
)
async def create_encounter(
    encounter: EncounterCreate,
    db: AsyncSession = Depends(get_session),
) -> EncounterResponse:
    """Crée une rencontre; le patient doit exister (404 sinon)."""
    created = await encounter_service.create_encounter(db=db, encounter_data=encounter)
    return EncounterResponse.model_validate(created)


@router.get(
    "/{encounter_id}",
    response_model=EncounterResponse,
    summary="Récupérer une rencontre par ID",
    responses=read_responses,
)
async def get_encounter(
    encounter_id: int,
    db: AsyncSession = Depends(get_session),
) -> EncounterResponse:
    encounter = await encounter_service.get_encounter(db=db, encounter_id=encounter_id)
    if not encounter:
        raise _encounter_not_found(encounter_id)
    return EncounterResponse.model_validate(encounter)


@router.put(
    "/{encounter_id}",
    response_model=EncounterResponse,
    summary="Mettre à jour une rencontre",
    responses=build_responses(400, 404),
)
async def update_encounter(
    encounter_id: int,
    encounter_update: EncounterUpdate,
    db: AsyncSession = Depends(get_session),
) -> EncounterResponse:
    updated = await encounter_service.update_encounter(
        db=db, encounter_id=encounter_id, encounter_data=encounter_update
    )
    if not updated:
        raise _encounter_not_found(encounter_id)
    return EncounterResponse.model_validate(updated)


@router.delete(
    "/{encounter_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Supprimer une rencontre",
    responses=delete_responses,
)
async def delete_encounter(
    encounter_id: int,
    db: AsyncSession = Depends(get_session),
) -> None:
    deleted = await encounter_service.delete_encounter(db=db, encounter_id=encounter_id)
    if not deleted:
        raise _encounter_not_found(encounter_id)
