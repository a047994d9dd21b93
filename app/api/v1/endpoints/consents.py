"""Endpoints API pour les formulaires de consentement."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_session
from app.core.exceptions import NotFoundError
from app.schemas.consent import ConsentCreate, ConsentResponse
from app.schemas.responses import build_responses, delete_responses, read_responses
from app.services import consent_service

router = APIRouter()


def _consent_not_found(consent_id: int) -> NotFoundError:
    return NotFoundError(
        message=f"Consent form {consent_id} not found",
        resource_type="consent_form",
        resource_id=consent_id,
    )


@router.get(
    "/",
    response_model=list[ConsentResponse],
    summary="Lister les consentements",
    description="Liste tous les consentements avec le résumé du patient, les plus récents en premier",
)
async def list_consents(db: AsyncSession = Depends(get_session)) -> list[ConsentResponse]:
    consents = await consent_service.list_consents(db)
    return [ConsentResponse.model_validate(consent) for consent in consents]


@router.post(
    "/",
    response_model=ConsentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Enregistrer un consentement",
    description="La date du consentement est posée par le serveur",
    responses=build_responses(400, 404),
)
async def create_consent(
    consent: ConsentCreate,
    db: AsyncSession = Depends(get_session),
) -> ConsentResponse:
    created = await consent_service.create_consent(db=db, consent_data=consent)
    return ConsentResponse.model_validate(created)


@router.get(
    "/{consent_id}",
    response_model=ConsentResponse,
    summary="Récupérer un consentement par ID",
    responses=read_responses,
)
async def get_consent(
    consent_id: int,
    db: AsyncSession = Depends(get_session),
) -> ConsentResponse:
    consent = await consent_service.get_consent(db=db, consent_id=consent_id)
    if not consent:
        raise _consent_not_found(consent_id)
    return ConsentResponse.model_validate(consent)


@router.delete(
    "/{consent_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Supprimer un consentement",
    responses=delete_responses,
)
async def delete_consent(
    consent_id: int,
    db: AsyncSession = Depends(get_session),
) -> None:
    deleted = await consent_service.delete_consent(db=db, consent_id=consent_id)
    if not deleted:
        raise _consent_not_found(consent_id)
