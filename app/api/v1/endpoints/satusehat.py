"""Endpoints API pour la configuration des credentials Satu Sehat."""

from fastapi import APIRouter, Depends

from app.core.dependencies import get_token_store
from app.infrastructure.satusehat.token_store import TokenStore
from app.schemas.responses import build_responses
from app.schemas.satusehat import CredentialsStatus, CredentialsUpdate
from app.services import satusehat_service

router = APIRouter()


@router.get(
    "/credentials",
    response_model=CredentialsStatus,
    summary="État des credentials Satu Sehat",
    description="Le client secret n'est jamais renvoyé",
)
async def get_credentials(store: TokenStore = Depends(get_token_store)) -> CredentialsStatus:
    return await satusehat_service.get_credentials_status(store)


@router.put(
    "/credentials",
    response_model=CredentialsStatus,
    summary="Remplacer les credentials Satu Sehat",
    description="Remplace client_id et client_secret; le token en cache est invalidé",
    responses=build_responses(400),
)
async def update_credentials(
    credentials: CredentialsUpdate,
    store: TokenStore = Depends(get_token_store),
) -> CredentialsStatus:
    return await satusehat_service.update_credentials(
        store, credentials.client_id, credentials.client_secret
    )
