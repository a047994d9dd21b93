"""Service de synchronisation des patients avec le registre Satu Sehat.

Un patient n'est envoyé qu'une seule fois: l'identifiant renvoyé par le
registre est enregistré sur le patient et tout nouvel envoi est refusé.
"""

import logging

from opentelemetry import trace
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, NotFoundError
from app.infrastructure.satusehat.client import SatuSehatClient
from app.infrastructure.satusehat.token_store import TokenStore, epoch_ms
from app.models.patient import Patient
from app.schemas.patient import PatientRecord
from app.schemas.satusehat import CredentialsStatus
from app.services import patient_service

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


async def sync_patient(db: AsyncSession, client: SatuSehatClient, patient_id: int) -> Patient:
    """
    Envoie un patient au registre et enregistre l'identifiant obtenu.

    Args:
        db: Session de base de données async
        client: Client du registre Satu Sehat
        patient_id: ID local du patient

    Returns:
        Patient avec ``satusehat_id`` renseigné

    Raises:
        NotFoundError: Si le patient n'existe pas
        ConflictError: Si le patient a déjà été synchronisé
        SatuSehatError: Toute erreur de validation, d'authentification ou du registre
    """
    with tracer.start_as_current_span("sync_patient_satusehat") as span:
        span.set_attribute("patient.id", patient_id)

        patient = await patient_service.get_patient(db, patient_id)
        if patient is None:
            raise NotFoundError(
                message=f"Patient {patient_id} not found",
                resource_type="patient",
                resource_id=patient_id,
            )

        if patient.satusehat_id:
            raise ConflictError(
                message=f"Patient {patient_id} is already synced to Satu Sehat",
                detail={"satusehat_id": patient.satusehat_id},
            )

        satusehat_id = await client.sync_patient(PatientRecord.model_validate(patient))

        patient.satusehat_id = satusehat_id
        await db.commit()
        await db.refresh(patient)

        span.set_attribute("satusehat.patient_id", satusehat_id)
        logger.info(f"Patient {patient_id} synchronisé avec Satu Sehat: {satusehat_id}")
        return patient


async def get_credentials_status(store: TokenStore) -> CredentialsStatus:
    """État des credentials, sans jamais exposer le secret."""
    credentials = store.get_credentials()
    return CredentialsStatus(
        client_id=credentials.client_id,
        client_secret_set=bool(credentials.client_secret),
        token_cached=store.get_valid_token(epoch_ms()) is not None,
    )


async def update_credentials(
    store: TokenStore, client_id: str, client_secret: str
) -> CredentialsStatus:
    """Remplace les credentials; le token en cache est invalidé."""
    await store.set_credentials(client_id, client_secret)
    return await get_credentials_status(store)
