"""Service métier pour les formulaires de consentement."""

from datetime import UTC, datetime

from opentelemetry import trace
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import NotFoundError
from app.models.consent import ConsentForm
from app.schemas.consent import ConsentCreate
from app.services import patient_service

tracer = trace.get_tracer(__name__)


async def create_consent(db: AsyncSession, consent_data: ConsentCreate) -> ConsentForm:
    """
    Enregistre un consentement pour un patient existant.

    La date de consentement est toujours l'instant de création.

    Raises:
        NotFoundError: Si le patient n'existe pas
    """
    with tracer.start_as_current_span("create_consent") as span:
        span.set_attribute("patient.id", consent_data.patient_id)

        if await patient_service.get_patient(db, consent_data.patient_id) is None:
            raise NotFoundError(
                message=f"Patient {consent_data.patient_id} not found",
                resource_type="patient",
                resource_id=consent_data.patient_id,
            )

        consent = ConsentForm(
            **consent_data.model_dump(),
            consent_date=datetime.now(UTC),
        )
        db.add(consent)
        await db.commit()

        span.set_attribute("consent.id", consent.id)
        span.add_event("Consentement enregistré")
        return await get_consent(db, consent.id)


async def get_consent(db: AsyncSession, consent_id: int) -> ConsentForm | None:
    """Récupère un consentement avec son patient, ou None."""
    result = await db.execute(
        select(ConsentForm)
        .options(selectinload(ConsentForm.patient))
        .where(ConsentForm.id == consent_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def list_consents(db: AsyncSession) -> list[ConsentForm]:
    """Liste tous les consentements, les plus récents en premier."""
    with tracer.start_as_current_span("list_consents") as span:
        result = await db.execute(
            select(ConsentForm)
            .options(selectinload(ConsentForm.patient))
            .order_by(ConsentForm.created_at.desc())
        )
        consents = list(result.scalars().all())
        span.set_attribute("consents.count", len(consents))
        return consents


async def delete_consent(db: AsyncSession, consent_id: int) -> bool:
    """Supprime un consentement. Retourne False s'il n'existe pas."""
    with tracer.start_as_current_span("delete_consent") as span:
        span.set_attribute("consent.id", consent_id)

        result = await db.execute(select(ConsentForm).where(ConsentForm.id == consent_id))
        consent = result.scalar_one_or_none()
        if consent is None:
            return False

        await db.delete(consent)
        await db.commit()
        return True
