"""Service métier pour la gestion des rencontres (encounters).

Chaque rencontre renvoyée embarque le résumé de son patient, chargé par
``selectinload`` (pas de lazy loading en session async).
"""

from opentelemetry import trace
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import NotFoundError
from app.models.encounter import Encounter
from app.schemas.encounter import EncounterCreate, EncounterUpdate
from app.services import patient_service

tracer = trace.get_tracer(__name__)

NULLABLE_FIELDS = {"description"}


async def _ensure_patient_exists(db: AsyncSession, patient_id: int) -> None:
    if await patient_service.get_patient(db, patient_id) is None:
        raise NotFoundError(
            message=f"Patient {patient_id} not found",
            resource_type="patient",
            resource_id=patient_id,
        )


async def create_encounter(db: AsyncSession, encounter_data: EncounterCreate) -> Encounter:
    """
    Crée une rencontre pour un patient existant.

    Raises:
        NotFoundError: Si le patient n'existe pas
    """
    with tracer.start_as_current_span("create_encounter") as span:
        span.set_attribute("patient.id", encounter_data.patient_id)

        await _ensure_patient_exists(db, encounter_data.patient_id)

        encounter = Encounter(**encounter_data.model_dump())
        db.add(encounter)
        await db.commit()

        span.set_attribute("encounter.id", encounter.id)
        span.add_event("Rencontre créée avec succès")
        return await get_encounter(db, encounter.id)


async def get_encounter(db: AsyncSession, encounter_id: int) -> Encounter | None:
    """Récupère une rencontre avec son patient, ou None."""
    with tracer.start_as_current_span("get_encounter") as span:
        span.set_attribute("encounter.id", encounter_id)
        result = await db.execute(
            select(Encounter)
            .options(selectinload(Encounter.patient))
            .where(Encounter.id == encounter_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()


async def list_encounters(db: AsyncSession) -> list[Encounter]:
    """Liste toutes les rencontres, les plus récentes en premier."""
    with tracer.start_as_current_span("list_encounters") as span:
        result = await db.execute(
            select(Encounter)
            .options(selectinload(Encounter.patient))
            .order_by(Encounter.created_at.desc())
        )
        encounters = list(result.scalars().all())
        span.set_attribute("encounters.count", len(encounters))
        return encounters


async def update_encounter(
    db: AsyncSession, encounter_id: int, encounter_data: EncounterUpdate
) -> Encounter | None:
    """
    Met à jour partiellement une rencontre.

    Returns:
        Rencontre mise à jour ou None si non trouvée

    Raises:
        NotFoundError: Si le nouveau patient_id ne correspond à aucun patient
    """
    with tracer.start_as_current_span("update_encounter") as span:
        span.set_attribute("encounter.id", encounter_id)

        encounter = await get_encounter(db, encounter_id)
        if encounter is None:
            return None

        updates = encounter_data.model_dump(exclude_unset=True)
        if updates.get("patient_id") is not None:
            await _ensure_patient_exists(db, updates["patient_id"])

        for field, value in updates.items():
            if value is None and field not in NULLABLE_FIELDS:
                continue
            setattr(encounter, field, value)

        await db.commit()
        span.add_event("Rencontre mise à jour")
        return await get_encounter(db, encounter_id)


async def delete_encounter(db: AsyncSession, encounter_id: int) -> bool:
    """Supprime une rencontre. Retourne False si elle n'existe pas."""
    with tracer.start_as_current_span("delete_encounter") as span:
        span.set_attribute("encounter.id", encounter_id)

        result = await db.execute(select(Encounter).where(Encounter.id == encounter_id))
        encounter = result.scalar_one_or_none()
        if encounter is None:
            return False

        await db.delete(encounter)
        await db.commit()
        return True
