"""Service métier pour la gestion des patients.

Opérations CRUD unitaires sur la table ``patients``. Les violations de la
contrainte d'unicité du NIK sont annulées (rollback) puis propagées sous forme
d'``IntegrityError`` pour être traduites en 409 par les endpoints.
"""

from opentelemetry import trace
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.patient import Patient
from app.schemas.patient import PatientCreate, PatientUpdate

tracer = trace.get_tracer(__name__)

NULLABLE_FIELDS = {"phone"}


async def create_patient(db: AsyncSession, patient_data: PatientCreate) -> Patient:
    """
    Crée un nouveau patient.

    Args:
        db: Session de base de données async
        patient_data: Données du patient à créer

    Returns:
        Patient créé

    Raises:
        IntegrityError: Si le NIK est déjà enregistré
    """
    with tracer.start_as_current_span("create_patient") as span:
        patient = Patient(**patient_data.model_dump())
        db.add(patient)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            span.add_event("NIK déjà enregistré")
            raise
        await db.refresh(patient)

        span.set_attribute("patient.id", patient.id)
        span.add_event("Patient créé avec succès")
        return patient


async def get_patient(db: AsyncSession, patient_id: int) -> Patient | None:
    """Récupère un patient par son ID, ou None."""
    with tracer.start_as_current_span("get_patient") as span:
        span.set_attribute("patient.id", patient_id)
        result = await db.execute(select(Patient).where(Patient.id == patient_id))
        return result.scalar_one_or_none()


async def list_patients(db: AsyncSession) -> list[Patient]:
    """Liste tous les patients, les plus récents en premier."""
    with tracer.start_as_current_span("list_patients") as span:
        result = await db.execute(select(Patient).order_by(Patient.created_at.desc()))
        patients = list(result.scalars().all())
        span.set_attribute("patients.count", len(patients))
        return patients


async def update_patient(
    db: AsyncSession, patient_id: int, patient_data: PatientUpdate
) -> Patient | None:
    """
    Met à jour partiellement un patient.

    Seuls les champs explicitement fournis sont modifiés.

    Returns:
        Patient mis à jour ou None si non trouvé

    Raises:
        IntegrityError: Si le nouveau NIK appartient déjà à un autre patient
    """
    with tracer.start_as_current_span("update_patient") as span:
        span.set_attribute("patient.id", patient_id)

        patient = await get_patient(db, patient_id)
        if patient is None:
            return None

        for field, value in patient_data.model_dump(exclude_unset=True).items():
            # null ne peut effacer que les champs optionnels
            if value is None and field not in NULLABLE_FIELDS:
                continue
            setattr(patient, field, value)

        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            span.add_event("NIK déjà enregistré")
            raise
        await db.refresh(patient)

        span.add_event("Patient mis à jour")
        return patient


async def delete_patient(db: AsyncSession, patient_id: int) -> bool:
    """
    Supprime un patient.

    Les rencontres et consentements liés sont supprimés par la base.

    Returns:
        True si supprimé, False si non trouvé
    """
    with tracer.start_as_current_span("delete_patient") as span:
        span.set_attribute("patient.id", patient_id)

        patient = await get_patient(db, patient_id)
        if patient is None:
            return False

        await db.delete(patient)
        await db.commit()
        span.add_event("Patient supprimé")
        return True
