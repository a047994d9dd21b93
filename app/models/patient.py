"""Modèle de données Patient.

Un patient est identifié localement par son ``id`` et nationalement par son
NIK (16 chiffres, unique). ``satusehat_id`` reste nul tant que le patient n'a
pas été synchronisé avec le registre Satu Sehat.
"""

from datetime import date, datetime
from typing import TYPE_CHECKING, Literal

from sqlalchemy import Date, DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base

if TYPE_CHECKING:
    from app.models.consent import ConsentForm
    from app.models.encounter import Encounter


class Patient(Base):
    """
    Modèle Patient.

    Les rencontres et consentements liés sont supprimés par la base
    (``ON DELETE CASCADE``) lorsque le patient est supprimé.
    """

    __tablename__ = "patients"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, comment="Nom complet")
    nik: Mapped[str] = mapped_column(
        String(16),
        unique=True,
        nullable=False,
        index=True,
        comment="Nomor Induk Kependudukan (16 chiffres)",
    )
    birth_date: Mapped[date] = mapped_column(Date, nullable=False, comment="Date de naissance")
    gender: Mapped[Literal["male", "female"]] = mapped_column(
        String(10), nullable=False, comment="Sexe administratif"
    )
    phone: Mapped[str | None] = mapped_column(
        String(20), nullable=True, comment="Téléphone mobile"
    )

    # Registre national
    satusehat_id: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
        index=True,
        comment="ID de la ressource Patient chez Satu Sehat (posé une seule fois)",
    )

    # Métadonnées
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        comment="Date de création",
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
        comment="Date de dernière modification",
    )

    encounters: Mapped[list["Encounter"]] = relationship(
        back_populates="patient", cascade="all, delete-orphan", passive_deletes=True
    )
    consent_forms: Mapped[list["ConsentForm"]] = relationship(
        back_populates="patient", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        """Représentation string du patient."""
        return f"<Patient(id={self.id}, name='{self.name}')>"
