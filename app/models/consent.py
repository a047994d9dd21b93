"""Modèle de données ConsentForm (formulaire de consentement)."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base

if TYPE_CHECKING:
    from app.models.patient import Patient


class ConsentForm(Base):
    """
    Consentement signé par un patient.

    ``consent_date`` est toujours posée par le serveur à la création.
    ``signature_data`` contient la signature manuscrite en data URL base64.
    """

    __tablename__ = "consent_forms"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    patient_id: Mapped[int] = mapped_column(
        ForeignKey("patients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    consent_type: Mapped[str] = mapped_column(
        String(100), nullable=False, comment="Treatment, Data Sharing, Research, Other"
    )
    signature_data: Mapped[str | None] = mapped_column(
        Text, nullable=True, comment="Signature (data URL base64)"
    )
    consent_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, comment="Date du consentement"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    patient: Mapped["Patient"] = relationship(back_populates="consent_forms")

    def __repr__(self) -> str:
        return f"<ConsentForm(id={self.id}, patient_id={self.patient_id})>"
