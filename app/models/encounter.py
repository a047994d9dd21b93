"""Modèle de données Encounter (rencontre clinique)."""

import datetime as dt
from typing import TYPE_CHECKING

from sqlalchemy import Date, DateTime, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base

if TYPE_CHECKING:
    from app.models.patient import Patient


class Encounter(Base):
    """Rencontre d'un patient avec l'établissement (consultation, hospitalisation...)."""

    __tablename__ = "encounters"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    patient_id: Mapped[int] = mapped_column(
        ForeignKey("patients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, comment="Date de la rencontre")
    type: Mapped[str] = mapped_column(
        String(100), nullable=False, comment="Type (Rawat Jalan, Rawat Inap, UGD, Lainnya)"
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    patient: Mapped["Patient"] = relationship(back_populates="encounters")

    def __repr__(self) -> str:
        return f"<Encounter(id={self.id}, patient_id={self.patient_id}, type='{self.type}')>"
