"""Create patients, encounters and consent_forms tables

Revision ID: 3a1f0c9e7b21
Revises:
Create Date: 2026-10-19 09:12:44.318207

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3a1f0c9e7b21"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "patients",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False, comment="Nom complet"),
        sa.Column(
            "nik",
            sa.String(length=16),
            nullable=False,
            comment="Nomor Induk Kependudukan (16 chiffres)",
        ),
        sa.Column("birth_date", sa.Date(), nullable=False, comment="Date de naissance"),
        sa.Column("gender", sa.String(length=10), nullable=False, comment="Sexe administratif"),
        sa.Column("phone", sa.String(length=20), nullable=True, comment="Téléphone mobile"),
        sa.Column(
            "satusehat_id",
            sa.String(length=64),
            nullable=True,
            comment="ID de la ressource Patient chez Satu Sehat (posé une seule fois)",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
            comment="Date de création",
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
            comment="Date de dernière modification",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_patients_id"), "patients", ["id"], unique=False)
    op.create_index(op.f("ix_patients_nik"), "patients", ["nik"], unique=True)
    op.create_index(op.f("ix_patients_satusehat_id"), "patients", ["satusehat_id"], unique=False)

    op.create_table(
        "encounters",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("patient_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False, comment="Date de la rencontre"),
        sa.Column(
            "type",
            sa.String(length=100),
            nullable=False,
            comment="Type (Rawat Jalan, Rawat Inap, UGD, Lainnya)",
        ),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.ForeignKeyConstraint(["patient_id"], ["patients.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_encounters_id"), "encounters", ["id"], unique=False)
    op.create_index(op.f("ix_encounters_patient_id"), "encounters", ["patient_id"], unique=False)

    op.create_table(
        "consent_forms",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("patient_id", sa.Integer(), nullable=False),
        sa.Column(
            "consent_type",
            sa.String(length=100),
            nullable=False,
            comment="Treatment, Data Sharing, Research, Other",
        ),
        sa.Column(
            "signature_data", sa.Text(), nullable=True, comment="Signature (data URL base64)"
        ),
        sa.Column(
            "consent_date",
            sa.DateTime(timezone=True),
            nullable=False,
            comment="Date du consentement",
        ),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
        ),
        sa.ForeignKeyConstraint(["patient_id"], ["patients.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_consent_forms_id"), "consent_forms", ["id"], unique=False)
    op.create_index(
        op.f("ix_consent_forms_patient_id"), "consent_forms", ["patient_id"], unique=False
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_consent_forms_patient_id"), table_name="consent_forms")
    op.drop_index(op.f("ix_consent_forms_id"), table_name="consent_forms")
    op.drop_table("consent_forms")
    op.drop_index(op.f("ix_encounters_patient_id"), table_name="encounters")
    op.drop_index(op.f("ix_encounters_id"), table_name="encounters")
    op.drop_table("encounters")
    op.drop_index(op.f("ix_patients_satusehat_id"), table_name="patients")
    op.drop_index(op.f("ix_patients_nik"), table_name="patients")
    op.drop_index(op.f("ix_patients_id"), table_name="patients")
    op.drop_table("patients")
