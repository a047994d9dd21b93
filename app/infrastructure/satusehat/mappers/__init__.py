"""Satu Sehat FHIR payload builders."""

from app.infrastructure.satusehat.mappers.patient_mapper import build_fhir_patient_payload

__all__ = ["build_fhir_patient_payload"]
