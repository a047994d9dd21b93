# Modèles SQLAlchemy pour cbc-lite
#
# - Patient: identité locale + NIK + identifiant Satu Sehat
# - Encounter: rencontres cliniques d'un patient
# - ConsentForm: consentements signés d'un patient
#
# Encounter et ConsentForm sont supprimés en cascade par la base avec leur patient.

from .consent import ConsentForm
from .encounter import Encounter
from .patient import Patient

__all__ = [
    "ConsentForm",
    "Encounter",
    "Patient",
]
