"""Annotations Pydantic réutilisables pour validation.

Ce module centralise les types annotés pour assurer la cohérence
de la validation à travers tous les schémas Pydantic du service.
"""

from typing import Annotated

from pydantic import Field, StringConstraints

# Chaînes avec contraintes
NonEmptyStr = Annotated[str, StringConstraints(min_length=1, strip_whitespace=True)]

# Identifiants
PatientId = Annotated[int, Field(gt=0, description="ID unique du patient")]

# Nomor Induk Kependudukan: exactement 16 chiffres ASCII
Nik = Annotated[
    str,
    StringConstraints(pattern=r"^[0-9]{16}$", strip_whitespace=True),
    Field(
        description="Numéro d'identité national indonésien (16 chiffres)",
        examples=["3171234567890001"],
    ),
]

# Téléphone libre (format local indonésien accepté, ex: 0812...)
PhoneNumber = Annotated[
    str,
    StringConstraints(min_length=3, max_length=20, strip_whitespace=True),
    Field(description="Numéro de téléphone mobile", examples=["081234567890"]),
]

# Métadonnées
Description = Annotated[str, Field(max_length=2000, description="Description texte")]
