"""
Schémas de réponses d'erreur pour la documentation OpenAPI.

Toutes les erreurs de l'API suivent la forme ``{error, message?, detail?}``.
"""

from typing import Any

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Corps JSON renvoyé pour toute réponse d'erreur."""

    error: str = Field(..., description="Intitulé court de l'erreur", examples=["Conflict"])
    message: str | None = Field(
        None,
        description="Message lisible destiné à l'opérateur",
        examples=["NIK is already registered in the system."],
    )
    detail: Any | None = Field(None, description="Détails complémentaires (champs, statut distant)")


def build_responses(*status_codes: int) -> dict[int | str, dict[str, Any]]:
    """Construit le dictionnaire ``responses`` d'un endpoint pour les codes donnés."""
    return {code: COMMON_RESPONSES[code] for code in status_codes}


COMMON_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Requête invalide"},
    404: {"model": ErrorResponse, "description": "Ressource introuvable"},
    409: {"model": ErrorResponse, "description": "Conflit (contrainte d'unicité)"},
    412: {"model": ErrorResponse, "description": "Credentials Satu Sehat non configurés"},
    422: {"model": ErrorResponse, "description": "Données patient refusées avant envoi"},
    500: {"model": ErrorResponse, "description": "Erreur interne"},
    502: {"model": ErrorResponse, "description": "Erreur du service Satu Sehat"},
    504: {"model": ErrorResponse, "description": "Délai dépassé vers Satu Sehat"},
}

create_responses = build_responses(400, 409)
read_responses = build_responses(404)
update_responses = build_responses(400, 404, 409)
delete_responses = build_responses(404)
sync_responses = build_responses(404, 409, 412, 422, 502, 504)
