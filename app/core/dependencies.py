"""Dependances FastAPI pour l'injection de services."""

from fastapi import Request

from app.infrastructure.satusehat.client import SatuSehatClient
from app.infrastructure.satusehat.token_store import TokenStore


def _get_state(request: Request, name: str):
    value = getattr(request.app.state, name, None)
    if value is None:
        raise RuntimeError(
            f"{name} not initialized. "
            f"Ensure the application lifespan properly initializes app.state.{name}"
        )
    return value


def get_token_store(request: Request) -> TokenStore:
    """
    Recupere le token store Satu Sehat depuis l'etat de l'application.

    Le store est cree dans le lifespan de l'application (main.py) et
    stocke dans app.state.token_store.

    Raises:
        RuntimeError: Si le store n'est pas initialise
    """
    return _get_state(request, "token_store")


def get_satusehat_client(request: Request) -> SatuSehatClient:
    """Recupere le client du registre Satu Sehat (app.state.satusehat_client)."""
    return _get_state(request, "satusehat_client")
