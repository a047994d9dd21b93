from fastapi import APIRouter

from app.api.v1 import health
from app.api.v1.endpoints import consents, encounters, patients, satusehat
from app.schemas import build_responses

# Erreurs communes à toutes les routes (corps {error, message?, detail?})
router = APIRouter(responses=build_responses(400, 500))

router.include_router(health.router, tags=["health"])
router.include_router(patients.router, prefix="/patients", tags=["patients"])
router.include_router(encounters.router, prefix="/encounters", tags=["encounters"])
router.include_router(consents.router, prefix="/consents", tags=["consents"])
router.include_router(satusehat.router, prefix="/satusehat", tags=["satusehat"])
