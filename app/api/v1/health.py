import logging
from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_session
from app.core.exceptions import ApiError

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    status: Literal["ok"] = Field(..., description="The status of the health check")


@router.get("/health", response_model=HealthResponse)
async def health(db: AsyncSession = Depends(get_session)) -> HealthResponse:
    """Vérifie que la base de données répond (SELECT 1)."""
    try:
        result = await db.execute(text("SELECT 1"))
        result.scalar_one()
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Health check failed: {e}")
        raise ApiError(message="Database is unreachable") from None

    return HealthResponse(status="ok")
