"""
Configuration et initialisation de la base de données pour cbc-lite.

Base de données: PostgreSQL avec SQLAlchemy 2.0 et AsyncSession
"""

import logging
from collections.abc import AsyncGenerator

from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from app.core.config import settings

logger = logging.getLogger(__name__)

# Exceptions transitoires au démarrage (PostgreSQL pas encore joignable)
TRANSIENT_CONNECT_EXCEPTIONS = (OperationalError, OSError)


class Base(DeclarativeBase):
    """Base class pour tous les modèles SQLAlchemy."""

    pass


# Engine SQLAlchemy 2.0
engine = create_async_engine(str(settings.SQLALCHEMY_DATABASE_URI), echo=False)

# Session factory
async_session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Obtient une session de base de données."""
    async with async_session_maker() as session:
        yield session


async def create_db_and_tables(max_attempts: int | None = None) -> None:
    """
    Crée toutes les tables.

    La connexion est retentée avec backoff exponentiel tant que la base
    n'est pas joignable (conteneur en cours de démarrage, redémarrage PostgreSQL).
    """
    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(max_attempts or settings.DB_CONNECT_RETRY_ATTEMPTS),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(TRANSIENT_CONNECT_EXCEPTIONS),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    ):
        with attempt:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

