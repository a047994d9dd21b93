from opentelemetry.instrumentation import auto_instrumentation

auto_instrumentation.initialize()

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from redis.asyncio import Redis

from app.api.v1 import api as api_v1
from app.core.config import settings
from app.core.database import create_db_and_tables
from app.core.exceptions import setup_exception_handlers
from app.infrastructure.satusehat.auth import TokenManager
from app.infrastructure.satusehat.client import SatuSehatClient
from app.infrastructure.satusehat.config import satusehat_settings
from app.infrastructure.satusehat.token_store import (
    InMemoryTokenStorage,
    RedisTokenStorage,
    TokenStorage,
    TokenStore,
)

logging.basicConfig(level=settings.LOG_LEVEL, format=settings.LOG_FORMAT)
logger = logging.getLogger(__name__)


def build_token_storage() -> tuple[TokenStorage, Redis | None]:
    """Sélectionne le backend de persistance du token Satu Sehat."""
    if satusehat_settings.SATUSEHAT_STORAGE_BACKEND == "redis":
        redis_client = Redis.from_url(settings.REDIS_URL, decode_responses=True)
        storage = RedisTokenStorage(redis_client, prefix=satusehat_settings.SATUSEHAT_STORAGE_PREFIX)
        return storage, redis_client
    return InMemoryTokenStorage(), None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Gère le cycle de vie de l'application:
    - Crée les tables de base de données (avec retry).
    - Charge les credentials et le token Satu Sehat depuis le storage.
    - Initialise le client du registre Satu Sehat (httpx async).
    - Ferme proprement les clients à l'arrêt.
    """
    logger.info("=== Application Startup ===")

    # 1. Créer les tables de base de données
    await create_db_and_tables()
    logger.info("Tables de base de données créées")

    # 2. Token store (jamais global: stocké dans app.state)
    storage, redis_client = build_token_storage()
    token_store = TokenStore(storage)
    await token_store.load()
    await token_store.seed_credentials(
        satusehat_settings.SATUSEHAT_CLIENT_ID,
        satusehat_settings.SATUSEHAT_CLIENT_SECRET,
    )
    app.state.token_store = token_store

    # 3. Client Satu Sehat
    app.state.satusehat_client = SatuSehatClient(TokenManager(token_store))
    logger.info(f"Client Satu Sehat initialisé: {satusehat_settings.SATUSEHAT_FHIR_BASE_URL}")

    logger.info("=== Application Startup Complete ===")
    try:
        yield
    finally:
        logger.info("=== Application Shutdown ===")
        await app.state.satusehat_client.close()
        if redis_client is not None:
            await redis_client.aclose()
        logger.info("=== Application Shutdown Complete ===")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description=settings.DESCRIPTION,
    lifespan=lifespan,
    openapi_url=f"{settings.get_api_prefix()}/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Handlers d'erreurs {error, message?, detail?}
setup_exception_handlers(app)

# Middleware CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[str(origin) for origin in settings.ALLOWED_ORIGINS],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Middleware Trusted Hosts
if settings.ENVIRONMENT != "development":
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=settings.TRUSTED_HOSTS,
    )

app.include_router(api_v1.router, prefix=settings.get_api_prefix("v1"))
