import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from ragvec.api.v1.router import api_v1_router
from ragvec.core.config import StoreConfig, get_settings
from ragvec.core.database import engine
from ragvec.core.logging import configure_logging
from ragvec.storage.postgres import PgVectorStore
from ragvec.storage.schema import SchemaManager

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # Startup: a ConfigurationError or SchemaError raised here stops the
    # server before it accepts any request.
    settings = get_settings()
    configure_logging(settings.log_level)
    store_config = StoreConfig.from_settings(settings)
    logger.info(
        "Vector table %s, distance metric %s (%s)",
        store_config.table_name,
        store_config.metric,
        store_config.ranking_function,
    )
    try:
        await SchemaManager(engine, store_config).initialize()
        app.state.vector_store = PgVectorStore(engine, store_config)
        yield
    finally:
        # Shutdown
        await engine.dispose()


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.include_router(api_v1_router, prefix="/api/v1")
    return app
