"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from nutrition_trends.api.trends import router as trends_router
from nutrition_trends.app_logging import configure_logging
from nutrition_trends.containers import AppContainer
from nutrition_trends.domain.ranges import range_tokens


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        settings = app.state.container.settings
        logger.info("Trends API starting: environment=%s", settings.environment)
        yield
        app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(trends_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/ranges")
    async def ranges() -> dict[str, list[str]]:
        """Return the selectable lookback windows in display order."""
        return {"ranges": range_tokens()}

    return app
