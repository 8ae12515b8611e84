"""FastAPI application factory for the cloud API."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from gastro_log.api.logs import router as logs_router
from gastro_log.app_logging import configure_logging
from gastro_log.containers import ServerContainer


def create_app(container: ServerContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(title="Gastro Log API", lifespan=lifespan)
    app.state.container = container
    app.include_router(logs_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
