"""CourtScout HTTP service.

On startup the lifespan hook loads Settings (keyword args, environment, JSON
config, defaults), builds the Container and hands its VenueHandler to the
router. Routes are registered when the module is imported, so they exist
before uvicorn binds; until startup finishes the court routes answer 503.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from courtscout import __version__
from courtscout.config import Settings
from courtscout.container import Container
from courtscout.routers import venue_router, set_venue_handler
from courtscout.middleware import PrometheusMiddleware

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def build_container(settings: Settings) -> Container:
    """Apply the configured log level and wire the engine."""
    logging.getLogger().setLevel(settings.log_level.upper())

    container = Container(settings)
    set_venue_handler(container.venue_handler)

    logger.info(
        f"[Main] Ready: radius {settings.min_radius_miles}-{settings.max_radius_miles} mi "
        f"(default {settings.default_radius_miles}), render caps "
        f"wide={settings.wide_render_cap} close={settings.close_render_cap}"
    )
    return container


async def release_container(container: Optional[Container]) -> None:
    """Detach the handler first so no request reaches a closed client."""
    set_venue_handler(None)
    if container is not None:
        await container.shutdown()
    logger.info("[Main] Released engine resources")


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.container = build_container(Settings())
    try:
        yield
    finally:
        await release_container(app.state.container)
        app.state.container = None


def create_app() -> FastAPI:
    """Build the FastAPI application with metrics and court routes."""
    application = FastAPI(
        title="CourtScout API",
        description="Nearby court discovery: schedule-aware filtering, ranking and map culling",
        version=__version__,
        lifespan=lifespan,
    )
    application.add_middleware(PrometheusMiddleware)
    application.include_router(venue_router)

    @application.get("/health")
    def health():
        """Liveness probe."""
        return {"status": "healthy"}

    @application.get("/metrics", response_class=PlainTextResponse)
    def metrics():
        """Prometheus scrape endpoint."""
        return PlainTextResponse(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = Settings()
    logger.info(f"[Main] Serving CourtScout on port {settings.server_port}")
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.server_port,
        log_level=settings.log_level.lower(),
    )
