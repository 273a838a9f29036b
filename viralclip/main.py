"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from viralclip import __version__
from viralclip.config import settings
from viralclip.container import Services, build_services
from viralclip.api.routes import router, process_router

# Configure logging
logging.basicConfig(
    level=logging.INFO if not settings.debug else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logger.info("Starting ViralClip...")
    services: Services = app.state.services
    await services.open()
    logger.info("Database and automation engine ready")

    yield

    # Shutdown
    logger.info("Shutting down ViralClip...")
    await services.close()
    logger.info("Shutdown complete")


def create_app(services: Optional[Services] = None) -> FastAPI:
    """
    Create the FastAPI app.

    Args:
        services: Pre-built services (tests pass an opened set); built from
            settings when omitted and opened by the lifespan handler
    """
    app = FastAPI(
        title=settings.app_name,
        description="Transcript clip scoring and automated social posting",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.services = services or build_services(settings)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include API routes
    app.include_router(process_router)
    app.include_router(router, prefix="/api")

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "app": settings.app_name,
            "version": __version__,
            "api": "/api",
            "docs": "/docs",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "viralclip.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
