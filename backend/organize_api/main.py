import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from organize_api.core.config import settings
from organize_api.core.database import engine, init_db
from organize_api.api.routes import users

# Model modules must be imported before create_all sees their tables
import organize_api.models.user  # noqa: F401

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage app lifecycle events.

    Startup: configure logging, refuse to run with unusable settings,
    create missing tables
    """
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # Raises FatalConfigError before the first request is accepted
    settings.check_startup()

    # In production, tables are managed by migrations instead of create_all
    # An unreachable database raises FatalConfigError here as well
    init_db(engine)
    logger.info("Organize API started")
    yield
    logger.info("Organize API stopped")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Organize My Mind API",
        description="GraphQL API for user registration and management",
        version="1.0.0",
        lifespan=lifespan
    )

    # CORS middleware - allows the mobile and web clients to call the API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(users.router, prefix="/graphql")

    @app.get("/")
    async def root():
        """Root endpoint - API information"""
        return {"message": "Organize My Mind API", "version": "1.0.0", "graphql": "/graphql"}

    @app.get("/health")
    async def health():
        """Health check endpoint - used by monitoring/deployment tools"""
        return {"status": "healthy"}

    return app


app = create_app()
