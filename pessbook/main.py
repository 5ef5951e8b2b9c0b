"""Main application module for the face search service."""
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pessbook.api import router as api_v1_router
from pessbook.core.config import settings
from pessbook.core.container import container
from pessbook.core.logging import get_logger, setup_logging

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[Any, None]:
    """Initialize services on startup and release them on shutdown.

    Args:
        app: FastAPI application instance
    """
    logger.info(
        "Starting up face search service",
        version=settings.VERSION,
        environment=settings.ENVIRONMENT,
        bucket=settings.AWS_S3_BUCKET,
    )

    await container.initialize()
    logger.info("Initialized application services")

    yield

    logger.info("Shutting down face search service")
    await container.cleanup()


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    docs_url="/docs" if settings.ENVIRONMENT == "development" else None,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_v1_router, prefix=settings.API_V1_STR)


@app.get("/health")
async def health_check() -> dict:
    """Basic health check endpoint.

    Returns:
        dict: Health status
    """
    return {"status": "healthy"}
