"""
FastAPI application entry point.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from workflow_analyzer import __version__
from workflow_analyzer.api.deps import container
from workflow_analyzer.api.v1 import analysis, cache, health
from workflow_analyzer.core.config import settings
from workflow_analyzer.core.constants import API_PREFIX
from workflow_analyzer.core.exceptions import RateLimitError, WorkflowAnalyzerError
from workflow_analyzer.core.logging import get_logger, setup_logging

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    logger.info(
        "Starting workflow analyzer",
        app_name=settings.app_name,
        env=settings.app_env,
        youtrack_url=settings.youtrack.base_url,
    )

    try:
        container.initialize()
        logger.info("Service container initialized")
    except Exception as e:
        logger.warning(
            "Service container initialization failed (some services may not be available)",
            error=str(e),
        )

    yield

    logger.info("Shutting down workflow analyzer")
    await container.shutdown()


app = FastAPI(
    title="YouTrack Workflow Analyzer API",
    description="Explains why YouTrack workflow rules blocked a user action",
    version=__version__,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    openapi_url="/openapi.json" if settings.debug else None,
    lifespan=lifespan,
)


# Exception handlers
@app.exception_handler(WorkflowAnalyzerError)
async def workflow_analyzer_error_handler(
    request: Request,
    exc: WorkflowAnalyzerError,
) -> JSONResponse:
    """Handle custom application errors."""
    log = logger.error if exc.status_code >= 500 else logger.info
    log("Request failed", error_code=exc.code, error_message=exc.message, path=request.url.path)

    headers = None
    if isinstance(exc, RateLimitError):
        headers = {"Retry-After": str(exc.retry_after)}
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


@app.exception_handler(Exception)
async def general_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle unexpected errors."""
    logger.exception("Unexpected error", error=str(exc), path=request.url.path)
    return JSONResponse(
        status_code=500,
        content=WorkflowAnalyzerError("An unexpected error occurred").to_dict(),
    )


# Include routers
app.include_router(health.router, prefix=API_PREFIX, tags=["Health"])
app.include_router(analysis.router, prefix=API_PREFIX, tags=["Analysis"])
app.include_router(cache.router, prefix=API_PREFIX, tags=["Cache"])


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "name": settings.app_name,
        "version": __version__,
        "docs": "/docs" if settings.debug else "Disabled in production",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "workflow_analyzer.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
    )
