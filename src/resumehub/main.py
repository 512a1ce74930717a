import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from resumehub.api.v1.router import api_v1_router
from resumehub.core.config import get_settings
from resumehub.core.database import engine
from resumehub.core.exceptions import InvalidStatusTransitionError, PersistenceError
from resumehub.core.llm import build_resume_parser
from resumehub.core.logging import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # Startup: a missing AI credential stops the app here
    app.state.resume_parser = build_resume_parser(get_settings())
    yield
    # Shutdown
    await engine.dispose()


async def persistence_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Persistence failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Resume storage is unavailable"},
    )


async def status_transition_error_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.add_exception_handler(PersistenceError, persistence_error_handler)
    app.add_exception_handler(InvalidStatusTransitionError, status_transition_error_handler)
    app.include_router(api_v1_router, prefix="/api/v1")
    return app
