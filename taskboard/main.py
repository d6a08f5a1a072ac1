import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from taskboard.core.config import Settings, settings as default_settings
from taskboard.core.errors import BackendUnavailable, IntegrityViolation, ValidationFailure
from taskboard.core.logging_setup import setup_logging
from taskboard.routers import dashboard, health, task_items, tasks, users, workspaces
from taskboard.storage.base import Storage
from taskboard.storage.factory import create_storage

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, storage: Optional[Storage] = None) -> FastAPI:
    """Build the API.

    Without an explicit ``storage`` the backend named in the settings is
    created at startup and closed at shutdown.
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_storage = app.state.storage is None
        if owns_storage:
            setup_logging(settings.LOG_LEVEL)
            app.state.storage = create_storage(settings)
        yield
        if owns_storage:
            app.state.storage.close()
            app.state.storage = None

    app = FastAPI(
        title="Taskboard API",
        version="0.1.0",
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.storage = storage

    # Erreurs du store -> réponses HTTP
    @app.exception_handler(ValidationFailure)
    async def validation_failure_handler(request: Request, exc: ValidationFailure):
        return JSONResponse(
            status_code=422,
            content={"message": str(exc), "errors": exc.errors},
        )

    @app.exception_handler(IntegrityViolation)
    async def integrity_violation_handler(request: Request, exc: IntegrityViolation):
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"message": str(exc)})

    @app.exception_handler(BackendUnavailable)
    async def backend_unavailable_handler(request: Request, exc: BackendUnavailable):
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"message": "Storage backend unavailable"},
        )

    # Routes
    app.include_router(health.router, prefix="/health")
    app.include_router(users.router)
    app.include_router(workspaces.router)
    app.include_router(tasks.router)
    app.include_router(task_items.router)
    app.include_router(dashboard.router)

    return app


app = create_app()
