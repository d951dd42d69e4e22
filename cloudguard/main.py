"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
import uvicorn

from cloudguard.config import Settings, get_settings
from cloudguard.database import build_engine, build_session_factory, create_schema
from cloudguard.exceptions import (
    CloudGuardError,
    DuplicateKeyError,
    InvalidInputError,
    InvalidTransitionError,
    NotFoundError,
)
from cloudguard.repositories.alerts import (
    AlertRepository,
    InMemoryAlertRepository,
    SqlAlchemyAlertRepository,
)
from cloudguard.routers.alerts import router as alerts_router
from cloudguard.routers.audit import router as audit_router
from cloudguard.schemas.common import HealthResponse
from cloudguard.services.alerts import AlertManager
from cloudguard.services.audit import AuditLog
from cloudguard.timestamps import utc_now_iso

logger = logging.getLogger("cloudguard")

_STATUS_BY_ERROR: tuple[tuple[type[CloudGuardError], int], ...] = (
    (InvalidInputError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (DuplicateKeyError, status.HTTP_409_CONFLICT),
    (InvalidTransitionError, status.HTTP_409_CONFLICT),
)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application and its alert services.

    Parameters
    ----------
    settings : Settings | None, default=None
        Settings to use. Defaults to :func:`get_settings`.

    Returns
    -------
    FastAPI
        Configured application. Services are attached to ``app.state`` when
        the lifespan starts.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Wire the repository, audit log and manager.

        Yields
        ------
        None
            Runs the application lifespan.
        """
        logging.basicConfig(level=settings.log_level)
        engine = None
        repository: AlertRepository
        if settings.storage_backend == "database":
            engine = build_engine(settings.database_url)
            await create_schema(engine)
            repository = SqlAlchemyAlertRepository(build_session_factory(engine))
        else:
            repository = InMemoryAlertRepository()

        audit_log = AuditLog(max_logs=settings.max_audit_logs)
        app.state.audit_log = audit_log
        app.state.alert_manager = AlertManager(repository, audit_log)
        logger.info(
            "%s starting (storage=%s)", settings.app_name, settings.storage_backend
        )
        yield

        if engine is not None:
            await engine.dispose()
        logger.info("%s shut down", settings.app_name)

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.include_router(alerts_router)
    app.include_router(audit_router)

    @app.get("/health", response_model=HealthResponse, tags=["meta"])
    async def health_check() -> HealthResponse:
        """Report service liveness."""
        return HealthResponse(
            status="healthy",
            timestamp=utc_now_iso(),
            service=settings.app_name,
        )

    @app.exception_handler(CloudGuardError)
    async def domain_error_handler(
        request: Request, exc: CloudGuardError
    ) -> JSONResponse:
        """Translate domain errors into JSON responses."""
        _ = request
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        for error_type, mapped_status in _STATUS_BY_ERROR:
            if isinstance(exc, error_type):
                status_code = mapped_status
                break
        content: dict[str, object] = {"detail": str(exc)}
        if isinstance(exc, InvalidInputError):
            content["errors"] = exc.errors
        return JSONResponse(status_code=status_code, content=content)

    return app


app = create_app()


def run() -> None:
    """Serve the application with uvicorn using the configured address."""
    settings = get_settings()
    uvicorn.run(
        "cloudguard.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
