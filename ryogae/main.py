import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core import errors
from .core.config import Settings, get_settings
from .core.logging import init_logging, request_context_middleware
from .routers import health, rates
from .services.rates.scheduler import build_refresh_scheduler, get_refresh_scheduler


def create_app(settings_override: Settings | None = None) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment (e.g., static provider, fake key). The app then gets
    its own scheduler built from those settings instead of the process-wide one.
    """
    settings = settings_override or get_settings()
    if settings_override is not None:
        settings.init_post_load()
    init_logging(debug=settings.debug)

    app = FastAPI(
        title=settings.app_name, debug=settings.debug, version=settings.version
    )

    if settings_override is not None:
        scheduler = build_refresh_scheduler(settings)
        app.dependency_overrides[get_settings] = lambda: settings
        app.dependency_overrides[get_refresh_scheduler] = lambda: scheduler

    # Middleware (request id / structured logging)
    app.middleware("http")(request_context_middleware)

    # Error handlers
    app.add_exception_handler(StarletteHTTPException, errors.http_error_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    app.include_router(health.router)
    app.include_router(rates.router)

    @app.get("/")
    async def root():
        return {"message": f"{settings.app_name} API", "version": settings.version}

    logging.getLogger("ryogae").info(
        "app created",
        extra={
            "provider": settings.exchange_rate_provider,
            "credential_configured": settings.credential_configured,
        },
    )
    return app


app = create_app()
