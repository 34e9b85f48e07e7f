import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import get_settings, Settings
from .core.logging import init_logging, request_context_middleware
from .core import errors
from .routers import health, state, ui
from .services.http_client import PaymentApiClient
from .services.portal import build_portal


def create_app(
    settings_override: Settings | None = None,
    api_client: PaymentApiClient | None = None,
) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment. Falls back to cached get_settings().
    api_client: replaces the HTTP client to the upstream payments service.
    """
    settings = settings_override or get_settings()
    # Initialize logging early
    init_logging(debug=settings.debug)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Loaders schedule tasks and timers, so the portal needs a running loop
        portal = build_portal(settings, client=api_client)
        app.state.portal = portal
        portal.start()
        logging.getLogger("fxportal").info("portal started against %s", settings.api_base)
        try:
            yield
        finally:
            await portal.aclose()
            app.state.portal = None

    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        version=settings.version,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Middleware (request id / structured logging)
    app.middleware("http")(request_context_middleware)

    # Error handlers
    app.add_exception_handler(StarletteHTTPException, errors.http_error_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Routers
    app.include_router(health.router)
    app.include_router(state.router)
    app.include_router(ui.router)

    return app


app = create_app()
