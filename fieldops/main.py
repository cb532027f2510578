"""FastAPI application entry point.

Wiring only: lifespan, exception handlers, middleware, routers.
See fieldops.core.lifespan and fieldops.core.exception_handlers.

Settings are loaded inside create_app() so tests can set env (and clear the
get_settings cache) before building the app.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from fieldops.api.v1 import api_router
from fieldops.core.config import get_settings
from fieldops.core.exception_handlers import register_exception_handlers
from fieldops.core.lifespan import create_lifespan
from fieldops.core.limiter import limiter
from fieldops.middleware import RequestIDMiddleware


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    register_exception_handlers(app)

    # First added = innermost; request id wraps CORS so preflights carry it too.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIDMiddleware, header_name=settings.request_id_header)

    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_app()
