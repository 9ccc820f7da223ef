"""
LevelScope — FastAPI Application Entry Point

HTTP surface for presentation clients. The analysis core has no I/O of its
own; this module only wires it to routes, middleware and error handlers.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from levelscope.config import get_settings
from levelscope.observability import configure_logging
from levelscope.routes import analysis_router, health_router

log = structlog.get_logger("levelscope.startup")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle hooks."""
    settings = get_settings()
    log.info(
        "startup",
        env=settings.app_env,
        history_warn_bars=settings.history_warn_bars,
        max_request_bars=settings.max_request_bars,
    )
    yield
    log.info("shutdown")


def create_app() -> FastAPI:
    """Application factory."""
    settings = get_settings()
    configure_logging()

    app = FastAPI(
        title="LevelScope",
        description="""# LevelScope API

Anchor-bar support/resistance analysis.

## Features
- **Levels**: four resistance and four support levels from one anchor bar
- **Reactions**: bounce / breakout / rejection at every level touch
- **Patterns**: repeated bounces, breakout retests, trends, rejection clusters
- **Signal**: one BUY / SELL / NEUTRAL call with entry, stop and target
""",
        version="1.0.0",
        debug=settings.app_debug and not settings.is_production,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_tags=[
            {"name": "Health", "description": "Service health checks"},
            {"name": "Analysis", "description": "Level, reaction, pattern and signal analysis"},
        ],
    )

    # ── Global Error Handlers ──
    from levelscope.error_handlers import register_error_handlers
    register_error_handlers(app)

    # ── CORS (configurable from settings) ──
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Custom Middleware ──
    from levelscope.middleware.request_logger import RequestLoggerMiddleware
    app.add_middleware(RequestLoggerMiddleware)

    # ── Routes ──
    app.include_router(health_router, tags=["Health"])

    API_V1 = "/v1/api"
    app.include_router(analysis_router, prefix=API_V1, tags=["Analysis"])

    @app.middleware("http")
    async def add_api_version_header(request, call_next):
        response = await call_next(request)
        response.headers["X-API-Version"] = "v1"
        return response

    return app


app = create_app()
