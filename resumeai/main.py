import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from resumeai.api.v1.router import api_v1_router
from resumeai.core.config import Settings, settings, validate_settings_for_production
from resumeai.core.logging import setup_logging
from resumeai.core.metrics import PrometheusMiddleware, metrics_response
from resumeai.core.middleware import RequestLoggingMiddleware
from resumeai.core.rate_limit import limiter
from resumeai.core.sentry import init_sentry
from resumeai.gateway.errors import ConfigurationError
from resumeai.gateway.registry import ProviderRegistry

logger = logging.getLogger(__name__)


def create_app(app_settings: Settings | None = None, registry: ProviderRegistry | None = None) -> FastAPI:
    """Build the application; the provider chain is built once in the lifespan."""
    app_settings = app_settings or settings
    registry = registry or ProviderRegistry()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        validate_settings_for_production(app_settings)
        gateway = registry.initialize(app_settings)
        app.state.gateway = gateway
        if not gateway.providers:
            logger.warning("No text-generation providers configured; AI endpoints will return 503")
        logger.info("Resume AI started (env=%s)", app_settings.app_env)

        yield

        logger.info("Resume AI shut down")

    app = FastAPI(
        title="Resume AI",
        description="Resume rewriting backed by a multi-provider LLM fallback chain",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/api/docs" if app_settings.app_debug else None,
        redoc_url="/api/redoc" if app_settings.app_debug else None,
    )

    @app.exception_handler(ConfigurationError)
    async def _configuration_error_handler(request: Request, exc: ConfigurationError):
        logger.error("Configuration error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=503, content={"detail": {"error": "not_configured"}})

    # Log unhandled exceptions with the full traceback
    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):
        tb = traceback.format_exception(type(exc), exc, exc.__traceback__)
        logger.error("Unhandled %s on %s %s:\n%s", type(exc).__name__, request.method, request.url.path, "".join(tb))
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(PrometheusMiddleware)

    # CORS: allowed_origins is comma-separated
    _origins = [o.strip() for o in app_settings.allowed_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_v1_router)

    @app.get("/api/v1/health")
    async def health(request: Request):
        gateway = getattr(request.app.state, "gateway", None)
        return {
            "status": "ok",
            "providers": [a.provider_id for a in gateway.adapters] if gateway else [],
        }

    @app.get("/metrics", include_in_schema=False)
    async def metrics():
        return metrics_response()

    return app


def run() -> None:
    """Console entry point: configure logging and serve with uvicorn."""
    import uvicorn

    setup_logging()
    init_sentry()
    uvicorn.run(create_app(), host=settings.app_host, port=settings.app_port)


if __name__ == "__main__":
    run()
