"""FastAPI application server."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from affiliate_bridge.api.admin_routes import router as admin_router
from affiliate_bridge.api.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from affiliate_bridge.api.oauth import router as oauth_router
from affiliate_bridge.api.routes import router
from affiliate_bridge.api.webhooks import router as webhooks_router
from affiliate_bridge.bridge import Bridge
from affiliate_bridge.config import Settings, get_settings
from affiliate_bridge.exceptions import BridgeError
from affiliate_bridge.observability.logging import configure_logging
from affiliate_bridge.observability.telemetry import (
    TelemetryConfig,
    init_telemetry,
    shutdown_telemetry,
)

logger = logging.getLogger(__name__)

PUBLIC_DIR = Path(__file__).resolve().parent.parent / "public"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan manager.

    Initializes and shuts down:
    - Structured logging
    - OpenTelemetry (tracing + metrics)
    - The bridge (storage backends and platform clients)
    """
    settings: Settings = app.state.settings

    configure_logging(level=settings.log_level, json_format=settings.log_json)
    logger.info("Starting Affiliate Bridge...")

    if not settings.nuvemshop_oauth_configured:
        logger.warning("Set NS_CLIENT_ID, NS_CLIENT_SECRET and NS_REDIRECT_URL to enable installs")
    if not settings.goaffpro_access_token:
        logger.warning("GOAFFPRO_ACCESS_TOKEN not set; orders and coupons will not reach GoAffPro")
    if settings.service_environment == "production" and settings.goaffpro_webhook_secret == "change-me":
        logger.warning("Production: GOAFFPRO_WEBHOOK_SECRET is the default value")

    if settings.enable_tracing or settings.enable_metrics:
        init_telemetry(
            TelemetryConfig(
                service_name=settings.service_name,
                service_version=settings.api_version,
                environment=settings.service_environment,
                otlp_endpoint=settings.otlp_endpoint,
                enable_tracing=settings.enable_tracing,
                enable_metrics=settings.enable_metrics,
            )
        )

    bridge: Bridge | None = getattr(app.state, "bridge", None)
    if bridge is None:
        bridge = Bridge(settings=settings)
    await bridge.initialize()
    app.state.bridge = bridge
    logger.info("Affiliate Bridge ready")

    yield

    logger.info("Shutting down Affiliate Bridge...")
    await bridge.shutdown()
    shutdown_telemetry()
    logger.info("Shutdown complete")


def create_app(settings: Settings | None = None, bridge: Bridge | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration settings. Uses cached settings if not provided.
        bridge: Pre-built bridge (for testing); built during startup otherwise.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description="Bridges Nuvemshop order events and GoAffPro affiliate events.",
        lifespan=lifespan,
    )
    app.state.settings = settings
    if bridge is not None:
        app.state.bridge = bridge

    @app.exception_handler(BridgeError)
    async def bridge_error_handler(request: Request, exc: BridgeError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"ok": False, "error": exc.detail},
        )

    # The capture script posts from the storefront's origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(router)
    app.include_router(webhooks_router)
    app.include_router(oauth_router)
    app.include_router(admin_router)

    app.mount("/public", StaticFiles(directory=PUBLIC_DIR), name="public")

    if settings.enable_metrics:

        @app.get("/metrics", include_in_schema=False)
        async def metrics():
            """Prometheus metrics endpoint."""
            return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "affiliate_bridge.api.server:app",
        host="0.0.0.0",
        port=3000,
        reload=True,
    )
