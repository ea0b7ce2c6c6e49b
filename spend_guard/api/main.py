"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from spend_guard.api.middleware import RequestIDMiddleware, MetricsMiddleware
from spend_guard.api.v1 import config, kill_switch, safe_to_spend, transactions
from spend_guard.infrastructure.observability.logging import setup_logging
from spend_guard.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Spend Guard",
        description="Safe-to-spend allowance, risk scoring and spending kill-switch",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(config.router, prefix="/v1", tags=["config"])
    app.include_router(safe_to_spend.router, prefix="/v1", tags=["safe-to-spend"])
    app.include_router(kill_switch.router, prefix="/v1", tags=["kill-switch"])
    app.include_router(transactions.router, prefix="/v1", tags=["transactions"])

    return app


app = create_app()
