"""FastAPI application factory"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from expense_forecast.api.middleware import MetricsMiddleware, RequestIDMiddleware
from expense_forecast.api.v1 import forecast
from expense_forecast.config import settings
from expense_forecast.infrastructure.database.session import init_db
from expense_forecast.infrastructure.observability.logging import setup_logging

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Expense Forecast Service",
        description="Spending forecasts from transaction history with an AI oracle and deterministic fallback",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(forecast.router, prefix="/v1", tags=["forecast"])

    return app


app = create_app()
