"""FastAPI application factory."""
from __future__ import annotations
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from ..config import Settings
from ..scanner import BillScanner
from ..utils.logging import setup_logging
from .middleware import RequestLoggingMiddleware
from .routes import health, scan, status


def create_app(settings: Settings | None = None, scanner: BillScanner | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    if settings is None:
        settings = Settings()
    if scanner is None:
        scanner = BillScanner(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        setup_logging(settings.log_level)
        yield
        # Shutdown
        await scanner.aclose()

    app = FastAPI(
        title="Bill Scanner API",
        description="Electricity bill scanning with local and cloud vision models",
        version="0.1.0",
        lifespan=lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    # Store shared objects in app state
    app.state.settings = settings
    app.state.scanner = scanner

    # Register routes
    app.include_router(health.router, tags=["health"])
    app.include_router(scan.router, prefix="/api/bills", tags=["bills"])
    app.include_router(status.router, prefix="/api/vlm", tags=["vlm"])

    return app
