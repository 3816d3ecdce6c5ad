"""
FastAPI application entry point for Lifeline Records API.

This module configures and creates the FastAPI application with:
- Structured JSON Logging: Request/response logging with request IDs
- Dependency Injection: Services and repositories injected via Depends()
- Exception Handling: Consistent {"error": ...} bodies via setup_exception_handlers()
- CORS Middleware: Allows the dashboard to be served from another origin
- Lifespan Management: Connection pool creation and disposal
- Static Frontend: The prebuilt dashboard served for every non-API path

Architecture Overview:
    ┌─────────────────────────────────────────────────────────────┐
    │                     FastAPI Application                      │
    ├─────────────────────────────────────────────────────────────┤
    │  Middleware Stack                                           │
    │    ├── LoggingMiddleware  - Request logging & metrics       │
    │    └── CORSMiddleware     - Cross-origin support            │
    ├─────────────────────────────────────────────────────────────┤
    │  Routers (api/routers/)                                     │
    │    ├── health.py     - /health, /ready, /metrics            │
    │    ├── patients.py   - /api/patients                        │
    │    ├── lab_tests.py  - /api/tests                           │
    │    ├── staff.py      - /api/doctors, /api/reviewers         │
    │    └── stats.py      - /api/stats                           │
    ├─────────────────────────────────────────────────────────────┤
    │  Services (services/)     ← Injected via Depends()          │
    ├─────────────────────────────────────────────────────────────┤
    │  Repositories (repositories/)   ← Injected into Services    │
    ├─────────────────────────────────────────────────────────────┤
    │  Database (MySQL via SQLAlchemy pool)                       │
    └─────────────────────────────────────────────────────────────┘
    StaticFiles mounted at "/" after every router.
"""
import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
import uvicorn

from core.config import API_HOST, API_PORT, API_RELOAD, STATIC_DIR, settings
from core.dependencies import get_database, reset_database
from core.exceptions import setup_exception_handlers
from core.logging_config import setup_logging
from core.middleware import LoggingMiddleware
from api.routers import (
    health_router,
    patients_router,
    lab_tests_router,
    staff_router,
    stats_router,
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for FastAPI application.

    Startup:
        - Configures structured JSON logging
        - Creates the connection pool

    Shutdown:
        - Disposes of every pooled connection
    """
    setup_logging(level="INFO", json_format=True)

    logger = logging.getLogger(__name__)
    logger.info("Starting Lifeline Records API...")

    db = get_database()
    logger.info(
        "Database pool ready",
        extra={"backend": db.backend, "stored_procedures": db.use_stored_procedures}
    )

    yield

    logger.info("Lifeline Records API shutting down...")
    reset_database()


def create_app(static_dir: str = STATIC_DIR) -> FastAPI:
    """
    Assemble the application.

    Args:
        static_dir: Directory of the prebuilt frontend. Mounted at "/" after
            every router; skipped with a warning if it does not exist.
    """
    app = FastAPI(
        title="Lifeline Records API",
        description="REST API for a clinical records dashboard: patients, diagnostic tests, doctors and reviewers, plus dashboard statistics.",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan
    )

    # =========================================================================
    # EXCEPTION HANDLERS
    # =========================================================================
    setup_exception_handlers(app)

    # =========================================================================
    # MIDDLEWARE
    # =========================================================================
    # Executed in reverse order of registration: LoggingMiddleware sees every
    # request first.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingMiddleware)

    # =========================================================================
    # ROUTERS
    # =========================================================================
    app.include_router(health_router)
    app.include_router(patients_router)
    app.include_router(lab_tests_router)
    app.include_router(staff_router)
    app.include_router(stats_router)

    # Mounted last so API routes always win.
    if os.path.isdir(static_dir):
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="frontend")
    else:
        logging.getLogger(__name__).warning(
            f"Static directory '{static_dir}' not found; frontend will not be served"
        )

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=API_HOST,
        port=API_PORT,
        reload=API_RELOAD
    )
