import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.adapters.sqlite.migrator import SQLiteMigrator
from src.api.deps import get_buffered_logger, get_rules, get_settings
from src.app_shell.config import ConfigError, validate_ops_rules

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    # Load rules and validate on startup (fail-fast)
    try:
        rules = get_rules(settings)
        validate_ops_rules(rules)
        logger.info("Rules loaded from %s", settings.rules_path)
    except (FileNotFoundError, ValueError, ConfigError) as e:
        logger.critical("Rules load failed: %s", e)
        sys.exit(1)

    Path(settings.data_dir).mkdir(parents=True, exist_ok=True)
    SQLiteMigrator(settings.db_path, settings.migrations_dir).run_migrations()

    log = get_buffered_logger()
    log.start()
    try:
        yield
    finally:
        await log.aclose()


app = FastAPI(
    title="Naomi Luxe API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Routers ---
from src.api.routes import (  # noqa: E402
    admin_logs,
    bookings,
    catalog,
    content,
    notifications,
    orders,
)

app.include_router(catalog.products_router, prefix="/api/products", tags=["Products"])
app.include_router(catalog.services_router, prefix="/api/services", tags=["Services"])
app.include_router(bookings.router, prefix="/api/bookings", tags=["Bookings"])
app.include_router(orders.router, prefix="/api/orders", tags=["Orders"])
app.include_router(content.gallery_router, prefix="/api/gallery", tags=["Gallery"])
app.include_router(
    content.testimonials_router, prefix="/api/testimonials", tags=["Testimonials"]
)
app.include_router(content.homepage_router, prefix="/api/homepage", tags=["Homepage"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["Notifications"])
app.include_router(admin_logs.router, prefix="/api/admin/logs", tags=["Admin Logs"])


# CORS (Allow Frontend)
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "https://naomi-luxe.com",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "api"}
