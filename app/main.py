# app/main.py

import logging
import os
import subprocess
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from app import models  # noqa: F401  registers models on Base.metadata
from app.core.config import get_settings
from app.core.logging_config import configure_logging
from app.routes import health, listings, reviews

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Run migrations on startup
    if os.getenv('RUN_MIGRATIONS', 'false').lower() == 'true':
        logger.info("Running database migrations...")
        result = subprocess.run(['alembic', 'upgrade', 'head'], capture_output=True, text=True)
        if result.returncode == 0:
            logger.info("Migrations completed successfully")
        else:
            logger.error(f"Migration failed: {result.stderr}")

    settings = get_settings()
    logger.info(f"Reputation sync starting (environment={settings.ENVIRONMENT})")
    yield


app = FastAPI(
    title="Reputation Sync",
    debug=get_settings().DEBUG,
    lifespan=lifespan
)


# Add middleware to handle HTTPS behind proxy
@app.middleware("http")
async def proxy_headers_middleware(request: Request, call_next):
    forwarded_proto = request.headers.get("x-forwarded-proto")
    if forwarded_proto == "https":
        request.scope["scheme"] = "https"
    response = await call_next(request)
    return response


app.include_router(reviews.router)
app.include_router(listings.router)
app.include_router(health.router)
