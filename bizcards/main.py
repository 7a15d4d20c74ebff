"""FastAPI application entry point."""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from bizcards.api import cards, users
from bizcards.api.error_handlers import register_error_handlers
from bizcards.config import get_settings

settings = get_settings()

logger = logging.getLogger(__name__)


def setup_logging(level: str) -> None:
    """Configure root logging once at startup."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    setup_logging(settings.log_level)
    logger.info(f"Business card API starting ({settings.environment})")
    yield
    logger.info("Business card API shutting down")


app = FastAPI(
    title="Business Card Directory API",
    description="Business cards directory with account security and lockout protection",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log method, path, status and duration of each request."""
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        f"{request.method} {request.url.path} {response.status_code} {elapsed_ms:.1f}ms"
    )
    return response


# Register routers
app.include_router(users.router)
app.include_router(cards.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "environment": settings.environment}


@app.get("/ping", response_class=PlainTextResponse)
async def ping():
    """Liveness check."""
    return "pong"
