"""
FastAPI application factory.

* Registers routes for every resource plus admin.
* Releases the Redis pool and the DB engine via lifespan events.
* Applies rate-limiting middleware.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError

from src.api.middleware import limiter
from src.api.routes import (
    admin,
    deliveries,
    inventory,
    medicines,
    order_items,
    orders,
    pharmacies,
    prescriptions,
    users,
    viewers,
)
from src.config import settings
from src.infrastructure.database import engine
from src.infrastructure.redis_client import close_redis

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

ROUTERS = (
    users,
    pharmacies,
    medicines,
    inventory,
    orders,
    order_items,
    deliveries,
    prescriptions,
    viewers,
    admin,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Nothing to start; release pooled connections on shutdown."""
    yield
    await close_redis()
    await engine.dispose()


async def _integrity_error_handler(request: Request, exc: IntegrityError):
    # Unique / foreign-key races that slipped past the route's own checks
    logger.warning(
        "Integrity error on %s %s: %s", request.method, request.url.path, exc.orig
    )
    return JSONResponse(
        status_code=409,
        content={"detail": "Request conflicts with existing data"},
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title="Medicine Delivery API",
        description=(
            "Backend for ordering medicines from nearby pharmacies: catalogue "
            "and stock search, delivery quotes, order tracking and "
            "prescription verification."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(IntegrityError, _integrity_error_handler)

    # Routers
    for module in ROUTERS:
        app.include_router(module.router, prefix="/api/v1")

    return app
