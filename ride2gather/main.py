"""Application wiring for the ride2gather API.

Importing this module configures logging, creates/upgrades the schema,
optionally seeds equipment, and builds the FastAPI ``app`` with its routers,
middleware, static uploads mount and error handlers.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import settings
from .core.errors import (
    ServiceError,
    http_exception_handler,
    service_error_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from .core.logging import configure_logging
from .db.migrate import run_migrations
from .db.seed import seed_equipment
from .db.session import Base, SessionLocal, engine
from .middlewares import RequestIdMiddleware
from .routers import api_accounts, api_profiles

# Registers the tables with ``Base.metadata``.
from . import models as _models  # noqa: F401

configure_logging(settings.LOG_LEVEL)

Base.metadata.create_all(bind=engine)
run_migrations(engine)

if settings.SEED_EQUIPMENT:
    _seed_db = SessionLocal()
    try:
        seed_equipment(_seed_db)
    finally:
        _seed_db.close()

app = FastAPI(title=settings.APP_NAME)

app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

settings.uploads_dir.mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=str(settings.uploads_dir)), name="uploads")

app.include_router(api_accounts.router)
app.include_router(api_profiles.router)

app.add_exception_handler(ServiceError, service_error_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

Instrumentator().instrument(app).expose(app, include_in_schema=False)


@app.get("/")
def root() -> dict[str, object]:
    return {"ok": True, "service": settings.APP_NAME}


@app.get("/health")
def health() -> dict[str, bool]:
    return {"ok": True}


__all__ = ["app"]
