from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from solar_scheduler.core.logging import configure_logging
from solar_scheduler import database
from solar_scheduler.routers.auth import router as auth_router
from solar_scheduler.routers.contracts import router as contracts_router
from solar_scheduler.routers.customers import router as customers_router
from solar_scheduler.routers.equipment import router as equipment_router
from solar_scheduler.routers.exports import router as exports_router
from solar_scheduler.routers.installations import router as installations_router
from solar_scheduler.routers.jobs import router as jobs_router
from solar_scheduler.routers.statistics import router as statistics_router
from solar_scheduler.routers.vendors import router as vendors_router
from solar_scheduler.services.errors import (
    ConstraintViolation,
    NotFound,
    PersistenceFailure,
    RecordError,
    ValidationFailure,
)

logger = logging.getLogger(__name__)

# checked in order; InvalidTransition is caught as a ConstraintViolation
_STATUS_CODES = (
    (ValidationFailure, 422),
    (NotFound, 404),
    (ConstraintViolation, 409),
    (PersistenceFailure, 503),
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()

    # PostgreSQL schemas are managed by alembic; a local SQLite file is created on demand.
    if database.engine is not None and database.engine.dialect.name == "sqlite":
        database.create_schema()

    yield


app = FastAPI(
    title="Solar Scheduler",
    lifespan=lifespan,
)


@app.exception_handler(RecordError)
async def record_error_handler(request: Request, exc: RecordError):
    status_code = 400
    for error_cls, code in _STATUS_CODES:
        if isinstance(exc, error_cls):
            status_code = code
            break

    if status_code >= 500:
        logger.error("Record operation failed", extra={"code": exc.code, "path": request.url.path})

    return JSONResponse(status_code=status_code, content=exc.to_dict())


@app.middleware("http")
async def catch_unhandled_exceptions(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception:
        logger.exception("Unhandled exception")
        return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


app.include_router(auth_router)
app.include_router(customers_router)
app.include_router(jobs_router)
app.include_router(installations_router)
app.include_router(equipment_router)
app.include_router(vendors_router)
app.include_router(contracts_router)
app.include_router(statistics_router)
app.include_router(exports_router)


@app.get("/")
def root():
    return {"status": "Solar Scheduler running"}


@app.get("/health")
def health():
    return {
        "status": "ok",
        "version": "1.0.0",
    }
