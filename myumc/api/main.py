"""
FastAPI app assembly: logging, middleware, error mapping and router wiring.
"""
import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from myumc import __version__
from myumc.api.accounts import router as accounts_router
from myumc.api.audits import router as audits_router
from myumc.api.content import router as content_router
from myumc.api.events import router as events_router
from myumc.api.members import router as members_router
from myumc.api.organizations import router as organizations_router
from myumc.api.profile import router as profile_router
from myumc.api.store import router as store_router
from myumc.services.errors import (
    ConflictError,
    InvalidOperationError,
    NotFoundError,
    PermissionDeniedError,
)
from myumc.services.profile_storage import StorageError

# Configure logging
LOG_LEVEL_NAME = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL = getattr(logging, LOG_LEVEL_NAME, logging.INFO)
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)
logger.setLevel(LOG_LEVEL)
logger.info("app_startup: log_level=%s", LOG_LEVEL_NAME)

# Database schema is managed by Alembic migrations.

app = FastAPI(
    title="MyUMC Church Management Service",
    description="API for church members, content, events and the church store.",
    version=__version__,
)

# Avoid implicit trailing-slash redirects for predictable URLs
app.router.redirect_slashes = False

DEFAULT_ORIGINS = "http://localhost,http://localhost:3000,http://localhost:8000"
origins = [o.strip() for o in os.getenv("ALLOWED_ORIGINS", DEFAULT_ORIGINS).split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse({"detail": str(exc)}, status_code=status_code)


@app.exception_handler(NotFoundError)
async def handle_not_found(request: Request, exc: NotFoundError):
    return _error(404, exc)


@app.exception_handler(InvalidOperationError)
async def handle_invalid_operation(request: Request, exc: InvalidOperationError):
    return _error(400, exc)


@app.exception_handler(PermissionDeniedError)
async def handle_permission_denied(request: Request, exc: PermissionDeniedError):
    return _error(403, exc)


@app.exception_handler(ConflictError)
async def handle_conflict(request: Request, exc: ConflictError):
    return _error(409, exc)


@app.exception_handler(StorageError)
async def handle_storage_error(request: Request, exc: StorageError):
    return _error(502, exc)


@app.exception_handler(Exception)
async def handle_unexpected(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse({"detail": "An unexpected error occurred"}, status_code=500)


app.include_router(accounts_router)
app.include_router(organizations_router)
app.include_router(members_router)
app.include_router(content_router)
app.include_router(events_router)
app.include_router(store_router)
app.include_router(profile_router)
app.include_router(audits_router)


@app.get("/health")
def health_check():
    return {"status": "ok", "service": "myumc"}
