"""
Loyalty Registry — FastAPI Application

Issues and retires non-transferable loyalty tokens for a single
administrator, and exposes the administrator's transferability gate
(intent flag + emergency lock).
"""
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi import HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from domain.responses import error_body
from routes import admin, auth, events, health, tokens

# ── Logging ─────────────────────────────────────────────────────────

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: validate settings, create tables, build the registry."""
    # Ensure data/ directory exists for SQLite
    if settings.database_url.startswith("sqlite:///./"):
        os.makedirs("data", exist_ok=True)

    settings.validate_production_settings()

    from database import init_db, async_session
    await init_db()
    logger.info("Database initialized")

    from services import registry_service
    registry = registry_service.get_registry()
    async with async_session() as db:
        written = await registry_service.flush_events(db)
    logger.info(f"Registry ready: {registry!r} ({written} event(s) recorded)")

    yield  # app runs here

    pending = registry_service.pending_event_count()
    if pending:
        logger.warning(f"Shutting down with {pending} unrecorded event(s)")
    logger.info("Shutting down")


# ── App Factory ─────────────────────────────────────────────────────

app = FastAPI(
    title="Loyalty Registry API",
    description="Non-transferable loyalty tokens with an administrator-controlled transfer gate",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routes ──────────────────────────────────────────────────────────

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(tokens.router)
app.include_router(tokens.holders_router)
app.include_router(admin.router)
app.include_router(events.router)


# ── Exception Handlers ──────────────────────────────────────────────


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """
    Catch-all for unhandled exceptions.

    Never return raw exception details to clients; the traceback is logged
    server-side.
    """
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content=error_body("internal_server_error", "Internal server error"),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content=error_body("request_validation", "Request validation failed", jsonable_encoder(exc.errors())),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc: HTTPException):
    """
    Wrap HTTPException (and every DomainError) in the error envelope.

    DomainError subclasses get a code derived from the class name, e.g.
    AlreadyBurntError -> "alreadyburnt", TransfersDisabledError -> "transfersdisabled".
    """
    if hasattr(exc, "message") and hasattr(exc, "details"):
        error_code = exc.__class__.__name__.replace("Error", "").lower()
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(error_code, exc.message, exc.details),
        )

    detail = exc.detail
    message = detail if isinstance(detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(
            "http_error",
            message,
            detail if not isinstance(detail, str) else None,
        ),
        headers=getattr(exc, "headers", None),
    )


# ── Entrypoint ──────────────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="info")
