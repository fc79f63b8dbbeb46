"""
hyperbolic.api.main — FastAPI application entry point
======================================================

Run with::

    uvicorn hyperbolic.api.main:app --reload --port 8000

Every error leaves the API as ``{"error": "<message>"}`` with the status
code of the :mod:`hyperbolic.errors` class that produced it.
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

load_dotenv()

from hyperbolic.api.deps import get_engine  # noqa: E402
from hyperbolic.api.routes.community import router as community_router  # noqa: E402
from hyperbolic.api.routes.games import router as games_router  # noqa: E402
from hyperbolic.api.routes.player import router as player_router  # noqa: E402
from hyperbolic.api.routes.staff import router as staff_router  # noqa: E402
from hyperbolic.api.routes.xp import router as xp_router  # noqa: E402
from hyperbolic.database.engine import init_db, run_db  # noqa: E402
from hyperbolic.errors import HyperbolicError  # noqa: E402

logger = logging.getLogger(__name__)


def _cors_origins() -> list[str]:
    """Resolve allowed CORS origins from env with safe defaults.

    Priority:
      1) CORS_ALLOW_ORIGINS (comma-separated)
      2) FRONTEND_URL (single origin)
    """
    raw = os.getenv("CORS_ALLOW_ORIGINS", "").strip()
    if raw:
        return [origin.strip().rstrip("/") for origin in raw.split(",") if origin.strip()]

    frontend_url = os.getenv("FRONTEND_URL", "").strip()
    if frontend_url:
        return [frontend_url.rstrip("/")]

    return []


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle — warm the DB engine, ensure games exist."""
    engine = get_engine()
    await run_db(init_db, engine)
    logger.info("Hyperbolic API started — engine ready (%s)", engine.url.database)
    yield
    logger.info("Hyperbolic API shutting down")


app = FastAPI(
    title="Hyperbolic Loyalty API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Error translation
# ---------------------------------------------------------------------------
@app.exception_handler(HyperbolicError)
async def _service_error(request: Request, exc: HyperbolicError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(exc.to_payload(), status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def _request_validation_error(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Invalid request"
    return JSONResponse({"error": message}, status_code=status.HTTP_400_BAD_REQUEST)


@app.exception_handler(StarletteHTTPException)
async def _http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        {"error": str(exc.detail)}, status_code=exc.status_code, headers=exc.headers,
    )


@app.exception_handler(SQLAlchemyError)
async def _database_error(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(
        {"error": "Database error"}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


@app.exception_handler(Exception)
async def _unexpected_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        {"error": "Internal server error"}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


# Mount routers
app.include_router(community_router, prefix="/api")
app.include_router(player_router, prefix="/api")
app.include_router(xp_router, prefix="/api")
app.include_router(games_router, prefix="/api")
app.include_router(staff_router, prefix="/api")


@app.get("/api/health")
def health():
    return {"status": "ok"}
