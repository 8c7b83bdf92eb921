"""MedTrack FastAPI application.

Web server for the medication request and order lifecycle. Commands are
processed synchronously; each HTTP request runs inside the medtrack domain
context. Patient notifications are sent by the Engine (``src/server.py``).

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from medtrack.api import (
    fakes_router,
    inventory_router,
    order_router,
    patient_router,
    request_router,
)
from medtrack.api.errors import register_error_handlers
from medtrack.domain import medtrack
from medtrack.utils.logging import clear_caller, configure_logging

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the config overlay from domain.toml:
#   - "development" / "test" → in-memory provider, notifications sent inline
#   - unset                  → in-memory provider, notifications need the Engine
#   - "production"           → PostgreSQL via DATABASE_URL, message-db event store
medtrack.init()


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    yield


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="MedTrack API",
    description="Medication request and order lifecycle",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the medtrack domain context for each request."""
    try:
        with medtrack.domain_context():
            response = await call_next(request)
        return response
    finally:
        clear_caller()


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
app.include_router(patient_router)
app.include_router(inventory_router)
app.include_router(request_router)
app.include_router(order_router)
app.include_router(fakes_router)

register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": {"name": medtrack.name}})
