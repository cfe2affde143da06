"""
api.main
========

HTTP layer over the Tenure orchestrator.

Error mapping:

* guard rejections (:class:`~tenure.errors.TransitionError`) → 409, the
  message is passed through unchanged for the caller to display;
* unknown entity ids → 404;
* period‑store invariant faults → logged, 500.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tenure.errors import EntityNotFoundError, PeriodIntegrityError, TransitionError
from tenure.models import Status
from tenure.settings import API_DEBUG, configure_logging

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Tenure API",
    version="0.1.0",
    description="HTTP layer over the roster lifecycle engine.",
    debug=API_DEBUG,
)

# --- CORS ----------------------------------------------------------
origins = [
    "http://localhost:5173",    # Vite dev server default port
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept"],
)


# --- Error mapping -------------------------------------------------
@app.exception_handler(TransitionError)
async def transition_rejected(request: Request, exc: TransitionError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(EntityNotFoundError)
async def entity_not_found(request: Request, exc: EntityNotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(PeriodIntegrityError)
async def period_integrity_fault(request: Request, exc: PeriodIntegrityError):
    logger.error(f"{request.method} {request.url.path} aborted: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Internal error"})


# --- Include Routers -----------------------------------------------
from .entities import router as entities_router  # noqa: E402

app.include_router(entities_router)


# ---------- health-check ----------
@app.get("/")
def root():
    return {"status": "ok", "msg": "Tenure API is alive"}


# ---------- GET /statuses ----------
@app.get("/statuses")
def status_names():
    """Every status value the engine can resolve to."""
    return [s.value for s in Status]
