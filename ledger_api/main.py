"""
Ledger API - Application.

============================================================
RESPONSIBILITY
============================================================
FastAPI application exposing accounts, the trade ledger and
the asset catalogue.

Run with:
    python -m ledger_api.main
============================================================
"""

import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from database.engine import initialize_database
from ledger_api.routers import accounts, assets, ledger
from ledger_engine.errors import LedgerError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    initialize_database()
    logger.info("Ledger API started")
    yield


app = FastAPI(
    title="Trade Ledger API",
    description="Record trades and track realized P&L per account.",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS (Allow local frontend development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError):
    """Accounting rejections answer with the status of their error code."""
    status_code = exc.info.http_status
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=status_code, content={"detail": exc.to_dict()})


# Include Routers
app.include_router(accounts.router)
app.include_router(ledger.router)
app.include_router(assets.router)


@app.get("/health", tags=["Health"])
def health_check():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        app,
        host=os.getenv("API_HOST", "0.0.0.0"),
        port=int(os.getenv("API_PORT", "8000")),
    )
