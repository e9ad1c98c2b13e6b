"""
FastAPI application and entry point.

This module creates and configures the FastAPI application:
  1. Lifespan manager — logging setup, table creation, engine cleanup
  2. CORS middleware — allows frontend origins to make cross-origin requests
  3. Exception handlers — maps domain errors to HTTP responses
  4. Router registration — auth at /auth, the ledger under API_PREFIX

Running locally:
    uvicorn marketing_ledger.main:app --reload
or:
    python -m marketing_ledger
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from marketing_ledger import models  # noqa: F401  (registers every table on Base.metadata)
from marketing_ledger.config import settings
from marketing_ledger.database import engine, Base
from marketing_ledger.exceptions import register_exception_handlers
from marketing_ledger.log import configure_logging
from marketing_ledger.routers import ad_accounts, auth, cards, overview, transactions

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup:
      Configures logging and creates any missing tables. Schema changes in
      production should go through migrations rather than create_all.

    Shutdown:
      Disposes of the database engine, closing all connections cleanly.
    """
    configure_logging()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("%s %s started", settings.APP_NAME, settings.APP_VERSION)
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Marketing card ledger: cold/real balances, dotation limits, reversible transactions",
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------

register_exception_handlers(app)

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(cards.router, prefix=f"{settings.API_PREFIX}/cards", tags=["Cards"])
app.include_router(
    ad_accounts.router, prefix=f"{settings.API_PREFIX}/ad-accounts", tags=["Ad Accounts"]
)
app.include_router(
    transactions.router, prefix=f"{settings.API_PREFIX}/transactions", tags=["Transactions"]
)
app.include_router(overview.router, prefix=settings.API_PREFIX, tags=["Overview"])


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

@app.get("/health", tags=["Health"])
async def health_check():
    """Liveness probe for deployments."""
    return {"status": "ok", "version": settings.APP_VERSION}
