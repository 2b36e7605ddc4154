"""
Ripe FX Quote — FastAPI application entry point.

Configures the app, middleware, and the rate refresh loop, and registers
the API routers.
"""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ripefx.api import rates
from ripefx.config import settings
from ripefx.services.rate_service import build_rate_service


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    # Startup: one shared HTTP client, rate store, and the refresh loop
    client = httpx.AsyncClient(timeout=settings.FX_FALLBACK_TIMEOUT_SECONDS)
    service = build_rate_service(client)
    app.state.rate_service = service
    service.scheduler.start(run_immediately=settings.FX_REFRESH_ON_STARTUP)

    yield

    # Shutdown: stop refreshing, close connections
    await service.scheduler.stop()
    await client.aclose()


app = FastAPI(
    title=settings.APP_NAME,
    description="Transparent stablecoin-to-fiat payout quotes for PHP, THB, IDR and MYR.",
    version="0.1.0",
    lifespan=lifespan,
)

# --- CORS Middleware ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Routers ---
app.include_router(rates.router, prefix="/api/v1/rates", tags=["Rates"])


@app.get("/health")
async def health_check():
    """Health check endpoint for load balancers and monitoring."""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": "0.1.0",
    }
