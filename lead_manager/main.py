"""
Lead Manager Backend - FastAPI Application
Main entry point with all routes configured.
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from lead_manager.config import settings
from lead_manager.core.logging import configure_logging
from lead_manager.database import init_db
from lead_manager.schemas.common import HealthResponse

# Import all API routers
from lead_manager.api import campaigns, districts, leads, outreach_sequences, sync, touchpoints, users

configure_logging()
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    await init_db()
    logger.info("Lead Manager API started")
    yield


app = FastAPI(
    title="Lead Manager API",
    description="Multi-tenant sales lead CRM: leads, district contacts, campaigns and touchpoints",
    version=VERSION,
    lifespan=lifespan
)

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include all routers
app.include_router(campaigns.router)
app.include_router(outreach_sequences.router)
app.include_router(leads.router)
app.include_router(districts.router)
app.include_router(touchpoints.router)
app.include_router(users.router)
app.include_router(sync.router)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "message": "Lead Manager API is running",
        "version": VERSION,
        "docs": "/docs"
    }


@app.get("/health", response_model=HealthResponse)
async def health():
    """Detailed health check."""
    return HealthResponse(version=VERSION)
