import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlmodel import SQLModel

from backend.app.core.config import settings
from backend.app.core.database import get_engine
from backend.app.api import api_router
from backend.app.api.errors import register_exception_handlers

# Import all models to register them with SQLModel metadata
from backend.app import models  # noqa: F401

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# --- App Initialization ---
app = FastAPI(
    title="Group Ledger API",
    description="Join shared expense groups through time-limited invitation links",
    version="1.0.0",
)

# CORS middleware for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router)
register_exception_handlers(app)


# --- Event Handlers ---
@app.on_event("startup")
async def startup_event():
    logger.info("Starting up Group Ledger API...")

    if settings.AUTO_CREATE_TABLES:
        try:
            logger.info("Auto-creating database tables...")
            SQLModel.metadata.create_all(get_engine())
            logger.info("Database tables created successfully!")
        except Exception as e:
            logger.error(f"Failed to create database tables: {e}")
            logger.error("Database functionality may not work properly.")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down Group Ledger API...")


# --- API Endpoints ---
@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": "Group Ledger API", "version": "1.0.0"}


@app.get("/health")
async def health_check():
    """Health check endpoint with database status."""
    status = {"status": "healthy", "database": "unknown"}

    try:
        with get_engine().connect() as conn:
            conn.execute(text("SELECT 1"))
        status["database"] = "connected"
    except Exception as e:
        status["database"] = f"error: {str(e)}"
        status["status"] = "degraded"

    return status
