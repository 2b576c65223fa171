"""
Garage Analytics Backend - Main Application

Financial analytics for the garage dashboard: revenue, profit, margin,
client segmentation, mechanic attribution, rankings and monthly revenue.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv
import os
import logging

# Load .env before app modules read their configuration
load_dotenv()

from app.routers import reports, garage_data
from app.scheduler import start_scheduler, stop_scheduler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    # Startup
    logger.info("Starting Garage Analytics Backend...")
    start_scheduler()
    yield
    # Shutdown
    logger.info("Shutting down Garage Analytics Backend...")
    stop_scheduler()


# Initialize FastAPI app
app = FastAPI(
    title="Garage Analytics Backend",
    description="Financial analytics engine for the garage dashboard",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(reports.router, prefix="/api/reports", tags=["Reports"])
app.include_router(garage_data.router, prefix="/api/data", tags=["Garage Data"])


@app.get("/")
def read_root():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "Garage Analytics Backend",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health")
def health_check():
    """Detailed health check"""
    return {
        "status": "healthy",
        "supabase_configured": bool(os.getenv("SUPABASE_URL")) and bool(
            os.getenv("SUPABASE_SERVICE_KEY") or os.getenv("SUPABASE_KEY")),
        "refresh_enabled": os.getenv("REFRESH_ENABLED", "true").lower() == "true"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=int(os.getenv("PORT", 8000)), reload=True)
