"""
Proposal Engine API - Main Application Entry Point

This module initializes the FastAPI application with:
- Logging configuration
- Database connection and schema initialization
- Stalled job reaper (APScheduler)
- CORS middleware for frontend communication
- Prometheus metrics
- API router registration

Architecture:
    FastAPI App
    ├── Lifespan Management (startup/shutdown)
    ├── CORS Middleware
    ├── Prometheus Middleware (+ /metrics)
    └── API Router
        ├── /jobs - Submission, polling, proposal and critique
        ├── /resumes - Resume chunk management
        ├── /chat - Quick proposal for a pasted job description
        ├── /history - Saved quick proposals
        └── /stats - Dashboard statistics
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.config import get_settings
from app.database import init_db
from app.api import api_router
from app.logging_config import setup_logging
from app.middleware.metrics import setup_metrics
from app.scheduler import start_scheduler, stop_scheduler

settings = get_settings()
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and run the stalled-job reaper for the life of the app."""
    await init_db()
    start_scheduler()
    yield
    stop_scheduler()


app = FastAPI(
    title="Proposal Engine API",
    description="Multi-stage job analysis and proposal generation API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_metrics(app)

app.include_router(api_router)


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
