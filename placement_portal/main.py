"""
College Placement Portal - Main Application

FastAPI backend with:
- PostgreSQL (any SQLAlchemy database) for all data
- JWT authentication (Bearer header or authToken cookie)
- Department-filtered jobs and announcements
- SMTP email for invitations and notifications

Run: uvicorn placement_portal.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from placement_portal import __version__
from placement_portal.api.routes import api_router
from placement_portal.core.config import get_settings
from placement_portal.core.logging import setup_logging
from placement_portal.db.postgres import test_postgres_connection
from placement_portal.db.schema import init_db

settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables on startup."""
    try:
        init_db()
        logger.info("Database tables initialized")
    except SQLAlchemyError as e:
        logger.error("Database initialization failed: %s", e)
    yield


# Create FastAPI app
app = FastAPI(
    title="College Placement Portal",
    description="""
    Placement cell backend.

    ## Features
    - **Authentication**: JWT-based auth for students and admins
    - **Registration**: Admin invitations (single or CSV), two-step student onboarding
    - **Jobs**: Department-targeted postings with PDF attachments, one application per student
    - **Messages**: Department-targeted announcements with email notification
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    """Store failures surface as a generic server error."""
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Server error"})


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    database_ok = test_postgres_connection()
    return {
        "status": "healthy" if database_ok else "degraded",
        "database": "connected" if database_ok else "disconnected"
    }
