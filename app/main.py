"""
Veteran Job Marketplace - Main Application

FastAPI backend with:
- MongoDB for all marketplace data
- Rule-based job matching (MOS, clearance, skills, location)
- Service record parsing and template resume generation
- JWT authentication

Run: uvicorn app.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.api.routes import api_router
from app.core.config import get_settings
from app.core.logging_config import setup_logging
from app.core.rate_limit import limiter
from app.db.mongodb import init_mongo_indexes, test_mongo_connection
from app.schemas.schemas import ErrorResponse

settings = get_settings()

setup_logging()
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Veteran Job Marketplace",
    description="""
    Connects military veterans with employers.

    ## Features
    - **Authentication**: JWT-based auth for veterans, employers and admins
    - **Profiles**: Veteran persona (MOS, clearance, skills, location)
    - **Jobs**: Postings with veteran preferences, ranked matches per veteran
    - **Resumes**: Service record parsing and civilian resume generation
    - **Messaging**: Direct messages between veterans and employers
    - **Community**: Success stories and partner inquiries
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=ErrorResponse(detail="Internal server error").model_dump())


# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize MongoDB indexes on startup."""
    try:
        init_mongo_indexes()
    except PyMongoError as e:
        # The API still starts; requests will fail until MongoDB is reachable
        logger.error("MongoDB index initialization failed: %s", e)


@app.get("/", tags=["Health"])
async def root():
    return {"status": "healthy", "app": "Veteran Job Marketplace"}


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "mongodb": "connected" if test_mongo_connection() else "disconnected"
    }
