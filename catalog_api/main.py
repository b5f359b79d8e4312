"""
FastAPI Main Application
Catalog API Service
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import structlog
from contextlib import asynccontextmanager

from catalog_api.core.config import settings
from catalog_api.core.database import AsyncSessionLocal, close_database, init_database
from catalog_api.core.logging import setup_logging
from catalog_api.api.v1.router import api_router
from catalog_api.api.v1.endpoints.health import health_check
from catalog_api.services.bootstrap_admin import ensure_bootstrap_admin_exists

# Setup structured logging
setup_logging()
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Starting Catalog API Service", version="1.0.0", environment=settings.ENVIRONMENT)

    await init_database()

    # Ensure bootstrap admin exists (idempotent)
    async with AsyncSessionLocal() as session:
        await ensure_bootstrap_admin_exists(session)

    yield

    logger.info("Shutting down Catalog API Service")
    await close_database()


# Create FastAPI application
app = FastAPI(
    title="Catalog API",
    description="Multi-tenant catalog management API",
    version="1.0.0",
    docs_url="/docs" if settings.ENVIRONMENT == "development" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT == "development" else None,
    lifespan=lifespan
)

# Build CORS origins list
cors_origins = list(settings.cors_origins)

if settings.ENVIRONMENT == "development":
    for origin in ("http://localhost:3000", "http://localhost:5173", "http://127.0.0.1:5173"):
        if origin not in cors_origins:
            cors_origins.append(origin)

logger.info("Configuring CORS", environment=settings.ENVIRONMENT, allowed_origins=cors_origins)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,  # Required for JWT authentication
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=[
        "Authorization",
        "Content-Type",
        "Accept",
        "X-API-Key",
        "Origin",
    ],
    max_age=600,
)

# Include API router
app.include_router(api_router, prefix="/api/v1")

# Health check for Docker and load balancers
app.add_api_route("/health", health_check, methods=["GET"], tags=["health"])


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Catalog API Service",
        "version": "1.0.0",
        "docs": "/docs" if settings.ENVIRONMENT == "development" else "disabled",
        "health": "/health"
    }


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler"""
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_info=True
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "message": "An unexpected error occurred"
        }
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "catalog_api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
        log_level=settings.LOG_LEVEL.lower()
    )
