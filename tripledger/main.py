"""FastAPI application entry point"""

import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from tripledger.api.v1.router import api_router
from tripledger.config import get_settings
from tripledger.core.exceptions import AppException
from tripledger.services.cache_service import CacheService

settings = get_settings()

logger.remove()
logger.add(
    sys.stderr,
    level=settings.log_level.upper(),
    format="{time:HH:mm:ss} | {level:<7} | {name}:{line} | {message}",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("{} starting", settings.app_name)
    yield
    await CacheService.close_redis_client()
    logger.info("{} stopped", settings.app_name)


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version="1.0.0",
    description="Backend API for shared trip budgets and expenses",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Add CORS middleware
if settings.allowed_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin.strip() for origin in settings.allowed_origins],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    response = await call_next(request)
    logger.info("{} {} -> {}", request.method, request.url.path, response.status_code)
    return response


# Exception handlers
@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
    """Handle custom application exceptions"""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "message": exc.message,
                "type": exc.error_type,
                "path": str(request.url.path),
            }
        },
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle all other exceptions"""
    logger.exception("Unhandled exception on {} {}", request.method, request.url.path)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {"message": "Internal server error", "type": "InternalServerError"}
        },
    )


# Include API v1 router
app.include_router(api_router, prefix=settings.api_prefix)


# Root endpoint
@app.get("/", tags=["Root"])
async def root():
    """Root endpoint - points to docs"""
    return {
        "message": f"Welcome to {settings.app_name}",
        "docs_url": "/docs",
        "version": "1.0.0",
    }


# Health check endpoint
@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    redis_ok = await CacheService.health_check()
    return {"status": "healthy", "redis": "up" if redis_ok else "down"}
