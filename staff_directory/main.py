"""FastAPI main application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.orm import Session

from staff_directory.core.config import settings
from staff_directory.core.middleware import setup_middleware
from staff_directory.core.rate_limiter import limiter
from staff_directory.core.exceptions import DirectoryError
from staff_directory.db.session import get_db

from staff_directory.api.auth import router as auth_router
from staff_directory.api.columns import router as columns_router
from staff_directory.api.employees import router as employees_router
from staff_directory.api.admins import router as admins_router
from staff_directory.api.logs import router as logs_router

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("staff_directory")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("Starting %s API", settings.APP_NAME)
    yield
    logger.info("Shutting down %s API", settings.APP_NAME)


app = FastAPI(
    title="Staff Directory API",
    description="Employee directory with dynamic columns and an audited admin console",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Middleware
setup_middleware(app)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(DirectoryError)
async def directory_exception_handler(request: Request, exc: DirectoryError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.kind},
    )

# Register routers
app.include_router(auth_router, prefix="/api")
app.include_router(columns_router, prefix="/api")
app.include_router(employees_router, prefix="/api")
app.include_router(admins_router, prefix="/api")
app.include_router(logs_router, prefix="/api")


@app.get("/")
async def root():
    return {
        "name": settings.APP_NAME,
        "version": "0.1.0",
        "docs": "/docs",
    }


@app.get("/api/health")
async def health(db: Session = Depends(get_db)):
    """Health check including database connectivity."""
    try:
        db.execute(text("SELECT 1"))
        db_ok = True
    except Exception as e:
        logger.warning("Database health check failed: %s", e)
        db_ok = False
    return {
        "database": "ok" if db_ok else "error",
        "status": "healthy" if db_ok else "degraded",
    }
