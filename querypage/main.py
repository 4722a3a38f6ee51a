"""
Main FastAPI application entry point.
"""
import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from .config import settings
from .database import engine, init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    logger.info("Starting querypage API...")
    logger.info("Database: %s", settings.database_url)
    logger.info("CORS origins: %s", settings.cors_origins_list)

    init_db()
    logger.info("Database initialized")

    yield

    logger.info("Shutting down querypage API...")


# Create FastAPI application
app = FastAPI(
    title="querypage API",
    description="Paginated, sortable, searchable and filterable list endpoints over SQLAlchemy",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "querypage API",
        "version": "0.1.0",
        "docs": "/docs",
        "status": "running",
    }


@app.get("/livez")
async def liveness():
    """Liveness probe - zero dependencies, confirms process is responsive."""
    return {"status": "ok"}


@app.get("/readyz")
async def readiness():
    """Readiness probe - checks database connectivity."""
    try:
        def _check_db():
            with engine.connect() as conn:
                return conn.execute(text("SELECT 1")).scalar() == 1

        healthy = await asyncio.to_thread(_check_db)
        checks = {"database": "ok" if healthy else "error: unexpected result"}
    except Exception as e:
        healthy = False
        checks = {"database": f"error: {type(e).__name__}"}

    return JSONResponse(
        content={"status": "ok" if healthy else "unhealthy", "checks": checks},
        status_code=200 if healthy else 503,
    )


# Include API routers
from .api.v1.router import router as api_router  # noqa: E402

app.include_router(api_router, prefix="/api/v1")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "querypage.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level,
        reload=True,
    )
