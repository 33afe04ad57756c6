"""
Village Profile CMS API Server

FastAPI server that provides REST endpoints for the village website and its admin panel.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles
import logging
import os
import uvicorn
from slowapi import _rate_limit_exceeded_handler  # type: ignore
from slowapi.errors import RateLimitExceeded  # type: ignore

from village_cms.api.routes import router, limiter as routes_limiter
from village_cms.api.public_routes import public_router
from village_cms.database.db import Database
from village_cms.database.init_defaults import init_defaults
from village_cms.services import upload_service

# Set up logging
# Allow log level to be configured via environment variable (default: INFO)
log_level = os.getenv("LOG_LEVEL", "INFO").upper()
numeric_level = getattr(logging, log_level, logging.INFO)
logging.basicConfig(
    level=numeric_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan handler for startup and shutdown events."""
    # Startup
    logger.info("Starting up Village Profile CMS API...")

    db = Database()
    app.state.db = db

    # Create tables if they don't exist (fallback when migrations haven't run)
    try:
        await db.init_schema()
        logger.info("Database initialized")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)
        # Don't raise - allow app to start so /api/health can report the problem

    # Bootstrap the admin account from the environment
    try:
        await init_defaults(db)
        logger.info("✓ Default values initialized")
    except Exception as e:
        logger.error(f"Failed to initialize defaults: {e}", exc_info=True)

    try:
        upload_service.get_upload_dir().mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Could not create upload directory: {e}", exc_info=True)

    yield  # App is running

    # Shutdown
    logger.info("Shutting down Village Profile CMS API...")
    try:
        await db.dispose()
    except Exception as e:
        logger.error(f"Error disposing database engine: {e}", exc_info=True)


app = FastAPI(
    title="Village Profile CMS API",
    description="API for village news, galleries, map locations and the homepage slider",
    version="1.0.0",
    lifespan=lifespan,
)

# Setup rate limiter
app.state.limiter = routes_limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Add CORS middleware, origins configured via ALLOWED_ORIGINS env var
allowed_origins = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(router)
app.include_router(public_router)

# Locally stored uploads are served from the upload directory
app.mount(
    upload_service.LOCAL_URL_PREFIX,
    StaticFiles(directory=upload_service.get_upload_dir(), check_dir=False),
    name="uploads",
)


@app.get("/", response_class=HTMLResponse)
async def root():
    """API root endpoint - frontend is served separately."""
    return HTMLResponse(
        content="""
        <!DOCTYPE html>
        <html>
            <head>
                <title>Village Profile CMS API</title>
                <style>
                    body { font-family: sans-serif; max-width: 800px; margin: 50px auto; padding: 20px; }
                    h1 { color: #2f855a; }
                    a { color: #2f855a; }
                </style>
            </head>
            <body>
                <h1>Village Profile CMS API</h1>
                <p>API is running successfully!</p>
                <h2>Available Resources:</h2>
                <ul>
                    <li><a href="/docs">API Documentation</a> - Interactive API docs</li>
                    <li><a href="/api/health">Health Check</a> - System status</li>
                </ul>
                <p><em>Note: Frontend is served separately.</em></p>
            </body>
        </html>
    """
    )


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
