# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Impact Dashboard API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import (
    DashboardException,
    dashboard_exception_handler,
    validation_exception_handler,
)
from app.routers import health, initiatives
from app.auth import routes as auth_routes
from app.routers.health import API_VERSION

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Logs the environment on startup and shutdown. The Supabase client is
    created lazily on first use.
    """
    logger.info(f"Starting Impact Dashboard API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    logger.info(f"Image bucket: {settings.IMAGE_BUCKET}")

    yield

    logger.info("Shutting down Impact Dashboard API")


# Create FastAPI application
app = FastAPI(
    title="Impact Dashboard API",
    description="""
## Community Impact Dashboard API

Programs publish initiatives with a description, an image and metrics
grouped as **People**, **Place** and **Policy**.

### Endpoints

| Endpoint | Purpose |
|----------|---------|
| `GET /fetch-scoreboard` | Public per-label totals for a program's initiatives |
| `GET /fetch-initiative` | Full detail of one initiative |
| `POST /add-initiative` | Create (multipart: image + fields) |
| `POST /edit-initiative` | Update (multipart, image optional) |
| `DELETE /delete-initiative` | Delete with metrics and image |
| `POST /set-program-password` | Set a program's password |
| `POST /program-login` | Verify a program's password |

### Quick Start

```bash
curl -X POST http://localhost:8000/add-initiative \\
  -F programName="Green Streets" -F initiativeName="Tree Planting" \\
  -F description="Planting street trees" -F 'modesOfAction=["Serve"]' \\
  -F 'metrics={"Place":[{"label":"Trees","values":[{"value":3}]}]}' \\
  -F "image=@tree.png;type=image/png"

curl "http://localhost:8000/fetch-scoreboard?programName=Green%20Streets"
```
""",
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Initiatives",
            "description": "Scoreboard, initiative detail and initiative CRUD",
        },
        {
            "name": "Auth",
            "description": "Per-program password endpoints",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================

# CORS middleware - allows cross-origin requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(DashboardException)
async def handle_dashboard_exception(request: Request, exc: DashboardException):
    """Handle custom dashboard exceptions."""
    if exc.status_code >= 500:
        logger.error(f"{exc.code}: {exc.message} {exc.details}")
    return await dashboard_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_exception(request: Request, exc: RequestValidationError):
    """Handle request body/query validation errors as 400s."""
    return await validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

# Initiative and scoreboard endpoints
app.include_router(
    initiatives.router,
    tags=["Initiatives"]
)

# Program password endpoints
app.include_router(
    auth_routes.router,
    tags=["Auth"]
)

# Health check endpoints
app.include_router(
    health.router,
    tags=["Health"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "Impact Dashboard API",
        "version": API_VERSION,
        "docs": "/docs",
        "health": "/health",
    }
