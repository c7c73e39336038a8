"""
Dinner Planner Web API - FastAPI application.

Backend for the Telegram Mini App: dishes, shopping lists and AI recipes.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dinner_planner import __version__
from dinner_planner.errors import AuthorizationError, PersistenceError, ValidationError
from dinner_planner.web.routes import router

logger = logging.getLogger(__name__)

app = FastAPI(title="Dinner Planner", version=__version__)


@app.on_event("startup")
async def startup_event():
    """Configure logging on startup."""
    from dinner_planner.config import settings

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(f"Dinner Planner {__version__} starting ({settings.planner_env})")


# CORS middleware for the Mini App dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",  # Next.js dev server
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router, prefix="/api")


# =============================================================================
# Error Handlers
# =============================================================================


@app.exception_handler(AuthorizationError)
async def authorization_error_handler(request: Request, exc: AuthorizationError):
    logger.info(f"Forbidden {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=403, content={"error": exc.message})


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content={"error": exc.message})


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError):
    logger.error(f"Persistence failure on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=500,
        content={"error": "Something went wrong. Please try again."},
    )


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}
