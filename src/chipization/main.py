"""Main FastAPI application for the Chipization tracker."""

import time

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy import text

from . import __version__
from .api import accounts, animal_types, animals, locations, visited_locations
from .api.middleware import ProblemDetailsMiddleware, register_exception_handlers
from .config import get_config
from .utils.logging_config import get_logger, initialize_logging


def create_app() -> FastAPI:
    """Build the application with middleware, handlers and routers."""
    config = get_config()
    initialize_logging()
    logger = get_logger("main")

    app = FastAPI(
        title=config.app.app_name,
        description=config.app.description,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(ProblemDetailsMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.app.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept", "Origin"],
    )
    register_exception_handlers(app)

    # Type routes first: "/animals/types/..." must not resolve as an animal id
    app.include_router(accounts.router)
    app.include_router(locations.router)
    app.include_router(animal_types.router)
    app.include_router(animals.router)
    app.include_router(visited_locations.router)

    @app.get("/", include_in_schema=False)
    async def root():
        return RedirectResponse(url="/docs")

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": "chipization-tracker", "version": __version__}

    @app.get("/ready")
    def readiness_check():
        """Readiness check endpoint that validates database connectivity."""
        from .db.database import SessionLocal

        start_time = time.time()
        errors = []
        database_ok = False

        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
            database_ok = True
        except Exception as e:
            logger.error(f"Readiness database check failed: {e}")
            errors.append(f"Database check failed: {e}")
        finally:
            db.close()

        response = {
            "status": "ready" if database_ok else "not_ready",
            "service": "chipization-tracker",
            "version": __version__,
            "checks": {"database": database_ok},
            "response_time_ms": round((time.time() - start_time) * 1000, 2),
        }
        if errors:
            response["errors"] = errors
        return JSONResponse(content=response, status_code=200 if database_ok else 503)

    logger.info(f"{config.app.app_name} {__version__} application created")
    return app


app = create_app()
