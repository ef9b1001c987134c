"""Main FastAPI application"""

import asyncio
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api import jira, system, templates, testplan
from .api import settings as settings_api
from .config import settings
from .database import Database
from .services.errors import AppError
from .services.log_service import log_service


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"success": False, "error": message}
    )


def create_app(database: Optional[Database] = None) -> FastAPI:
    """Build the application around one database"""
    database = database or Database(settings.DATABASE_URL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown events"""
        await database.init()
        log_service.info(f"TestPlan Agent started on port {settings.PORT}")
        try:
            yield
        except asyncio.CancelledError:
            pass  # Suppress CancelledError during shutdown
        finally:
            await database.dispose()

    app = FastAPI(
        title="TestPlan AI Agent",
        description="Generate QA test plans from JIRA tickets with Groq or Ollama",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.ALLOWED_ORIGINS.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = int((time.monotonic() - start) * 1000)
        log_service.info(
            f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms}ms)"
        )
        return response

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            log_service.error(f"{request.method} {request.url.path}: {exc.message}")
        return _error(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if errors:
            first = errors[0]
            field = ".".join(str(part) for part in first.get("loc", ())[1:])
            message = f"{field}: {first.get('msg')}" if field else first.get("msg")
        else:
            message = "Invalid request"
        return _error(400, message)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        log_service.error(
            f"Unhandled error on {request.method} {request.url.path}: {exc!r}"
        )
        return _error(500, "Internal server error")

    # Include API routers
    app.include_router(system.router)
    app.include_router(jira.router)
    app.include_router(testplan.router)
    app.include_router(settings_api.router)
    app.include_router(templates.router)

    return app


app = create_app()
