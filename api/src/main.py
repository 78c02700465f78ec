"""LearnHub API - Main Application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.auth.service import FirebaseTokenVerifier
from src.config import Settings, get_settings
from src.core.context import get_request_id
from src.core.database import Database
from src.core.logging import configure_structlog, get_logger
from src.core.middleware import OptionsResponseMiddleware, RequestContextMiddleware
from src.courses.router import (
    admin_lessons,
    admin_modules,
    router_lessons,
    router_modules,
)
from src.courses.service import LessonService, ModuleService
from src.enrollments.router import admin_router as enrollments_admin_router
from src.enrollments.router import router as enrollments_router
from src.enrollments.service import EnrollmentService
from src.health import router as health_router
from src.storage.router import router as storage_router
from src.storage.service import LocalStorageService
from src.users.router import admin_router as users_admin_router
from src.users.router import router as users_router
from src.users.service import UserService
from src.video.router import router as video_router


# Configure logging early (before creating logger)
settings = get_settings()
configure_structlog(settings, log_dir=Path(settings.log_dir))

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings: Settings = app.state.settings
    logger.info(
        "starting_application",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    database = Database(settings)
    app.state.database = database

    if settings.database_create_tables:
        try:
            await database.create_all()
        except (SQLAlchemyError, OSError) as e:
            logger.warning(
                "database_init_skipped",
                error=str(e),
                message="Running without database tables",
            )

    storage_service = LocalStorageService(settings)
    storage_service.ensure_upload_dir()
    app.state.storage_service = storage_service
    logger.info("storage_service_initialized", upload_dir=settings.upload_dir)

    app.state.module_service = ModuleService(database, storage_service)
    app.state.lesson_service = LessonService(database, storage_service)
    app.state.user_service = UserService(database)
    app.state.enrollment_service = EnrollmentService(database)
    logger.info("database_services_initialized")

    app.state.token_verifier = FirebaseTokenVerifier(settings)
    if not settings.firebase_configured:
        logger.warning(
            "firebase_not_configured",
            message="Admin routes will answer 503",
        )

    yield

    # Shutdown
    logger.info("shutting_down_application")
    await database.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    # debug stays False so Starlette never renders tracebacks in responses
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="LearnHub course platform - API",
        debug=False,
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
    )
    app.state.settings = settings

    # Middleware added first runs innermost
    app.add_middleware(
        OptionsResponseMiddleware,
        path_prefix="/api",
        allow_origins=settings.cors_origins,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    app.add_middleware(
        RequestContextMiddleware,
        log_requests=settings.log_requests,
        exclude_paths=settings.log_exclude_paths,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        expose_headers=settings.cors_expose_headers,
        max_age=settings.cors_max_age,
    )

    def _get_request_id_safe(request: Request) -> str | None:
        """Get request_id from request state or context."""
        if hasattr(request.state, "request_id"):
            return request.state.request_id
        return get_request_id()

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> ORJSONResponse:
        """Handle HTTP exceptions with safe error messages."""
        request_id = _get_request_id_safe(request)

        logger.warning(
            "http_exception",
            status_code=exc.status_code,
            detail=str(exc.detail),
            path=request.url.path,
            method=request.method,
        )

        return ORJSONResponse(
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
            content={
                "error": True,
                "message": str(exc.detail)
                if exc.status_code < status.HTTP_500_INTERNAL_SERVER_ERROR
                else "Internal server error",
                "status_code": exc.status_code,
                "request_id": request_id,
            },
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        """Report invalid input as 400 with per-field details."""
        request_id = _get_request_id_safe(request)

        logger.warning(
            "validation_error",
            errors=exc.errors(),
            path=request.url.path,
            method=request.method,
        )

        return ORJSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "error": True,
                "message": "Validation error",
                "status_code": status.HTTP_400_BAD_REQUEST,
                "request_id": request_id,
                "details": [
                    {
                        "field": ".".join(str(loc) for loc in err.get("loc", [])),
                        "message": err.get("msg", "Invalid value"),
                    }
                    for err in exc.errors()
                ],
            },
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> ORJSONResponse:
        """Catch-all handler for unhandled exceptions.

        Details are logged internally; the client only sees a generic message.
        """
        request_id = _get_request_id_safe(request)

        logger.exception(
            "unhandled_exception",
            error_type=type(exc).__name__,
            error_message=str(exc),
            path=request.url.path,
            method=request.method,
        )

        return ORJSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": True,
                "message": "An unexpected error occurred. Please try again later.",
                "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR,
                "request_id": request_id,
            },
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(router_modules)
    app.include_router(router_lessons)
    app.include_router(users_router)
    app.include_router(enrollments_router)
    app.include_router(admin_modules)
    app.include_router(admin_lessons)
    app.include_router(users_admin_router)
    app.include_router(enrollments_admin_router)
    app.include_router(storage_router)
    app.include_router(video_router)

    app.mount(
        settings.upload_url_prefix,
        StaticFiles(directory=settings.upload_dir, check_dir=False),
        name="uploads",
    )

    @app.get("/", include_in_schema=False)
    async def root(request: Request) -> dict[str, str]:
        """Root endpoint."""
        return {
            "message": "LearnHub API",
            "version": settings.app_version,
            "docs": f"{request.url}docs",
        }

    return app


app = create_app()
