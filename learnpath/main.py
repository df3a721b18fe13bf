"""LearnPath API - Main Application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from learnpath.catalog.router import lectures_router
from learnpath.catalog.router import router as courses_router
from learnpath.catalog.service import CatalogService
from learnpath.config import get_settings
from learnpath.core.context import get_request_id
from learnpath.core.database import init_async_cassandra, shutdown_async_cassandra
from learnpath.core.logging import configure_structlog, get_logger
from learnpath.core.middleware import RequestContextMiddleware
from learnpath.enrollments.router import course_enrollments_router
from learnpath.enrollments.router import router as enrollments_router
from learnpath.enrollments.service import EnrollmentService
from learnpath.health.router import router as health_router
from learnpath.progress.router import router as progress_router
from learnpath.progress.service import ProgressService
from learnpath.quizzes.router import router as quizzes_router
from learnpath.quizzes.service import QuizService


# Configure logging early (before creating logger)
settings = get_settings()
configure_structlog(settings, log_dir=Path(settings.log_dir))

logger = get_logger(__name__)


def init_services(app: FastAPI, session, keyspace: str) -> None:
    """Build the service graph on ``app.state``.

    Catalog is read by every other service; enrollments are ensured by
    progress and quizzes; quizzes write progress through the progress service.
    """
    catalog = CatalogService(
        session=session,
        keyspace=keyspace,
        position_attempts=get_settings().lecture_position_attempts,
    )
    enrollments = EnrollmentService(session=session, keyspace=keyspace, catalog=catalog)
    progress = ProgressService(
        session=session,
        keyspace=keyspace,
        catalog=catalog,
        enrollments=enrollments,
    )
    quizzes = QuizService(
        session=session,
        keyspace=keyspace,
        catalog=catalog,
        enrollments=enrollments,
        progress=progress,
    )

    app.state.cassandra_session = session
    app.state.catalog_service = catalog
    app.state.enrollment_service = enrollments
    app.state.progress_service = progress
    app.state.quiz_service = quizzes
    logger.info("services_initialized", keyspace=keyspace)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings = get_settings()
    logger.info(
        "starting_application",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    try:
        session = await init_async_cassandra()
        init_services(app, session, settings.cassandra_keyspace)
    except Exception as e:
        logger.warning(
            "database_init_skipped",
            error=str(e),
            message="Running without database connection",
        )

    yield

    logger.info("shutting_down_application")
    await shutdown_async_cassandra()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    # debug stays off so Starlette never renders tracebacks
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Course enrollment and progress tracking API",
        debug=False,
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
    )

    # Outermost middleware
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
        max_age=settings.cors_max_age,
    )

    def _get_request_id_safe(request: Request) -> str | None:
        if hasattr(request.state, "request_id"):
            return request.state.request_id
        return get_request_id()

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> ORJSONResponse:
        """Handle HTTP exceptions; 5xx details are not exposed."""
        logger.warning(
            "http_exception",
            status_code=exc.status_code,
            detail=str(exc.detail),
            path=request.url.path,
            method=request.method,
        )

        return ORJSONResponse(
            status_code=exc.status_code,
            content={
                "error": True,
                "message": str(exc.detail)
                if exc.status_code < status.HTTP_500_INTERNAL_SERVER_ERROR
                else "Internal server error",
                "status_code": exc.status_code,
                "request_id": _get_request_id_safe(request),
            },
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        """Handle request validation errors."""
        logger.warning(
            "validation_error",
            errors=exc.errors(),
            path=request.url.path,
            method=request.method,
        )

        return ORJSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": True,
                "message": "Validation error",
                "status_code": status.HTTP_422_UNPROCESSABLE_ENTITY,
                "request_id": _get_request_id_safe(request),
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
        """Catch-all handler; the traceback goes to the log only."""
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
                "request_id": _get_request_id_safe(request),
            },
        )

    app.include_router(health_router)
    app.include_router(courses_router)
    app.include_router(lectures_router)
    app.include_router(enrollments_router)
    app.include_router(course_enrollments_router)
    app.include_router(progress_router)
    app.include_router(quizzes_router)

    @app.get("/", include_in_schema=False)
    async def root(request: Request) -> dict[str, str]:
        """Root endpoint."""
        return {
            "message": "LearnPath API",
            "version": settings.app_version,
        }

    return app


app = create_app()
