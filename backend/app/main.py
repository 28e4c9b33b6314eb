"""FastAPI application entry point"""

from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError

from backend.app.core.config import settings
from backend.app.core.container import Container, build_default_container
from backend.app.core.logging import setup_logging, get_logger
from backend.app.core.middleware import (
    BrowserSessionMiddleware,
    LoggingMiddleware,
    RequestIDMiddleware,
)
from backend.app.core.exceptions import FounderBridgeException
from backend.app.api import auth, dashboard, intent, listings, profiles

# Setup logging
setup_logging()
logger = get_logger(__name__)

DESCRIPTION = """
## FounderBridge

Marketplace connecting developers with recruiters and founders looking for
co-founders.

### Sign-in flow

1. Pick a role with `PUT /api/v1/intent` (`candidate` or `recruiter`)
2. Sign in with GitHub, either through `/api/v1/auth/github/login` (redirect)
   or by posting the popup's token to `/api/v1/auth/github/popup`
3. The first sign-in of the browser session consumes the role and navigates
   to the matching dashboard, carrying the user id as navigation state

### Authentication

After sign-in the session token is set as an HTTP-only cookie. API clients
may send it as `Authorization: Bearer <token>` instead.
"""


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(FounderBridgeException)
    async def founderbridge_exception_handler(request: Request, exc: FounderBridgeException):
        """Handle custom FounderBridge exceptions"""
        request_id = getattr(request.state, "request_id", "unknown")

        logger.error(
            f"FounderBridge exception: {exc.message}",
            extra={
                "request_id": request_id,
                "status_code": exc.status_code,
            }
        )

        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.message,
                "details": exc.details,
                "request_id": request_id,
            }
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle Pydantic validation errors"""
        request_id = getattr(request.state, "request_id", "unknown")

        logger.warning(
            f"Validation error: {exc.errors()}",
            extra={"request_id": request_id}
        )

        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "error": "Validation error",
                "details": jsonable_errors(exc),
                "request_id": request_id,
            }
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        """Handle document store failures"""
        request_id = getattr(request.state, "request_id", "unknown")

        logger.error(
            f"Document store error: {str(exc)}",
            extra={"request_id": request_id},
            exc_info=True
        )

        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={
                "error": "Document store error",
                "details": {"message": "The document store could not complete the request"},
                "request_id": request_id,
            }
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle all other exceptions"""
        request_id = getattr(request.state, "request_id", "unknown")

        logger.error(
            f"Unhandled exception: {str(exc)}",
            extra={"request_id": request_id},
            exc_info=True
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Internal server error",
                "details": {"message": "An unexpected error occurred"},
                "request_id": request_id,
            }
        )


def jsonable_errors(exc: RequestValidationError) -> list:
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]


def create_app(container: Optional[Container] = None) -> FastAPI:
    """Build the application around a service container"""
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description=DESCRIPTION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        openapi_tags=[
            {"name": "Authentication", "description": "GitHub sign-in and session state"},
            {"name": "Intent", "description": "Role selection before sign-in"},
            {"name": "Profiles", "description": "Developer and recruiter signup"},
            {"name": "Listings", "description": "Ideas, job postings and applications"},
            {"name": "Dashboards", "description": "Per-role dashboard snapshots and profile edits"},
        ],
    )
    app.state.container = container or build_default_container()

    # Last added is outermost
    app.add_middleware(BrowserSessionMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    @app.on_event("startup")
    async def startup_event():
        """Application startup tasks"""
        logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
        logger.info(f"Environment: {settings.ENVIRONMENT}")
        await app.state.container.start()

    @app.on_event("shutdown")
    async def shutdown_event():
        """Application shutdown tasks"""
        logger.info("Shutting down application")
        await app.state.container.stop()

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "status": "running",
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy"}

    prefix = settings.API_V1_PREFIX
    app.include_router(auth.router, prefix=f"{prefix}/auth", tags=["Authentication"])
    app.include_router(intent.router, prefix=f"{prefix}/intent", tags=["Intent"])
    app.include_router(profiles.router, prefix=f"{prefix}/profiles", tags=["Profiles"])
    app.include_router(listings.router, prefix=prefix, tags=["Listings"])
    app.include_router(dashboard.router, prefix=f"{prefix}/dashboard", tags=["Dashboards"])

    return app


app = create_app()
