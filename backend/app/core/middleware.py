"""Custom middleware for FastAPI application"""

import time
import uuid
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from backend.app.core.config import settings
from backend.app.core.logging import get_logger, request_id_var, session_id_var

logger = get_logger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Middleware to add unique request ID to each request"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        request.state.request_id = request_id
        token = request_id_var.set(request_id)

        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers["X-Request-ID"] = request_id
        return response


class BrowserSessionMiddleware(BaseHTTPMiddleware):
    """Middleware that gives every browser a stable session identifier

    The identifier keys the pending role intent and the observed auth state,
    so it has to survive page reloads.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        session_id = request.cookies.get(settings.SESSION_COOKIE_NAME)
        issued = session_id is None
        if issued:
            session_id = uuid.uuid4().hex

        request.state.session_id = session_id
        token = session_id_var.set(session_id)

        try:
            response = await call_next(request)
        finally:
            session_id_var.reset(token)

        if issued:
            response.set_cookie(
                settings.SESSION_COOKIE_NAME,
                session_id,
                httponly=True,
                samesite="lax",
                secure=settings.COOKIE_SECURE,
            )
        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log all requests and responses"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = getattr(request.state, "request_id", "unknown")

        logger.info(
            "Request started",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
            }
        )

        start_time = time.time()

        try:
            response = await call_next(request)

            duration = time.time() - start_time
            logger.info(
                "Request completed",
                extra={
                    "request_id": request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": round(duration * 1000, 2),
                }
            )

            return response

        except Exception as e:
            duration = time.time() - start_time
            logger.error(
                f"Request failed: {str(e)}",
                extra={
                    "request_id": request_id,
                    "method": request.method,
                    "path": request.url.path,
                    "duration_ms": round(duration * 1000, 2),
                },
                exc_info=True
            )

            raise
