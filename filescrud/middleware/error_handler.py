"""
Global error handler middleware untuk Files-CRUD Auth.
Menangani semua unhandled exceptions dan mengubahnya menjadi response yang konsisten.
"""

from typing import Callable, Optional, Dict, Any
import traceback
import logging
from datetime import datetime, timezone

from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from filescrud.core.config import settings
from filescrud.core.exceptions import FilesCrudException, ValidationError


logger = logging.getLogger("filescrud.error")


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Global error handler middleware.

    Features:
    - Format error response yang konsisten
    - Error logging dengan stack traces untuk 5xx
    - Menyembunyikan detail internal di production
    """

    def __init__(
        self,
        app: ASGIApp,
        debug: Optional[bool] = None,
        log_errors: bool = True
    ):
        """
        Initialize error handler middleware.

        Args:
            app: FastAPI/Starlette application
            debug: Debug mode (shows stack traces)
            log_errors: Whether to log errors
        """
        super().__init__(app)
        self.debug = debug if debug is not None else settings.DEBUG
        self.log_errors = log_errors

    def create_error_response(
        self,
        request: Request,
        status_code: int,
        message: str,
        code: str,
        details: Optional[Dict[str, Any]] = None,
        error_type: Optional[str] = None,
        stack_trace: Optional[str] = None
    ) -> JSONResponse:
        """
        Create standardized error response.

        Args:
            request: Request object
            status_code: HTTP status code
            message: Error message
            code: Machine readable error code
            details: Additional error details
            error_type: Type of error
            stack_trace: Stack trace (only in debug mode)

        Returns:
            JSON error response
        """
        error_response = {
            "error": {
                "message": message,
                "type": error_type or "Error",
                "code": code,
                "timestamp": datetime.now(timezone.utc).isoformat()
            }
        }

        if hasattr(request.state, "request_id"):
            error_response["error"]["request_id"] = request.state.request_id

        if details:
            error_response["error"]["details"] = details

        if self.debug:
            debug_info = {
                "path": request.url.path,
                "method": request.method
            }
            if stack_trace:
                debug_info["stack_trace"] = stack_trace.split("\n")
            error_response["debug"] = debug_info

        return JSONResponse(
            status_code=status_code,
            content=error_response,
            headers={"Cache-Control": "no-store"}
        )

    def log_error(self, request: Request, error: Exception, status_code: int) -> None:
        """
        Log error with context. Request body tidak pernah di-log.
        """
        if not self.log_errors:
            return

        log_entry = {
            "request_id": getattr(request.state, "request_id", "unknown"),
            "method": request.method,
            "path": request.url.path,
            "status_code": status_code,
            "error_type": type(error).__name__,
            "error_message": str(error)
        }

        if status_code >= 500:
            logger.error(log_entry, exc_info=error)
        else:
            logger.warning(log_entry)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            return await self.handle_exception(request, exc)

    async def handle_exception(self, request: Request, exc: Exception) -> Response:
        """
        Handle specific exception types.

        Args:
            request: Request object
            exc: Exception to handle

        Returns:
            Error response
        """
        stack_trace = traceback.format_exc() if self.debug else None

        if isinstance(exc, FilesCrudException):
            self.log_error(request, exc, exc.status_code)
            return self.create_error_response(
                request=request,
                status_code=exc.status_code,
                message=exc.message,
                code=exc.code,
                details=exc.details,
                error_type=type(exc).__name__,
                stack_trace=stack_trace
            )

        self.log_error(request, exc, 500)
        message = str(exc) if self.debug else "An internal server error occurred"
        return self.create_error_response(
            request=request,
            status_code=500,
            message=message,
            code=FilesCrudException.default_code,
            error_type="InternalServerError",
            stack_trace=stack_trace
        )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Render request validation errors dalam format error yang sama.
    FastAPI menangani RequestValidationError sebelum middleware melihatnya.
    """
    errors = []
    for item in exc.errors():
        errors.append({
            "field": " -> ".join(str(x) for x in item["loc"]),
            "message": item["msg"],
            "type": item["type"]
        })

    error = ValidationError(details={"validation_errors": errors})
    logger.warning(f"Request validation failed on {request.method} {request.url.path}")

    return JSONResponse(
        status_code=error.status_code,
        content={
            "error": {
                "message": error.message,
                "type": type(error).__name__,
                "code": error.code,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "details": error.details
            }
        },
        headers={"Cache-Control": "no-store"}
    )
