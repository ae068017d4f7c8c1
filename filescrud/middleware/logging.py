"""
Request logging middleware untuk Files-CRUD Auth.
Logs setiap HTTP request dengan request ID dan durasi.
"""

from typing import Callable, Optional, List
import time
import uuid
import logging

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp


logger = logging.getLogger("filescrud.access")


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Request logging middleware.

    Request body tidak di-log karena berisi password.
    """

    def __init__(self, app: ASGIApp, exclude_paths: Optional[List[str]] = None):
        """
        Initialize logging middleware.

        Args:
            app: FastAPI/Starlette application
            exclude_paths: Paths to exclude from logging
        """
        super().__init__(app)
        self.exclude_paths = exclude_paths or ["/health"]

    def should_log_path(self, path: str) -> bool:
        return not any(path.startswith(excluded) for excluded in self.exclude_paths)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Process request with logging.

        Args:
            request: Incoming request
            call_next: Next middleware/endpoint

        Returns:
            Response
        """
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        if not self.should_log_path(request.url.path):
            return await call_next(request)

        start_time = time.time()
        response = await call_next(request)
        duration_ms = (time.time() - start_time) * 1000
        response.headers["X-Request-ID"] = request_id

        client_ip = request.client.host if request.client else "unknown"
        line = (
            f"{request_id} {client_ip} \"{request.method} {request.url.path}\" "
            f"{response.status_code} {duration_ms:.2f}ms"
        )
        if response.status_code >= 500:
            logger.error(line)
        elif response.status_code >= 400:
            logger.warning(line)
        else:
            logger.info(line)

        return response
