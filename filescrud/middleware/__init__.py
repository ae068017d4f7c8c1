"""
Middleware package untuk Files-CRUD Auth.
Berisi middleware untuk error handling dan request logging.
"""

from filescrud.middleware.logging import LoggingMiddleware
from filescrud.middleware.error_handler import ErrorHandlerMiddleware

__all__ = [
    "LoggingMiddleware",
    "ErrorHandlerMiddleware"
]
