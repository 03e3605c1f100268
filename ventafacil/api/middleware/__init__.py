"""API middleware."""

from ventafacil.api.middleware.error_handler import ErrorHandlerMiddleware
from ventafacil.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware", "ErrorHandlerMiddleware"]
