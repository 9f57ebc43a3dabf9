"""Core application middleware utilities.

Imported in app_factory to compose the middleware stack in the intended order.
"""

from .headers import cors_headers, cors_middleware
from .logging_middleware import LoggingMiddleware

__all__ = ["LoggingMiddleware", "cors_headers", "cors_middleware"]
