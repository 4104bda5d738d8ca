"""
Request middleware for the compiler API: request ids, timing headers and call logging.
"""

from .logging_middleware import LoggingMiddleware, add_logging_middleware

__all__ = ["LoggingMiddleware", "add_logging_middleware"]
