"""Middleware package."""

from authz_service.api.middleware.request_id import RequestIdMiddleware, get_request_id
from authz_service.api.middleware.logging import LoggingMiddleware

__all__ = [
    "RequestIdMiddleware",
    "get_request_id",
    "LoggingMiddleware",
]
