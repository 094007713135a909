"""Middleware package."""

from rbac_api.middleware.request_id import RequestIDMiddleware

__all__ = [
    "RequestIDMiddleware",
]
