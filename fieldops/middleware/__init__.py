"""HTTP middleware (raw ASGI). Applied in fieldops.main."""

from fieldops.middleware.request_id import RequestIDMiddleware

__all__ = ["RequestIDMiddleware"]
