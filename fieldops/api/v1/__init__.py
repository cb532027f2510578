"""API v1: aggregated router mounted at /api/v1."""

from fieldops.api.v1.router import api_router

__all__ = ["api_router"]
