"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. Routes get
their services from fieldops.api.v1.dependencies.
"""

from fastapi import APIRouter

from fieldops.api.v1.endpoints import (
    health,
    invoices,
    roles,
    user_roles,
    users,
    work_orders,
    workflow_statuses,
    workflow_triggers,
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(user_roles.router, prefix="/users", tags=["user-roles"])
api_router.include_router(roles.router, prefix="/roles", tags=["roles"])
api_router.include_router(
    workflow_statuses.router, prefix="/workflow-statuses", tags=["workflow-statuses"]
)
api_router.include_router(
    workflow_triggers.router, prefix="/workflow-triggers", tags=["workflow-triggers"]
)
api_router.include_router(work_orders.router, prefix="/work-orders", tags=["work-orders"])
api_router.include_router(invoices.router, prefix="/invoices", tags=["invoices"])
