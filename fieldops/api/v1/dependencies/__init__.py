"""Presentation-layer dependency injection (composition root).

Routes depend only on these providers; repositories and services are built
here from the shared Firestore client and the lifespan-managed dispatcher.
"""

from .auth import (
    get_permission_evaluator,
    get_request_authorizer,
    get_token_verifier,
    require_permission,
)
from .services import (
    get_dead_letter_service,
    get_role_service,
    get_work_order_service,
    get_workflow_status_service,
    get_workflow_trigger_service,
)
from .stores import (
    get_firestore,
    get_invoice_repo,
    get_trigger_dispatcher,
)

__all__ = [
    "get_dead_letter_service",
    "get_firestore",
    "get_invoice_repo",
    "get_permission_evaluator",
    "get_request_authorizer",
    "get_role_service",
    "get_token_verifier",
    "get_trigger_dispatcher",
    "get_work_order_service",
    "get_workflow_status_service",
    "get_workflow_trigger_service",
    "require_permission",
]
