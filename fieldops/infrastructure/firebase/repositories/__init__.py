"""Firestore-backed repository implementations of the application ports."""

from fieldops.infrastructure.firebase.repositories.customer_repo_firestore import (
    FirestoreCustomerRepository,
)
from fieldops.infrastructure.firebase.repositories.dead_letter_repo_firestore import (
    FirestoreDeadLetterRepository,
)
from fieldops.infrastructure.firebase.repositories.invoice_repo_firestore import (
    FirestoreInvoiceRepository,
)
from fieldops.infrastructure.firebase.repositories.notification_repo_firestore import (
    FirestoreNotificationRepository,
)
from fieldops.infrastructure.firebase.repositories.profile_repo_firestore import (
    FirestoreProfileRepository,
)
from fieldops.infrastructure.firebase.repositories.role_repo_firestore import (
    FirestoreRoleRepository,
)
from fieldops.infrastructure.firebase.repositories.trigger_run_repo_firestore import (
    FirestoreTriggerRunRepository,
)
from fieldops.infrastructure.firebase.repositories.user_role_repo_firestore import (
    FirestoreUserRoleRepository,
)
from fieldops.infrastructure.firebase.repositories.work_order_repo_firestore import (
    FirestoreWorkOrderRepository,
)
from fieldops.infrastructure.firebase.repositories.workflow_status_repo_firestore import (
    FirestoreWorkflowStatusRepository,
)
from fieldops.infrastructure.firebase.repositories.workflow_trigger_repo_firestore import (
    FirestoreWorkflowTriggerRepository,
)

__all__ = [
    "FirestoreCustomerRepository",
    "FirestoreDeadLetterRepository",
    "FirestoreInvoiceRepository",
    "FirestoreNotificationRepository",
    "FirestoreProfileRepository",
    "FirestoreRoleRepository",
    "FirestoreTriggerRunRepository",
    "FirestoreUserRoleRepository",
    "FirestoreWorkOrderRepository",
    "FirestoreWorkflowStatusRepository",
    "FirestoreWorkflowTriggerRepository",
]
