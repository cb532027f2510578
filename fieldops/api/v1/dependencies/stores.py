"""Document store and repository dependencies (composition root).

Repositories are cheap wrappers around the shared Firestore client, built per
request. Tests override ``get_firestore`` with an in-memory client.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from fieldops.application.interfaces.services import IStatusChangeDispatcher
from fieldops.domain.exceptions import StoreUnavailableException
from fieldops.infrastructure.exceptions import StoreNotConfiguredError
from fieldops.infrastructure.firebase._rest_client import FirestoreRESTClient
from fieldops.infrastructure.firebase.client import get_firestore_client
from fieldops.infrastructure.firebase.repositories import (
    FirestoreCustomerRepository,
    FirestoreDeadLetterRepository,
    FirestoreInvoiceRepository,
    FirestoreProfileRepository,
    FirestoreRoleRepository,
    FirestoreUserRoleRepository,
    FirestoreWorkflowStatusRepository,
    FirestoreWorkflowTriggerRepository,
    FirestoreWorkOrderRepository,
)


def get_firestore() -> FirestoreRESTClient:
    """Shared Firestore client; 500 STORE_UNAVAILABLE when credentials are missing."""
    client = get_firestore_client()
    if client is None:
        raise StoreNotConfiguredError()
    return client


Store = Annotated[FirestoreRESTClient, Depends(get_firestore)]


def get_profile_repo(client: Store) -> FirestoreProfileRepository:
    return FirestoreProfileRepository(client)


def get_role_repo(client: Store) -> FirestoreRoleRepository:
    return FirestoreRoleRepository(client)


def get_user_role_repo(client: Store) -> FirestoreUserRoleRepository:
    return FirestoreUserRoleRepository(client)


def get_workflow_status_repo(client: Store) -> FirestoreWorkflowStatusRepository:
    return FirestoreWorkflowStatusRepository(client)


def get_workflow_trigger_repo(client: Store) -> FirestoreWorkflowTriggerRepository:
    return FirestoreWorkflowTriggerRepository(client)


def get_work_order_repo(client: Store) -> FirestoreWorkOrderRepository:
    return FirestoreWorkOrderRepository(client)


def get_customer_repo(client: Store) -> FirestoreCustomerRepository:
    return FirestoreCustomerRepository(client)


def get_invoice_repo(client: Store) -> FirestoreInvoiceRepository:
    return FirestoreInvoiceRepository(client)


def get_dead_letter_repo(client: Store) -> FirestoreDeadLetterRepository:
    return FirestoreDeadLetterRepository(client)


def get_trigger_dispatcher(request: Request) -> IStatusChangeDispatcher:
    """Dispatcher started in the app lifespan."""
    dispatcher = getattr(request.app.state, "trigger_dispatcher", None)
    if dispatcher is None:
        raise StoreUnavailableException(
            "Workflow trigger dispatcher is not running", operation="dispatch"
        )
    return dispatcher
