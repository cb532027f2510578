"""Unit tests for WorkOrderService: customer ownership and unqueued status changes."""

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from fieldops.application.dtos.work_order import WorkOrderCreate, WorkOrderUpdate
from fieldops.application.dtos.workflow import WorkflowStatusCreate
from fieldops.application.services.work_order_service import WorkOrderService
from fieldops.application.services.workflow_status_service import WorkflowStatusService
from fieldops.domain.enums import StatusGroup
from fieldops.domain.exceptions import (
    CrossTenantAccessException,
    ResourceNotFoundException,
    StoreUnavailableException,
)
from fieldops.infrastructure.firebase.collections import (
    COLLECTION_DEAD_LETTERS,
    COLLECTION_WORK_ORDERS,
)
from fieldops.infrastructure.firebase.repositories import (
    FirestoreCustomerRepository,
    FirestoreDeadLetterRepository,
    FirestoreWorkflowStatusRepository,
    FirestoreWorkflowTriggerRepository,
    FirestoreWorkOrderRepository,
)
from tests.factories import COMPANY_A, COMPANY_B, add_customer
from tests.fakes import FakeFirestoreClient


def dispatcher_mock(accepts: bool = True) -> MagicMock:
    dispatcher = MagicMock()
    dispatcher.submit.return_value = accepts
    return dispatcher


def make_service(
    store: FakeFirestoreClient, dispatcher: MagicMock, dead_letter_repo=None
) -> WorkOrderService:
    statuses = WorkflowStatusService(
        FirestoreWorkflowStatusRepository(store),
        FirestoreWorkflowTriggerRepository(store),
        FirestoreWorkOrderRepository(store),
    )
    return WorkOrderService(
        FirestoreWorkOrderRepository(store),
        statuses,
        dispatcher,
        FirestoreCustomerRepository(store),
        dead_letter_repo or FirestoreDeadLetterRepository(store),
    )


@pytest.fixture
async def company_store(store: FakeFirestoreClient) -> FakeFirestoreClient:
    repo = FirestoreWorkflowStatusRepository(store)
    await repo.create(COMPANY_A, WorkflowStatusCreate("Scheduled", "#111111", StatusGroup.ACTIVE, 10))
    await repo.create(COMPANY_A, WorkflowStatusCreate("Completed", "#222222", StatusGroup.FINAL, 20))
    add_customer(store, "cust-a", COMPANY_A)
    add_customer(store, "cust-b", COMPANY_B)
    return store


async def test_create_rejects_customer_of_other_company(
    company_store: FakeFirestoreClient,
) -> None:
    service = make_service(company_store, dispatcher_mock())
    with pytest.raises(CrossTenantAccessException):
        await service.create_work_order(COMPANY_A, WorkOrderCreate(customer_id="cust-b"), "u1")
    assert company_store.docs(COLLECTION_WORK_ORDERS) == {}


async def test_create_rejects_unknown_customer(company_store: FakeFirestoreClient) -> None:
    service = make_service(company_store, dispatcher_mock())
    with pytest.raises(ResourceNotFoundException):
        await service.create_work_order(COMPANY_A, WorkOrderCreate(customer_id="ghost"), "u1")
    assert company_store.docs(COLLECTION_WORK_ORDERS) == {}


async def test_update_rejects_customer_of_other_company(
    company_store: FakeFirestoreClient,
) -> None:
    dispatcher = dispatcher_mock()
    service = make_service(company_store, dispatcher)
    work_order = await service.create_work_order(
        COMPANY_A, WorkOrderCreate(customer_id="cust-a"), "u1"
    )
    with pytest.raises(CrossTenantAccessException):
        await service.update_work_order(
            COMPANY_A,
            work_order.id,
            WorkOrderUpdate(customer_id="cust-b", status="Completed"),
            "u1",
        )
    stored = company_store.docs(COLLECTION_WORK_ORDERS)[work_order.id]
    assert stored["customer_id"] == "cust-a"
    assert stored["status"] == "Scheduled"
    dispatcher.submit.assert_not_called()


async def test_refused_status_change_is_dead_lettered(
    company_store: FakeFirestoreClient,
) -> None:
    service = make_service(company_store, dispatcher_mock(accepts=False))
    work_order = await service.create_work_order(
        COMPANY_A, WorkOrderCreate(customer_id="cust-a"), "u1"
    )

    updated = await service.update_work_order(
        COMPANY_A, work_order.id, WorkOrderUpdate(status="Completed"), "u1"
    )

    assert updated.status == "Completed"
    [letter] = await FirestoreDeadLetterRepository(company_store).list_by_company(COMPANY_A)
    assert letter.trigger_id is None
    assert letter.action_type is None
    assert letter.attempts == 0
    assert letter.status_name == "Completed"
    assert letter.change.work_order_id == work_order.id
    assert letter.change.old_status == "Scheduled"
    assert letter.replayed_at is None


async def test_accepted_status_change_writes_no_dead_letter(
    company_store: FakeFirestoreClient,
) -> None:
    dispatcher = dispatcher_mock()
    service = make_service(company_store, dispatcher)
    work_order = await service.create_work_order(COMPANY_A, WorkOrderCreate(), "u1")
    await service.update_work_order(
        COMPANY_A, work_order.id, WorkOrderUpdate(status="Completed"), "u1"
    )
    [change] = [call.args[0] for call in dispatcher.submit.call_args_list]
    assert change.new_status == "Completed"
    assert company_store.docs(COLLECTION_DEAD_LETTERS) == {}


async def test_dead_letter_outage_does_not_fail_update(
    company_store: FakeFirestoreClient, caplog: pytest.LogCaptureFixture
) -> None:
    dead_letters = MagicMock()
    dead_letters.create = AsyncMock(side_effect=StoreUnavailableException("down"))
    service = make_service(company_store, dispatcher_mock(accepts=False), dead_letters)
    work_order = await service.create_work_order(COMPANY_A, WorkOrderCreate(), "u1")

    with caplog.at_level(logging.ERROR):
        updated = await service.update_work_order(
            COMPANY_A, work_order.id, WorkOrderUpdate(status="Completed"), "u1"
        )

    assert updated.status == "Completed"
    dead_letters.create.assert_awaited_once()
    assert "Could not dead-letter" in caplog.text
