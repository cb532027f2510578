"""Unit tests for WorkflowStatusService and WorkflowTriggerService."""

from datetime import UTC, datetime

import pytest

from fieldops.application.dtos.workflow import (
    TriggerAction,
    WorkflowStatusCreate,
    WorkflowStatusResult,
    WorkflowStatusUpdate,
    WorkflowTriggerCreate,
    WorkflowTriggerUpdate,
)
from fieldops.application.services.workflow_status_service import (
    WorkflowStatusService,
    sort_statuses,
)
from fieldops.application.services.workflow_trigger_service import WorkflowTriggerService
from fieldops.domain.enums import StatusGroup, TriggerEvent
from fieldops.domain.exceptions import (
    ConflictException,
    CrossTenantAccessException,
    ResourceNotFoundException,
    StatusInUseException,
    UnknownWorkflowStatusException,
    ValidationException,
)
from fieldops.infrastructure.firebase.collections import COLLECTION_WORK_ORDERS
from fieldops.infrastructure.firebase.repositories import (
    FirestoreWorkflowStatusRepository,
    FirestoreWorkflowTriggerRepository,
    FirestoreWorkOrderRepository,
)
from tests.factories import COMPANY_A, COMPANY_B
from tests.fakes import FakeFirestoreClient


def status_service(store: FakeFirestoreClient) -> WorkflowStatusService:
    return WorkflowStatusService(
        FirestoreWorkflowStatusRepository(store),
        FirestoreWorkflowTriggerRepository(store),
        FirestoreWorkOrderRepository(store),
    )


def trigger_service(store: FakeFirestoreClient) -> WorkflowTriggerService:
    return WorkflowTriggerService(FirestoreWorkflowTriggerRepository(store), status_service(store))


def new_status(name: str, sort_order: int = 10) -> WorkflowStatusCreate:
    return WorkflowStatusCreate(name, "#123456", StatusGroup.ACTIVE, sort_order)


def on_enter(status_name: str, action_type: str = "notify_user") -> WorkflowTriggerCreate:
    return WorkflowTriggerCreate(
        name=f"On {status_name}",
        workflow_status_name=status_name,
        trigger_event=TriggerEvent.ON_ENTER,
        action=TriggerAction(type=action_type),
    )


def test_sort_statuses_by_sort_order_then_creation() -> None:
    def s(id_: str, order: int, minute: int) -> WorkflowStatusResult:
        return WorkflowStatusResult(
            id=id_,
            company_id=COMPANY_A,
            name=id_,
            color="#000000",
            group=StatusGroup.ACTIVE,
            sort_order=order,
            created_at=datetime(2026, 1, 1, 0, minute, tzinfo=UTC),
        )

    ordered = sort_statuses([s("c", 20, 0), s("b", 10, 5), s("a", 10, 1)])
    assert [x.id for x in ordered] == ["a", "b", "c"]


async def test_list_statuses_sorted(store: FakeFirestoreClient) -> None:
    service = status_service(store)
    await service.create_status(COMPANY_A, new_status("Done", 30))
    await service.create_status(COMPANY_A, new_status("Open", 10))
    await service.create_status(COMPANY_B, new_status("Elsewhere", 1))
    assert [s.name for s in await service.list_statuses(COMPANY_A)] == ["Open", "Done"]
    assert (await service.default_status(COMPANY_A)).name == "Open"


async def test_default_status_without_statuses(store: FakeFirestoreClient) -> None:
    with pytest.raises(UnknownWorkflowStatusException):
        await status_service(store).default_status(COMPANY_A)


async def test_duplicate_name_conflicts_within_tenant_only(store: FakeFirestoreClient) -> None:
    service = status_service(store)
    await service.create_status(COMPANY_A, new_status("Open"))
    with pytest.raises(ConflictException):
        await service.create_status(COMPANY_A, new_status("Open"))
    await service.create_status(COMPANY_B, new_status("Open"))


async def test_get_status_of_other_tenant_is_forbidden(store: FakeFirestoreClient) -> None:
    service = status_service(store)
    status = await service.create_status(COMPANY_B, new_status("Open"))
    with pytest.raises(CrossTenantAccessException):
        await service.get_status(COMPANY_A, status.id)
    with pytest.raises(ResourceNotFoundException):
        await service.get_status(COMPANY_A, "missing")


async def test_update_color_only(store: FakeFirestoreClient) -> None:
    service = status_service(store)
    status = await service.create_status(COMPANY_A, new_status("Open"))
    updated = await service.update_status(
        COMPANY_A, status.id, WorkflowStatusUpdate(color="#abcdef")
    )
    assert updated.color == "#abcdef"
    assert updated.name == "Open"


async def test_delete_status_referenced_by_trigger_is_rejected(
    store: FakeFirestoreClient,
) -> None:
    statuses = status_service(store)
    status = await statuses.create_status(COMPANY_A, new_status("Open"))
    trigger = await trigger_service(store).create_trigger(COMPANY_A, on_enter("Open"), "u1")
    with pytest.raises(StatusInUseException) as exc_info:
        await statuses.delete_status(COMPANY_A, status.id)
    assert exc_info.value.details["trigger_ids"] == [trigger.id]


async def test_rename_status_in_use_by_work_order_is_rejected(
    store: FakeFirestoreClient,
) -> None:
    statuses = status_service(store)
    status = await statuses.create_status(COMPANY_A, new_status("Open"))
    store.put(COLLECTION_WORK_ORDERS, "wo1", {"company_id": COMPANY_A, "status": "Open"})
    with pytest.raises(StatusInUseException) as exc_info:
        await statuses.update_status(COMPANY_A, status.id, WorkflowStatusUpdate(name="Opened"))
    assert exc_info.value.details["work_order_count"] == 1


async def test_delete_unreferenced_status(store: FakeFirestoreClient) -> None:
    statuses = status_service(store)
    status = await statuses.create_status(COMPANY_A, new_status("Open"))
    await statuses.delete_status(COMPANY_A, status.id)
    assert await statuses.list_statuses(COMPANY_A) == []


async def test_create_trigger_for_unknown_status(store: FakeFirestoreClient) -> None:
    with pytest.raises(UnknownWorkflowStatusException):
        await trigger_service(store).create_trigger(COMPANY_A, on_enter("Nope"), "u1")


async def test_create_trigger_with_unsupported_action(store: FakeFirestoreClient) -> None:
    await status_service(store).create_status(COMPANY_A, new_status("Open"))
    with pytest.raises(ValidationException):
        await trigger_service(store).create_trigger(
            COMPANY_A, on_enter("Open", action_type="launch_rocket"), "u1"
        )


async def test_create_and_list_triggers(store: FakeFirestoreClient) -> None:
    statuses = status_service(store)
    await statuses.create_status(COMPANY_A, new_status("Open"))
    await statuses.create_status(COMPANY_A, new_status("Done", 20))
    service = trigger_service(store)
    created = await service.create_trigger(COMPANY_A, on_enter("Open"), "u1")
    await service.create_trigger(COMPANY_A, on_enter("Done"), "u1")

    assert created.created_by == "u1"
    assert created.trigger_event == TriggerEvent.ON_ENTER
    assert len(await service.list_triggers(COMPANY_A)) == 2
    assert [t.id for t in await service.list_triggers(COMPANY_A, "Open")] == [created.id]
    assert await service.list_triggers(COMPANY_B) == []


async def test_update_trigger_checks_new_status_name(store: FakeFirestoreClient) -> None:
    await status_service(store).create_status(COMPANY_A, new_status("Open"))
    service = trigger_service(store)
    trigger = await service.create_trigger(COMPANY_A, on_enter("Open"), "u1")
    with pytest.raises(UnknownWorkflowStatusException):
        await service.update_trigger(
            COMPANY_A, trigger.id, WorkflowTriggerUpdate(workflow_status_name="Nope"), "u2"
        )
    updated = await service.update_trigger(
        COMPANY_A, trigger.id, WorkflowTriggerUpdate(trigger_event=TriggerEvent.ON_EXIT), "u2"
    )
    assert updated.trigger_event == TriggerEvent.ON_EXIT
    assert updated.updated_by == "u2"


async def test_trigger_of_other_tenant_is_forbidden(store: FakeFirestoreClient) -> None:
    await status_service(store).create_status(COMPANY_B, new_status("Open"))
    service = trigger_service(store)
    trigger = await service.create_trigger(COMPANY_B, on_enter("Open"), "u1")
    with pytest.raises(CrossTenantAccessException):
        await service.delete_trigger(COMPANY_A, trigger.id)
