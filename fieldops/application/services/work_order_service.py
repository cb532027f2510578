"""Work-order slice: create, read and update, with status writes driving automation.

A status change is handed to the trigger dispatcher and never awaited, so a
slow or failing workflow action cannot delay or fail the update itself. A
change the dispatcher refuses is written as a dead letter for later replay.
"""

from __future__ import annotations

from typing import Any

from fieldops.application.dtos.work_order import (
    WorkOrderCreate,
    WorkOrderResult,
    WorkOrderUpdate,
)
from fieldops.application.dtos.workflow import StatusChange
from fieldops.application.interfaces.repositories import (
    ICustomerRepository,
    IDeadLetterRepository,
    IWorkOrderRepository,
)
from fieldops.application.interfaces.services import IStatusChangeDispatcher
from fieldops.application.services.request_authorizer import ensure_tenant_access
from fieldops.application.services.workflow_status_service import WorkflowStatusService
from fieldops.domain.enums import TriggerEvent
from fieldops.domain.exceptions import ResourceNotFoundException
from fieldops.shared.telemetry.logging import get_logger
from fieldops.shared.utils.datetime import utc_now
from fieldops.shared.utils.generators import generate_cuid

logger = get_logger(__name__)

NOT_QUEUED_ERROR = "not queued: trigger dispatcher unavailable"


class WorkOrderService:
    def __init__(
        self,
        work_order_repo: IWorkOrderRepository,
        status_service: WorkflowStatusService,
        dispatcher: IStatusChangeDispatcher,
        customer_repo: ICustomerRepository,
        dead_letter_repo: IDeadLetterRepository,
    ) -> None:
        self._work_orders = work_order_repo
        self._statuses = status_service
        self._dispatcher = dispatcher
        self._customers = customer_repo
        self._dead_letters = dead_letter_repo

    async def get_work_order(self, tenant_id: str, work_order_id: str) -> WorkOrderResult:
        work_order = await self._work_orders.get_by_id(work_order_id)
        if work_order is None:
            raise ResourceNotFoundException("work_order", work_order_id)
        ensure_tenant_access(tenant_id, work_order.company_id)
        return work_order

    async def _require_customer(self, tenant_id: str, customer_id: str) -> None:
        """The customer must exist and belong to the caller's company."""
        customer = await self._customers.get_by_id(customer_id)
        if customer is None:
            raise ResourceNotFoundException("customer", customer_id)
        ensure_tenant_access(tenant_id, customer.company_id)

    async def create_work_order(
        self, tenant_id: str, data: WorkOrderCreate, created_by: str | None
    ) -> WorkOrderResult:
        if data.customer_id is not None:
            await self._require_customer(tenant_id, data.customer_id)
        if data.status is not None:
            status = (await self._statuses.require_status_name(tenant_id, data.status)).name
        else:
            status = (await self._statuses.default_status(tenant_id)).name
        work_order = await self._work_orders.create(tenant_id, data, status, created_by)
        logger.info("Created work order %s in status %s", work_order.id, status)
        return work_order

    async def update_work_order(
        self,
        tenant_id: str,
        work_order_id: str,
        data: WorkOrderUpdate,
        updated_by: str | None,
    ) -> WorkOrderResult:
        current = await self.get_work_order(tenant_id, work_order_id)
        fields: dict[str, Any] = {
            k: v
            for k, v in {
                "customer_id": data.customer_id,
                "location_id": data.location_id,
                "summary": data.summary,
                "assigned_technician_id": data.assigned_technician_id,
            }.items()
            if v is not None
        }
        if data.customer_id is not None and data.customer_id != current.customer_id:
            await self._require_customer(tenant_id, data.customer_id)
        status_changed = data.status is not None and data.status != current.status
        if status_changed:
            await self._statuses.require_status_name(tenant_id, data.status)
            fields["status"] = data.status
        if not fields:
            return current
        fields["updated_by"] = updated_by
        updated = await self._work_orders.update(work_order_id, fields)
        if updated is None:
            raise ResourceNotFoundException("work_order", work_order_id)

        if status_changed:
            change = StatusChange(
                change_id=generate_cuid(),
                work_order_id=work_order_id,
                company_id=current.company_id,
                old_status=current.status or None,
                new_status=updated.status,
                changed_by=updated_by,
                occurred_at=utc_now(),
            )
            if not self._dispatcher.submit(change):
                await self._dead_letter_unqueued(change)
        return updated

    async def _dead_letter_unqueued(self, change: StatusChange) -> None:
        """Park a change the dispatcher refused so it can be replayed.

        The status write has already happened, so a store error here is logged
        rather than failing the request.
        """
        logger.error(
            "Status change %s for work order %s was not queued for automation",
            change.change_id,
            change.work_order_id,
        )
        try:
            letter = await self._dead_letters.create(
                change, change.new_status, TriggerEvent.ON_ENTER, NOT_QUEUED_ERROR, 0, None
            )
        except Exception:
            logger.exception(
                "Could not dead-letter unqueued status change %s", change.change_id
            )
            return
        logger.warning(
            "Unqueued status change %s parked as dead letter %s", change.change_id, letter.id
        )
