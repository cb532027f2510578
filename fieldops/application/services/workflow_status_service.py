"""Workflow status registry: a tenant's ordered set of named work-order statuses.

Statuses are referenced by name from triggers and work orders, so names are
unique per tenant and a referenced status can be neither renamed nor deleted.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from fieldops.application.dtos.workflow import (
    WorkflowStatusCreate,
    WorkflowStatusResult,
    WorkflowStatusUpdate,
)
from fieldops.application.interfaces.repositories import (
    IWorkflowStatusRepository,
    IWorkflowTriggerRepository,
    IWorkOrderRepository,
)
from fieldops.application.services.request_authorizer import ensure_tenant_access
from fieldops.domain.exceptions import (
    ConflictException,
    ResourceNotFoundException,
    StatusInUseException,
    UnknownWorkflowStatusException,
)
from fieldops.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_EPOCH = datetime.min.replace(tzinfo=UTC)


def sort_statuses(statuses: list[WorkflowStatusResult]) -> list[WorkflowStatusResult]:
    """Ascending sort_order; ties keep creation order."""
    return sorted(statuses, key=lambda s: (s.sort_order, s.created_at or _EPOCH))


class WorkflowStatusService:
    def __init__(
        self,
        status_repo: IWorkflowStatusRepository,
        trigger_repo: IWorkflowTriggerRepository,
        work_order_repo: IWorkOrderRepository,
    ) -> None:
        self._statuses = status_repo
        self._triggers = trigger_repo
        self._work_orders = work_order_repo

    async def list_statuses(self, tenant_id: str) -> list[WorkflowStatusResult]:
        return sort_statuses(await self._statuses.list_by_company(tenant_id))

    async def get_status(self, tenant_id: str, status_id: str) -> WorkflowStatusResult:
        status = await self._statuses.get_by_id(status_id)
        if status is None:
            raise ResourceNotFoundException("workflow_status", status_id)
        ensure_tenant_access(tenant_id, status.company_id)
        return status

    async def require_status_name(self, tenant_id: str, name: str) -> WorkflowStatusResult:
        """Return the tenant's status called ``name`` or raise UnknownWorkflowStatusException."""
        status = await self._statuses.get_by_name(tenant_id, name)
        if status is None:
            raise UnknownWorkflowStatusException(name, tenant_id)
        return status

    async def default_status(self, tenant_id: str) -> WorkflowStatusResult:
        """First status in display order (new work orders start here)."""
        statuses = await self.list_statuses(tenant_id)
        if not statuses:
            raise UnknownWorkflowStatusException("<default>", tenant_id)
        return statuses[0]

    async def create_status(
        self, tenant_id: str, data: WorkflowStatusCreate
    ) -> WorkflowStatusResult:
        if await self._statuses.get_by_name(tenant_id, data.name) is not None:
            raise ConflictException(
                f"Workflow status '{data.name}' already exists", name=data.name
            )
        status = await self._statuses.create(tenant_id, data)
        logger.info("Created workflow status %s (%s) for %s", status.id, status.name, tenant_id)
        return status

    async def update_status(
        self, tenant_id: str, status_id: str, data: WorkflowStatusUpdate
    ) -> WorkflowStatusResult:
        status = await self.get_status(tenant_id, status_id)
        fields: dict[str, Any] = {
            k: v
            for k, v in {
                "color": data.color,
                "description": data.description,
                "group": data.group,
                "sort_order": data.sort_order,
                "is_final_step": data.is_final_step,
            }.items()
            if v is not None
        }
        if data.name is not None and data.name != status.name:
            if await self._statuses.get_by_name(tenant_id, data.name) is not None:
                raise ConflictException(
                    f"Workflow status '{data.name}' already exists", name=data.name
                )
            await self._ensure_unreferenced(tenant_id, status.name)
            fields["name"] = data.name
        if not fields:
            return status
        updated = await self._statuses.update(status_id, fields)
        if updated is None:
            raise ResourceNotFoundException("workflow_status", status_id)
        return updated

    async def delete_status(self, tenant_id: str, status_id: str) -> None:
        status = await self.get_status(tenant_id, status_id)
        await self._ensure_unreferenced(tenant_id, status.name)
        await self._statuses.delete(status_id)
        logger.info("Deleted workflow status %s (%s) for %s", status_id, status.name, tenant_id)

    async def _ensure_unreferenced(self, tenant_id: str, name: str) -> None:
        triggers = await self._triggers.list_by_company(tenant_id, status_name=name)
        work_order_count = await self._work_orders.count_with_status(tenant_id, name)
        if triggers or work_order_count:
            raise StatusInUseException(name, [t.id for t in triggers], work_order_count)
