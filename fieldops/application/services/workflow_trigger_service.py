"""Workflow trigger configuration: CRUD with status-name validation."""

from __future__ import annotations

from typing import Any

from fieldops.application.dtos.workflow import (
    TriggerAction,
    WorkflowTriggerCreate,
    WorkflowTriggerResult,
    WorkflowTriggerUpdate,
)
from fieldops.application.interfaces.repositories import IWorkflowTriggerRepository
from fieldops.application.services.request_authorizer import ensure_tenant_access
from fieldops.application.services.workflow_status_service import WorkflowStatusService
from fieldops.domain.enums import TriggerActionType
from fieldops.domain.exceptions import ResourceNotFoundException, ValidationException
from fieldops.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


def validate_action(action: TriggerAction) -> None:
    if action.type not in TriggerActionType.values():
        raise ValidationException(
            f"Unsupported action type: {action.type!r}", field="action.type"
        )


class WorkflowTriggerService:
    def __init__(
        self,
        trigger_repo: IWorkflowTriggerRepository,
        status_service: WorkflowStatusService,
    ) -> None:
        self._triggers = trigger_repo
        self._statuses = status_service

    async def list_triggers(
        self, tenant_id: str, status_name: str | None = None
    ) -> list[WorkflowTriggerResult]:
        triggers = await self._triggers.list_by_company(tenant_id, status_name=status_name)
        return sorted(triggers, key=lambda t: t.name.lower())

    async def get_trigger(self, tenant_id: str, trigger_id: str) -> WorkflowTriggerResult:
        trigger = await self._triggers.get_by_id(trigger_id)
        if trigger is None:
            raise ResourceNotFoundException("workflow_trigger", trigger_id)
        ensure_tenant_access(tenant_id, trigger.company_id)
        return trigger

    async def create_trigger(
        self, tenant_id: str, data: WorkflowTriggerCreate, created_by: str | None
    ) -> WorkflowTriggerResult:
        validate_action(data.action)
        await self._statuses.require_status_name(tenant_id, data.workflow_status_name)
        trigger = await self._triggers.create(tenant_id, data, created_by)
        logger.info(
            "Created trigger %s: %s %s -> %s",
            trigger.id,
            trigger.trigger_event.value,
            trigger.workflow_status_name,
            trigger.action.type,
        )
        return trigger

    async def update_trigger(
        self,
        tenant_id: str,
        trigger_id: str,
        data: WorkflowTriggerUpdate,
        updated_by: str | None,
    ) -> WorkflowTriggerResult:
        trigger = await self.get_trigger(tenant_id, trigger_id)
        fields: dict[str, Any] = {}
        if data.name is not None:
            fields["name"] = data.name
        if data.trigger_event is not None:
            fields["trigger_event"] = data.trigger_event
        if data.action is not None:
            validate_action(data.action)
            fields["action"] = data.action
        if (
            data.workflow_status_name is not None
            and data.workflow_status_name != trigger.workflow_status_name
        ):
            await self._statuses.require_status_name(tenant_id, data.workflow_status_name)
            fields["workflow_status_name"] = data.workflow_status_name
        if not fields:
            return trigger
        fields["updated_by"] = updated_by
        updated = await self._triggers.update(trigger_id, fields)
        if updated is None:
            raise ResourceNotFoundException("workflow_trigger", trigger_id)
        return updated

    async def delete_trigger(self, tenant_id: str, trigger_id: str) -> None:
        await self.get_trigger(tenant_id, trigger_id)
        await self._triggers.delete(trigger_id)
        logger.info("Deleted trigger %s for %s", trigger_id, tenant_id)
