"""DTOs for workflow statuses, triggers and trigger execution."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from fieldops.domain.enums import StatusGroup, TriggerEvent, TriggerRunStatus


@dataclass(frozen=True)
class WorkflowStatusResult:
    id: str
    company_id: str
    name: str
    color: str
    group: StatusGroup
    sort_order: int
    is_final_step: bool = False
    description: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class WorkflowStatusCreate:
    name: str
    color: str
    group: StatusGroup
    sort_order: int
    is_final_step: bool = False
    description: str | None = None


@dataclass(frozen=True)
class WorkflowStatusUpdate:
    """Partial status update; None fields are left unchanged."""

    name: str | None = None
    color: str | None = None
    group: StatusGroup | None = None
    sort_order: int | None = None
    is_final_step: bool | None = None
    description: str | None = None


@dataclass(frozen=True)
class TriggerAction:
    """Action payload ``{type, params}``; params are passed to the executor untouched."""

    type: str
    params: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class WorkflowTriggerResult:
    id: str
    company_id: str
    name: str
    workflow_status_name: str
    trigger_event: TriggerEvent
    action: TriggerAction
    created_at: datetime | None = None
    created_by: str | None = None
    updated_at: datetime | None = None
    updated_by: str | None = None


@dataclass(frozen=True)
class WorkflowTriggerCreate:
    name: str
    workflow_status_name: str
    trigger_event: TriggerEvent
    action: TriggerAction


@dataclass(frozen=True)
class WorkflowTriggerUpdate:
    """Partial trigger update; None fields are left unchanged."""

    name: str | None = None
    workflow_status_name: str | None = None
    trigger_event: TriggerEvent | None = None
    action: TriggerAction | None = None


@dataclass(frozen=True)
class StatusChange:
    """A work order moved from old_status to new_status.

    change_id identifies the change across redelivery and replay; trigger run
    records are keyed on it.
    """

    change_id: str
    work_order_id: str
    company_id: str
    old_status: str | None
    new_status: str
    changed_by: str | None = None
    occurred_at: datetime | None = None


@dataclass(frozen=True)
class TriggerOutcome:
    """What happened to one matched trigger for one status change."""

    trigger_id: str
    action_type: str
    status: TriggerRunStatus | None
    attempts: int = 0
    result: dict[str, Any] | None = None
    error: str | None = None
    skipped_reason: str | None = None


@dataclass(frozen=True)
class DeadLetterResult:
    id: str
    company_id: str
    change: StatusChange
    status_name: str
    trigger_event: TriggerEvent
    error: str
    attempts: int
    trigger_id: str | None = None
    action_type: str | None = None
    created_at: datetime | None = None
    replayed_at: datetime | None = None
