"""Workflow status, trigger and dead-letter API schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from fieldops.application.dtos.workflow import TriggerAction
from fieldops.domain.enums import StatusGroup, TriggerEvent


class WorkflowStatusCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    color: str = Field(default="#888888", pattern=r"^#[0-9a-fA-F]{6}$")
    group: StatusGroup = StatusGroup.ACTIVE
    sort_order: int = 0
    is_final_step: bool = False
    description: str | None = Field(default=None, max_length=500)


class WorkflowStatusUpdateRequest(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    color: str | None = Field(default=None, pattern=r"^#[0-9a-fA-F]{6}$")
    group: StatusGroup | None = None
    sort_order: int | None = None
    is_final_step: bool | None = None
    description: str | None = Field(default=None, max_length=500)


class WorkflowStatusResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    company_id: str
    name: str
    color: str
    group: StatusGroup
    sort_order: int
    is_final_step: bool
    description: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class TriggerActionModel(BaseModel):
    """Action payload; ``params`` is passed to the executor untouched."""

    model_config = ConfigDict(from_attributes=True)

    type: str = Field(..., min_length=1, max_length=64)
    params: dict[str, Any] = Field(default_factory=dict)

    def to_dto(self) -> TriggerAction:
        return TriggerAction(type=self.type, params=dict(self.params))


class WorkflowTriggerCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    workflow_status_name: str = Field(..., min_length=1, max_length=100)
    trigger_event: TriggerEvent
    action: TriggerActionModel


class WorkflowTriggerUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    workflow_status_name: str | None = Field(default=None, min_length=1, max_length=100)
    trigger_event: TriggerEvent | None = None
    action: TriggerActionModel | None = None


class WorkflowTriggerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    company_id: str
    name: str
    workflow_status_name: str
    trigger_event: TriggerEvent
    action: TriggerActionModel
    created_at: datetime | None = None
    created_by: str | None = None
    updated_at: datetime | None = None
    updated_by: str | None = None


class StatusChangeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    change_id: str
    work_order_id: str
    company_id: str
    old_status: str | None
    new_status: str
    changed_by: str | None = None
    occurred_at: datetime | None = None


class DeadLetterResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    company_id: str
    change: StatusChangeResponse
    status_name: str
    trigger_event: TriggerEvent
    error: str
    attempts: int
    trigger_id: str | None = None
    action_type: str | None = None
    created_at: datetime | None = None
    replayed_at: datetime | None = None
