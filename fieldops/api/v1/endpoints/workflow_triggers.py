"""Workflow triggers API: trigger configuration plus dead-letter inspection and replay."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from fieldops.api.v1.dependencies import (
    get_dead_letter_service,
    get_workflow_trigger_service,
    require_permission,
)
from fieldops.application.dtos.identity import AuthResult
from fieldops.application.dtos.workflow import WorkflowTriggerCreate, WorkflowTriggerUpdate
from fieldops.application.services.dead_letter_service import DeadLetterService
from fieldops.application.services.request_authorizer import require_tenant
from fieldops.application.services.workflow_trigger_service import WorkflowTriggerService
from fieldops.core.limiter import limit_writes
from fieldops.schemas.workflow import (
    DeadLetterResponse,
    WorkflowTriggerCreateRequest,
    WorkflowTriggerResponse,
    WorkflowTriggerUpdateRequest,
)

router = APIRouter()

TriggerService = Annotated[WorkflowTriggerService, Depends(get_workflow_trigger_service)]


@router.get("", response_model=list[WorkflowTriggerResponse])
async def list_workflow_triggers(
    auth: Annotated[AuthResult, Depends(require_permission("automation:view"))],
    trigger_service: TriggerService,
    status_name: Annotated[str | None, Query(description="Only triggers for this status")] = None,
):
    triggers = await trigger_service.list_triggers(require_tenant(auth), status_name)
    return [WorkflowTriggerResponse.model_validate(t) for t in triggers]


@router.post("", response_model=WorkflowTriggerResponse, status_code=201)
@limit_writes
async def create_workflow_trigger(
    request: Request,
    body: WorkflowTriggerCreateRequest,
    auth: Annotated[AuthResult, Depends(require_permission("automation:manage"))],
    trigger_service: TriggerService,
):
    """Create a trigger; 422 if the status name is not in the company's registry."""
    trigger = await trigger_service.create_trigger(
        require_tenant(auth),
        WorkflowTriggerCreate(
            name=body.name,
            workflow_status_name=body.workflow_status_name,
            trigger_event=body.trigger_event,
            action=body.action.to_dto(),
        ),
        created_by=auth.identity.user_id,
    )
    return WorkflowTriggerResponse.model_validate(trigger)


@router.get("/dead-letters", response_model=list[DeadLetterResponse])
async def list_dead_letters(
    auth: Annotated[AuthResult, Depends(require_permission("automation:view"))],
    dead_letter_service: Annotated[DeadLetterService, Depends(get_dead_letter_service)],
    include_replayed: bool = False,
):
    """Failed trigger runs, newest first."""
    letters = await dead_letter_service.list_dead_letters(require_tenant(auth), include_replayed)
    return [DeadLetterResponse.model_validate(d) for d in letters]


@router.post("/dead-letters/{dead_letter_id}/replay", response_model=DeadLetterResponse)
@limit_writes
async def replay_dead_letter(
    request: Request,
    dead_letter_id: str,
    auth: Annotated[AuthResult, Depends(require_permission("automation:manage"))],
    dead_letter_service: Annotated[DeadLetterService, Depends(get_dead_letter_service)],
):
    """Re-submit the original status change; triggers that already succeeded are skipped."""
    letter = await dead_letter_service.replay(require_tenant(auth), dead_letter_id)
    return DeadLetterResponse.model_validate(letter)


@router.get("/{trigger_id}", response_model=WorkflowTriggerResponse)
async def get_workflow_trigger(
    trigger_id: str,
    auth: Annotated[AuthResult, Depends(require_permission("automation:view"))],
    trigger_service: TriggerService,
):
    trigger = await trigger_service.get_trigger(require_tenant(auth), trigger_id)
    return WorkflowTriggerResponse.model_validate(trigger)


@router.put("/{trigger_id}", response_model=WorkflowTriggerResponse)
@limit_writes
async def update_workflow_trigger(
    request: Request,
    trigger_id: str,
    body: WorkflowTriggerUpdateRequest,
    auth: Annotated[AuthResult, Depends(require_permission("customization:edit"))],
    trigger_service: TriggerService,
):
    trigger = await trigger_service.update_trigger(
        require_tenant(auth),
        trigger_id,
        WorkflowTriggerUpdate(
            name=body.name,
            workflow_status_name=body.workflow_status_name,
            trigger_event=body.trigger_event,
            action=body.action.to_dto() if body.action else None,
        ),
        updated_by=auth.identity.user_id,
    )
    return WorkflowTriggerResponse.model_validate(trigger)


@router.delete("/{trigger_id}", status_code=204)
@limit_writes
async def delete_workflow_trigger(
    request: Request,
    trigger_id: str,
    auth: Annotated[AuthResult, Depends(require_permission("customization:edit"))],
    trigger_service: TriggerService,
):
    await trigger_service.delete_trigger(require_tenant(auth), trigger_id)
