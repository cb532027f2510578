"""Workflow statuses API: the per-company status registry.

Reading needs ``automation:view``; changes need ``customization:edit``.
Deleting or renaming a status still referenced by triggers or work orders
answers 409 STATUS_IN_USE.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from fieldops.api.v1.dependencies import get_workflow_status_service, require_permission
from fieldops.application.dtos.identity import AuthResult
from fieldops.application.dtos.workflow import WorkflowStatusCreate, WorkflowStatusUpdate
from fieldops.application.services.request_authorizer import require_tenant
from fieldops.application.services.workflow_status_service import WorkflowStatusService
from fieldops.core.limiter import limit_writes
from fieldops.schemas.workflow import (
    WorkflowStatusCreateRequest,
    WorkflowStatusResponse,
    WorkflowStatusUpdateRequest,
)

router = APIRouter()

StatusService = Annotated[WorkflowStatusService, Depends(get_workflow_status_service)]


@router.get("", response_model=list[WorkflowStatusResponse])
async def list_workflow_statuses(
    auth: Annotated[AuthResult, Depends(require_permission("automation:view"))],
    status_service: StatusService,
):
    """Statuses in display order (sort_order, then creation time)."""
    statuses = await status_service.list_statuses(require_tenant(auth))
    return [WorkflowStatusResponse.model_validate(s) for s in statuses]


@router.post("", response_model=WorkflowStatusResponse, status_code=201)
@limit_writes
async def create_workflow_status(
    request: Request,
    body: WorkflowStatusCreateRequest,
    auth: Annotated[AuthResult, Depends(require_permission("customization:edit"))],
    status_service: StatusService,
):
    status = await status_service.create_status(
        require_tenant(auth),
        WorkflowStatusCreate(
            name=body.name,
            color=body.color,
            group=body.group,
            sort_order=body.sort_order,
            is_final_step=body.is_final_step,
            description=body.description,
        ),
    )
    return WorkflowStatusResponse.model_validate(status)


@router.get("/{status_id}", response_model=WorkflowStatusResponse)
async def get_workflow_status(
    status_id: str,
    auth: Annotated[AuthResult, Depends(require_permission("automation:view"))],
    status_service: StatusService,
):
    status = await status_service.get_status(require_tenant(auth), status_id)
    return WorkflowStatusResponse.model_validate(status)


@router.put("/{status_id}", response_model=WorkflowStatusResponse)
@limit_writes
async def update_workflow_status(
    request: Request,
    status_id: str,
    body: WorkflowStatusUpdateRequest,
    auth: Annotated[AuthResult, Depends(require_permission("customization:edit"))],
    status_service: StatusService,
):
    status = await status_service.update_status(
        require_tenant(auth),
        status_id,
        WorkflowStatusUpdate(**body.model_dump(exclude_unset=True)),
    )
    return WorkflowStatusResponse.model_validate(status)


@router.delete("/{status_id}", status_code=204)
@limit_writes
async def delete_workflow_status(
    request: Request,
    status_id: str,
    auth: Annotated[AuthResult, Depends(require_permission("customization:edit"))],
    status_service: StatusService,
):
    await status_service.delete_status(require_tenant(auth), status_id)
