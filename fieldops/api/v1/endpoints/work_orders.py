"""Work orders API. A status change on update is handed to the trigger dispatcher."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from fieldops.api.v1.dependencies import get_work_order_service, require_permission
from fieldops.application.dtos.identity import AuthResult
from fieldops.application.dtos.work_order import WorkOrderCreate, WorkOrderUpdate
from fieldops.application.services.request_authorizer import require_tenant
from fieldops.application.services.work_order_service import WorkOrderService
from fieldops.core.limiter import limit_writes
from fieldops.schemas.work_order import (
    WorkOrderCreateRequest,
    WorkOrderResponse,
    WorkOrderUpdateRequest,
)

router = APIRouter()

WorkOrders = Annotated[WorkOrderService, Depends(get_work_order_service)]


@router.post("", response_model=WorkOrderResponse, status_code=201)
@limit_writes
async def create_work_order(
    request: Request,
    body: WorkOrderCreateRequest,
    auth: Annotated[AuthResult, Depends(require_permission("work-orders:create"))],
    work_orders: WorkOrders,
):
    work_order = await work_orders.create_work_order(
        require_tenant(auth),
        WorkOrderCreate(**body.model_dump()),
        created_by=auth.identity.user_id,
    )
    return WorkOrderResponse.model_validate(work_order)


@router.get("/{work_order_id}", response_model=WorkOrderResponse)
async def get_work_order(
    work_order_id: str,
    auth: Annotated[AuthResult, Depends(require_permission("work-orders:view"))],
    work_orders: WorkOrders,
):
    work_order = await work_orders.get_work_order(require_tenant(auth), work_order_id)
    return WorkOrderResponse.model_validate(work_order)


@router.put("/{work_order_id}", response_model=WorkOrderResponse)
@limit_writes
async def update_work_order(
    request: Request,
    work_order_id: str,
    body: WorkOrderUpdateRequest,
    auth: Annotated[AuthResult, Depends(require_permission("work-orders:edit"))],
    work_orders: WorkOrders,
):
    """Partial update. The response does not wait for workflow triggers."""
    work_order = await work_orders.update_work_order(
        require_tenant(auth),
        work_order_id,
        WorkOrderUpdate(**body.model_dump(exclude_unset=True)),
        updated_by=auth.identity.user_id,
    )
    return WorkOrderResponse.model_validate(work_order)
