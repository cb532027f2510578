"""User-roles API: list, assign and remove a user's roles in the caller's tenant context."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from fieldops.api.v1.dependencies import get_role_service, require_permission
from fieldops.application.dtos.identity import AuthResult
from fieldops.application.services.role_service import RoleService
from fieldops.core.limiter import limit_writes
from fieldops.schemas.role import (
    AssignRoleRequest,
    RoleResponse,
    UserRoleAssignmentResponse,
)

router = APIRouter()


@router.get("/{user_id}/roles", response_model=list[RoleResponse])
async def list_user_roles(
    user_id: str,
    auth: Annotated[AuthResult, Depends(require_permission("users:view"))],
    role_service: Annotated[RoleService, Depends(get_role_service)],
):
    roles = await role_service.list_user_roles(user_id, auth.tenant_id)
    return [RoleResponse.from_result(r) for r in roles]


@router.post("/{user_id}/roles", response_model=UserRoleAssignmentResponse, status_code=201)
@limit_writes
async def assign_role_to_user(
    request: Request,
    user_id: str,
    body: AssignRoleRequest,
    auth: Annotated[AuthResult, Depends(require_permission("users:edit"))],
    role_service: Annotated[RoleService, Depends(get_role_service)],
):
    """Assign a role (idempotent: assigning twice returns the same assignment)."""
    assignment = await role_service.assign_role(
        user_id, body.role_id, auth.tenant_id, assigned_by=auth.identity.user_id
    )
    return UserRoleAssignmentResponse.from_result(assignment)


@router.delete("/{user_id}/roles/{role_id}", status_code=204)
@limit_writes
async def remove_role_from_user(
    request: Request,
    user_id: str,
    role_id: str,
    auth: Annotated[AuthResult, Depends(require_permission("users:edit"))],
    role_service: Annotated[RoleService, Depends(get_role_service)],
):
    await role_service.remove_role(user_id, role_id, auth.tenant_id)
