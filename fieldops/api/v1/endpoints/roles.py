"""Roles API: list, get, create, update, delete.

Roles belong to the caller's tenant context: their own company, or for a
platform user the ``company_id`` they name (platform roles when omitted).
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from fieldops.api.v1.dependencies import get_role_service, require_permission
from fieldops.application.dtos.identity import AuthResult
from fieldops.application.dtos.role import RoleCreate, RoleUpdate
from fieldops.application.services.role_service import RoleService
from fieldops.core.limiter import limit_writes
from fieldops.schemas.role import (
    RoleCreateRequest,
    RoleResponse,
    RoleUpdateRequest,
    to_grants,
)

router = APIRouter()


@router.get("", response_model=list[RoleResponse])
async def list_roles(
    auth: Annotated[AuthResult, Depends(require_permission("roles:view"))],
    role_service: Annotated[RoleService, Depends(get_role_service)],
):
    roles = await role_service.list_roles(auth.tenant_id)
    return [RoleResponse.from_result(r) for r in roles]


@router.post("", response_model=RoleResponse, status_code=201)
@limit_writes
async def create_role(
    request: Request,
    body: RoleCreateRequest,
    auth: Annotated[AuthResult, Depends(require_permission("roles:create"))],
    role_service: Annotated[RoleService, Depends(get_role_service)],
):
    """Create a role; the name must be unique in the tenant context."""
    role = await role_service.create_role(
        RoleCreate(
            name=body.name,
            company_id=auth.tenant_id,
            permissions=to_grants(body.permissions) or {},
            description=body.description,
        )
    )
    return RoleResponse.from_result(role)


@router.get("/{role_id}", response_model=RoleResponse)
async def get_role(
    role_id: str,
    auth: Annotated[AuthResult, Depends(require_permission("roles:view"))],
    role_service: Annotated[RoleService, Depends(get_role_service)],
):
    role = await role_service.get_role(role_id, auth.tenant_id)
    return RoleResponse.from_result(role)


@router.put("/{role_id}", response_model=RoleResponse)
@limit_writes
async def update_role(
    request: Request,
    role_id: str,
    body: RoleUpdateRequest,
    auth: Annotated[AuthResult, Depends(require_permission("roles:edit"))],
    role_service: Annotated[RoleService, Depends(get_role_service)],
):
    """Update name, description or the whole permission map. The super-admin role is immutable."""
    role = await role_service.update_role(
        role_id,
        auth.tenant_id,
        RoleUpdate(
            name=body.name,
            description=body.description,
            permissions=to_grants(body.permissions),
        ),
    )
    return RoleResponse.from_result(role)


@router.delete("/{role_id}", status_code=204)
@limit_writes
async def delete_role(
    request: Request,
    role_id: str,
    auth: Annotated[AuthResult, Depends(require_permission("roles:delete"))],
    role_service: Annotated[RoleService, Depends(get_role_service)],
):
    """Delete a role; 409 while any user still holds it."""
    await role_service.delete_role(role_id, auth.tenant_id)
