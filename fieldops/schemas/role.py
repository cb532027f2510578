"""Role and role-assignment API schemas.

Permission maps use the stored shape: module slug -> ``true`` or
``{action: bool}``.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from fieldops.application.dtos.role import RoleResult, UserRoleAssignment
from fieldops.domain.permissions import (
    PermissionGrant,
    dump_permission_map,
    parse_permission_map,
)

PermissionMap = dict[str, bool | dict[str, bool]]


def to_grants(raw: PermissionMap | None) -> dict[str, PermissionGrant] | None:
    if raw is None:
        return None
    return parse_permission_map(raw) or {}


class RoleCreateRequest(BaseModel):
    """Request body for creating a role."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=500)
    permissions: PermissionMap = Field(default_factory=dict)


class RoleUpdateRequest(BaseModel):
    """Request body for updating a role (partial)."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=500)
    permissions: PermissionMap | None = None


class RoleResponse(BaseModel):
    id: str
    name: str
    description: str | None
    scope: str
    company_id: str | None
    permissions: dict[str, Any] | None
    is_super_admin: bool
    is_template: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_result(cls, role: RoleResult) -> "RoleResponse":
        return cls(
            id=role.id,
            name=role.name,
            description=role.description,
            scope=role.scope.value,
            company_id=role.company_id,
            permissions=(
                dump_permission_map(role.permissions) if role.permissions is not None else None
            ),
            is_super_admin=role.is_super_admin,
            is_template=role.is_template,
            created_at=role.created_at,
            updated_at=role.updated_at,
        )


class AssignRoleRequest(BaseModel):
    """Request body for POST /users/{user_id}/roles."""

    role_id: str = Field(..., min_length=1)


class UserRoleAssignmentResponse(BaseModel):
    id: str
    user_id: str
    role_id: str
    company_id: str | None
    assigned_at: datetime | None = None
    assigned_by: str | None = None

    @classmethod
    def from_result(cls, assignment: UserRoleAssignment) -> "UserRoleAssignmentResponse":
        return cls(
            id=assignment.id,
            user_id=assignment.user_id,
            role_id=assignment.role_id,
            company_id=assignment.company_id,
            assigned_at=assignment.assigned_at,
            assigned_by=assignment.assigned_by,
        )
