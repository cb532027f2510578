"""DTOs for role and role-assignment use cases."""

from dataclasses import dataclass, field
from datetime import datetime

from fieldops.domain.enums import RoleScope
from fieldops.domain.permissions import PermissionGrant


@dataclass(frozen=True)
class RoleResult:
    """Role read-model. ``permissions`` holds parsed grants; None = malformed on disk."""

    id: str
    name: str
    scope: RoleScope
    company_id: str | None
    permissions: dict[str, PermissionGrant] | None
    description: str | None = None
    is_super_admin: bool = False
    is_template: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class RoleCreate:
    """Input for creating a role inside a company (or platform when company_id is None)."""

    name: str
    company_id: str | None
    permissions: dict[str, PermissionGrant] = field(default_factory=dict)
    description: str | None = None


@dataclass(frozen=True)
class RoleUpdate:
    """Partial role update; None fields are left unchanged."""

    name: str | None = None
    description: str | None = None
    permissions: dict[str, PermissionGrant] | None = None


@dataclass(frozen=True)
class UserRoleAssignment:
    """One ``user_roles`` document linking a user to a role in one tenant context."""

    id: str
    user_id: str
    role_id: str
    company_id: str | None
    assigned_at: datetime | None = None
    assigned_by: str | None = None
