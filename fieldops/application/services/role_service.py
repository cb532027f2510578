"""Role management: CRUD on role documents and user-role assignments."""

from __future__ import annotations

from typing import Any

from fieldops.application.dtos.role import (
    RoleCreate,
    RoleResult,
    RoleUpdate,
    UserRoleAssignment,
)
from fieldops.application.interfaces.repositories import (
    IProfileRepository,
    IRoleRepository,
    IUserRoleRepository,
)
from fieldops.domain.exceptions import (
    ConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from fieldops.application.services.request_authorizer import ensure_tenant_access
from fieldops.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class RoleService:
    """Roles are owned by one tenant context (a company, or the platform when None)."""

    def __init__(
        self,
        role_repo: IRoleRepository,
        user_role_repo: IUserRoleRepository,
        profile_repo: IProfileRepository,
    ) -> None:
        self._roles = role_repo
        self._user_roles = user_role_repo
        self._profiles = profile_repo

    async def list_roles(self, company_id: str | None) -> list[RoleResult]:
        return await self._roles.list_for_company(company_id)

    async def get_role(self, role_id: str, company_id: str | None) -> RoleResult:
        role = await self._roles.get_by_id(role_id)
        if role is None:
            raise ResourceNotFoundException("role", role_id)
        ensure_tenant_access(company_id, role.company_id)
        return role

    async def create_role(self, data: RoleCreate) -> RoleResult:
        existing = await self._roles.list_for_company(data.company_id)
        if any(r.name.lower() == data.name.lower() for r in existing):
            raise ConflictException(
                f"Role with name '{data.name}' already exists", name=data.name
            )
        role = await self._roles.create(data)
        logger.info("Created role %s (%s) for company %s", role.id, role.name, role.company_id)
        return role

    async def update_role(
        self, role_id: str, company_id: str | None, data: RoleUpdate
    ) -> RoleResult:
        role = await self.get_role(role_id, company_id)
        if role.is_super_admin:
            raise ValidationException("The super-admin role cannot be modified")
        fields: dict[str, Any] = {}
        if data.name is not None and data.name != role.name:
            siblings = await self._roles.list_for_company(role.company_id)
            if any(r.id != role.id and r.name.lower() == data.name.lower() for r in siblings):
                raise ConflictException(
                    f"Role with name '{data.name}' already exists", name=data.name
                )
            fields["name"] = data.name
        if data.description is not None:
            fields["description"] = data.description
        if data.permissions is not None:
            fields["permissions"] = data.permissions
        if not fields:
            return role
        updated = await self._roles.update(role_id, fields)
        if updated is None:
            raise ResourceNotFoundException("role", role_id)
        return updated

    async def delete_role(self, role_id: str, company_id: str | None) -> None:
        role = await self.get_role(role_id, company_id)
        if role.is_super_admin:
            raise ValidationException("The super-admin role cannot be deleted")
        assignments = await self._user_roles.list_for_role(role_id)
        if assignments:
            raise ConflictException(
                "Role is still assigned to users",
                role_id=role_id,
                assignment_count=len(assignments),
            )
        await self._roles.delete(role_id)
        logger.info("Deleted role %s", role_id)

    async def list_user_roles(
        self, user_id: str, company_id: str | None
    ) -> list[RoleResult]:
        assignments = await self._user_roles.list_for_user(user_id, company_id)
        if not assignments:
            return []
        return await self._roles.get_many([a.role_id for a in assignments])

    async def assign_role(
        self,
        user_id: str,
        role_id: str,
        company_id: str | None,
        assigned_by: str | None,
    ) -> UserRoleAssignment:
        """Assign a role in the given tenant context.

        The user must belong to that context and the role must be owned by it.
        """
        profile = await self._profiles.get_by_id(user_id)
        if profile is None:
            raise ResourceNotFoundException("user", user_id)
        ensure_tenant_access(company_id, profile.company_id)
        role = await self.get_role(role_id, company_id)
        if role.is_template:
            raise ValidationException("Role templates cannot be assigned directly")
        assignment = await self._user_roles.assign(user_id, role.id, company_id, assigned_by)
        logger.info("Assigned role %s to user %s (company %s)", role.id, user_id, company_id)
        return assignment

    async def remove_role(
        self, user_id: str, role_id: str, company_id: str | None
    ) -> None:
        if not await self._user_roles.remove(user_id, role_id, company_id):
            raise ResourceNotFoundException("user_role", f"{user_id}/{role_id}")
        logger.info("Removed role %s from user %s (company %s)", role_id, user_id, company_id)
