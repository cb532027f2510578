"""Permission evaluator: aggregates a user's roles into allow/deny decisions.

Roles are loaded in the identity's own tenant context only and are additive.
The role cache lives on one evaluator instance (one request) and is never
shared across requests, so role edits take effect on the next request.
"""

from __future__ import annotations

from fieldops.application.dtos.identity import Identity, PermissionDecision
from fieldops.application.dtos.role import RoleResult
from fieldops.application.interfaces.repositories import (
    IRoleRepository,
    IUserRoleRepository,
)
from fieldops.domain.permissions import (
    ANY_AUTHENTICATED,
    PermissionGrant,
    merge_grants,
    parse_permission,
)
from fieldops.shared.telemetry.logging import get_logger
from fieldops.shared.telemetry.tracing import traced

logger = get_logger(__name__)

REASON_NO_ROLES = "no assigned roles"
REASON_ROLES_MISSING = "role definitions not found"
REASON_MISSING_PERMISSION = "missing required permission"
REASON_INVALID_PERMISSION = "invalid permission string"


class PermissionEvaluator:
    """Evaluates ``"<module>:<action>"`` checks against the identity's roles."""

    def __init__(
        self,
        role_repo: IRoleRepository,
        user_role_repo: IUserRoleRepository,
    ) -> None:
        self._role_repo = role_repo
        self._user_role_repo = user_role_repo
        self._cache: dict[tuple[str, str | None], tuple[int, list[RoleResult]]] = {}

    async def load_roles(self, identity: Identity) -> tuple[int, list[RoleResult]]:
        """Return (assignment count, roles applicable to the identity's tenant context)."""
        key = (identity.user_id, identity.company_id)
        if key in self._cache:
            return self._cache[key]
        assignments = await self._user_role_repo.list_for_user(
            identity.user_id, identity.company_id
        )
        roles: list[RoleResult] = []
        if assignments:
            for role in await self._role_repo.get_many([a.role_id for a in assignments]):
                if role.company_id != identity.company_id:
                    logger.warning(
                        "Skipping role %s for user %s: role company %s does not match context %s",
                        role.id,
                        identity.user_id,
                        role.company_id,
                        identity.company_id,
                    )
                    continue
                roles.append(role)
        self._cache[key] = (len(assignments), roles)
        return self._cache[key]

    @traced("permission.evaluate")
    async def evaluate(
        self, identity: Identity, required_permission: str
    ) -> PermissionDecision:
        """Return Allow/Deny for one permission check.

        ``*`` allows any resolved identity. Otherwise the first role whose
        grant for the module is blanket, has ``manage``, or has the action wins.
        """
        if required_permission == ANY_AUTHENTICATED:
            return PermissionDecision.allow()
        try:
            required = parse_permission(required_permission)
        except ValueError:
            logger.warning("Invalid permission string %r", required_permission)
            return PermissionDecision.deny(REASON_INVALID_PERMISSION)

        assignment_count, roles = await self.load_roles(identity)
        if assignment_count == 0:
            return PermissionDecision.deny(REASON_NO_ROLES)
        if not roles:
            return PermissionDecision.deny(REASON_ROLES_MISSING)

        if identity.is_platform and any(r.is_super_admin for r in roles):
            return PermissionDecision.allow()

        for role in roles:
            if role.permissions is None:
                continue
            grant = role.permissions.get(required.module_slug)
            if grant is not None and grant.allows(required.action):
                return PermissionDecision.allow()

        logger.info(
            "Permission denied: user=%s company=%s permission=%s",
            identity.user_id,
            identity.company_id,
            required,
        )
        return PermissionDecision.deny(REASON_MISSING_PERMISSION)

    async def effective_permissions(
        self, identity: Identity
    ) -> dict[str, PermissionGrant]:
        """Union of every applicable role's grants, keyed by module slug."""
        _, roles = await self.load_roles(identity)
        merged: dict[str, PermissionGrant] = {}
        for role in roles:
            for slug, grant in (role.permissions or {}).items():
                merged[slug] = merge_grants(merged[slug], grant) if slug in merged else grant
        return merged

    async def is_super_admin(self, identity: Identity) -> bool:
        if not identity.is_platform:
            return False
        _, roles = await self.load_roles(identity)
        return any(r.is_super_admin for r in roles)
