"""Permission grants and permission strings.

A role stores one grant per module slug. On disk a grant is either the
boolean ``true`` (every action on the module) or an object of
``action -> bool``. Parsing normalizes both forms into a tagged variant so
evaluation never has to inspect raw JSON.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

ANY_AUTHENTICATED = "*"
DEFAULT_ACTION = "can_access"
MANAGE_ACTION = "manage"

# Every action a full-access grant object carries (used by seed templates).
ALL_ACTIONS: tuple[str, ...] = (
    "can_access",
    "view",
    "create",
    "edit",
    "delete",
    "assign",
    "approve",
    "send",
    "manage_status",
    "process_payment",
    "link_qr",
    "transfer",
    "ocr",
    "recurring",
    "convert",
    "fill",
    "live",
    "upload",
    "manage",
    "generate",
    "resolve",
    "impersonate",
    "export",
)


@dataclass(frozen=True)
class BlanketGrant:
    """Grants every action on a module, including the implicit ``manage``."""

    def allows(self, action: str) -> bool:
        return True

    def to_stored(self) -> bool:
        return True


@dataclass(frozen=True)
class ActionGrant:
    """Grants only the actions mapped to ``True``. ``manage`` implies all."""

    actions: Mapping[str, bool] = field(default_factory=dict)

    def allows(self, action: str) -> bool:
        if self.actions.get(MANAGE_ACTION) is True:
            return True
        return self.actions.get(action) is True

    def to_stored(self) -> dict[str, bool]:
        return dict(self.actions)


PermissionGrant = Union[BlanketGrant, ActionGrant]


def parse_grant(raw: Any) -> PermissionGrant | None:
    """Normalize a stored grant value.

    ``True`` becomes BlanketGrant, a mapping becomes ActionGrant with only
    boolean values kept. ``False``, ``None`` and anything else mean no grant.
    """
    if raw is True:
        return BlanketGrant()
    if isinstance(raw, Mapping):
        return ActionGrant(
            {str(k): v for k, v in raw.items() if isinstance(v, bool)}
        )
    return None


def parse_permission_map(raw: Any) -> dict[str, PermissionGrant] | None:
    """Parse a role's ``permissions`` field; None when it is missing or malformed."""
    if not isinstance(raw, Mapping):
        return None
    grants: dict[str, PermissionGrant] = {}
    for slug, value in raw.items():
        grant = parse_grant(value)
        if grant is not None:
            grants[str(slug)] = grant
    return grants


def dump_permission_map(grants: Mapping[str, PermissionGrant]) -> dict[str, Any]:
    """Inverse of parse_permission_map: the JSON-compatible stored form."""
    return {slug: grant.to_stored() for slug, grant in grants.items()}


def merge_grants(a: PermissionGrant, b: PermissionGrant) -> PermissionGrant:
    """Union of two grants on the same module (roles are additive)."""
    if isinstance(a, BlanketGrant) or isinstance(b, BlanketGrant):
        return BlanketGrant()
    merged = {k: v for k, v in a.actions.items() if v}
    for k, v in b.actions.items():
        if v:
            merged[k] = True
    return ActionGrant(merged)


@dataclass(frozen=True)
class RequiredPermission:
    """A parsed ``"<module-slug>:<action>"`` check request."""

    module_slug: str
    action: str

    def __str__(self) -> str:
        return f"{self.module_slug}:{self.action}"


def parse_permission(permission: str) -> RequiredPermission:
    """Split a permission string; the action defaults to ``can_access``.

    Raises:
        ValueError: If the module slug is empty or the string is the ``*`` sentinel.
    """
    if permission == ANY_AUTHENTICATED:
        raise ValueError("'*' is not a module permission")
    module_slug, _, action = permission.partition(":")
    module_slug = module_slug.strip()
    if not module_slug:
        raise ValueError(f"Invalid permission string: {permission!r}")
    return RequiredPermission(module_slug, action.strip() or DEFAULT_ACTION)
