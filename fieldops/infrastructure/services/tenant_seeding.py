"""Seed platform roles, company role templates and per-company defaults.

Platform roles and templates use fixed document ids so re-seeding overwrites
them in place. Company defaults are written once: a company that already has
roles or statuses is left alone.
"""

from __future__ import annotations

from typing import Any, TypedDict

from fieldops.application.dtos.workflow import WorkflowStatusCreate
from fieldops.domain.enums import RoleScope, StatusGroup
from fieldops.domain.permissions import ALL_ACTIONS, DEFAULT_ACTION
from fieldops.infrastructure.firebase._rest_client import FirestoreRESTClient
from fieldops.infrastructure.firebase.collections import (
    COLLECTION_ROLES,
    COLLECTION_USER_ROLES,
    COLLECTION_WORKFLOW_STATUSES,
)
from fieldops.infrastructure.firebase.repositories.user_role_repo_firestore import (
    assignment_id,
)
from fieldops.infrastructure.firebase.repositories.workflow_status_repo_firestore import (
    status_document,
)
from fieldops.shared.telemetry.logging import get_logger
from fieldops.shared.utils.datetime import utc_now
from fieldops.shared.utils.generators import generate_cuid

logger = get_logger(__name__)


class RoleData(TypedDict):
    """Seed definition of one role."""

    name: str
    description: str
    permissions: dict[str, Any]
    is_super_admin: bool


def full_access() -> dict[str, bool]:
    return {action: True for action in ALL_ACTIONS}


def actions(*names: str) -> dict[str, bool]:
    """Action map granting ``can_access`` plus the named actions."""
    granted = {DEFAULT_ACTION: True}
    granted.update({name: True for name in names})
    return granted


PLATFORM_MODULE_SLUGS: tuple[str, ...] = (
    "platform-companies",
    "platform-templates",
    "audit-logs",
    "language",
    "platform-settings",
    "dev-tools",
)

COMPANY_MODULE_SLUGS: tuple[str, ...] = (
    "dashboard", "profile", "todos", "work-orders", "scheduling", "customers",
    "locations", "equipment", "deficiencies", "repairs", "inventory",
    "purchase-orders", "estimates", "invoicing", "maintenance", "checklists",
    "timesheets", "payroll", "reports", "files", "chat", "gps-tracking",
    "automation", "settings", "users", "roles", "company-profile", "billing",
    "company-modules", "integrations", "customization", "import-data",
    "support", "logout",
)

SUPER_ADMIN_ROLE_ID = "platform-owner"

PLATFORM_ROLES: dict[str, RoleData] = {
    SUPER_ADMIN_ROLE_ID: {
        "name": "Platform Owner",
        "description": "Unrestricted access to every platform and company feature.",
        "permissions": {
            slug: full_access()
            for slug in ("platform-companies", "platform-templates", "audit-logs", "language", "platform-settings")
        },
        "is_super_admin": True,
    },
    "platform-admin": {
        "name": "Platform Admin",
        "description": "Manages companies, templates and platform settings.",
        "permissions": {
            "platform-companies": full_access(),
            "platform-templates": full_access(),
            "platform-settings": full_access(),
            "audit-logs": actions("view", "generate"),
            "language": actions("edit"),
        },
        "is_super_admin": False,
    },
    "platform-support": {
        "name": "Platform Support",
        "description": "Read-only access for customer support.",
        "permissions": {
            slug: actions("view")
            for slug in ("platform-companies", "platform-templates", "audit-logs", "users", "platform-settings")
        },
        "is_super_admin": False,
    },
    "platform-developer": {
        "name": "Platform Developer",
        "description": "Access to developer tools and technical settings.",
        "permissions": {
            "platform-companies": actions("view"),
            "dev-tools": full_access(),
            "platform-settings": actions("view", "edit"),
        },
        "is_super_admin": False,
    },
    "platform-auditor": {
        "name": "Platform Auditor",
        "description": "Reviews audit logs and platform configuration.",
        "permissions": {
            slug: actions("view")
            for slug in ("platform-companies", "audit-logs", "users", "platform-settings")
        },
        "is_super_admin": False,
    },
}

_BASICS: dict[str, Any] = {
    "dashboard": actions("view"),
    "profile": actions("view", "edit"),
    "support": actions(),
    "logout": actions(),
}

COMPANY_ROLE_TEMPLATES: dict[str, RoleData] = {
    "admin-template": {
        "name": "Administrator",
        "description": "Full access to all company features and settings.",
        "permissions": {
            **{slug: full_access() for slug in COMPANY_MODULE_SLUGS},
            "company-profile": True,
        },
        "is_super_admin": False,
    },
    "technician-template": {
        "name": "Technician",
        "description": "Access to assigned work orders, scheduling, and inventory usage.",
        "permissions": {
            **_BASICS,
            "work-orders": actions("view", "edit", "manage_status", "create"),
            "scheduling": actions("view"),
            "locations": actions("view"),
            "equipment": actions("view", "create", "edit"),
            "checklists": actions("view", "fill"),
            "timesheets": actions("create", "view", "edit"),
            "files": actions("view", "upload"),
            "deficiencies": actions("view", "create", "edit", "resolve"),
            "repairs": actions("view", "create", "edit"),
            "inventory": actions("view"),
            "todos": actions("manage"),
        },
        "is_super_admin": False,
    },
    "dispatcher-template": {
        "name": "Dispatcher",
        "description": "Manages scheduling, work order assignment, and technician tracking.",
        "permissions": {
            **_BASICS,
            "work-orders": actions("view", "create", "edit", "manage_status", "assign"),
            "scheduling": full_access(),
            "customers": actions("view"),
            "locations": actions("view"),
            "equipment": actions("view"),
            "users": actions("view"),
            "gps-tracking": actions("live"),
        },
        "is_super_admin": False,
    },
    "office-manager-template": {
        "name": "Office Manager",
        "description": "Handles invoicing, estimates, purchase orders, and reporting.",
        "permissions": {
            **_BASICS,
            "work-orders": actions("view", "edit", "create"),
            "customers": full_access(),
            "locations": actions("view", "create", "edit"),
            "equipment": actions("view"),
            "estimates": full_access(),
            "invoicing": full_access(),
            "purchase-orders": full_access(),
            "reports": actions("view", "generate"),
            "users": actions("view"),
        },
        "is_super_admin": False,
    },
    "customer-portal-template": {
        "name": "Customer Portal User",
        "description": "Access for end clients to view their own data via the portal.",
        "permissions": {
            "portal-dashboard": actions("view"),
            "portal-work-orders": actions("view"),
            "portal-equipment": actions("view"),
            "portal-invoices": actions("view", "process_payment"),
            "portal-settings": actions("edit"),
            "logout": actions(),
        },
        "is_super_admin": False,
    },
}

ADMIN_TEMPLATE_ID = "admin-template"

DEFAULT_WORKFLOW_STATUSES: tuple[WorkflowStatusCreate, ...] = (
    WorkflowStatusCreate("New", "#888888", StatusGroup.START, 10),
    WorkflowStatusCreate("Scheduled", "#3b82f6", StatusGroup.ACTIVE, 20),
    WorkflowStatusCreate("In Progress", "#a855f7", StatusGroup.ACTIVE, 30),
    WorkflowStatusCreate("On Hold", "#f59e0b", StatusGroup.ACTIVE, 40),
    WorkflowStatusCreate("Completed", "#22c55e", StatusGroup.FINAL, 50, is_final_step=True),
    WorkflowStatusCreate("Invoiced", "#14b8a6", StatusGroup.FINAL, 60, is_final_step=True),
    WorkflowStatusCreate("Cancelled", "#ef4444", StatusGroup.CANCELLED, 70, is_final_step=True),
)


def _role_document(
    role: RoleData, company_id: str | None, *, is_template: bool
) -> dict[str, Any]:
    now = utc_now()
    return {
        "name": role["name"],
        "description": role["description"],
        "scope": (RoleScope.PLATFORM if company_id is None else RoleScope.COMPANY).value,
        "company_id": company_id,
        "permissions": role["permissions"],
        "is_super_admin": role["is_super_admin"],
        "is_template": is_template,
        "created_at": now,
        "updated_at": now,
    }


class TenantSeedingService:
    """Writes seed documents in one atomic batch per call."""

    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client

    async def seed_platform(self, owner_user_id: str | None = None) -> list[str]:
        """Upsert platform roles and company templates; optionally make a user platform owner."""
        roles = self._client.collection(COLLECTION_ROLES)
        batch = self._client.batch()
        for role_id, role in PLATFORM_ROLES.items():
            batch.set(roles.document(role_id), _role_document(role, None, is_template=False))
        for role_id, role in COMPANY_ROLE_TEMPLATES.items():
            batch.set(roles.document(role_id), _role_document(role, None, is_template=True))
        if owner_user_id:
            self._queue_assignment(batch, owner_user_id, SUPER_ADMIN_ROLE_ID, None)
        await batch.commit()
        seeded = [*PLATFORM_ROLES, *COMPANY_ROLE_TEMPLATES]
        logger.info("Seeded %d platform roles and templates", len(seeded))
        return seeded

    async def seed_company(
        self, company_id: str, admin_user_id: str | None = None
    ) -> bool:
        """Clone role templates and default statuses into a company.

        Returns False without writing when the company already has roles or
        statuses.
        """
        if await self._has_documents(COLLECTION_ROLES, company_id) or await self._has_documents(
            COLLECTION_WORKFLOW_STATUSES, company_id
        ):
            logger.info("Company %s already seeded; skipping", company_id)
            return False

        roles = self._client.collection(COLLECTION_ROLES)
        statuses = self._client.collection(COLLECTION_WORKFLOW_STATUSES)
        batch = self._client.batch()
        admin_role_id: str | None = None
        for template_id, role in COMPANY_ROLE_TEMPLATES.items():
            role_id = generate_cuid()
            batch.set(roles.document(role_id), _role_document(role, company_id, is_template=False))
            if template_id == ADMIN_TEMPLATE_ID:
                admin_role_id = role_id
        for status in DEFAULT_WORKFLOW_STATUSES:
            batch.set(statuses.document(generate_cuid()), status_document(company_id, status))
        if admin_user_id and admin_role_id:
            self._queue_assignment(batch, admin_user_id, admin_role_id, company_id)
        await batch.commit()
        logger.info(
            "Seeded company %s: %d roles, %d statuses",
            company_id,
            len(COMPANY_ROLE_TEMPLATES),
            len(DEFAULT_WORKFLOW_STATUSES),
        )
        return True

    def _queue_assignment(
        self, batch: Any, user_id: str, role_id: str, company_id: str | None
    ) -> None:
        ref = self._client.collection(COLLECTION_USER_ROLES).document(
            assignment_id(user_id, role_id, company_id)
        )
        batch.set(
            ref,
            {
                "user_id": user_id,
                "role_id": role_id,
                "company_id": company_id,
                "assigned_at": utc_now(),
                "assigned_by": "seed",
            },
        )

    async def _has_documents(self, collection: str, company_id: str) -> bool:
        q = self._client.collection(collection).where("company_id", "==", company_id).limit(1)
        async for _ in q.stream():
            return True
        return False
