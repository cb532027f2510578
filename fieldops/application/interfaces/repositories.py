"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill.
All types reference application DTOs only; no infrastructure imports.
Implementations raise StoreUnavailableException when the store cannot be reached.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

from fieldops.domain.enums import TriggerEvent, TriggerRunStatus

if TYPE_CHECKING:
    from fieldops.application.dtos.identity import UserProfile
    from fieldops.application.dtos.role import (
        RoleCreate,
        RoleResult,
        RoleUpdate,
        UserRoleAssignment,
    )
    from fieldops.application.dtos.work_order import (
        CustomerResult,
        InvoiceDraft,
        InvoiceResult,
        WorkOrderCreate,
        WorkOrderResult,
    )
    from fieldops.application.dtos.workflow import (
        DeadLetterResult,
        StatusChange,
        WorkflowStatusCreate,
        WorkflowStatusResult,
        WorkflowTriggerCreate,
        WorkflowTriggerResult,
    )


class IProfileRepository(Protocol):
    async def get_by_id(self, user_id: str) -> UserProfile | None:
        """Return the profile for a token subject, or None."""


class IRoleRepository(Protocol):
    async def get_by_id(self, role_id: str) -> RoleResult | None:
        """Return one role by id."""

    async def get_many(self, role_ids: list[str]) -> list[RoleResult]:
        """Return the roles that exist among role_ids (missing ids are omitted)."""

    async def list_for_company(self, company_id: str | None) -> list[RoleResult]:
        """Return roles owned by a company (None = platform roles)."""

    async def create(self, data: RoleCreate) -> RoleResult:
        """Create a role with a generated id."""

    async def update(self, role_id: str, fields: dict[str, Any]) -> RoleResult | None:
        """Merge fields into a role; None if it does not exist."""

    async def delete(self, role_id: str) -> None:
        """Delete a role (idempotent)."""


class IUserRoleRepository(Protocol):
    async def list_for_user(
        self, user_id: str, company_id: str | None
    ) -> list[UserRoleAssignment]:
        """Assignments of user_id in exactly this tenant context (None = platform)."""

    async def list_for_role(self, role_id: str) -> list[UserRoleAssignment]:
        """Assignments that reference role_id."""

    async def assign(
        self, user_id: str, role_id: str, company_id: str | None, assigned_by: str | None
    ) -> UserRoleAssignment:
        """Create (or return the existing) assignment."""

    async def remove(self, user_id: str, role_id: str, company_id: str | None) -> bool:
        """Delete an assignment; False if there was none."""


class IWorkflowStatusRepository(Protocol):
    async def list_by_company(self, company_id: str) -> list[WorkflowStatusResult]:
        """All statuses of a company, unordered."""

    async def get_by_id(self, status_id: str) -> WorkflowStatusResult | None:
        """Return one status."""

    async def get_by_name(self, company_id: str, name: str) -> WorkflowStatusResult | None:
        """Return the company's status with this exact name."""

    async def create(self, company_id: str, data: WorkflowStatusCreate) -> WorkflowStatusResult:
        """Create a status with a generated id."""

    async def update(self, status_id: str, fields: dict[str, Any]) -> WorkflowStatusResult | None:
        """Merge fields into a status; None if it does not exist."""

    async def delete(self, status_id: str) -> None:
        """Delete a status (idempotent)."""


class IWorkflowTriggerRepository(Protocol):
    async def list_by_company(
        self, company_id: str, status_name: str | None = None
    ) -> list[WorkflowTriggerResult]:
        """All triggers of a company, optionally only those for one status name."""

    async def find_matching(
        self, company_id: str, status_name: str, event: TriggerEvent
    ) -> list[WorkflowTriggerResult]:
        """Triggers for (company, status name, event)."""

    async def get_by_id(self, trigger_id: str) -> WorkflowTriggerResult | None:
        """Return one trigger."""

    async def create(
        self, company_id: str, data: WorkflowTriggerCreate, created_by: str | None
    ) -> WorkflowTriggerResult:
        """Create a trigger with a generated id."""

    async def update(
        self, trigger_id: str, fields: dict[str, Any]
    ) -> WorkflowTriggerResult | None:
        """Merge fields into a trigger; None if it does not exist."""

    async def delete(self, trigger_id: str) -> None:
        """Delete a trigger (idempotent)."""


class IWorkOrderRepository(Protocol):
    async def get_by_id(self, work_order_id: str) -> WorkOrderResult | None:
        """Return one work order."""

    async def create(
        self, company_id: str, data: WorkOrderCreate, status: str, created_by: str | None
    ) -> WorkOrderResult:
        """Create a work order with a generated id and number."""

    async def update(
        self, work_order_id: str, fields: dict[str, Any]
    ) -> WorkOrderResult | None:
        """Merge fields into a work order; None if it does not exist."""

    async def count_with_status(self, company_id: str, status: str) -> int:
        """Number of the company's work orders currently in status."""


class ICustomerRepository(Protocol):
    async def get_by_id(self, customer_id: str) -> CustomerResult | None:
        """Return one customer."""


class IInvoiceRepository(Protocol):
    async def create_draft(self, draft: InvoiceDraft) -> InvoiceResult:
        """Create a draft invoice linked to a work order."""

    async def list_by_company(
        self,
        company_id: str,
        status: str | None = None,
        work_order_id: str | None = None,
    ) -> list[InvoiceResult]:
        """Invoices of a company, optionally filtered by status or linked work order."""


class INotificationRepository(Protocol):
    async def create(self, data: dict[str, Any]) -> str:
        """Persist an in-app notification document; return its id."""


class ITriggerRunRepository(Protocol):
    async def claim(self, run_id: str, data: dict[str, Any]) -> bool:
        """Create-if-absent; True when this caller now owns the run.

        A run previously marked failed may be claimed again (replay).
        """

    async def finish(
        self,
        run_id: str,
        status: TriggerRunStatus,
        attempts: int,
        *,
        result: dict[str, Any] | None = None,
        error: str | None = None,
    ) -> None:
        """Record the final state of a run."""


class IDeadLetterRepository(Protocol):
    async def create(
        self,
        change: StatusChange,
        status_name: str,
        event: TriggerEvent,
        error: str,
        attempts: int,
        trigger: WorkflowTriggerResult | None,
    ) -> DeadLetterResult:
        """Persist a dead letter for a trigger (or trigger lookup) that ran out of retries,
        or for a status change that could not be queued (``trigger`` is None)."""

    async def list_by_company(
        self, company_id: str, include_replayed: bool = False
    ) -> list[DeadLetterResult]:
        """Dead letters of a company, newest first."""

    async def get_by_id(self, dead_letter_id: str) -> DeadLetterResult | None:
        """Return one dead letter."""

    async def mark_replayed(self, dead_letter_id: str, at: datetime) -> bool:
        """Stamp replayed_at if still unset; False when it was already replayed."""

    async def clear_replayed(self, dead_letter_id: str) -> None:
        """Undo mark_replayed when the replay could not be queued."""
