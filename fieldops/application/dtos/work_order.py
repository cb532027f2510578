"""DTOs for the work-order, customer and invoice slices."""

from dataclasses import dataclass, field
from datetime import datetime

from fieldops.domain.enums import InvoiceStatus


@dataclass(frozen=True)
class WorkOrderResult:
    id: str
    company_id: str
    work_order_number: str
    status: str
    customer_id: str | None = None
    location_id: str | None = None
    summary: str | None = None
    assigned_technician_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    created_by: str | None = None
    updated_by: str | None = None


@dataclass(frozen=True)
class WorkOrderCreate:
    customer_id: str | None = None
    location_id: str | None = None
    summary: str | None = None
    status: str | None = None
    assigned_technician_id: str | None = None


@dataclass(frozen=True)
class WorkOrderUpdate:
    """Partial update; None fields are left unchanged."""

    customer_id: str | None = None
    location_id: str | None = None
    summary: str | None = None
    status: str | None = None
    assigned_technician_id: str | None = None


@dataclass(frozen=True)
class CustomerResult:
    id: str
    company_id: str
    name: str
    email: str | None = None
    phone: str | None = None


@dataclass(frozen=True)
class InvoiceResult:
    id: str
    company_id: str
    invoice_number: str
    status: InvoiceStatus
    customer_id: str | None = None
    location_id: str | None = None
    line_items: list[dict] = field(default_factory=list)
    subtotal: float = 0.0
    tax_amount: float = 0.0
    total_amount: float = 0.0
    amount_paid: float = 0.0
    amount_due: float = 0.0
    issue_date: datetime | None = None
    due_date: datetime | None = None
    related_work_order_ids: list[str] = field(default_factory=list)
    created_by: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class InvoiceDraft:
    """Input for an automation-created draft: no line items, all totals zero."""

    company_id: str
    customer_id: str
    location_id: str | None
    work_order_id: str
    due_days: int
    created_by: str = "system_workflow"
