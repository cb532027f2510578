"""Invoice API schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from fieldops.domain.enums import InvoiceStatus


class InvoiceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    company_id: str
    invoice_number: str
    status: InvoiceStatus
    customer_id: str | None = None
    location_id: str | None = None
    line_items: list[dict[str, Any]]
    subtotal: float
    tax_amount: float
    total_amount: float
    amount_paid: float
    amount_due: float
    issue_date: datetime | None = None
    due_date: datetime | None = None
    related_work_order_ids: list[str]
    created_by: str | None = None
    created_at: datetime | None = None
