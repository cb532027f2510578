"""Work-order API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class WorkOrderCreateRequest(BaseModel):
    customer_id: str | None = None
    location_id: str | None = None
    summary: str | None = Field(default=None, max_length=2000)
    status: str | None = Field(default=None, description="Defaults to the first workflow status")
    assigned_technician_id: str | None = None


class WorkOrderUpdateRequest(BaseModel):
    """Partial update. Changing ``status`` fires the company's workflow triggers."""

    customer_id: str | None = None
    location_id: str | None = None
    summary: str | None = Field(default=None, max_length=2000)
    status: str | None = None
    assigned_technician_id: str | None = None


class WorkOrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

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
