"""Invoices API (read-only; drafts are created by workflow automation)."""

from typing import Annotated

from fastapi import APIRouter, Depends

from fieldops.api.v1.dependencies import get_invoice_repo, require_permission
from fieldops.application.dtos.identity import AuthResult
from fieldops.application.interfaces.repositories import IInvoiceRepository
from fieldops.application.services.request_authorizer import require_tenant
from fieldops.domain.enums import InvoiceStatus
from fieldops.schemas.invoice import InvoiceResponse

router = APIRouter()


@router.get("", response_model=list[InvoiceResponse])
async def list_invoices(
    auth: Annotated[AuthResult, Depends(require_permission("invoicing:view"))],
    invoice_repo: Annotated[IInvoiceRepository, Depends(get_invoice_repo)],
    status: InvoiceStatus | None = None,
    work_order_id: str | None = None,
):
    invoices = await invoice_repo.list_by_company(
        require_tenant(auth),
        status=status.value if status else None,
        work_order_id=work_order_id,
    )
    return [InvoiceResponse.model_validate(i) for i in invoices]
