"""Firestore-backed invoice repository (implements IInvoiceRepository)."""

from __future__ import annotations

from typing import Any

from fieldops.application.dtos.work_order import InvoiceDraft, InvoiceResult
from fieldops.domain.enums import InvoiceStatus
from fieldops.infrastructure.firebase._rest_client import FirestoreRESTClient
from fieldops.infrastructure.firebase.collections import COLLECTION_INVOICES
from fieldops.shared.utils.datetime import add_days, utc_now
from fieldops.shared.utils.generators import generate_cuid, generate_document_number


def _to_result(doc_id: str, data: dict[str, Any]) -> InvoiceResult:
    try:
        status = InvoiceStatus(data.get("status"))
    except ValueError:
        status = InvoiceStatus.DRAFT
    return InvoiceResult(
        id=doc_id,
        company_id=data.get("company_id", ""),
        invoice_number=data.get("invoice_number", ""),
        status=status,
        customer_id=data.get("customer_id"),
        location_id=data.get("location_id"),
        line_items=list(data.get("line_items") or []),
        subtotal=float(data.get("subtotal") or 0),
        tax_amount=float(data.get("tax_amount") or 0),
        total_amount=float(data.get("total_amount") or 0),
        amount_paid=float(data.get("amount_paid") or 0),
        amount_due=float(data.get("amount_due") or 0),
        issue_date=data.get("issue_date"),
        due_date=data.get("due_date"),
        related_work_order_ids=list(data.get("related_work_order_ids") or []),
        created_by=data.get("created_by"),
        created_at=data.get("created_at"),
    )


class FirestoreInvoiceRepository:
    def __init__(self, client: FirestoreRESTClient) -> None:
        self._coll = client.collection(COLLECTION_INVOICES)

    async def create_draft(self, draft: InvoiceDraft) -> InvoiceResult:
        now = utc_now()
        invoice_id = generate_cuid()
        doc = {
            "company_id": draft.company_id,
            "customer_id": draft.customer_id,
            "location_id": draft.location_id,
            "invoice_number": generate_document_number("INV"),
            "status": InvoiceStatus.DRAFT.value,
            "issue_date": now,
            "due_date": add_days(now, draft.due_days),
            "line_items": [],
            "subtotal": 0.0,
            "tax_amount": 0.0,
            "total_amount": 0.0,
            "amount_paid": 0.0,
            "amount_due": 0.0,
            "related_work_order_ids": [draft.work_order_id],
            "created_by": draft.created_by,
            "created_at": now,
            "updated_at": now,
        }
        await self._coll.document(invoice_id).set(doc)
        return _to_result(invoice_id, doc)

    async def list_by_company(
        self,
        company_id: str,
        status: str | None = None,
        work_order_id: str | None = None,
    ) -> list[InvoiceResult]:
        q = self._coll.where("company_id", "==", company_id)
        if status is not None:
            q = q.where("status", "==", status)
        if work_order_id is not None:
            q = q.where("related_work_order_ids", "array-contains", work_order_id)
        invoices = [_to_result(s.id, s.to_dict()) async for s in q.stream()]
        return sorted(invoices, key=lambda i: i.invoice_number)
