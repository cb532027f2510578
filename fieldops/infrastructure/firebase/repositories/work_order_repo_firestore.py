"""Firestore-backed work order repository (implements IWorkOrderRepository).

Only the fields the workflow engine reads or writes are modelled; other
fields written by the wider application are preserved by partial updates.
"""

from __future__ import annotations

from typing import Any

from fieldops.application.dtos.work_order import WorkOrderCreate, WorkOrderResult
from fieldops.infrastructure.firebase._rest_client import FirestoreRESTClient
from fieldops.infrastructure.firebase.collections import COLLECTION_WORK_ORDERS
from fieldops.shared.utils.datetime import utc_now
from fieldops.shared.utils.generators import generate_cuid, generate_document_number


def _to_result(doc_id: str, data: dict[str, Any]) -> WorkOrderResult:
    return WorkOrderResult(
        id=doc_id,
        company_id=data.get("company_id", ""),
        work_order_number=str(data.get("work_order_number", "")),
        status=data.get("status", ""),
        customer_id=data.get("customer_id"),
        location_id=data.get("location_id"),
        summary=data.get("summary"),
        assigned_technician_id=data.get("assigned_technician_id"),
        created_at=data.get("created_at"),
        updated_at=data.get("updated_at"),
        created_by=data.get("created_by"),
        updated_by=data.get("updated_by"),
    )


class FirestoreWorkOrderRepository:
    def __init__(self, client: FirestoreRESTClient) -> None:
        self._coll = client.collection(COLLECTION_WORK_ORDERS)

    async def get_by_id(self, work_order_id: str) -> WorkOrderResult | None:
        doc = await self._coll.document(work_order_id).get()
        if not doc:
            return None
        return _to_result(doc.id, doc.to_dict())

    async def create(
        self,
        company_id: str,
        data: WorkOrderCreate,
        status: str,
        created_by: str | None,
    ) -> WorkOrderResult:
        now = utc_now()
        work_order_id = generate_cuid()
        doc = {
            "company_id": company_id,
            "work_order_number": generate_document_number("WO"),
            "status": status,
            "customer_id": data.customer_id,
            "location_id": data.location_id,
            "summary": data.summary,
            "assigned_technician_id": data.assigned_technician_id,
            "created_at": now,
            "updated_at": now,
            "created_by": created_by,
            "updated_by": created_by,
        }
        await self._coll.document(work_order_id).set(doc)
        return _to_result(work_order_id, doc)

    async def update(
        self, work_order_id: str, fields: dict[str, Any]
    ) -> WorkOrderResult | None:
        payload = dict(fields)
        payload["updated_at"] = utc_now()
        if not await self._coll.document(work_order_id).update(payload):
            return None
        return await self.get_by_id(work_order_id)

    async def count_with_status(self, company_id: str, status: str) -> int:
        q = (
            self._coll.where("company_id", "==", company_id)
            .where("status", "==", status)
        )
        return len([s async for s in q.stream()])
