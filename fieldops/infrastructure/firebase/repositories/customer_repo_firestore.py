"""Firestore-backed customer lookup (implements ICustomerRepository)."""

from __future__ import annotations

from fieldops.application.dtos.work_order import CustomerResult
from fieldops.infrastructure.firebase._rest_client import FirestoreRESTClient
from fieldops.infrastructure.firebase.collections import COLLECTION_CUSTOMERS


class FirestoreCustomerRepository:
    def __init__(self, client: FirestoreRESTClient) -> None:
        self._coll = client.collection(COLLECTION_CUSTOMERS)

    async def get_by_id(self, customer_id: str) -> CustomerResult | None:
        doc = await self._coll.document(customer_id).get()
        if not doc:
            return None
        data = doc.to_dict()
        return CustomerResult(
            id=doc.id,
            company_id=data.get("company_id", ""),
            name=data.get("name") or data.get("display_name") or "",
            email=data.get("email") or None,
            phone=data.get("phone") or None,
        )
