"""Firestore-backed workflow status repository (implements IWorkflowStatusRepository)."""

from __future__ import annotations

from typing import Any

from fieldops.application.dtos.workflow import WorkflowStatusCreate, WorkflowStatusResult
from fieldops.domain.enums import StatusGroup
from fieldops.infrastructure.firebase._rest_client import FirestoreRESTClient
from fieldops.infrastructure.firebase.collections import COLLECTION_WORKFLOW_STATUSES
from fieldops.shared.utils.datetime import utc_now
from fieldops.shared.utils.generators import generate_cuid


def _group(raw: Any) -> StatusGroup:
    try:
        return StatusGroup(raw)
    except ValueError:
        return StatusGroup.ACTIVE


def _to_result(doc_id: str, data: dict[str, Any]) -> WorkflowStatusResult:
    return WorkflowStatusResult(
        id=doc_id,
        company_id=data.get("company_id", ""),
        name=data.get("name", ""),
        color=data.get("color", "#888888"),
        description=data.get("description"),
        group=_group(data.get("group")),
        is_final_step=data.get("is_final_step") is True,
        sort_order=int(data.get("sort_order") or 0),
        created_at=data.get("created_at"),
        updated_at=data.get("updated_at"),
    )


def status_document(company_id: str, data: WorkflowStatusCreate) -> dict[str, Any]:
    """Stored form of a new status (also used by tenant seeding)."""
    now = utc_now()
    return {
        "company_id": company_id,
        "name": data.name,
        "color": data.color,
        "description": data.description,
        "group": data.group.value,
        "is_final_step": data.is_final_step,
        "sort_order": data.sort_order,
        "created_at": now,
        "updated_at": now,
    }


class FirestoreWorkflowStatusRepository:
    def __init__(self, client: FirestoreRESTClient) -> None:
        self._coll = client.collection(COLLECTION_WORKFLOW_STATUSES)

    async def list_by_company(self, company_id: str) -> list[WorkflowStatusResult]:
        q = self._coll.where("company_id", "==", company_id)
        return [_to_result(s.id, s.to_dict()) async for s in q.stream()]

    async def get_by_id(self, status_id: str) -> WorkflowStatusResult | None:
        doc = await self._coll.document(status_id).get()
        if not doc:
            return None
        return _to_result(doc.id, doc.to_dict())

    async def get_by_name(self, company_id: str, name: str) -> WorkflowStatusResult | None:
        q = (
            self._coll.where("company_id", "==", company_id)
            .where("name", "==", name)
            .limit(1)
        )
        async for s in q.stream():
            return _to_result(s.id, s.to_dict())
        return None

    async def create(self, company_id: str, data: WorkflowStatusCreate) -> WorkflowStatusResult:
        status_id = generate_cuid()
        doc = status_document(company_id, data)
        await self._coll.document(status_id).set(doc)
        return _to_result(status_id, doc)

    async def update(self, status_id: str, fields: dict[str, Any]) -> WorkflowStatusResult | None:
        payload = {
            k: (v.value if isinstance(v, StatusGroup) else v) for k, v in fields.items()
        }
        payload["updated_at"] = utc_now()
        if not await self._coll.document(status_id).update(payload):
            return None
        return await self.get_by_id(status_id)

    async def delete(self, status_id: str) -> None:
        await self._coll.document(status_id).delete()
