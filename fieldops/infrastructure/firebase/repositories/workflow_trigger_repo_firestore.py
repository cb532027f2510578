"""Firestore-backed workflow trigger repository (implements IWorkflowTriggerRepository)."""

from __future__ import annotations

from typing import Any

from fieldops.application.dtos.workflow import (
    TriggerAction,
    WorkflowTriggerCreate,
    WorkflowTriggerResult,
)
from fieldops.domain.enums import TriggerEvent
from fieldops.infrastructure.firebase._rest_client import FirestoreRESTClient
from fieldops.infrastructure.firebase.collections import COLLECTION_WORKFLOW_TRIGGERS
from fieldops.shared.telemetry.logging import get_logger
from fieldops.shared.utils.datetime import utc_now
from fieldops.shared.utils.generators import generate_cuid

logger = get_logger(__name__)


def _action(raw: Any) -> TriggerAction:
    if not isinstance(raw, dict):
        return TriggerAction(type="")
    params = raw.get("params")
    return TriggerAction(
        type=str(raw.get("type") or ""),
        params=params if isinstance(params, dict) else {},
    )


def _to_result(doc_id: str, data: dict[str, Any]) -> WorkflowTriggerResult | None:
    try:
        event = TriggerEvent(data.get("trigger_event"))
    except ValueError:
        logger.warning("Trigger %s has invalid trigger_event %r", doc_id, data.get("trigger_event"))
        return None
    return WorkflowTriggerResult(
        id=doc_id,
        company_id=data.get("company_id", ""),
        name=data.get("name", ""),
        workflow_status_name=data.get("workflow_status_name", ""),
        trigger_event=event,
        action=_action(data.get("action")),
        created_at=data.get("created_at"),
        created_by=data.get("created_by"),
        updated_at=data.get("updated_at"),
        updated_by=data.get("updated_by"),
    )


def _dump(value: Any) -> Any:
    if isinstance(value, TriggerEvent):
        return value.value
    if isinstance(value, TriggerAction):
        return {"type": value.type, "params": dict(value.params)}
    return value


class FirestoreWorkflowTriggerRepository:
    def __init__(self, client: FirestoreRESTClient) -> None:
        self._coll = client.collection(COLLECTION_WORKFLOW_TRIGGERS)

    async def _collect(self, q) -> list[WorkflowTriggerResult]:
        out = []
        async for s in q.stream():
            result = _to_result(s.id, s.to_dict())
            if result is not None:
                out.append(result)
        return out

    async def list_by_company(
        self, company_id: str, status_name: str | None = None
    ) -> list[WorkflowTriggerResult]:
        q = self._coll.where("company_id", "==", company_id)
        if status_name is not None:
            q = q.where("workflow_status_name", "==", status_name)
        return await self._collect(q)

    async def find_matching(
        self, company_id: str, status_name: str, event: TriggerEvent
    ) -> list[WorkflowTriggerResult]:
        q = (
            self._coll.where("company_id", "==", company_id)
            .where("workflow_status_name", "==", status_name)
            .where("trigger_event", "==", event.value)
        )
        return await self._collect(q)

    async def get_by_id(self, trigger_id: str) -> WorkflowTriggerResult | None:
        doc = await self._coll.document(trigger_id).get()
        if not doc:
            return None
        return _to_result(doc.id, doc.to_dict())

    async def create(
        self, company_id: str, data: WorkflowTriggerCreate, created_by: str | None
    ) -> WorkflowTriggerResult:
        now = utc_now()
        trigger_id = generate_cuid()
        doc = {
            "company_id": company_id,
            "name": data.name,
            "workflow_status_name": data.workflow_status_name,
            "trigger_event": data.trigger_event.value,
            "action": _dump(data.action),
            "created_at": now,
            "created_by": created_by,
            "updated_at": now,
            "updated_by": created_by,
        }
        await self._coll.document(trigger_id).set(doc)
        result = _to_result(trigger_id, doc)
        assert result is not None
        return result

    async def update(
        self, trigger_id: str, fields: dict[str, Any]
    ) -> WorkflowTriggerResult | None:
        payload = {k: _dump(v) for k, v in fields.items()}
        payload["updated_at"] = utc_now()
        if not await self._coll.document(trigger_id).update(payload):
            return None
        return await self.get_by_id(trigger_id)

    async def delete(self, trigger_id: str) -> None:
        await self._coll.document(trigger_id).delete()
