"""Dead letters: trigger runs (or trigger lookups) that exhausted their retries."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from fieldops.application.dtos.workflow import (
    DeadLetterResult,
    StatusChange,
    WorkflowTriggerResult,
)
from fieldops.domain.enums import TriggerEvent
from fieldops.infrastructure.exceptions import ConcurrentUpdateError
from fieldops.infrastructure.firebase._rest_client import FirestoreRESTClient
from fieldops.infrastructure.firebase.collections import COLLECTION_DEAD_LETTERS
from fieldops.shared.utils.datetime import utc_now
from fieldops.shared.utils.generators import generate_cuid


def change_to_dict(change: StatusChange) -> dict[str, Any]:
    return {
        "change_id": change.change_id,
        "work_order_id": change.work_order_id,
        "company_id": change.company_id,
        "old_status": change.old_status,
        "new_status": change.new_status,
        "changed_by": change.changed_by,
        "occurred_at": change.occurred_at,
    }


def change_from_dict(data: dict[str, Any]) -> StatusChange:
    return StatusChange(
        change_id=data.get("change_id", ""),
        work_order_id=data.get("work_order_id", ""),
        company_id=data.get("company_id", ""),
        old_status=data.get("old_status"),
        new_status=data.get("new_status", ""),
        changed_by=data.get("changed_by"),
        occurred_at=data.get("occurred_at"),
    )


def _to_result(doc_id: str, data: dict[str, Any]) -> DeadLetterResult:
    return DeadLetterResult(
        id=doc_id,
        company_id=data.get("company_id", ""),
        change=change_from_dict(data.get("change") or {}),
        status_name=data.get("status_name", ""),
        trigger_event=TriggerEvent(data.get("trigger_event", TriggerEvent.ON_ENTER.value)),
        error=data.get("error", ""),
        attempts=int(data.get("attempts") or 0),
        trigger_id=data.get("trigger_id"),
        action_type=data.get("action_type"),
        created_at=data.get("created_at"),
        replayed_at=data.get("replayed_at"),
    )


class FirestoreDeadLetterRepository:
    def __init__(self, client: FirestoreRESTClient) -> None:
        self._coll = client.collection(COLLECTION_DEAD_LETTERS)

    async def create(
        self,
        change: StatusChange,
        status_name: str,
        event: TriggerEvent,
        error: str,
        attempts: int,
        trigger: WorkflowTriggerResult | None,
    ) -> DeadLetterResult:
        dead_letter_id = generate_cuid()
        doc = {
            "company_id": change.company_id,
            "change": change_to_dict(change),
            "status_name": status_name,
            "trigger_event": event.value,
            "trigger_id": trigger.id if trigger else None,
            "action_type": trigger.action.type if trigger else None,
            "error": error,
            "attempts": attempts,
            "created_at": utc_now(),
            "replayed_at": None,
        }
        await self._coll.document(dead_letter_id).set(doc)
        return _to_result(dead_letter_id, doc)

    async def list_by_company(
        self, company_id: str, include_replayed: bool = False
    ) -> list[DeadLetterResult]:
        q = self._coll.where("company_id", "==", company_id)
        if not include_replayed:
            q = q.where("replayed_at", "==", None)
        letters = [_to_result(s.id, s.to_dict()) async for s in q.stream()]
        return sorted(
            letters,
            key=lambda d: d.created_at or datetime.min.replace(tzinfo=UTC),
            reverse=True,
        )

    async def get_by_id(self, dead_letter_id: str) -> DeadLetterResult | None:
        doc = await self._coll.document(dead_letter_id).get()
        if not doc:
            return None
        return _to_result(doc.id, doc.to_dict())

    async def mark_replayed(self, dead_letter_id: str, at: datetime) -> bool:
        """Set ``replayed_at`` unless it is already set; False if this caller lost.

        Guarded by the update time of the read, so two concurrent replays
        cannot both mark (and so both re-submit) the same letter.
        """
        ref = self._coll.document(dead_letter_id)
        doc = await ref.get()
        if doc is None or doc.to_dict().get("replayed_at") is not None:
            return False
        try:
            return await ref.update({"replayed_at": at}, update_time=doc.update_time)
        except ConcurrentUpdateError:
            return False

    async def clear_replayed(self, dead_letter_id: str) -> None:
        await self._coll.document(dead_letter_id).update({"replayed_at": None})
