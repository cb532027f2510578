"""Trigger run records: the idempotency claim for one (status change, trigger) pair."""

from __future__ import annotations

from typing import Any

from fieldops.domain.enums import TriggerRunStatus
from fieldops.infrastructure.exceptions import ConcurrentUpdateError, DocumentExistsError
from fieldops.infrastructure.firebase._rest_client import FirestoreRESTClient
from fieldops.infrastructure.firebase.collections import COLLECTION_TRIGGER_RUNS
from fieldops.shared.telemetry.logging import get_logger
from fieldops.shared.utils.datetime import utc_now

logger = get_logger(__name__)


class FirestoreTriggerRunRepository:
    def __init__(self, client: FirestoreRESTClient) -> None:
        self._coll = client.collection(COLLECTION_TRIGGER_RUNS)

    async def claim(self, run_id: str, data: dict[str, Any]) -> bool:
        """Create the run as ``running``; a failed run may be reclaimed, anything else may not.

        The reclaim is guarded by the failed run's update time, so of two
        concurrent replays only one gets the run.
        """
        now = utc_now()
        doc = {
            **data,
            "status": TriggerRunStatus.RUNNING.value,
            "attempts": 0,
            "started_at": now,
            "finished_at": None,
        }
        try:
            await self._coll.create(run_id, doc)
            return True
        except DocumentExistsError:
            ref = self._coll.document(run_id)
            existing = await ref.get()
            if existing is None:
                return False
            if existing.to_dict().get("status") != TriggerRunStatus.FAILED.value:
                return False
            try:
                return await ref.update(
                    {
                        "status": TriggerRunStatus.RUNNING.value,
                        "started_at": now,
                        "finished_at": None,
                    },
                    update_time=existing.update_time,
                )
            except ConcurrentUpdateError:
                logger.info("Trigger run %s was reclaimed by another worker", run_id)
                return False

    async def finish(
        self,
        run_id: str,
        status: TriggerRunStatus,
        attempts: int,
        *,
        result: dict[str, Any] | None = None,
        error: str | None = None,
    ) -> None:
        await self._coll.document(run_id).update(
            {
                "status": status.value,
                "attempts": attempts,
                "result": result,
                "error": error,
                "finished_at": utc_now(),
            }
        )
