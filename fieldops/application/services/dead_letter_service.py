"""Dead-letter inspection and replay for workflow trigger failures."""

from __future__ import annotations

from fieldops.application.dtos.workflow import DeadLetterResult
from fieldops.application.interfaces.repositories import IDeadLetterRepository
from fieldops.application.interfaces.services import IStatusChangeDispatcher
from fieldops.application.services.request_authorizer import ensure_tenant_access
from fieldops.domain.exceptions import (
    ConflictException,
    ResourceNotFoundException,
    StoreUnavailableException,
)
from fieldops.shared.telemetry.logging import get_logger
from fieldops.shared.utils.datetime import utc_now

logger = get_logger(__name__)


class DeadLetterService:
    def __init__(
        self,
        dead_letter_repo: IDeadLetterRepository,
        dispatcher: IStatusChangeDispatcher,
    ) -> None:
        self._dead_letters = dead_letter_repo
        self._dispatcher = dispatcher

    async def list_dead_letters(
        self, tenant_id: str, include_replayed: bool = False
    ) -> list[DeadLetterResult]:
        return await self._dead_letters.list_by_company(tenant_id, include_replayed)

    async def replay(self, tenant_id: str, dead_letter_id: str) -> DeadLetterResult:
        """Re-submit the original status change.

        Triggers that already succeeded for that change are skipped by their
        run records; only failed ones run again. The letter is marked before
        the change is queued, so concurrent replays queue it at most once.
        """
        letter = await self._dead_letters.get_by_id(dead_letter_id)
        if letter is None:
            raise ResourceNotFoundException("dead_letter", dead_letter_id)
        ensure_tenant_access(tenant_id, letter.company_id)
        if letter.replayed_at is not None:
            raise ConflictException(
                "Dead letter was already replayed", dead_letter_id=dead_letter_id
            )
        if not await self._dead_letters.mark_replayed(dead_letter_id, utc_now()):
            raise ConflictException(
                "Dead letter was already replayed", dead_letter_id=dead_letter_id
            )
        if not self._dispatcher.submit(letter.change):
            await self._dead_letters.clear_replayed(dead_letter_id)
            raise StoreUnavailableException(
                "Trigger dispatcher is not accepting work", operation="replay"
            )
        logger.info("Replayed dead letter %s (change %s)", dead_letter_id, letter.change.change_id)
        return await self._dead_letters.get_by_id(dead_letter_id) or letter
