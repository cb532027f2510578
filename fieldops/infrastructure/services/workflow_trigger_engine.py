"""Workflow trigger engine: run configured actions when a work order changes status.

A status change old -> new fires the (old, on_exit) and (new, on_enter)
triggers of the work order's company. Each matched trigger runs
independently:

- it is claimed first through a run record keyed ``<change_id>__<trigger_id>``,
  so redelivering the same change never fires a trigger twice;
- its action is retried with exponential backoff;
- when retries are exhausted the run is marked failed and a dead letter is
  written for inspection and replay.

Nothing raised here reaches the request that changed the status.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, TypeVar

from fieldops.application.dtos.work_order import WorkOrderResult
from fieldops.application.dtos.workflow import (
    StatusChange,
    TriggerOutcome,
    WorkflowTriggerResult,
)
from fieldops.application.interfaces.repositories import (
    IDeadLetterRepository,
    ITriggerRunRepository,
    IWorkflowTriggerRepository,
    IWorkOrderRepository,
)
from fieldops.domain.enums import TriggerEvent, TriggerRunStatus
from fieldops.infrastructure.services.action_executors import ActionContext, ActionExecutor
from fieldops.shared.telemetry.logging import get_logger
from fieldops.shared.telemetry.tracing import (
    add_span_attributes,
    add_span_event,
    set_span_error,
    traced,
)
from fieldops.shared.utils.generators import generate_cuid

logger = get_logger(__name__)

T = TypeVar("T")


def run_id_for(change_id: str, trigger_id: str) -> str:
    return f"{change_id}__{trigger_id}"


class WorkflowTriggerEngine:
    def __init__(
        self,
        trigger_repo: IWorkflowTriggerRepository,
        work_order_repo: IWorkOrderRepository,
        run_repo: ITriggerRunRepository,
        dead_letter_repo: IDeadLetterRepository,
        executors: Mapping[str, ActionExecutor],
        *,
        max_attempts: int = 3,
        backoff_base: float = 0.5,
        backoff_max: float = 30.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._triggers = trigger_repo
        self._work_orders = work_order_repo
        self._runs = run_repo
        self._dead_letters = dead_letter_repo
        self._executors = dict(executors)
        self._max_attempts = max(1, max_attempts)
        self._backoff_base = backoff_base
        self._backoff_max = backoff_max
        self._sleep = sleep

    def backoff_delay(self, attempt: int) -> float:
        """Delay after failed attempt number ``attempt`` (1-based)."""
        return min(self._backoff_base * (2 ** (attempt - 1)), self._backoff_max)

    @traced("workflow.handle_status_change")
    async def handle_status_change(self, change: StatusChange) -> list[TriggerOutcome]:
        """Fire on_exit(old) then on_enter(new); nothing when the status did not change."""
        if change.old_status == change.new_status:
            logger.debug("Status unchanged for work order %s; no triggers", change.work_order_id)
            return []
        add_span_attributes(work_order_id=change.work_order_id, change_id=change.change_id)
        outcomes: list[TriggerOutcome] = []
        if change.old_status:
            outcomes.extend(
                await self._process(change, change.old_status, TriggerEvent.ON_EXIT)
            )
        outcomes.extend(await self._process(change, change.new_status, TriggerEvent.ON_ENTER))
        return outcomes

    async def process_transition(
        self,
        work_order_id: str,
        tenant_id: str,
        status_name: str,
        event: TriggerEvent,
        change: StatusChange | None = None,
    ) -> list[TriggerOutcome]:
        """Run the triggers of one (status, event) pair for a work order.

        Without ``change`` a one-off change id is generated, so the call is not
        deduplicated against earlier runs.
        """
        if change is None:
            change = StatusChange(
                change_id=generate_cuid(),
                work_order_id=work_order_id,
                company_id=tenant_id,
                old_status=status_name if event == TriggerEvent.ON_EXIT else None,
                new_status=status_name,
            )
        return await self._process(change, status_name, event)

    async def _process(
        self, change: StatusChange, status_name: str, event: TriggerEvent
    ) -> list[TriggerOutcome]:
        try:
            triggers = await self._retry(
                lambda: self._triggers.find_matching(change.company_id, status_name, event),
                f"trigger lookup {status_name}/{event.value}",
            )
            if not triggers:
                return []
            work_order = await self._retry(
                lambda: self._work_orders.get_by_id(change.work_order_id),
                f"work order lookup {change.work_order_id}",
            )
        except Exception as e:
            logger.error(
                "Giving up on %s triggers for status %s (work order %s): %s",
                event.value,
                status_name,
                change.work_order_id,
                e,
            )
            await self._dead_letter(change, status_name, event, str(e), self._max_attempts, None)
            return []

        if work_order is None or work_order.company_id != change.company_id:
            logger.warning(
                "Work order %s not found for company %s; skipping %d trigger(s)",
                change.work_order_id,
                change.company_id,
                len(triggers),
            )
            return []

        logger.info(
            "Running %d %s trigger(s) for status %s on work order %s",
            len(triggers),
            event.value,
            status_name,
            work_order.id,
        )
        return list(
            await asyncio.gather(
                *(self._run_trigger(change, work_order, t, status_name) for t in triggers)
            )
        )

    async def _run_trigger(
        self,
        change: StatusChange,
        work_order: WorkOrderResult,
        trigger: WorkflowTriggerResult,
        status_name: str,
    ) -> TriggerOutcome:
        action_type = trigger.action.type
        run_id = run_id_for(change.change_id, trigger.id)
        try:
            claimed = await self._retry(
                lambda: self._runs.claim(
                    run_id,
                    {
                        "company_id": change.company_id,
                        "change_id": change.change_id,
                        "trigger_id": trigger.id,
                        "work_order_id": work_order.id,
                        "action_type": action_type,
                        "trigger_event": trigger.trigger_event.value,
                    },
                ),
                f"claim {run_id}",
            )
        except Exception as e:
            await self._dead_letter(
                change, status_name, trigger.trigger_event, f"claim failed: {e}", self._max_attempts, trigger
            )
            return TriggerOutcome(trigger.id, action_type, TriggerRunStatus.FAILED, error=str(e))
        if not claimed:
            logger.info("Trigger %s already ran for change %s; skipping", trigger.id, change.change_id)
            return TriggerOutcome(
                trigger.id, action_type, None, skipped_reason="already processed"
            )

        executor = self._executors.get(action_type)
        if executor is None:
            logger.warning(
                "No executor for action type %r (trigger %s); skipping", action_type, trigger.id
            )
            await self._finish(
                run_id, TriggerRunStatus.SUCCEEDED, 0, result={"skipped": "unsupported action type"}
            )
            return TriggerOutcome(
                trigger.id, action_type, TriggerRunStatus.SUCCEEDED, skipped_reason="unsupported action type"
            )

        ctx = ActionContext(change=change, work_order=work_order, trigger=trigger)
        last_error: Exception | None = None
        for attempt in range(1, self._max_attempts + 1):
            try:
                result = await executor(ctx)
            except Exception as e:
                last_error = e
                logger.warning(
                    "Action %s of trigger %s failed (attempt %d/%d): %s",
                    action_type,
                    trigger.id,
                    attempt,
                    self._max_attempts,
                    e,
                )
                if attempt < self._max_attempts:
                    await self._sleep(self.backoff_delay(attempt))
                continue
            await self._finish(run_id, TriggerRunStatus.SUCCEEDED, attempt, result=result)
            return TriggerOutcome(
                trigger.id, action_type, TriggerRunStatus.SUCCEEDED, attempts=attempt, result=result
            )

        error = str(last_error)
        logger.error(
            "Action %s of trigger %s exhausted %d attempts; dead-lettering: %s",
            action_type,
            trigger.id,
            self._max_attempts,
            error,
        )
        if last_error is not None:
            set_span_error(last_error)
        await self._finish(run_id, TriggerRunStatus.FAILED, self._max_attempts, error=error)
        await self._dead_letter(
            change, status_name, trigger.trigger_event, error, self._max_attempts, trigger
        )
        return TriggerOutcome(
            trigger.id, action_type, TriggerRunStatus.FAILED, attempts=self._max_attempts, error=error
        )

    async def _retry(self, op: Callable[[], Awaitable[T]], what: str) -> T:
        """Run a store operation with the engine's retry policy; re-raise the last error."""
        for attempt in range(1, self._max_attempts + 1):
            try:
                return await op()
            except Exception as e:
                if attempt >= self._max_attempts:
                    raise
                logger.warning("%s failed (attempt %d/%d): %s", what, attempt, self._max_attempts, e)
                await self._sleep(self.backoff_delay(attempt))
        raise RuntimeError("unreachable")

    async def _finish(
        self,
        run_id: str,
        status: TriggerRunStatus,
        attempts: int,
        *,
        result: dict[str, Any] | None = None,
        error: str | None = None,
    ) -> None:
        try:
            await self._runs.finish(run_id, status, attempts, result=result, error=error)
        except Exception:
            logger.exception("Could not record trigger run %s as %s", run_id, status.value)

    async def _dead_letter(
        self,
        change: StatusChange,
        status_name: str,
        event: TriggerEvent,
        error: str,
        attempts: int,
        trigger: WorkflowTriggerResult | None,
    ) -> None:
        try:
            letter = await self._dead_letters.create(
                change, status_name, event, error, attempts, trigger
            )
            logger.error("Dead letter %s written for change %s", letter.id, change.change_id)
            add_span_event(
                "trigger.dead_lettered",
                {"dead_letter_id": letter.id, "trigger_id": trigger.id if trigger else ""},
            )
        except Exception:
            logger.exception(
                "Could not write dead letter for change %s (trigger %s)",
                change.change_id,
                trigger.id if trigger else None,
            )
