"""Background dispatch of work-order status changes to the trigger engine.

An asyncio.Queue drained by a fixed pool of worker tasks started in the app
lifespan. ``submit`` never blocks the request; on shutdown the queue is given
a bounded time to drain before workers are cancelled.
"""

from __future__ import annotations

import asyncio

import httpx

from fieldops.application.dtos.workflow import StatusChange
from fieldops.application.interfaces.services import INotificationSender
from fieldops.core.config import Settings
from fieldops.infrastructure.firebase._rest_client import FirestoreRESTClient
from fieldops.infrastructure.firebase.repositories import (
    FirestoreCustomerRepository,
    FirestoreDeadLetterRepository,
    FirestoreInvoiceRepository,
    FirestoreNotificationRepository,
    FirestoreProfileRepository,
    FirestoreTriggerRunRepository,
    FirestoreWorkflowTriggerRepository,
    FirestoreWorkOrderRepository,
)
from fieldops.infrastructure.services.action_executors import build_executors
from fieldops.infrastructure.services.notification_sender import LogOnlyNotificationSender
from fieldops.infrastructure.services.workflow_trigger_engine import WorkflowTriggerEngine
from fieldops.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class TriggerDispatcher:
    """Implements IStatusChangeDispatcher."""

    def __init__(
        self,
        engine: WorkflowTriggerEngine,
        *,
        workers: int = 2,
        queue_size: int = 1000,
    ) -> None:
        self._engine = engine
        self._worker_count = max(1, workers)
        self._queue: asyncio.Queue[StatusChange] = asyncio.Queue(maxsize=queue_size)
        self._tasks: list[asyncio.Task] = []

    @property
    def running(self) -> bool:
        return bool(self._tasks)

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    async def start(self) -> None:
        if self._tasks:
            return
        self._tasks = [
            asyncio.create_task(self._worker(i), name=f"trigger-worker-{i}")
            for i in range(self._worker_count)
        ]
        logger.info("Trigger dispatcher started with %d worker(s)", self._worker_count)

    def submit(self, change: StatusChange) -> bool:
        """Queue a change for background processing; False if not running or full."""
        if not self._tasks:
            logger.error("Trigger dispatcher not running; dropping change %s", change.change_id)
            return False
        try:
            self._queue.put_nowait(change)
        except asyncio.QueueFull:
            logger.error(
                "Trigger queue full (%d); dropping change %s for work order %s",
                self._queue.maxsize,
                change.change_id,
                change.work_order_id,
            )
            return False
        logger.debug("Queued status change %s (%s -> %s)", change.change_id, change.old_status, change.new_status)
        return True

    async def join(self) -> None:
        """Wait until every queued change has been processed."""
        await self._queue.join()

    async def stop(self, timeout: float = 10.0) -> None:
        """Drain for up to ``timeout`` seconds, then cancel the workers."""
        if not self._tasks:
            return
        try:
            await asyncio.wait_for(self._queue.join(), timeout=timeout)
        except TimeoutError:
            logger.warning(
                "Trigger queue not drained within %.1fs; %d change(s) abandoned",
                timeout,
                self._queue.qsize(),
            )
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        logger.info("Trigger dispatcher stopped")

    async def _worker(self, index: int) -> None:
        while True:
            change = await self._queue.get()
            try:
                await self._engine.handle_status_change(change)
            except Exception:
                logger.exception(
                    "Worker %d failed processing change %s for work order %s",
                    index,
                    change.change_id,
                    change.work_order_id,
                )
            finally:
                self._queue.task_done()


def build_trigger_dispatcher(
    client: FirestoreRESTClient,
    http_client: httpx.AsyncClient,
    settings: Settings,
    *,
    sender: INotificationSender | None = None,
) -> TriggerDispatcher:
    """Wire the engine, its repositories and executors into a dispatcher (not started)."""
    executors = build_executors(
        invoice_repo=FirestoreInvoiceRepository(client),
        customer_repo=FirestoreCustomerRepository(client),
        profile_repo=FirestoreProfileRepository(client),
        notification_repo=FirestoreNotificationRepository(client),
        sender=sender or LogOnlyNotificationSender(),
        http_client=http_client,
        invoice_due_days=settings.invoice_due_days,
        webhook_timeout=settings.webhook_timeout_seconds,
    )
    engine = WorkflowTriggerEngine(
        FirestoreWorkflowTriggerRepository(client),
        FirestoreWorkOrderRepository(client),
        FirestoreTriggerRunRepository(client),
        FirestoreDeadLetterRepository(client),
        executors,
        max_attempts=settings.trigger_max_attempts,
        backoff_base=settings.trigger_backoff_base_seconds,
        backoff_max=settings.trigger_backoff_max_seconds,
    )
    return TriggerDispatcher(
        engine,
        workers=settings.trigger_workers,
        queue_size=settings.trigger_queue_size,
    )
