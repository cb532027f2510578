"""Notification delivery: log-only sender (implements INotificationSender)."""

from __future__ import annotations

import logging

from fieldops.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class LogOnlyNotificationSender:
    """Logs instead of sending email/SMS.

    Used when no mail or SMS provider is configured; a real provider can be
    swapped in through the dispatcher wiring in the app lifespan.
    """

    async def send(self, to: list[str], subject: str, body: str) -> None:
        recipients = [r for r in (to or []) if r]
        subject_preview = (subject or "")[:80]
        if not recipients:
            logger.info("Notify: no recipients, skipping send (subject=%r)", subject_preview)
            return
        logger.info(
            "Notify: would send to %d recipients (subject=%r)",
            len(recipients),
            subject_preview,
        )
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Notify recipients: %s", recipients)
        logger.debug("Notify body (first 500 chars): %s", (body or "")[:500])
