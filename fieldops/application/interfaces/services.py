"""Service interfaces (ports) for the application layer."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from fieldops.application.dtos.workflow import StatusChange


class ITokenVerifier(Protocol):
    """Verifies a bearer token and returns its claims (must include ``sub``).

    Raises ValueError for any invalid, expired or forged token.
    """

    def __call__(self, token: str) -> dict[str, Any]: ...


class INotificationSender(Protocol):
    """Delivers a message to external recipients (email, SMS gateway, ...)."""

    async def send(self, to: list[str], subject: str, body: str) -> None:
        """Send; raise on delivery failure so the engine can retry."""


class IStatusChangeDispatcher(Protocol):
    """Hands a status change to background trigger processing without waiting."""

    def submit(self, change: StatusChange) -> bool:
        """Enqueue; False when the change could not be accepted."""
