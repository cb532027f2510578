"""Executors for workflow trigger actions.

Each executor receives an ActionContext and returns a small JSON-able result
dict recorded on the trigger run. Failures raise TriggerActionException (or
let store errors propagate); the engine owns retry and dead-lettering.
Action types without an executor are skipped by the engine.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import httpx

from fieldops.application.dtos.work_order import InvoiceDraft, WorkOrderResult
from fieldops.application.dtos.workflow import StatusChange, WorkflowTriggerResult
from fieldops.application.interfaces.repositories import (
    ICustomerRepository,
    IInvoiceRepository,
    INotificationRepository,
    IProfileRepository,
)
from fieldops.application.interfaces.services import INotificationSender
from fieldops.domain.enums import TriggerActionType
from fieldops.domain.exceptions import TriggerActionException
from fieldops.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

NOTIFICATION_TYPE_STATUS_UPDATE = "work_order_status_update"


@dataclass(frozen=True)
class ActionContext:
    change: StatusChange
    work_order: WorkOrderResult
    trigger: WorkflowTriggerResult

    @property
    def params(self) -> dict[str, Any]:
        return self.trigger.action.params

    @property
    def action_type(self) -> str:
        return self.trigger.action.type


ActionExecutor = Callable[[ActionContext], Awaitable[dict[str, Any]]]


def default_status_message(ctx: ActionContext) -> str:
    return (
        f"Your work order #{ctx.work_order.work_order_number} has been updated "
        f"to '{ctx.change.new_status}'."
    )


class CreateInvoiceDraftExecutor:
    """Creates a draft invoice (no line items, zero totals) for the work order's customer."""

    def __init__(
        self,
        invoice_repo: IInvoiceRepository,
        customer_repo: ICustomerRepository,
        due_days: int,
    ) -> None:
        self._invoices = invoice_repo
        self._customers = customer_repo
        self._due_days = due_days

    async def __call__(self, ctx: ActionContext) -> dict[str, Any]:
        work_order = ctx.work_order
        if not work_order.customer_id:
            raise TriggerActionException(
                ctx.action_type, "work order has no customer", work_order_id=work_order.id
            )
        customer = await self._customers.get_by_id(work_order.customer_id)
        if customer is None or customer.company_id != work_order.company_id:
            raise TriggerActionException(
                ctx.action_type, "customer not found", customer_id=work_order.customer_id
            )
        invoice = await self._invoices.create_draft(
            InvoiceDraft(
                company_id=work_order.company_id,
                customer_id=work_order.customer_id,
                location_id=work_order.location_id,
                work_order_id=work_order.id,
                due_days=int(ctx.params.get("due_days") or self._due_days),
            )
        )
        logger.info(
            "Draft invoice %s created for work order %s", invoice.invoice_number, work_order.id
        )
        return {"invoice_id": invoice.id, "invoice_number": invoice.invoice_number}


class NotifyCustomerExecutor:
    """Records an in-app notification for the customer and sends it to their email."""

    def __init__(
        self,
        customer_repo: ICustomerRepository,
        notification_repo: INotificationRepository,
        sender: INotificationSender,
    ) -> None:
        self._customers = customer_repo
        self._notifications = notification_repo
        self._sender = sender

    async def __call__(self, ctx: ActionContext) -> dict[str, Any]:
        work_order = ctx.work_order
        if not work_order.customer_id:
            raise TriggerActionException(
                ctx.action_type, "work order has no customer", work_order_id=work_order.id
            )
        customer = await self._customers.get_by_id(work_order.customer_id)
        if customer is None or customer.company_id != work_order.company_id:
            raise TriggerActionException(
                ctx.action_type, "customer not found", customer_id=work_order.customer_id
            )
        message = ctx.params.get("message") or default_status_message(ctx)
        notification_id = await self._notifications.create(
            {
                "company_id": work_order.company_id,
                "customer_id": customer.id,
                "user_id": None,
                "type": NOTIFICATION_TYPE_STATUS_UPDATE,
                "message": message,
                "related_entity": {"type": "work_order", "id": work_order.id},
            }
        )
        recipients = [customer.email] if customer.email else []
        if recipients:
            subject = ctx.params.get("subject") or (
                f"Work order #{work_order.work_order_number} update"
            )
            await self._sender.send(recipients, subject, message)
        return {"notification_id": notification_id, "delivered_to": recipients}


class NotifyUserExecutor:
    """Notifies an internal user: params.user_id, else the assigned technician."""

    def __init__(
        self,
        profile_repo: IProfileRepository,
        notification_repo: INotificationRepository,
        sender: INotificationSender,
    ) -> None:
        self._profiles = profile_repo
        self._notifications = notification_repo
        self._sender = sender

    async def __call__(self, ctx: ActionContext) -> dict[str, Any]:
        work_order = ctx.work_order
        user_id = ctx.params.get("user_id") or work_order.assigned_technician_id
        if not user_id:
            raise TriggerActionException(
                ctx.action_type, "no user_id and no assigned technician"
            )
        profile = await self._profiles.get_by_id(user_id)
        if profile is None or profile.company_id != work_order.company_id:
            raise TriggerActionException(ctx.action_type, "user not found", user_id=user_id)
        message = ctx.params.get("message") or (
            f"Work order #{work_order.work_order_number} moved to '{ctx.change.new_status}'."
        )
        notification_id = await self._notifications.create(
            {
                "company_id": work_order.company_id,
                "customer_id": None,
                "user_id": profile.id,
                "type": NOTIFICATION_TYPE_STATUS_UPDATE,
                "message": message,
                "related_entity": {"type": "work_order", "id": work_order.id},
            }
        )
        recipients = [profile.email] if profile.email else []
        if recipients:
            subject = ctx.params.get("subject") or (
                f"Work order #{work_order.work_order_number} update"
            )
            await self._sender.send(recipients, subject, message)
        return {"notification_id": notification_id, "delivered_to": recipients}


class WebhookExecutor:
    """POSTs the status change as JSON to params.url."""

    def __init__(self, http_client: httpx.AsyncClient, timeout: float) -> None:
        self._http = http_client
        self._timeout = timeout

    async def __call__(self, ctx: ActionContext) -> dict[str, Any]:
        url = ctx.params.get("url")
        if not isinstance(url, str) or not url.startswith(("http://", "https://")):
            raise TriggerActionException(ctx.action_type, "params.url must be an http(s) URL")
        headers = {
            str(k): str(v)
            for k, v in (ctx.params.get("headers") or {}).items()
        }
        change = ctx.change
        payload = {
            "trigger_id": ctx.trigger.id,
            "trigger_event": ctx.trigger.trigger_event.value,
            "workflow_status_name": ctx.trigger.workflow_status_name,
            "change": {
                "change_id": change.change_id,
                "old_status": change.old_status,
                "new_status": change.new_status,
                "changed_by": change.changed_by,
                "occurred_at": change.occurred_at.isoformat() if change.occurred_at else None,
            },
            "work_order": {
                "id": ctx.work_order.id,
                "company_id": ctx.work_order.company_id,
                "work_order_number": ctx.work_order.work_order_number,
                "status": ctx.work_order.status,
                "customer_id": ctx.work_order.customer_id,
                "location_id": ctx.work_order.location_id,
            },
        }
        try:
            resp = await self._http.post(url, json=payload, headers=headers, timeout=self._timeout)
        except httpx.HTTPError as e:
            raise TriggerActionException(ctx.action_type, f"request failed: {e}", url=url) from e
        if resp.status_code >= 400:
            raise TriggerActionException(
                ctx.action_type, f"endpoint returned HTTP {resp.status_code}", url=url
            )
        return {"status_code": resp.status_code}


def build_executors(
    *,
    invoice_repo: IInvoiceRepository,
    customer_repo: ICustomerRepository,
    profile_repo: IProfileRepository,
    notification_repo: INotificationRepository,
    sender: INotificationSender,
    http_client: httpx.AsyncClient,
    invoice_due_days: int,
    webhook_timeout: float,
) -> dict[str, ActionExecutor]:
    """Action type -> executor for every action this service can run."""
    return {
        TriggerActionType.CREATE_INVOICE_DRAFT.value: CreateInvoiceDraftExecutor(
            invoice_repo, customer_repo, invoice_due_days
        ),
        TriggerActionType.NOTIFY_CUSTOMER.value: NotifyCustomerExecutor(
            customer_repo, notification_repo, sender
        ),
        TriggerActionType.NOTIFY_USER.value: NotifyUserExecutor(
            profile_repo, notification_repo, sender
        ),
        TriggerActionType.WEBHOOK.value: WebhookExecutor(http_client, webhook_timeout),
    }
