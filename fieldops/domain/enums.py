"""Domain enumerations for fieldops.

Fixed sets of values for roles, workflow statuses, triggers and invoices.
"""

from enum import Enum


class RoleScope(str, Enum):
    """Whether a role applies platform-wide or inside one company."""

    PLATFORM = "platform"
    COMPANY = "company"


class StatusGroup(str, Enum):
    """Lifecycle bucket a workflow status belongs to."""

    START = "start"
    ACTIVE = "active"
    FINAL = "final"
    CANCELLED = "cancelled"


class TriggerEvent(str, Enum):
    """When a trigger fires relative to its workflow status."""

    ON_ENTER = "on_enter"
    ON_EXIT = "on_exit"


class TriggerActionType(str, Enum):
    """Closed set of actions a workflow trigger may run.

    Only some members have executors; the rest are accepted on configuration
    and skipped (with a warning) at run time.
    """

    NOTIFY_USER = "notify_user"
    NOTIFY_CUSTOMER = "notify_customer"
    SEND_EMAIL = "send_email"
    SEND_SMS = "send_sms"
    AUTO_ASSIGN_TECHNICIAN = "auto_assign_technician"
    UPDATE_FIELD = "update_field"
    ADD_CHECKLIST = "add_checklist"
    CREATE_FOLLOW_UP_WO = "create_follow_up_wo"
    CREATE_INVOICE_DRAFT = "create_invoice_draft"
    WEBHOOK = "webhook"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid action type strings."""
        return [t.value for t in cls]


class InvoiceStatus(str, Enum):
    """Invoice lifecycle status."""

    DRAFT = "draft"
    SENT = "sent"
    PARTIAL = "partial"
    PAID = "paid"
    OVERDUE = "overdue"
    VOID = "void"


class TriggerRunStatus(str, Enum):
    """State of one trigger run record (idempotency claim)."""

    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
