"""Domain exceptions for the fieldops application.

Business-rule and access-control failures, independent of FastAPI and of the
document store. The presentation layer maps error_code to an HTTP status in
fieldops.core.exception_handlers.
"""

from typing import Any


class FieldOpsException(Exception):
    """Base exception for all fieldops application errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. resource_id, permission).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON error body used by the HTTP exception handler."""
        body: dict[str, Any] = {"error": self.error_code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationException(FieldOpsException):
    """Raised when input validation fails outside of request-schema parsing."""

    def __init__(self, message: str, field: str | None = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class AuthenticationException(FieldOpsException):
    """Raised when the bearer token is missing, malformed, expired or forged."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, "AUTHENTICATION_ERROR")


class ProfileNotFoundException(FieldOpsException):
    """Raised when the token is valid but no user profile exists for its subject.

    This is a provisioning problem, not a credential problem, so it maps to 403.
    """

    def __init__(self, user_id: str) -> None:
        super().__init__(
            "User profile not found",
            "PROFILE_NOT_FOUND",
            {"user_id": user_id},
        )


class CrossTenantAccessException(FieldOpsException):
    """Raised when a tenant-scoped identity targets another tenant's resource."""

    def __init__(self, company_id: str | None, target_company_id: str | None) -> None:
        super().__init__(
            "Forbidden: cross-tenant access denied",
            "CROSS_TENANT_ACCESS",
            {"company_id": company_id, "target_company_id": target_company_id},
        )


class PermissionDeniedException(FieldOpsException):
    """Raised when an authenticated identity lacks the required permission.

    The message names the exact permission string; role internals are not leaked.
    """

    def __init__(self, permission: str, reason: str | None = None) -> None:
        details: dict[str, Any] = {"permission": permission}
        if reason:
            details["reason"] = reason
        super().__init__(
            f"Forbidden: missing required permission ({permission})",
            "PERMISSION_DENIED",
            details,
        )


class StoreUnavailableException(FieldOpsException):
    """Raised when the document store cannot be read or written."""

    def __init__(self, message: str = "Document store unavailable", operation: str | None = None) -> None:
        details = {"operation": operation} if operation else {}
        super().__init__(message, "STORE_UNAVAILABLE", details)


class ResourceNotFoundException(FieldOpsException):
    """Raised when a requested resource is not found (or not visible to the tenant)."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class ConflictException(FieldOpsException):
    """Raised when a write would break a uniqueness rule (e.g. status name per tenant)."""

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message, "CONFLICT", details)


class StatusInUseException(FieldOpsException):
    """Raised when deleting or renaming a workflow status that is still referenced."""

    def __init__(
        self,
        status_name: str,
        trigger_ids: list[str],
        work_order_count: int,
    ) -> None:
        super().__init__(
            f"Workflow status '{status_name}' is still referenced",
            "STATUS_IN_USE",
            {
                "status_name": status_name,
                "trigger_ids": trigger_ids,
                "work_order_count": work_order_count,
            },
        )


class UnknownWorkflowStatusException(FieldOpsException):
    """Raised when a trigger or work order names a status the tenant does not define."""

    def __init__(self, status_name: str, company_id: str) -> None:
        super().__init__(
            f"Unknown workflow status: {status_name}",
            "UNKNOWN_WORKFLOW_STATUS",
            {"status_name": status_name, "company_id": company_id},
        )


class TriggerActionException(FieldOpsException):
    """Raised by an action executor when a workflow action fails.

    Never surfaced to the request that changed the status; the engine logs it,
    retries, and finally dead-letters the run.
    """

    def __init__(self, action_type: str, reason: str, **details: Any) -> None:
        super().__init__(
            f"Workflow action '{action_type}' failed: {reason}",
            "TRIGGER_ACTION_FAILED",
            {"action_type": action_type, "reason": reason, **details},
        )
