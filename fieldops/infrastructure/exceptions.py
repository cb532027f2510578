"""Infrastructure exceptions for document-store and outbound operations.

DocumentExistsError and ConcurrentUpdateError are plain Exceptions: they are
control-flow signals (a create-if-absent or a guarded update lost a race) that
repositories translate, never HTTP errors.
"""

from fieldops.domain.exceptions import FieldOpsException


class DocumentExistsError(Exception):
    """Raised when createDocument returns 409 (document ID already exists)."""


class ConcurrentUpdateError(Exception):
    """Raised when a guarded update finds the document changed since it was read."""


class StoreNotConfiguredError(FieldOpsException):
    """Firestore credentials are missing; the app runs but cannot serve data."""

    def __init__(self) -> None:
        super().__init__(
            "Document store is not configured",
            "STORE_UNAVAILABLE",
            {"operation": "init"},
        )

