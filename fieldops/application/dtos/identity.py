"""DTOs for authentication and authorization results."""

from dataclasses import dataclass


@dataclass(frozen=True)
class UserProfile:
    """User profile document (``users/{id}``). company_id None = platform user."""

    id: str
    company_id: str | None
    email: str | None = None
    display_name: str | None = None
    is_active: bool = True


@dataclass(frozen=True)
class Identity:
    """Authenticated caller. Tenant context comes from the profile, never the request."""

    user_id: str
    company_id: str | None
    profile: UserProfile

    @property
    def is_platform(self) -> bool:
        return self.company_id is None


@dataclass(frozen=True)
class PermissionDecision:
    """Outcome of a permission evaluation."""

    allowed: bool
    reason: str | None = None

    @classmethod
    def allow(cls) -> "PermissionDecision":
        return cls(True)

    @classmethod
    def deny(cls, reason: str) -> "PermissionDecision":
        return cls(False, reason)


@dataclass(frozen=True)
class AuthResult:
    """Identity plus the tenant the request acts on.

    tenant_id is the identity's company, or for a platform identity the target
    company it asked for (None when it asked for none).
    """

    identity: Identity
    tenant_id: str | None
