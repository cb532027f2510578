"""Request authorizer: bearer token -> identity -> tenant check -> permission check.

Every failure is a domain exception; the HTTP layer maps them to 401/403/500.
Nothing is cached across calls.
"""

from __future__ import annotations

from fieldops.application.dtos.identity import AuthResult, Identity
from fieldops.application.interfaces.repositories import IProfileRepository
from fieldops.application.interfaces.services import ITokenVerifier
from fieldops.application.services.permission_evaluator import PermissionEvaluator
from fieldops.domain.exceptions import (
    AuthenticationException,
    CrossTenantAccessException,
    PermissionDeniedException,
    ProfileNotFoundException,
    ValidationException,
)
from fieldops.shared.telemetry.logging import get_logger
from fieldops.shared.telemetry.tracing import add_span_attributes, traced

logger = get_logger(__name__)

MISSING_TOKEN_MESSAGE = "Authorization header is missing or invalid"
INVALID_TOKEN_MESSAGE = "Invalid authentication token"


class RequestAuthorizer:
    def __init__(
        self,
        profile_repo: IProfileRepository,
        evaluator: PermissionEvaluator,
        token_verifier: ITokenVerifier,
    ) -> None:
        self._profile_repo = profile_repo
        self._evaluator = evaluator
        self._verify = token_verifier

    @property
    def evaluator(self) -> PermissionEvaluator:
        return self._evaluator

    async def resolve_identity(self, token: str | None) -> Identity:
        """Verify the token and load the caller's profile."""
        if not token or not token.strip():
            raise AuthenticationException(MISSING_TOKEN_MESSAGE)
        try:
            claims = self._verify(token.strip())
        except ValueError as e:
            logger.info("Token verification failed: %s", e)
            raise AuthenticationException(INVALID_TOKEN_MESSAGE) from e
        user_id = claims.get("sub")
        if not user_id:
            raise AuthenticationException(INVALID_TOKEN_MESSAGE)

        profile = await self._profile_repo.get_by_id(str(user_id))
        if profile is None:
            raise ProfileNotFoundException(str(user_id))
        if not profile.is_active:
            raise AuthenticationException("User account is disabled")
        return Identity(user_id=profile.id, company_id=profile.company_id, profile=profile)

    @traced("auth.authorize")
    async def authorize(
        self,
        token: str | None,
        required_permission: str,
        target_tenant_id: str | None = None,
    ) -> AuthResult:
        """Authenticate and check one permission.

        Args:
            token: Raw bearer token (without the ``Bearer`` prefix).
            required_permission: ``"<module>:<action>"`` or ``"*"``.
            target_tenant_id: Company the request operates on, when it names one.

        Raises:
            AuthenticationException: Missing/invalid token or inactive user.
            ProfileNotFoundException: Valid token but no profile.
            CrossTenantAccessException: Tenant user targeting another company.
            PermissionDeniedException: No role grants the permission.
        """
        identity = await self.resolve_identity(token)
        add_span_attributes(user_id=identity.user_id, platform=identity.is_platform)

        if (
            target_tenant_id
            and not identity.is_platform
            and identity.company_id != target_tenant_id
        ):
            logger.warning(
                "Cross-tenant access denied: user=%s company=%s target=%s",
                identity.user_id,
                identity.company_id,
                target_tenant_id,
            )
            raise CrossTenantAccessException(identity.company_id, target_tenant_id)

        decision = await self._evaluator.evaluate(identity, required_permission)
        if not decision.allowed:
            raise PermissionDeniedException(required_permission, decision.reason)

        tenant_id = identity.company_id
        if identity.is_platform and target_tenant_id:
            tenant_id = target_tenant_id
        return AuthResult(identity=identity, tenant_id=tenant_id)


def require_tenant(auth: AuthResult) -> str:
    """Return the tenant a tenant-scoped operation acts on.

    Platform identities must name the company explicitly (``company_id`` query).
    """
    if auth.tenant_id is None:
        raise ValidationException(
            "company_id is required for platform users on company-scoped resources",
            field="company_id",
        )
    return auth.tenant_id


def ensure_tenant_access(tenant_id: str | None, company_id: str | None) -> None:
    """Resource-level ownership check after a document has been loaded."""
    if tenant_id != company_id:
        raise CrossTenantAccessException(tenant_id, company_id)
