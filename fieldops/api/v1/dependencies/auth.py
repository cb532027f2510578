"""Authentication and permission dependencies (composition root).

``require_permission("<module>:<action>")`` is the single entry point for
protected routes. The optional ``company_id`` query parameter names the
target tenant; for tenant users it must match their own company.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from fieldops.application.dtos.identity import AuthResult
from fieldops.application.interfaces.services import ITokenVerifier
from fieldops.application.services.permission_evaluator import PermissionEvaluator
from fieldops.application.services.request_authorizer import RequestAuthorizer
from fieldops.infrastructure.firebase.repositories import (
    FirestoreProfileRepository,
    FirestoreRoleRepository,
    FirestoreUserRoleRepository,
)
from fieldops.infrastructure.security.jwt import verify_access_token

from .stores import get_profile_repo, get_role_repo, get_user_role_repo

_http_bearer = HTTPBearer(auto_error=False)


def get_token_verifier() -> ITokenVerifier:
    return verify_access_token


def get_permission_evaluator(
    role_repo: Annotated[FirestoreRoleRepository, Depends(get_role_repo)],
    user_role_repo: Annotated[FirestoreUserRoleRepository, Depends(get_user_role_repo)],
) -> PermissionEvaluator:
    """One evaluator per request, so its role cache never outlives the request."""
    return PermissionEvaluator(role_repo, user_role_repo)


def get_request_authorizer(
    profile_repo: Annotated[FirestoreProfileRepository, Depends(get_profile_repo)],
    evaluator: Annotated[PermissionEvaluator, Depends(get_permission_evaluator)],
    token_verifier: Annotated[ITokenVerifier, Depends(get_token_verifier)],
) -> RequestAuthorizer:
    return RequestAuthorizer(profile_repo, evaluator, token_verifier)


def require_permission(permission: str):
    """Dependency factory: authenticate and require ``permission``; returns AuthResult."""

    async def _require(
        credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
        authorizer: Annotated[RequestAuthorizer, Depends(get_request_authorizer)],
        company_id: Annotated[
            str | None,
            Query(description="Target company (required for platform users on company resources)"),
        ] = None,
    ) -> AuthResult:
        token = credentials.credentials if credentials else None
        return await authorizer.authorize(token, permission, company_id or None)

    return _require

