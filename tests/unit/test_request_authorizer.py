"""Unit tests for RequestAuthorizer: token, profile, tenant and permission checks in order."""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from fieldops.application.dtos.identity import AuthResult, Identity, UserProfile
from fieldops.application.services.permission_evaluator import PermissionEvaluator
from fieldops.application.services.request_authorizer import (
    RequestAuthorizer,
    ensure_tenant_access,
    require_tenant,
)
from fieldops.domain.exceptions import (
    AuthenticationException,
    CrossTenantAccessException,
    PermissionDeniedException,
    ProfileNotFoundException,
    ValidationException,
)
from fieldops.infrastructure.firebase.repositories import (
    FirestoreProfileRepository,
    FirestoreRoleRepository,
    FirestoreUserRoleRepository,
)
from fieldops.infrastructure.security.jwt import issue_access_token, verify_access_token
from tests.factories import COMPANY_A, COMPANY_B, add_role, add_user, make_token
from tests.fakes import FakeFirestoreClient


def make_authorizer(store: FakeFirestoreClient) -> RequestAuthorizer:
    evaluator = PermissionEvaluator(
        FirestoreRoleRepository(store), FirestoreUserRoleRepository(store)
    )
    return RequestAuthorizer(FirestoreProfileRepository(store), evaluator, verify_access_token)


@pytest.fixture
def tenant_store(store: FakeFirestoreClient) -> FakeFirestoreClient:
    add_role(store, "viewer", COMPANY_A, {"work-orders": {"view": True}})
    add_user(store, "u1", COMPANY_A, ("viewer",))
    add_role(store, "root-role", None, {}, is_super_admin=True)
    add_user(store, "root", None, ("root-role",))
    return store


@pytest.mark.parametrize("token", [None, "", "   "])
async def test_missing_token_is_authentication_error(
    tenant_store: FakeFirestoreClient, token
) -> None:
    with pytest.raises(AuthenticationException):
        await make_authorizer(tenant_store).authorize(token, "work-orders:view")


async def test_garbage_token_is_authentication_error(tenant_store: FakeFirestoreClient) -> None:
    with pytest.raises(AuthenticationException) as exc_info:
        await make_authorizer(tenant_store).authorize("not-a-jwt", "work-orders:view")
    assert exc_info.value.message == "Invalid authentication token"


async def test_expired_token_is_authentication_error(tenant_store: FakeFirestoreClient) -> None:
    token = issue_access_token("u1", ttl=timedelta(minutes=-5))
    with pytest.raises(AuthenticationException):
        await make_authorizer(tenant_store).authorize(token, "work-orders:view")


async def test_valid_token_without_profile_is_profile_not_found(
    tenant_store: FakeFirestoreClient,
) -> None:
    with pytest.raises(ProfileNotFoundException):
        await make_authorizer(tenant_store).authorize(make_token("nobody"), "*")


async def test_inactive_user_is_authentication_error(store: FakeFirestoreClient) -> None:
    add_user(store, "gone", COMPANY_A, is_active=False)
    with pytest.raises(AuthenticationException) as exc_info:
        await make_authorizer(store).authorize(make_token("gone"), "*")
    assert exc_info.value.message == "User account is disabled"


async def test_allowed_returns_identity_and_own_tenant(tenant_store: FakeFirestoreClient) -> None:
    auth = await make_authorizer(tenant_store).authorize(make_token("u1"), "work-orders:view")
    assert auth.identity.user_id == "u1"
    assert auth.tenant_id == COMPANY_A
    assert not auth.identity.is_platform


async def test_missing_permission_names_permission(tenant_store: FakeFirestoreClient) -> None:
    with pytest.raises(PermissionDeniedException) as exc_info:
        await make_authorizer(tenant_store).authorize(make_token("u1"), "work-orders:delete")
    assert exc_info.value.details["permission"] == "work-orders:delete"


async def test_cross_tenant_rejected_before_permission_evaluation(
    tenant_store: FakeFirestoreClient,
) -> None:
    authorizer = make_authorizer(tenant_store)
    authorizer.evaluator.evaluate = AsyncMock()
    with pytest.raises(CrossTenantAccessException):
        await authorizer.authorize(make_token("u1"), "work-orders:view", COMPANY_B)
    authorizer.evaluator.evaluate.assert_not_called()


async def test_same_tenant_target_is_allowed(tenant_store: FakeFirestoreClient) -> None:
    auth = await make_authorizer(tenant_store).authorize(
        make_token("u1"), "work-orders:view", COMPANY_A
    )
    assert auth.tenant_id == COMPANY_A


async def test_platform_user_acts_on_target_tenant(tenant_store: FakeFirestoreClient) -> None:
    authorizer = make_authorizer(tenant_store)
    auth = await authorizer.authorize(make_token("root"), "work-orders:edit", COMPANY_B)
    assert auth.identity.is_platform
    assert auth.tenant_id == COMPANY_B
    platform_only = await authorizer.authorize(make_token("root"), "roles:view")
    assert platform_only.tenant_id is None


async def test_repeated_calls_give_same_decision(tenant_store: FakeFirestoreClient) -> None:
    authorizer = make_authorizer(tenant_store)
    token = make_token("u1")
    for _ in range(3):
        auth = await authorizer.authorize(token, "work-orders:view")
        assert auth.tenant_id == COMPANY_A


def test_require_tenant_rejects_missing_tenant() -> None:
    identity = Identity("root", None, UserProfile(id="root", company_id=None))
    with pytest.raises(ValidationException):
        require_tenant(AuthResult(identity=identity, tenant_id=None))
    assert require_tenant(AuthResult(identity=identity, tenant_id=COMPANY_A)) == COMPANY_A


def test_ensure_tenant_access() -> None:
    ensure_tenant_access(COMPANY_A, COMPANY_A)
    with pytest.raises(CrossTenantAccessException):
        ensure_tenant_access(COMPANY_A, COMPANY_B)
