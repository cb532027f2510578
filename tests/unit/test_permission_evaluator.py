"""Unit tests for PermissionEvaluator over Firestore repositories backed by the fake store."""

from fieldops.application.dtos.identity import Identity, UserProfile
from fieldops.application.services.permission_evaluator import (
    REASON_MISSING_PERMISSION,
    REASON_NO_ROLES,
    REASON_ROLES_MISSING,
    PermissionEvaluator,
)
from fieldops.domain.permissions import ActionGrant, BlanketGrant
from fieldops.infrastructure.firebase.collections import COLLECTION_ROLES
from fieldops.infrastructure.firebase.repositories import (
    FirestoreRoleRepository,
    FirestoreUserRoleRepository,
)
from tests.factories import COMPANY_A, COMPANY_B, add_role, add_user
from tests.fakes import FakeFirestoreClient


def identity(user_id: str, company_id: str | None) -> Identity:
    return Identity(user_id, company_id, UserProfile(id=user_id, company_id=company_id))


def make_evaluator(store: FakeFirestoreClient) -> PermissionEvaluator:
    return PermissionEvaluator(FirestoreRoleRepository(store), FirestoreUserRoleRepository(store))


async def test_zero_roles_denies_everything(store: FakeFirestoreClient) -> None:
    add_user(store, "u1", COMPANY_A)
    decision = await make_evaluator(store).evaluate(identity("u1", COMPANY_A), "dashboard:view")
    assert not decision.allowed
    assert decision.reason == REASON_NO_ROLES


async def test_any_authenticated_allows_without_roles(store: FakeFirestoreClient) -> None:
    add_user(store, "u1", COMPANY_A)
    decision = await make_evaluator(store).evaluate(identity("u1", COMPANY_A), "*")
    assert decision.allowed


async def test_blanket_grant_allows_any_action(store: FakeFirestoreClient) -> None:
    add_role(store, "r1", COMPANY_A, {"work-orders": True})
    add_user(store, "u1", COMPANY_A, ("r1",))
    evaluator = make_evaluator(store)
    for action in ("view", "delete", "process_payment"):
        assert (await evaluator.evaluate(identity("u1", COMPANY_A), f"work-orders:{action}")).allowed


async def test_action_map_allows_only_listed_actions(store: FakeFirestoreClient) -> None:
    add_role(store, "r1", COMPANY_A, {"work-orders": {"can_access": True, "view": True}})
    add_user(store, "u1", COMPANY_A, ("r1",))
    evaluator = make_evaluator(store)
    me = identity("u1", COMPANY_A)
    assert (await evaluator.evaluate(me, "work-orders:view")).allowed
    assert (await evaluator.evaluate(me, "work-orders")).allowed
    denied = await evaluator.evaluate(me, "work-orders:edit")
    assert not denied.allowed
    assert denied.reason == REASON_MISSING_PERMISSION
    assert not (await evaluator.evaluate(me, "invoicing:view")).allowed


async def test_roles_are_additive(store: FakeFirestoreClient) -> None:
    add_role(store, "viewer", COMPANY_A, {"invoicing": {"view": True}})
    add_role(store, "editor", COMPANY_A, {"invoicing": {"edit": True}})
    add_user(store, "u1", COMPANY_A, ("viewer", "editor"))
    evaluator = make_evaluator(store)
    me = identity("u1", COMPANY_A)
    assert (await evaluator.evaluate(me, "invoicing:view")).allowed
    assert (await evaluator.evaluate(me, "invoicing:edit")).allowed
    assert not (await evaluator.evaluate(me, "invoicing:delete")).allowed


async def test_manage_action_implies_others(store: FakeFirestoreClient) -> None:
    add_role(store, "r1", COMPANY_A, {"todos": {"manage": True}})
    add_user(store, "u1", COMPANY_A, ("r1",))
    assert (await make_evaluator(store).evaluate(identity("u1", COMPANY_A), "todos:delete")).allowed


async def test_assigned_role_missing_denies(store: FakeFirestoreClient) -> None:
    add_user(store, "u1", COMPANY_A, ("ghost",))
    decision = await make_evaluator(store).evaluate(identity("u1", COMPANY_A), "dashboard:view")
    assert not decision.allowed
    assert decision.reason == REASON_ROLES_MISSING


async def test_role_from_other_company_is_ignored(store: FakeFirestoreClient) -> None:
    """An assignment pointing at another tenant's role grants nothing."""
    add_role(store, "foreign", COMPANY_B, {"work-orders": True})
    add_role(store, "own", COMPANY_A, {"dashboard": {"view": True}})
    add_user(store, "u1", COMPANY_A, ("foreign", "own"))
    evaluator = make_evaluator(store)
    assert not (await evaluator.evaluate(identity("u1", COMPANY_A), "work-orders:view")).allowed


async def test_malformed_role_permissions_skipped(store: FakeFirestoreClient) -> None:
    store.put(
        COLLECTION_ROLES,
        "broken",
        {"name": "broken", "company_id": COMPANY_A, "permissions": "everything"},
    )
    add_role(store, "ok", COMPANY_A, {"dashboard": {"view": True}})
    add_user(store, "u1", COMPANY_A, ("broken", "ok"))
    evaluator = make_evaluator(store)
    me = identity("u1", COMPANY_A)
    assert (await evaluator.evaluate(me, "dashboard:view")).allowed
    assert not (await evaluator.evaluate(me, "work-orders:view")).allowed


async def test_platform_super_admin_allows_everything(store: FakeFirestoreClient) -> None:
    add_role(store, "owner-role", None, {}, is_super_admin=True)
    add_user(store, "root", None, ("owner-role",))
    evaluator = make_evaluator(store)
    me = identity("root", None)
    assert (await evaluator.evaluate(me, "payroll:approve")).allowed
    assert await evaluator.is_super_admin(me)


async def test_super_admin_flag_ignored_for_company_users(store: FakeFirestoreClient) -> None:
    add_role(store, "fake-admin", COMPANY_A, {}, is_super_admin=True)
    add_user(store, "u1", COMPANY_A, ("fake-admin",))
    evaluator = make_evaluator(store)
    me = identity("u1", COMPANY_A)
    assert not (await evaluator.evaluate(me, "payroll:approve")).allowed
    assert not await evaluator.is_super_admin(me)


async def test_invalid_permission_string_denies(store: FakeFirestoreClient) -> None:
    add_role(store, "r1", COMPANY_A, {"work-orders": True})
    add_user(store, "u1", COMPANY_A, ("r1",))
    assert not (await make_evaluator(store).evaluate(identity("u1", COMPANY_A), ":view")).allowed


async def test_effective_permissions_merges_roles(store: FakeFirestoreClient) -> None:
    add_role(store, "a", COMPANY_A, {"invoicing": {"view": True}, "reports": True})
    add_role(store, "b", COMPANY_A, {"invoicing": {"edit": True}})
    add_user(store, "u1", COMPANY_A, ("a", "b"))
    grants = await make_evaluator(store).effective_permissions(identity("u1", COMPANY_A))
    assert grants["invoicing"] == ActionGrant({"view": True, "edit": True})
    assert isinstance(grants["reports"], BlanketGrant)


async def test_evaluation_is_deterministic(store: FakeFirestoreClient) -> None:
    add_role(store, "r1", COMPANY_A, {"work-orders": {"view": True}})
    add_user(store, "u1", COMPANY_A, ("r1",))
    evaluator = make_evaluator(store)
    me = identity("u1", COMPANY_A)
    results = [(await evaluator.evaluate(me, "work-orders:view")).allowed for _ in range(3)]
    assert results == [True, True, True]
