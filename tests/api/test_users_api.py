"""API tests for /users/me and user-role assignment."""

from httpx import AsyncClient

from tests.factories import COMPANY_A, COMPANY_B, add_user, bearer, role_id_named
from tests.fakes import FakeFirestoreClient


async def test_me_returns_effective_permissions(
    client: AsyncClient, seeded: FakeFirestoreClient
) -> None:
    response = await client.get("/api/v1/users/me", headers=bearer("tech-a"))
    assert response.status_code == 200
    me = response.json()
    assert me["id"] == "tech-a"
    assert me["company_id"] == COMPANY_A
    assert me["is_platform"] is False
    assert me["is_super_admin"] is False
    assert me["permissions"] == {
        "work-orders": {"can_access": True, "view": True},
        "automation": {"view": True},
    }


async def test_me_for_platform_owner(client: AsyncClient, seeded: FakeFirestoreClient) -> None:
    me = (await client.get("/api/v1/users/me", headers=bearer("owner"))).json()
    assert me["is_platform"] is True
    assert me["is_super_admin"] is True


async def test_me_without_roles(client: AsyncClient, seeded: FakeFirestoreClient) -> None:
    add_user(seeded, "newbie", COMPANY_A)
    response = await client.get("/api/v1/users/me", headers=bearer("newbie"))
    assert response.status_code == 200
    assert response.json()["permissions"] == {}


async def test_assign_list_and_remove_role(
    client: AsyncClient, seeded: FakeFirestoreClient
) -> None:
    headers = bearer("admin-a")
    dispatcher_role = role_id_named(seeded, COMPANY_A, "Dispatcher")

    assigned = await client.post(
        "/api/v1/users/tech-a/roles", json={"role_id": dispatcher_role}, headers=headers
    )
    assert assigned.status_code == 201
    assert assigned.json()["assigned_by"] == "admin-a"
    assert assigned.json()["company_id"] == COMPANY_A

    again = await client.post(
        "/api/v1/users/tech-a/roles", json={"role_id": dispatcher_role}, headers=headers
    )
    assert again.json()["id"] == assigned.json()["id"]

    roles = await client.get("/api/v1/users/tech-a/roles", headers=headers)
    assert sorted(r["name"] for r in roles.json()) == ["Dispatcher", "Field Tech"]

    removed = await client.delete(
        f"/api/v1/users/tech-a/roles/{dispatcher_role}", headers=headers
    )
    assert removed.status_code == 204
    gone = await client.delete(f"/api/v1/users/tech-a/roles/{dispatcher_role}", headers=headers)
    assert gone.status_code == 404


async def test_assigned_role_grants_permission(
    client: AsyncClient, seeded: FakeFirestoreClient
) -> None:
    assert (await client.get("/api/v1/invoices", headers=bearer("tech-a"))).status_code == 403
    office = role_id_named(seeded, COMPANY_A, "Office Manager")
    await client.post(
        "/api/v1/users/tech-a/roles", json={"role_id": office}, headers=bearer("admin-a")
    )
    assert (await client.get("/api/v1/invoices", headers=bearer("tech-a"))).status_code == 200


async def test_cannot_assign_other_company_role(
    client: AsyncClient, seeded: FakeFirestoreClient
) -> None:
    b_role = role_id_named(seeded, COMPANY_B, "Technician")
    response = await client.post(
        "/api/v1/users/tech-a/roles", json={"role_id": b_role}, headers=bearer("admin-a")
    )
    assert response.status_code == 403


async def test_cannot_assign_to_user_of_other_company(
    client: AsyncClient, seeded: FakeFirestoreClient
) -> None:
    a_role = role_id_named(seeded, COMPANY_A, "Technician")
    response = await client.post(
        "/api/v1/users/admin-b/roles", json={"role_id": a_role}, headers=bearer("admin-a")
    )
    assert response.status_code == 403
    assert response.json()["error"] == "CROSS_TENANT_ACCESS"


async def test_technician_cannot_assign_roles(
    client: AsyncClient, seeded: FakeFirestoreClient
) -> None:
    response = await client.post(
        "/api/v1/users/tech-a/roles", json={"role_id": "tech-role"}, headers=bearer("tech-a")
    )
    assert response.status_code == 403
