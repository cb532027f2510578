"""API tests for workflow statuses and workflow triggers."""

from httpx import AsyncClient

from tests.factories import COMPANY_A, COMPANY_B, bearer
from tests.fakes import FakeFirestoreClient

DEFAULT_ORDER = ["New", "Scheduled", "In Progress", "On Hold", "Completed", "Invoiced", "Cancelled"]


def invoice_trigger(status_name: str = "Completed") -> dict:
    return {
        "name": "Draft invoice on completion",
        "workflow_status_name": status_name,
        "trigger_event": "on_enter",
        "action": {"type": "create_invoice_draft", "params": {}},
    }


async def test_list_statuses_in_display_order(
    client: AsyncClient, seeded: FakeFirestoreClient
) -> None:
    response = await client.get("/api/v1/workflow-statuses", headers=bearer("admin-a"))
    assert response.status_code == 200
    assert [s["name"] for s in response.json()] == DEFAULT_ORDER
    assert {s["company_id"] for s in response.json()} == {COMPANY_A}


async def test_viewer_can_read_but_not_change_statuses(
    client: AsyncClient, seeded: FakeFirestoreClient
) -> None:
    headers = bearer("tech-a")
    assert (await client.get("/api/v1/workflow-statuses", headers=headers)).status_code == 200
    response = await client.post(
        "/api/v1/workflow-statuses", json={"name": "Parts Ordered"}, headers=headers
    )
    assert response.status_code == 403
    assert "customization:edit" in response.json()["message"]


async def test_status_create_update_delete(
    client: AsyncClient, seeded: FakeFirestoreClient
) -> None:
    headers = bearer("admin-a")
    created = await client.post(
        "/api/v1/workflow-statuses",
        json={"name": "Parts Ordered", "color": "#112233", "sort_order": 35},
        headers=headers,
    )
    assert created.status_code == 201
    status = created.json()
    assert status["group"] == "active"

    names = [s["name"] for s in (await client.get("/api/v1/workflow-statuses", headers=headers)).json()]
    assert names.index("Parts Ordered") == names.index("In Progress") + 1

    updated = await client.put(
        f"/api/v1/workflow-statuses/{status['id']}",
        json={"name": "Awaiting Parts", "is_final_step": False},
        headers=headers,
    )
    assert updated.status_code == 200
    assert updated.json()["name"] == "Awaiting Parts"
    assert updated.json()["color"] == "#112233"

    deleted = await client.delete(f"/api/v1/workflow-statuses/{status['id']}", headers=headers)
    assert deleted.status_code == 204


async def test_status_validation(client: AsyncClient, seeded: FakeFirestoreClient) -> None:
    headers = bearer("admin-a")
    bad_color = await client.post(
        "/api/v1/workflow-statuses", json={"name": "Odd", "color": "red"}, headers=headers
    )
    assert bad_color.status_code == 422
    duplicate = await client.post("/api/v1/workflow-statuses", json={"name": "New"}, headers=headers)
    assert duplicate.status_code == 409


async def test_platform_user_must_name_company(
    client: AsyncClient, seeded: FakeFirestoreClient
) -> None:
    without = await client.get("/api/v1/workflow-statuses", headers=bearer("owner"))
    assert without.status_code == 400
    with_company = await client.get(
        "/api/v1/workflow-statuses", params={"company_id": COMPANY_B}, headers=bearer("owner")
    )
    assert with_company.status_code == 200
    assert {s["company_id"] for s in with_company.json()} == {COMPANY_B}


async def test_trigger_crud(client: AsyncClient, seeded: FakeFirestoreClient) -> None:
    headers = bearer("admin-a")
    created = await client.post("/api/v1/workflow-triggers", json=invoice_trigger(), headers=headers)
    assert created.status_code == 201
    trigger = created.json()
    assert trigger["created_by"] == "admin-a"
    assert trigger["action"] == {"type": "create_invoice_draft", "params": {}}

    listed = await client.get(
        "/api/v1/workflow-triggers", params={"status_name": "Completed"}, headers=headers
    )
    assert [t["id"] for t in listed.json()] == [trigger["id"]]
    other = await client.get(
        "/api/v1/workflow-triggers", params={"status_name": "New"}, headers=headers
    )
    assert other.json() == []

    updated = await client.put(
        f"/api/v1/workflow-triggers/{trigger['id']}",
        json={"trigger_event": "on_exit", "workflow_status_name": "Scheduled"},
        headers=headers,
    )
    assert updated.status_code == 200
    assert updated.json()["trigger_event"] == "on_exit"
    assert updated.json()["workflow_status_name"] == "Scheduled"

    fetched = await client.get(f"/api/v1/workflow-triggers/{trigger['id']}", headers=headers)
    assert fetched.json()["updated_by"] == "admin-a"

    deleted = await client.delete(f"/api/v1/workflow-triggers/{trigger['id']}", headers=headers)
    assert deleted.status_code == 204
    missing = await client.get(f"/api/v1/workflow-triggers/{trigger['id']}", headers=headers)
    assert missing.status_code == 404


async def test_trigger_for_unknown_status_is_422(
    client: AsyncClient, seeded: FakeFirestoreClient
) -> None:
    response = await client.post(
        "/api/v1/workflow-triggers", json=invoice_trigger("Shipped"), headers=bearer("admin-a")
    )
    assert response.status_code == 422
    assert response.json()["error"] == "UNKNOWN_WORKFLOW_STATUS"


async def test_trigger_with_unsupported_action_is_400(
    client: AsyncClient, seeded: FakeFirestoreClient
) -> None:
    body = invoice_trigger()
    body["action"] = {"type": "launch_rocket"}
    response = await client.post("/api/v1/workflow-triggers", json=body, headers=bearer("admin-a"))
    assert response.status_code == 400
    assert response.json()["details"] == {"field": "action.type"}


async def test_trigger_with_bad_event_is_422(
    client: AsyncClient, seeded: FakeFirestoreClient
) -> None:
    body = invoice_trigger()
    body["trigger_event"] = "on_hover"
    response = await client.post("/api/v1/workflow-triggers", json=body, headers=bearer("admin-a"))
    assert response.status_code == 422


async def test_deleting_status_used_by_trigger_is_409(
    client: AsyncClient, seeded: FakeFirestoreClient
) -> None:
    headers = bearer("admin-a")
    trigger = (
        await client.post("/api/v1/workflow-triggers", json=invoice_trigger(), headers=headers)
    ).json()
    statuses = (await client.get("/api/v1/workflow-statuses", headers=headers)).json()
    completed = next(s for s in statuses if s["name"] == "Completed")

    response = await client.delete(f"/api/v1/workflow-statuses/{completed['id']}", headers=headers)
    assert response.status_code == 409
    body = response.json()
    assert body["error"] == "STATUS_IN_USE"
    assert body["details"]["trigger_ids"] == [trigger["id"]]


async def test_triggers_are_tenant_isolated(
    client: AsyncClient, seeded: FakeFirestoreClient
) -> None:
    trigger = (
        await client.post(
            "/api/v1/workflow-triggers", json=invoice_trigger(), headers=bearer("admin-a")
        )
    ).json()
    assert (await client.get("/api/v1/workflow-triggers", headers=bearer("admin-b"))).json() == []
    response = await client.get(
        f"/api/v1/workflow-triggers/{trigger['id']}", headers=bearer("admin-b")
    )
    assert response.status_code == 403
