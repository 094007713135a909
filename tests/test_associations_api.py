"""Association, bulk assignment and dashboard endpoint tests."""

from uuid import uuid4

import pytest
from httpx import AsyncClient

ASSOCIATIONS = "/api/v1/associations"


@pytest.fixture
async def inventory(client: AsyncClient) -> dict[str, str]:
    """Create two roles and three permissions, returning name -> id."""
    ids = {}
    for name in ("read_users", "write_users", "delete_users"):
        response = await client.post("/api/v1/permissions", json={"name": name})
        ids[name] = response.json()["id"]
    for name in ("admin", "viewer"):
        response = await client.post("/api/v1/roles", json={"name": name})
        ids[name] = response.json()["id"]
    return ids


class TestAssociations:
    """Granting and revoking single permissions."""

    async def test_create_association(self, client: AsyncClient, inventory: dict[str, str]) -> None:
        response = await client.post(
            ASSOCIATIONS,
            json={"role_id": inventory["admin"], "permission_id": inventory["read_users"]},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["role_id"] == inventory["admin"]
        assert body["permission_id"] == inventory["read_users"]

    async def test_second_create_is_conflict_and_storage_unchanged(
        self, client: AsyncClient, inventory: dict[str, str]
    ) -> None:
        payload = {"role_id": inventory["admin"], "permission_id": inventory["read_users"]}
        await client.post(ASSOCIATIONS, json=payload)

        response = await client.post(ASSOCIATIONS, json=payload)

        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "Association already exists"
        assert body["message"] == 'Role "admin" already has permission "read_users"'
        assert (await client.get(ASSOCIATIONS)).json()["total"] == 1

    async def test_create_with_unknown_role_is_not_found(
        self, client: AsyncClient, inventory: dict[str, str]
    ) -> None:
        response = await client.post(
            ASSOCIATIONS,
            json={"role_id": str(uuid4()), "permission_id": inventory["read_users"]},
        )

        assert response.status_code == 404
        assert response.json()["error"] == "Role does not exist"

    async def test_delete_association(self, client: AsyncClient, inventory: dict[str, str]) -> None:
        params = {"role_id": inventory["admin"], "permission_id": inventory["read_users"]}
        await client.post(ASSOCIATIONS, json=params)

        response = await client.delete(ASSOCIATIONS, params=params)

        assert response.status_code == 200
        assert (await client.get(ASSOCIATIONS)).json()["total"] == 0

    async def test_delete_missing_association_is_not_found(
        self, client: AsyncClient, inventory: dict[str, str]
    ) -> None:
        await client.post(
            ASSOCIATIONS,
            json={"role_id": inventory["viewer"], "permission_id": inventory["read_users"]},
        )

        response = await client.delete(
            ASSOCIATIONS,
            params={"role_id": inventory["admin"], "permission_id": inventory["read_users"]},
        )

        assert response.status_code == 404
        assert response.json()["error"] == "Association does not exist"
        assert (await client.get(ASSOCIATIONS)).json()["total"] == 1

    async def test_delete_requires_both_ids(
        self, client: AsyncClient, inventory: dict[str, str]
    ) -> None:
        response = await client.delete(ASSOCIATIONS, params={"role_id": inventory["admin"]})

        assert response.status_code == 400

    async def test_list_is_flattened_and_filterable(
        self, client: AsyncClient, inventory: dict[str, str]
    ) -> None:
        for role, permission in (
            ("admin", "read_users"),
            ("admin", "write_users"),
            ("viewer", "read_users"),
        ):
            await client.post(
                ASSOCIATIONS,
                json={"role_id": inventory[role], "permission_id": inventory[permission]},
            )

        response = await client.get(ASSOCIATIONS, params={"role_id": inventory["admin"]})

        body = response.json()
        assert body["total"] == 2
        assert [(a["role_name"], a["permission_name"]) for a in body["items"]] == [
            ("admin", "read_users"),
            ("admin", "write_users"),
        ]

        by_permission = await client.get(
            ASSOCIATIONS, params={"permission_id": inventory["read_users"]}
        )
        assert {a["role_name"] for a in by_permission.json()["items"]} == {"admin", "viewer"}


class TestBulkAssociations:
    """Assigning and unassigning several permissions at once."""

    async def test_bulk_assign_skips_existing(
        self, client: AsyncClient, inventory: dict[str, str]
    ) -> None:
        await client.post(
            ASSOCIATIONS,
            json={"role_id": inventory["admin"], "permission_id": inventory["read_users"]},
        )

        response = await client.post(
            f"{ASSOCIATIONS}/bulk",
            json={
                "role_id": inventory["admin"],
                "permission_ids": [
                    inventory["read_users"],
                    inventory["write_users"],
                    inventory["delete_users"],
                ],
                "operation": "assign",
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Successfully assigned 3 permissions to role"
        assert body["affected"] == 2
        assert (await client.get(ASSOCIATIONS)).json()["total"] == 3

    async def test_bulk_unassign(self, client: AsyncClient, inventory: dict[str, str]) -> None:
        for permission in ("read_users", "write_users"):
            await client.post(
                ASSOCIATIONS,
                json={"role_id": inventory["admin"], "permission_id": inventory[permission]},
            )

        response = await client.post(
            f"{ASSOCIATIONS}/bulk",
            json={
                "role_id": inventory["admin"],
                "permission_ids": [inventory["read_users"], inventory["delete_users"]],
                "operation": "unassign",
            },
        )

        assert response.status_code == 200
        assert response.json()["affected"] == 1
        remaining = (await client.get(ASSOCIATIONS)).json()["items"]
        assert [a["permission_name"] for a in remaining] == ["write_users"]

    async def test_bulk_with_unknown_permission_changes_nothing(
        self, client: AsyncClient, inventory: dict[str, str]
    ) -> None:
        missing = str(uuid4())

        response = await client.post(
            f"{ASSOCIATIONS}/bulk",
            json={
                "role_id": inventory["admin"],
                "permission_ids": [inventory["read_users"], missing],
                "operation": "assign",
            },
        )

        assert response.status_code == 404
        assert response.json()["details"]["missing_permission_ids"] == [missing]
        assert (await client.get(ASSOCIATIONS)).json()["total"] == 0

    async def test_bulk_rejects_unknown_operation(
        self, client: AsyncClient, inventory: dict[str, str]
    ) -> None:
        response = await client.post(
            f"{ASSOCIATIONS}/bulk",
            json={
                "role_id": inventory["admin"],
                "permission_ids": [inventory["read_users"]],
                "operation": "toggle",
            },
        )

        assert response.status_code == 400


class TestDashboard:
    """Dashboard statistics."""

    async def test_stats_counts_and_recent_activity(
        self, client: AsyncClient, inventory: dict[str, str]
    ) -> None:
        await client.post(
            ASSOCIATIONS,
            json={"role_id": inventory["admin"], "permission_id": inventory["read_users"]},
        )

        response = await client.get("/api/v1/dashboard/stats")

        assert response.status_code == 200
        body = response.json()
        assert body["total_permissions"] == 3
        assert body["total_roles"] == 2
        assert body["total_associations"] == 1
        activity = body["recent_activity"]
        assert len(activity) == 5
        assert {a["type"] for a in activity} == {"permission_created", "role_created"}
        timestamps = [a["timestamp"] for a in activity]
        assert timestamps == sorted(timestamps, reverse=True)

    async def test_recent_activity_is_capped(self, client: AsyncClient) -> None:
        for i in range(7):
            await client.post("/api/v1/permissions", json={"name": f"perm_{i}"})
            await client.post("/api/v1/roles", json={"name": f"role_{i}"})

        body = (await client.get("/api/v1/dashboard/stats")).json()

        assert body["total_permissions"] == 7
        assert len(body["recent_activity"]) == 10
