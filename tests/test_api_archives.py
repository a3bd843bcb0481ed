import pytest
import pytest_asyncio

from inspection_hub.services.archive import Archives
from inspection_hub.store import EntityName
from tests.factories import auth, seed_client


@pytest_asyncio.fixture()
async def archived(store, admin):
    await seed_client(
        store, "Acme", requests=2, documents_per_request=1, tasks_per_request=1,
        notes_per_task=2,
    )
    return await Archives.archive_client(store, "Acme", admin)


class TestArchiveListing:
    @pytest.mark.asyncio
    async def test_list_archives(self, client, archived):
        resp = await client.get("/archives", headers=auth())

        assert resp.status_code == 200
        data = resp.json()
        assert data["count"] == 1
        (summary,) = data["items"]
        assert summary["client_name"] == "Acme"
        assert summary["deleted_by"] == "admin@example.com"
        assert summary["counts"] == {
            "requests": 2,
            "documents": 2,
            "tasks": 2,
            "notes": 4,
        }

    @pytest.mark.asyncio
    async def test_list_requires_admin(self, client, archived):
        resp = await client.get("/archives", headers=auth("manager-token"))
        assert resp.status_code == 403

    @pytest.mark.asyncio
    async def test_get_archive(self, client, archived):
        resp = await client.get(f"/archives/{archived['id']}", headers=auth())

        assert resp.status_code == 200
        data = resp.json()
        assert len(data["archived_data"]["requests"]) == 2
        assert data["original_created_date"] is not None

    @pytest.mark.asyncio
    async def test_get_missing_archive(self, client):
        resp = await client.get("/archives/missing", headers=auth())
        assert resp.status_code == 404
        assert resp.json()["details"] == {"archive_id": "missing"}


class TestRestoreEndpoint:
    @pytest.mark.asyncio
    async def test_restore(self, client, store, archived):
        resp = await client.post(
            f"/archives/{archived['id']}/restore", headers=auth()
        )

        assert resp.status_code == 200
        data = resp.json()
        assert data["client_name"] == "Acme"
        assert data["counts"] == {"requests": 2, "documents": 2, "tasks": 2, "notes": 4}
        assert store.rows(EntityName.archived_profile) == []

        profile = await client.get("/clients/Acme", headers=auth())
        assert len(profile.json()["tasks"]) == 2

    @pytest.mark.asyncio
    async def test_partial_restore_keeps_archive(self, client, store, archived):
        store.fail(EntityName.task, "create")

        resp = await client.post(
            f"/archives/{archived['id']}/restore", headers=auth()
        )

        assert resp.status_code == 502
        body = resp.json()
        assert body["details"]["step"] == "create_tasks"
        assert len(body["details"]["created"]["requests"]) == 2
        assert len(store.rows(EntityName.archived_profile)) == 1

    @pytest.mark.asyncio
    async def test_restore_requires_admin(self, client, store, archived):
        resp = await client.post(
            f"/archives/{archived['id']}/restore", headers=auth("staff-token")
        )
        assert resp.status_code == 403
        assert store.rows(EntityName.inspection_request) == []

    @pytest.mark.asyncio
    async def test_delete_archive(self, client, store, archived):
        resp = await client.delete(f"/archives/{archived['id']}", headers=auth())

        assert resp.status_code == 204
        assert store.rows(EntityName.archived_profile) == []
