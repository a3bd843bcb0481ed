import pytest
import pytest_asyncio

from tests.factories import auth, seed_client, seed_statuses


@pytest_asyncio.fixture()
async def request_id(store):
    await seed_statuses(store, "inspection", "New")
    await seed_statuses(store, "task", "Pending", "Completed")
    seeded = await seed_client(store, "Acme")
    return seeded["requests"][0]["id"]


class TestRequestEndpoints:
    @pytest.mark.asyncio
    async def test_create_request(self, client, store):
        await seed_statuses(store, "inspection", "New")

        resp = await client.post(
            "/requests",
            json={"client_name": "Acme", "property_address": "1 Main St"},
            headers=auth("staff-token"),
        )

        assert resp.status_code == 201
        data = resp.json()
        assert data["status"] == "New"
        assert data["created_by"] == "staff@example.com"

    @pytest.mark.asyncio
    async def test_change_to_unknown_status(self, client, request_id):
        resp = await client.patch(
            f"/requests/{request_id}/status",
            json={"status": "Bogus"},
            headers=auth(),
        )
        assert resp.status_code == 400
        assert resp.json()["code"] == "invalid_request"

    @pytest.mark.asyncio
    async def test_get_missing_request(self, client):
        resp = await client.get("/requests/missing", headers=auth())
        assert resp.status_code == 404


class TestTaskEndpoints:
    @pytest.mark.asyncio
    async def test_task_lifecycle(self, client, request_id):
        created = await client.post(
            "/tasks",
            json={"related_request_id": request_id, "request_type": "Documents"},
            headers=auth("staff-token"),
        )
        assert created.status_code == 201
        task = created.json()
        assert task["title"] == "Documents Request for Acme"

        note = await client.post(
            f"/tasks/{task['id']}/notes",
            json={"content": "Called the adjuster"},
            headers=auth("staff-token"),
        )
        assert note.status_code == 201

        done = await client.patch(
            f"/tasks/{task['id']}",
            json={"status": "Completed"},
            headers=auth("staff-token"),
        )
        assert done.status_code == 200
        assert done.json()["completed_date"] is not None

        notes = await client.get(f"/tasks/{task['id']}/notes", headers=auth())
        assert notes.json()["count"] == 1

        listed = await client.get("/tasks", headers=auth("staff-token"))
        assert [t["id"] for t in listed.json()["items"]] == [task["id"]]

    @pytest.mark.asyncio
    async def test_delete_task_requires_admin(self, client, request_id):
        created = await client.post(
            "/tasks",
            json={"related_request_id": request_id, "title": "Roof photos"},
            headers=auth("staff-token"),
        )
        task_id = created.json()["id"]

        forbidden = await client.delete(f"/tasks/{task_id}", headers=auth("staff-token"))
        assert forbidden.status_code == 403

        deleted = await client.delete(f"/tasks/{task_id}", headers=auth())
        assert deleted.status_code == 204


class TestDocumentEndpoints:
    @pytest.mark.asyncio
    async def test_upload_document(self, client, store, request_id):
        resp = await client.post(
            "/documents",
            data={
                "inspection_request_id": request_id,
                "document_category": "Policy",
            },
            files={"file": ("policy.pdf", b"%PDF-1.4 policy", "application/pdf")},
            headers=auth("staff-token"),
        )

        assert resp.status_code == 201
        data = resp.json()
        assert data["document_category"] == "Policy"
        assert data["document_name"] == "policy.pdf"
        assert len(store.uploads) == 1

    @pytest.mark.asyncio
    async def test_upload_rejects_mismatched_content(self, client, request_id):
        resp = await client.post(
            "/documents",
            data={"inspection_request_id": request_id},
            files={"file": ("policy.pdf", b"<script>", "application/pdf")},
            headers=auth(),
        )
        assert resp.status_code == 400
