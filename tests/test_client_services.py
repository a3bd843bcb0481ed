import pytest

from inspection_hub.errors import (
    NotFoundError,
    PartialFailureError,
    PermissionDeniedError,
)
from inspection_hub.schemas.inspection import ClientInfoUpdate
from inspection_hub.services.client import ClientProfiles
from inspection_hub.store import EntityName
from tests.factories import seed_client


class TestClientProfileAccess:
    @pytest.mark.asyncio
    async def test_creator_can_view_profile(self, store, staff):
        await seed_client(store, "Acme", tasks_per_request=1)

        profile = await ClientProfiles.get(store, "Acme", staff)

        assert profile.client_name == "Acme"
        assert profile.counts()["tasks"] == 1

    @pytest.mark.asyncio
    async def test_other_user_rejected(self, store, other_user):
        await seed_client(store, "Acme")
        with pytest.raises(PermissionDeniedError):
            await ClientProfiles.get(store, "Acme", other_user)

    @pytest.mark.asyncio
    async def test_manager_and_admin_see_every_client(self, store, manager, admin):
        await seed_client(store, "Acme")

        assert not (await ClientProfiles.get(store, "Acme", manager)).is_empty
        assert not (await ClientProfiles.get(store, "Acme", admin)).is_empty

    @pytest.mark.asyncio
    async def test_creator_of_any_request_has_access(self, store, other_user):
        await seed_client(store, "Acme")
        await seed_client(store, "Acme", created_by="other@example.com")

        profile = await ClientProfiles.get(store, "Acme", other_user)

        assert len(profile.requests) == 2

    @pytest.mark.asyncio
    async def test_unknown_client(self, store, admin):
        with pytest.raises(NotFoundError):
            await ClientProfiles.get(store, "Nobody", admin)

    @pytest.mark.asyncio
    async def test_documents_and_tasks_newest_first(self, store, admin):
        seeded = await seed_client(
            store, "Acme", documents_per_request=2, tasks_per_request=2
        )

        profile = await ClientProfiles.get(store, "Acme", admin)

        assert [d["id"] for d in profile.documents] == [
            d["id"] for d in reversed(seeded["documents"])
        ]
        assert [t["id"] for t in profile.tasks] == [
            t["id"] for t in reversed(seeded["tasks"])
        ]


class TestClientDirectory:
    @pytest.mark.asyncio
    async def test_requests_grouped_by_client(self, store, admin):
        await seed_client(store, "Acme", requests=3)
        await seed_client(store, "Beta", requests=1)

        summaries = await ClientProfiles.list(store, admin)

        counts = {s.client_name: s.request_count for s in summaries}
        assert counts == {"Acme": 3, "Beta": 1}

    @pytest.mark.asyncio
    async def test_user_sees_own_clients(self, store, staff):
        await seed_client(store, "Acme")
        await seed_client(store, "Beta", created_by="other@example.com")

        summaries = await ClientProfiles.list(store, staff)

        assert [s.client_name for s in summaries] == ["Acme"]

    @pytest.mark.asyncio
    async def test_latest_request_drives_summary(self, store, admin):
        seeded = await seed_client(store, "Acme", requests=2)
        latest = seeded["requests"][0]
        await store.requests.update(latest["id"], {"status": "Scheduled"})

        (summary,) = await ClientProfiles.list(store, admin)

        assert summary.latest_status == "Scheduled"
        assert summary.property_address == latest["property_address"]


class TestUpdateClientInfo:
    @pytest.mark.asyncio
    async def test_update_applies_to_every_request(self, store, staff):
        await seed_client(store, "Acme", requests=3)

        updated = await ClientProfiles.update_info(
            store, "Acme", ClientInfoUpdate(client_contact_number="555-0100"), staff
        )

        assert len(updated) == 3
        rows = store.rows(EntityName.inspection_request)
        assert {r["client_contact_number"] for r in rows} == {"555-0100"}
        assert {r["claim_number"] for r in rows} == {"CLM-1", "CLM-2", "CLM-3"}

    @pytest.mark.asyncio
    async def test_partial_update_reports_failed_ids(self, store, admin):
        seeded = await seed_client(store, "Acme", requests=2)
        failing_id = seeded["requests"][1]["id"]
        store.fail(EntityName.inspection_request, "update", failing_id)

        with pytest.raises(PartialFailureError) as exc:
            await ClientProfiles.update_info(
                store, "Acme", ClientInfoUpdate(carrier="State Farm"), admin
            )

        assert exc.value.details["failed_ids"] == [failing_id]

    @pytest.mark.asyncio
    async def test_update_rejected_for_other_user(self, store, other_user):
        await seed_client(store, "Acme")
        with pytest.raises(PermissionDeniedError):
            await ClientProfiles.update_info(
                store, "Acme", ClientInfoUpdate(memo="x"), other_user
            )
        assert store.rows(EntityName.inspection_request)[0].get("memo") is None
