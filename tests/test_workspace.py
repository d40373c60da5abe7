"""
Tests for the lead workspace driven against the API over ASGI.
"""
import asyncio
import uuid
from datetime import datetime

import httpx
import pytest
import pytest_asyncio

from lead_manager.api.deps import get_outreach_provider
from lead_manager.core.exceptions import ActionFailedError
from lead_manager.models import Lead
from lead_manager.schemas.lead import LeadResponse
from lead_manager.services.integrations.base import OutreachProvider
from lead_manager.workspace.client import ApiError, LeadManagerClient
from lead_manager.workspace.workspace import LeadWorkspace


def api_client(app, token: str) -> LeadManagerClient:
    http = httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")
    return LeadManagerClient("http://test", token, client=http)


@pytest_asyncio.fixture
async def admin_api(app, admin, token_for):
    client = api_client(app, token_for(admin.id))
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def member_api(app, member, token_for):
    client = api_client(app, token_for(member.id))
    yield client
    await client.aclose()


class TestFetching:

    @pytest.mark.asyncio
    async def test_refresh_loads_leads_and_campaigns(self, admin_api, factory):
        await factory.campaign()
        older = await factory.lead()
        newer = await factory.lead()
        workspace = LeadWorkspace(admin_api, "CraftyCode")
        workspace.set_page(3)

        await workspace.refresh()

        assert [r.id for r in workspace.records] == [newer.id, older.id]
        assert len(workspace.campaigns) == 1
        assert workspace.view.current_page == 1
        assert workspace.loading is False
        assert workspace.total_company_leads == 2

    @pytest.mark.asyncio
    async def test_avalern_loads_district_contacts(self, admin_api, factory):
        district = await factory.district(county="Kern")
        contact = await factory.contact(district)
        workspace = LeadWorkspace(admin_api, "Avalern")

        await workspace.refresh()

        assert [r.id for r in workspace.records] == [contact.id]
        assert workspace.unique_cities == ["Kern"]
        assert workspace.unique_sources == []

    @pytest.mark.asyncio
    async def test_failed_read_keeps_previous_state(self, member_api, factory):
        await factory.lead()
        workspace = LeadWorkspace(member_api, "CraftyCode")
        sentinel = [object()]
        workspace.records = sentinel

        await workspace.refresh()

        assert workspace.records is sentinel
        assert workspace.loading is False

    @pytest.mark.asyncio
    async def test_switch_tenant_resets_view(self, admin_api, factory):
        await factory.contact(await factory.district())
        workspace = LeadWorkspace(admin_api, "CraftyCode")
        workspace.set_filters(search_term="jane")

        await workspace.switch_tenant("Avalern")

        assert workspace.view.search_term == ""
        assert workspace.is_leads is False
        assert len(workspace.records) == 1


class StubClient:
    """Serves lead lists whose completion order the test controls."""

    def __init__(self):
        self.gates = []

    async def list_campaigns(self, company):
        return []

    async def list_leads(self, company):
        gate = asyncio.get_running_loop().create_future()
        self.gates.append(gate)
        return await gate


class TestOverlappingFetches:

    @pytest.mark.asyncio
    async def test_latest_fetch_wins(self):
        client = StubClient()
        workspace = LeadWorkspace(client, "CraftyCode")

        first = asyncio.create_task(workspace.refresh())
        await asyncio.sleep(0)
        second = asyncio.create_task(workspace.refresh())
        await asyncio.sleep(0)

        client.gates[1].set_result(["second"])
        await second
        assert workspace.records == ["second"]
        assert workspace.loading is False

        client.gates[0].set_result(["first"])
        await first
        assert workspace.records == ["second"]


class TestViewControls:

    @pytest.mark.asyncio
    async def test_filters_pages_and_selection(self, admin_api, factory):
        for i in range(25):
            await factory.lead(first_name=f"Agent{i:02d}", city="Glendale" if i % 5 == 0 else "Burbank")
        workspace = LeadWorkspace(admin_api, "CraftyCode")
        await workspace.refresh()

        assert workspace.total_pages == 2
        workspace.set_page(2)
        assert workspace.page_window == (21, 25)
        assert len(workspace.page) == 5

        workspace.set_filters(city="Glendale")
        assert workspace.view.current_page == 1
        assert workspace.total_filtered_count == 5

        workspace.select_all()
        assert len(workspace.view.selected_ids) == 5
        workspace.select_all()
        assert workspace.view.selected_ids == []

        workspace.select_first(2)
        workspace.toggle_selection(workspace.view.selected_ids[0])
        assert len(workspace.view.selected_ids) == 1

        workspace.clear_filters()
        assert workspace.total_filtered_count == 25

    @pytest.mark.asyncio
    async def test_items_per_page_resets_page(self, admin_api):
        workspace = LeadWorkspace(admin_api, "CraftyCode")
        workspace.set_page(4)
        workspace.set_items_per_page(50)
        assert workspace.view.current_page == 1


class TestWrites:

    @pytest.mark.asyncio
    async def test_save_applies_status_rule_without_refetch(self, admin_api, factory):
        campaign = await factory.campaign()
        lead = await factory.lead()
        workspace = LeadWorkspace(admin_api, "CraftyCode")
        await workspace.refresh()
        workspace.set_page(2)

        await workspace.open_record(workspace.records[0])
        workspace.edit(campaign_id=campaign.id)
        saved = await workspace.save()

        assert saved.status == "actively_contacting"
        assert workspace.records[0].status == "actively_contacting"
        assert workspace.selected_record.campaign_id == campaign.id
        assert workspace.editing_record.status == "actively_contacting"
        assert workspace.view.current_page == 2
        assert workspace.saving is False
        assert saved.id == lead.id

    @pytest.mark.asyncio
    async def test_failed_save_raises_with_server_message(self, admin_api, factory, db_session):
        lead = await factory.lead()
        workspace = LeadWorkspace(admin_api, "CraftyCode")
        await workspace.refresh()
        await workspace.open_record(workspace.records[0])
        await db_session.delete(await db_session.get(Lead, lead.id))
        await db_session.commit()

        with pytest.raises(ActionFailedError) as exc_info:
            await workspace.save()

        assert exc_info.value.message == f"Failed to update lead: Lead with id '{lead.id}' not found"
        assert workspace.saving is False

    @pytest.mark.asyncio
    async def test_save_without_open_record(self, admin_api):
        with pytest.raises(ActionFailedError):
            await LeadWorkspace(admin_api, "CraftyCode").save()

    @pytest.mark.asyncio
    async def test_save_district_contact(self, admin_api, factory):
        await factory.contact(await factory.district())
        workspace = LeadWorkspace(admin_api, "Avalern")
        await workspace.refresh()
        await workspace.open_record(workspace.records[0])

        workspace.edit(title="Assistant Superintendent")
        await workspace.save()

        assert workspace.records[0].title == "Assistant Superintendent"

    @pytest.mark.asyncio
    async def test_blank_campaign_clears_assignment(self, admin_api, factory):
        campaign = await factory.campaign()
        await factory.lead(campaign_id=campaign.id, status="actively_contacting")
        workspace = LeadWorkspace(admin_api, "CraftyCode")
        await workspace.refresh()
        await workspace.open_record(workspace.records[0])

        workspace.edit(campaign_id="")
        saved = await workspace.save()

        assert saved.campaign_id is None
        assert saved.status == "not_contacted"

    @pytest.mark.asyncio
    async def test_invalid_edit_raises_action_failed(self, admin_api, factory):
        await factory.lead()
        workspace = LeadWorkspace(admin_api, "CraftyCode")
        await workspace.refresh()
        await workspace.open_record(workspace.records[0])

        workspace.edit(first_name="")
        with pytest.raises(ActionFailedError) as exc_info:
            await workspace.save()

        assert exc_info.value.message.startswith("Failed to update lead")
        assert workspace.saving is False

    @pytest.mark.asyncio
    async def test_add_touchpoint_counts_and_patches(self, admin_api, factory):
        lead = await factory.lead()
        await factory.touchpoint(lead_id=lead.id, completed_at=datetime(2026, 4, 1), outcome="replied")
        workspace = LeadWorkspace(admin_api, "CraftyCode")
        await workspace.refresh()
        await workspace.open_record(workspace.records[0])

        await workspace.add_touchpoint({
            "type": "call",
            "completed_at": datetime(2026, 5, 1, 16, 30),
            "outcome": "booked",
        })

        assert len(workspace.touchpoints) == 2
        assert len(workspace.past_touchpoints) == 2
        assert workspace.records[0].touchpoints_count == 2
        assert workspace.records[0].last_contacted_at == datetime(2026, 5, 1, 16, 30)
        assert workspace.selected_record.touchpoints_count == 2

    @pytest.mark.asyncio
    async def test_scheduled_touchpoint_does_not_count(self, admin_api, factory):
        await factory.lead()
        workspace = LeadWorkspace(admin_api, "CraftyCode")
        await workspace.refresh()
        await workspace.open_record(workspace.records[0])

        await workspace.add_touchpoint({"type": "email", "scheduled_at": datetime(2026, 9, 1, 9)})

        assert workspace.records[0].touchpoints_count == 0
        assert workspace.records[0].last_contacted_at is None
        assert len(workspace.scheduled_touchpoints) == 1

    @pytest.mark.asyncio
    async def test_add_touchpoint_failure(self, admin_api, factory):
        await factory.lead()
        workspace = LeadWorkspace(admin_api, "CraftyCode")
        await workspace.refresh()
        await workspace.open_record(workspace.records[0])

        with pytest.raises(ActionFailedError) as exc_info:
            await workspace.add_touchpoint({"type": "carrier pigeon"})

        assert exc_info.value.message.startswith("Failed to add touchpoint")


class SyncProvider(OutreachProvider):

    async def add_leads_to_campaign(self, campaign_id, leads):
        return {"success": True, "added": len(leads), "failed": 0}

    async def get_emails(self, campaign_id=None, status=None, limit=None, offset=None,
                         start_date=None, end_date=None):
        return []


class TestSyncAndExport:

    @pytest.mark.asyncio
    async def test_sync_selected_leads(self, app, admin_api, factory):
        async def provider():
            yield SyncProvider()
        app.dependency_overrides[get_outreach_provider] = provider

        campaign = await factory.campaign(instantly_campaign_id="inst-1")
        await factory.lead(campaign_id=campaign.id)
        await factory.lead(campaign_id=campaign.id)
        workspace = LeadWorkspace(admin_api, "CraftyCode")
        await workspace.refresh()
        workspace.select_first(1)

        results = await workspace.sync()

        assert results.synced_count == 1
        assert workspace.sync_results == results
        assert workspace.syncing is False

    @pytest.mark.asyncio
    async def test_sync_failure_raises(self, app, admin_api, factory):
        async def provider():
            yield None
        app.dependency_overrides[get_outreach_provider] = provider
        await factory.lead()
        workspace = LeadWorkspace(admin_api, "CraftyCode")
        await workspace.refresh()

        with pytest.raises(ActionFailedError) as exc_info:
            await workspace.sync()

        assert exc_info.value.detail == "Instantly API key is not configured"

    @pytest.mark.asyncio
    async def test_sync_only_for_leads(self, admin_api):
        with pytest.raises(ActionFailedError):
            await LeadWorkspace(admin_api, "Avalern").sync()

    @pytest.mark.asyncio
    async def test_export_writes_filtered_leads(self, admin_api, factory, tmp_path):
        await factory.lead(first_name="Ana", city="Burbank")
        await factory.lead(first_name="Ben", city="Glendale")
        workspace = LeadWorkspace(admin_api, "CraftyCode")
        await workspace.refresh()
        workspace.set_filters(city="Glendale")

        path = workspace.export_csv(tmp_path, "glendale")

        assert path == tmp_path / "glendale.csv"
        lines = path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 2
        assert lines[1].startswith("Ben,")


class TestApiClient:

    @pytest.mark.asyncio
    async def test_error_message_from_detail(self, member_api):
        with pytest.raises(ApiError) as exc_info:
            await member_api.list_leads("CraftyCode")
        assert exc_info.value.status_code == 403
        assert exc_info.value.message == "Access denied to company CraftyCode"

    @pytest.mark.asyncio
    async def test_record_round_trips_into_response_model(self, admin_api, factory):
        await factory.lead()
        leads = await admin_api.list_leads("CraftyCode")
        assert isinstance(leads[0], LeadResponse)
        assert isinstance(leads[0].id, uuid.UUID)


def mocked_api(handler) -> LeadManagerClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test")
    return LeadManagerClient("http://test", "token", client=http)


class TestMalformedResponses:

    @pytest.mark.asyncio
    async def test_html_body_keeps_previous_state(self):
        api = mocked_api(lambda request: httpx.Response(200, text="<html>proxy</html>"))
        workspace = LeadWorkspace(api, "CraftyCode")
        sentinel = [object()]
        workspace.records = sentinel

        await workspace.refresh()

        assert workspace.records is sentinel
        assert workspace.loading is False

    @pytest.mark.asyncio
    async def test_html_body_is_api_error(self):
        api = mocked_api(lambda request: httpx.Response(200, text="<html>proxy</html>"))
        with pytest.raises(ApiError, match="Expected JSON"):
            await api.list_campaigns("CraftyCode")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{}, {"leads": {"id": "x"}}, {"leads": [{"id": "not-a-uuid"}]}, []])
    async def test_unexpected_shape_is_api_error(self, body):
        api = mocked_api(lambda request: httpx.Response(200, json=body))
        with pytest.raises(ApiError, match="Unexpected response from GET /api/leads"):
            await api.list_leads("CraftyCode")

    @pytest.mark.asyncio
    async def test_malformed_write_response_raises_action_failed(self, admin_api, factory):
        await factory.lead()
        workspace = LeadWorkspace(admin_api, "CraftyCode")
        await workspace.refresh()
        await workspace.open_record(workspace.records[0])
        workspace.client = mocked_api(lambda request: httpx.Response(200, text="ok"))

        with pytest.raises(ActionFailedError) as exc_info:
            await workspace.save()

        assert "Expected JSON from PUT" in exc_info.value.message
