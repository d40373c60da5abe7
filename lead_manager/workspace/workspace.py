"""
Lead workspace - client-side state for working a tenant's leads or district contacts.

Holds the fetched records, campaigns and the open record's touchpoints,
plus an explicit ViewState. Everything derived (filtered rows, the current
page, page counts, filter options) is recomputed from those on access.

Failed reads are logged and leave the previous data in place. Failed
writes raise ActionFailedError carrying the server's message.
"""
import logging
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from lead_manager.config import settings
from lead_manager.core.exceptions import ActionFailedError
from lead_manager.core.pagination import page_window, paginate, total_pages
from lead_manager.core.status import next_status
from lead_manager.core.vocabulary import ALL, Tenant
from lead_manager.schemas.campaign import CampaignResponse
from lead_manager.schemas.district import DistrictContactResponse, DistrictContactUpdate
from lead_manager.schemas.lead import LeadResponse, LeadUpdate
from lead_manager.schemas.sync import SyncResults
from lead_manager.schemas.touchpoint import TouchpointCreate, TouchpointResponse
from lead_manager.services.csv_service import DEFAULT_EXPORT_FILENAME, export_to_csv
from lead_manager.workspace import view
from lead_manager.workspace.client import ApiError, LeadManagerClient

logger = logging.getLogger(__name__)

Record = Union[LeadResponse, DistrictContactResponse]


class LeadWorkspace:
    """Stateful controller over the pure functions in workspace.view."""

    def __init__(
        self,
        client: LeadManagerClient,
        tenant: str = Tenant.CRAFTY_CODE.value,
        district_id: Optional[uuid.UUID] = None,
        items_per_page: int = settings.DEFAULT_PAGE_SIZE
    ):
        self.client = client
        self.tenant = tenant
        self.district_id = district_id
        self.kind = view.kind_for_tenant(tenant)
        self.view = view.ViewState(items_per_page=items_per_page)

        self.records: List[Record] = []
        self.campaigns: List[CampaignResponse] = []
        self.touchpoints: List[TouchpointResponse] = []
        self.selected_record: Optional[Record] = None
        self.editing_record: Optional[Record] = None
        self.sync_results: Optional[SyncResults] = None

        self.loading = False
        self.saving = False
        self.syncing = False

        # Only the latest fetch of each kind may write its results
        self._fetch_generation = 0
        self._touchpoint_generation = 0

    @property
    def is_leads(self) -> bool:
        return self.kind is view.LEAD_KIND

    # Fetching

    async def refresh(self) -> None:
        """Fetch campaigns and records for the current tenant / district scope."""
        self._fetch_generation += 1
        generation = self._fetch_generation
        self.loading = True
        try:
            campaigns = await self.client.list_campaigns(self.tenant)
            if self.is_leads:
                records = await self.client.list_leads(self.tenant)
            else:
                records = await self.client.list_district_contacts(self.district_id)
        except ApiError as e:
            logger.error(f"Failed to fetch {self.kind.name} records: {e.message}", extra={"tenant": self.tenant})
            return
        finally:
            if generation == self._fetch_generation:
                self.loading = False

        if generation != self._fetch_generation:
            logger.debug(f"Dropping stale {self.kind.name} fetch #{generation}")
            return

        self.campaigns = campaigns
        self.records = records
        self.view.current_page = 1

    async def switch_tenant(self, tenant: str, district_id: Optional[uuid.UUID] = None) -> None:
        """Change tenant (and district scope); filters and selection start over."""
        self.tenant = tenant
        self.district_id = district_id
        self.kind = view.kind_for_tenant(tenant)
        self.view = view.ViewState(items_per_page=self.view.items_per_page)
        self.records = []
        self.close_record()
        await self.refresh()

    async def fetch_touchpoints(self, record: Optional[Record] = None) -> None:
        record = record or self.selected_record
        if record is None:
            return

        self._touchpoint_generation += 1
        generation = self._touchpoint_generation
        try:
            touchpoints = await self.client.list_touchpoints(**self._parent_of(record))
        except ApiError as e:
            logger.error(f"Failed to fetch touchpoints for {record.id}: {e.message}")
            return

        if generation == self._touchpoint_generation:
            self.touchpoints = touchpoints

    async def open_record(self, record: Record) -> None:
        """Select a record for the detail view and load its touchpoints."""
        self.selected_record = record
        self.editing_record = record.model_copy()
        self.touchpoints = []
        await self.fetch_touchpoints(record)

    def close_record(self) -> None:
        self.selected_record = None
        self.editing_record = None
        self.touchpoints = []
        self._touchpoint_generation += 1

    # Derived values

    @property
    def filtered(self) -> List[Record]:
        return view.filter_records(self.records, self.view, self.kind)

    @property
    def page(self) -> List[Record]:
        return paginate(self.filtered, self.view.current_page, self.view.items_per_page)

    @property
    def total_pages(self) -> int:
        return total_pages(len(self.filtered), self.view.items_per_page)

    @property
    def page_window(self) -> Tuple[int, int]:
        """1-based (start, end) of the rows on the current page."""
        return page_window(len(self.filtered), self.view.current_page, self.view.items_per_page)

    @property
    def total_filtered_count(self) -> int:
        return len(self.filtered)

    @property
    def total_company_leads(self) -> int:
        return len(self.records)

    @property
    def unique_sources(self) -> List[str]:
        return view.unique_sources(self.records, self.kind)

    @property
    def unique_cities(self) -> List[str]:
        return view.unique_cities(self.records, self.kind)

    @property
    def available_statuses(self) -> List[str]:
        return view.available_statuses()

    @property
    def past_touchpoints(self) -> List[TouchpointResponse]:
        return view.split_touchpoints(self.touchpoints)[0]

    @property
    def scheduled_touchpoints(self) -> List[TouchpointResponse]:
        return view.split_touchpoints(self.touchpoints)[1]

    # Filters and pagination

    def set_filters(
        self,
        search_term: Optional[str] = None,
        stage: Optional[str] = None,
        campaign: Optional[str] = None,
        source: Optional[str] = None,
        city: Optional[str] = None
    ) -> None:
        """Change any filter; the page goes back to 1."""
        if search_term is not None:
            self.view.search_term = search_term
        if stage is not None:
            self.view.stage = stage
        if campaign is not None:
            self.view.campaign = campaign
        if source is not None:
            self.view.source = source
        if city is not None:
            self.view.city = city
        self.view.current_page = 1

    def clear_filters(self) -> None:
        self.set_filters(search_term="", stage=ALL, campaign=ALL, source=ALL, city=ALL)

    def set_page(self, page: int) -> None:
        self.view.current_page = page

    def set_items_per_page(self, items_per_page: int) -> None:
        self.view.items_per_page = items_per_page
        self.view.current_page = 1

    # Selection

    def toggle_selection(self, record_id: uuid.UUID) -> None:
        self.view.selected_ids = view.toggle_selection(self.view.selected_ids, record_id)

    def select_all(self) -> None:
        self.view.selected_ids = view.select_all(self.view.selected_ids, self.filtered)

    def select_first(self, count: int) -> None:
        self.view.selected_ids = view.select_first(self.filtered, count)

    # Writes

    def edit(self, **changes: Any) -> None:
        """Change fields of the record being edited (not saved yet)."""
        if self.editing_record is None:
            raise ActionFailedError("edit record", "No record is open")
        self.editing_record = self.editing_record.model_copy(update=changes)

    async def save(self) -> Record:
        """Persist the edited record and patch it into local state without refetching."""
        original, edited = self.selected_record, self.editing_record
        if original is None or edited is None:
            raise ActionFailedError("update lead", "No record is open")

        self.saving = True
        try:
            if self.is_leads:
                # Validate first so a blank campaign_id counts as no campaign
                payload = LeadUpdate(**{f: getattr(edited, f) for f in LeadUpdate.model_fields})
                payload = payload.model_copy(update={"status": next_status(original, payload)})
                updated = await self.client.update_lead(original.id, payload.model_dump(mode="json"))
            else:
                payload = DistrictContactUpdate(**{f: getattr(edited, f) for f in DistrictContactUpdate.model_fields})
                updated = await self.client.update_district_contact(original.id, payload.model_dump(mode="json"))
        except ApiError as e:
            raise ActionFailedError("update lead", e.message)
        except ValueError as e:
            raise ActionFailedError("update lead", str(e))
        finally:
            self.saving = False

        self._replace_record(updated)
        self.editing_record = updated.model_copy()
        return updated

    async def add_touchpoint(self, draft: Dict[str, Any]) -> TouchpointResponse:
        """
        Log a touchpoint on the open record.

        The record's touchpoints_count becomes the completed touchpoints known
        before this call, plus one when the new touchpoint is itself completed.
        """
        record = self.selected_record
        if record is None:
            raise ActionFailedError("add touchpoint", "No record is open")

        try:
            payload = TouchpointCreate(**{**draft, **self._parent_of(record)})
            touchpoint = await self.client.create_touchpoint(payload.model_dump(mode="json", exclude_none=True))
        except ApiError as e:
            raise ActionFailedError("add touchpoint", e.message)
        except ValueError as e:
            raise ActionFailedError("add touchpoint", str(e))

        previously_completed = view.touchpoint_counts(self.touchpoints)[0]
        await self.fetch_touchpoints(record)

        changes: Dict[str, Any] = {
            "touchpoints_count": previously_completed + (1 if view.is_completed(touchpoint) else 0)
        }
        if touchpoint.completed_at:
            if self.is_leads:
                changes["last_contacted_at"] = touchpoint.completed_at
            elif record.district_lead:
                changes["district_lead"] = record.district_lead.model_copy(
                    update={"last_contacted_at": touchpoint.completed_at}
                )
        self._replace_record(record.model_copy(update=changes))
        return touchpoint

    async def sync(self) -> SyncResults:
        """
        Sync the selected leads (all filtered leads when nothing is selected)
        with Instantly, then reload leads and the open lead's touchpoints.
        """
        if not self.is_leads:
            raise ActionFailedError("sync with Instantly", "Sync is only available for leads")

        lead_ids = self.view.selected_ids or [record.id for record in self.filtered]
        self.syncing = True
        try:
            results = await self.client.sync_instantly(lead_ids)
        except ApiError as e:
            raise ActionFailedError("sync with Instantly", e.message)
        finally:
            self.syncing = False

        self.sync_results = results
        await self.refresh()
        if self.selected_record is not None:
            refreshed = next((r for r in self.records if r.id == self.selected_record.id), None)
            if refreshed is not None:
                self.selected_record = refreshed
            await self.fetch_touchpoints()
        return results

    def export_csv(self, directory: Union[str, Path] = ".", filename: str = DEFAULT_EXPORT_FILENAME) -> Path:
        """Write the filtered leads to `<directory>/<filename>.csv`."""
        if not self.is_leads:
            raise ActionFailedError("export leads", "Export is only available for leads")

        name, content = export_to_csv(self.filtered, filename)
        path = Path(directory) / name
        try:
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise ActionFailedError("export leads", str(e))
        return path

    # Helpers

    def _parent_of(self, record: Record) -> Dict[str, uuid.UUID]:
        if self.is_leads:
            return {"lead_id": record.id}
        return {"district_contact_id": record.id}

    def _replace_record(self, updated: Record) -> None:
        self.records = [updated if r.id == updated.id else r for r in self.records]
        if self.selected_record is not None and self.selected_record.id == updated.id:
            self.selected_record = updated
