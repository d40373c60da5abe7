"""
Pure view logic for the lead workspace: filtering, selection and derived values.

Records are either leads (CraftyCode) or district contacts (Avalern). A
RecordKind, picked once from the tenant, tells these functions where each
filterable field lives, so no function here branches on the tenant.
"""
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple

from lead_manager.core.vocabulary import ALL, LeadStatus, Tenant


@dataclass
class ViewState:
    """Filter, page and selection inputs of the workspace."""
    search_term: str = ""
    stage: str = ALL
    campaign: str = ALL
    source: str = ALL
    city: str = ALL
    current_page: int = 1
    items_per_page: int = 20
    selected_ids: List[uuid.UUID] = field(default_factory=list)


@dataclass(frozen=True)
class RecordKind:
    name: str
    search_fields: Callable[[Any], Sequence[Optional[str]]]
    stage: Callable[[Any], Optional[str]]
    campaign_id: Callable[[Any], Optional[uuid.UUID]]
    city: Callable[[Any], Optional[str]]
    source: Optional[Callable[[Any], Optional[str]]] = None  # None: kind has no source filter


def _district(record):
    return record.district_lead


LEAD_KIND = RecordKind(
    name="lead",
    search_fields=lambda r: (f"{r.first_name} {r.last_name}", r.email, r.company),
    stage=lambda r: r.status,
    campaign_id=lambda r: r.campaign_id,
    city=lambda r: r.city,
    source=lambda r: r.source,
)

CONTACT_KIND = RecordKind(
    name="district_contact",
    search_fields=lambda r: (
        f"{r.first_name} {r.last_name}",
        r.email,
        r.title,
        _district(r).district_name if _district(r) else None,
        _district(r).county if _district(r) else None,
    ),
    stage=lambda r: _district(r).status if _district(r) else None,
    campaign_id=lambda r: _district(r).campaign_id if _district(r) else None,
    city=lambda r: _district(r).county if _district(r) else None,
)


def kind_for_tenant(tenant: str) -> RecordKind:
    return CONTACT_KIND if tenant == Tenant.AVALERN.value else LEAD_KIND


def _matches(record, view: ViewState, kind: RecordKind, term: str) -> bool:
    if term and not any(term in (text or "").lower() for text in kind.search_fields(record)):
        return False
    if view.stage != ALL and kind.stage(record) != view.stage:
        return False
    if view.campaign != ALL:
        campaign_id = kind.campaign_id(record)
        if campaign_id is None or str(campaign_id) != str(view.campaign):
            return False
    if kind.source and view.source != ALL and kind.source(record) != view.source:
        return False
    if view.city != ALL and kind.city(record) != view.city:
        return False
    return True


def filter_records(records: Iterable, view: ViewState, kind: RecordKind) -> list:
    """
    Records matching every active filter, in their original order.

    Search is a case-insensitive substring match; every other filter is an
    exact match bypassed by "all".
    """
    term = view.search_term.lower()
    return [record for record in records if _matches(record, view, kind, term)]


def toggle_selection(selected: Sequence[uuid.UUID], record_id: uuid.UUID) -> List[uuid.UUID]:
    if record_id in selected:
        return [i for i in selected if i != record_id]
    return [*selected, record_id]


def select_all(selected: Sequence[uuid.UUID], filtered: Sequence) -> List[uuid.UUID]:
    """Everything filtered is selected -> clear; otherwise select everything filtered."""
    if len(selected) == len(filtered):
        return []
    return [record.id for record in filtered]


def select_first(filtered: Sequence, count: int) -> List[uuid.UUID]:
    """Select the first `count` filtered records; 0 clears the selection."""
    if count <= 0:
        return []
    return [record.id for record in filtered[:count]]


def unique_sources(records: Iterable, kind: RecordKind) -> List[str]:
    if not kind.source:
        return []
    return sorted({kind.source(r) for r in records if kind.source(r) and kind.source(r).strip()})


def unique_cities(records: Iterable, kind: RecordKind) -> List[str]:
    return sorted({kind.city(r) for r in records if kind.city(r) and kind.city(r).strip()})


def available_statuses() -> List[str]:
    return [status.value for status in LeadStatus]


def is_completed(touchpoint) -> bool:
    """Counts toward touchpoints_count: completed with an outcome."""
    return bool(touchpoint.completed_at and touchpoint.outcome)


def touchpoint_counts(touchpoints: Iterable) -> Tuple[int, int]:
    """(completed with outcome, scheduled and not completed)"""
    completed = scheduled = 0
    for touchpoint in touchpoints:
        if is_completed(touchpoint):
            completed += 1
        if touchpoint.scheduled_at and not touchpoint.completed_at:
            scheduled += 1
    return completed, scheduled


def split_touchpoints(touchpoints: Iterable) -> Tuple[list, list]:
    """(past: completed, scheduled: not completed), order preserved."""
    past, upcoming = [], []
    for touchpoint in touchpoints:
        (past if touchpoint.completed_at else upcoming).append(touchpoint)
    return past, upcoming
