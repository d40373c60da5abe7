"""
Automatic lead status transitions on campaign assignment.
"""
from lead_manager.core.vocabulary import LeadStatus


def next_status(old, new) -> str:
    """
    Status a record should be saved with, given its stored and edited versions.

    Both arguments only need `campaign_id` and `status` attributes, so this
    works for Lead / District models, API payloads and client-side records.

    - campaign newly assigned while the edit says not_contacted -> actively_contacting
    - campaign removed while the edit says actively_contacting -> not_contacted
    - otherwise the edited status wins
    """
    had_campaign = old.campaign_id is not None
    has_campaign = new.campaign_id is not None

    if not had_campaign and has_campaign and new.status == LeadStatus.NOT_CONTACTED:
        return LeadStatus.ACTIVELY_CONTACTING.value
    if had_campaign and not has_campaign and new.status == LeadStatus.ACTIVELY_CONTACTING:
        return LeadStatus.NOT_CONTACTED.value
    return new.status
