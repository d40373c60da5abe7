"""
Tests for the campaign-driven status transition and the status vocabulary.
"""
import uuid
from types import SimpleNamespace

import pytest

from lead_manager.core.status import next_status
from lead_manager.core.vocabulary import STATUS_DESCRIPTIONS, STATUS_DISPLAY_MAP, LeadStatus, status_label


CAMPAIGN = uuid.uuid4()


def record(status: str, campaign_id=None):
    return SimpleNamespace(status=status, campaign_id=campaign_id)


class TestNextStatus:

    def test_assigning_campaign_starts_outreach(self):
        assert next_status(record("not_contacted"), record("not_contacted", CAMPAIGN)) == "actively_contacting"

    def test_removing_campaign_resets_outreach(self):
        old = record("actively_contacting", CAMPAIGN)
        assert next_status(old, record("actively_contacting")) == "not_contacted"

    @pytest.mark.parametrize("status", ["engaged", "won", "not_interested", "actively_contacting"])
    def test_assigning_campaign_keeps_other_statuses(self, status):
        assert next_status(record(status), record(status, CAMPAIGN)) == status

    @pytest.mark.parametrize("status", ["engaged", "won", "not_interested", "not_contacted"])
    def test_removing_campaign_keeps_other_statuses(self, status):
        assert next_status(record(status, CAMPAIGN), record(status)) == status

    def test_campaign_swap_keeps_edited_status(self):
        old = record("not_contacted", CAMPAIGN)
        assert next_status(old, record("not_contacted", uuid.uuid4())) == "not_contacted"

    def test_explicit_status_change_wins(self):
        assert next_status(record("not_contacted"), record("won")) == "won"

    def test_accepts_enum_members(self):
        new = record(LeadStatus.NOT_CONTACTED, CAMPAIGN)
        assert next_status(record(LeadStatus.NOT_CONTACTED), new) == "actively_contacting"


class TestStatusVocabulary:

    def test_every_status_has_label_and_description(self):
        for status in LeadStatus:
            assert status.value in STATUS_DISPLAY_MAP
            assert status.value in STATUS_DESCRIPTIONS

    def test_status_label(self):
        assert status_label("not_interested") == "Not Interested"
        assert status_label("legacy") == "legacy"
