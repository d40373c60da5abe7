# Models package - database tables
from lead_manager.models.user import User, UserDistrictAssignment, UserLeadAssignment
from lead_manager.models.outreach import OutreachSequence, OutreachStep
from lead_manager.models.campaign import Campaign
from lead_manager.models.lead import Lead, LeadCampaignStatus
from lead_manager.models.district import District, DistrictContact
from lead_manager.models.touchpoint import Touchpoint
