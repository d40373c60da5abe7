"""
Fixed vocabularies: tenants, lead statuses, sources, touchpoint types.
"""
from enum import Enum
from typing import Dict, List


ALL = "all"  # filter sentinel: bypasses the filter


class Tenant(str, Enum):
    CRAFTY_CODE = "CraftyCode"
    AVALERN = "Avalern"


COMPANIES: List[str] = [t.value for t in Tenant]


class LeadStatus(str, Enum):
    NOT_CONTACTED = "not_contacted"
    ACTIVELY_CONTACTING = "actively_contacting"
    ENGAGED = "engaged"
    WON = "won"
    NOT_INTERESTED = "not_interested"


STATUS_DISPLAY_MAP: Dict[str, str] = {
    LeadStatus.NOT_CONTACTED.value: "Not Contacted",
    LeadStatus.ACTIVELY_CONTACTING.value: "Actively Contacting",
    LeadStatus.ENGAGED.value: "Engaged",
    LeadStatus.WON.value: "Won",
    LeadStatus.NOT_INTERESTED.value: "Not Interested",
}

STATUS_DESCRIPTIONS: Dict[str, str] = {
    LeadStatus.NOT_CONTACTED.value: "Lead is in your database, but no outreach yet.",
    LeadStatus.ACTIVELY_CONTACTING.value: "You're in the process of emailing/calling/following up.",
    LeadStatus.ENGAGED.value: "They've responded or shown interest (replied, booked a call, etc.).",
    LeadStatus.WON.value: "They became a customer or agreed to a pilot/demo.",
    LeadStatus.NOT_INTERESTED.value: "Said no, ghosted after multiple follow-ups, or clearly not a fit.",
}


def status_label(status: str) -> str:
    """Human label for a status code; unknown codes are shown as-is."""
    return STATUS_DISPLAY_MAP.get(status, status)


class LeadSource(str, Enum):
    ZILLOW = "Zillow"
    LINKEDIN = "LinkedIn"
    REALTOR = "Realtor.com"
    REDFIN = "Redfin"
    TRULIA = "Trulia"
    OTHER = "Other"


# Transient source assigned by the CSV parser before enum mapping
COLD_OUTREACH = "Cold Outreach"


class TouchpointType(str, Enum):
    EMAIL = "email"
    CALL = "call"
    MEETING = "meeting"
    LINKEDIN_MESSAGE = "linkedin_message"
    NOTE = "note"


class TouchpointOutcome(str, Enum):
    REPLIED = "replied"
    NO_ANSWER = "no_answer"
    VOICEMAIL = "voicemail"
    OPTED_OUT = "opted_out"
    BOUNCED = "bounced"
    BOOKED = "booked"
    IGNORED = "ignored"


class ContactStatus(str, Enum):
    """Data quality of a district contact."""
    VALID = "Valid"
    NOT_FOUND = "Not Found"
    NULL = "Null"


class UserRole(str, Enum):
    ADMIN = "admin"
    MEMBER = "member"


CITY_MAP: Dict[str, str] = {
    "burbank": "Burbank",
    "glendale": "Glendale",
    "los angeles": "Los Angeles",
    "pasadena": "Pasadena",
    "north hollywood": "North Hollywood",
    "van nuys": "Van Nuys",
    "sherman oaks": "Sherman Oaks",
    "studio city": "Studio City",
    "hollywood": "Hollywood",
    "west hollywood": "West Hollywood",
    "beverly hills": "Beverly Hills",
    "santa monica": "Santa Monica",
    "culver city": "Culver City",
    "westwood": "Westwood",
    "brentwood": "Brentwood",
    "venice": "Venice",
    "manhattan beach": "Manhattan Beach",
    "redondo beach": "Redondo Beach",
    "torrance": "Torrance",
    "el segundo": "El Segundo",
    "inglewood": "Inglewood",
    "hawthorne": "Hawthorne",
}

SOURCE_MAP: Dict[str, str] = {
    "zillow": LeadSource.ZILLOW.value,
    "linkedin": LeadSource.LINKEDIN.value,
    "realtor.com": LeadSource.REALTOR.value,
    "realtor": LeadSource.REALTOR.value,
    "redfin": LeadSource.REDFIN.value,
    "trulia": LeadSource.TRULIA.value,
}
