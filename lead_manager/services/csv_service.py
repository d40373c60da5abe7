"""
CSV utilities - lead and district upload parsing, validation and export.

Everything here is pure: no database access, no I/O beyond the strings
passed in. Validation problems are returned as data; only an unparseable
file raises (CSVParseError).
"""
import csv
import io
import re
import uuid
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple, Union

from lead_manager.core.exceptions import CSVParseError
from lead_manager.core.vocabulary import (
    CITY_MAP,
    COLD_OUTREACH,
    SOURCE_MAP,
    ContactStatus,
    LeadSource,
    LeadStatus,
    status_label,
)
from lead_manager.schemas.district import InvalidDistrict, ProcessedContact, ProcessedDistrict
from lead_manager.schemas.lead import CSVLead, InvalidLeadRow

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^[\+]?[1-9]?[\-\s\(\)]?[0-9]{3}[\-\s\(\)]?[0-9]{3}[\-\s]?[0-9]{4}$")
PHONE_STRIP_RE = re.compile(r"[\s\-\(\)]")

# Upload header -> CSVLead field
LEAD_COLUMNS: Dict[str, str] = {
    "First Name": "first_name",
    "Last Name": "last_name",
    "Email": "email",
    "Phone Number": "phone",
    "City/State": "city",
    "Company": "company",
    "Linkedin URL": "linkedin_url",
    "Website Link": "website_url",
    "Online Profile": "online_profile",
    "Email Sent?": "email_sent",
    "Call Made?": "call_made",
    "Response": "response",
    "Next Step / Notes": "next_step",
}

EXPORT_COLUMNS = [
    "First Name",
    "Last Name",
    "Email",
    "Phone Number",
    "City/State",
    "Company",
    "LinkedIn URL",
    "Website Link",
    "Online Profile",
    "Source",
    "Status",
]

DEFAULT_EXPORT_FILENAME = "san-fernando-valley-leads"


def _read_rows(content: Union[str, bytes]) -> List[Dict[str, str]]:
    """
    Header-keyed rows of a CSV document; blank lines are skipped.

    A row whose field count differs from the header, or broken quoting,
    raises CSVParseError naming the first problem.
    """
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise CSVParseError(f"File is not valid UTF-8 ({e.reason})")
    elif content.startswith("\ufeff"):
        content = content[1:]

    reader = csv.reader(io.StringIO(content), strict=True)
    try:
        lines = [(reader.line_num, row) for row in reader if any(field.strip() for field in row)]
    except csv.Error as e:
        raise CSVParseError(f"Row {reader.line_num}: {e}")

    if not lines:
        return []

    header = [h.strip() for h in lines[0][1]]
    rows = []
    for line_num, row in lines[1:]:
        if len(row) < len(header):
            raise CSVParseError(
                f"Row {line_num}: Too few fields: expected {len(header)} fields but parsed {len(row)}"
            )
        if len(row) > len(header):
            raise CSVParseError(
                f"Row {line_num}: Too many fields: expected {len(header)} fields but parsed {len(row)}"
            )
        rows.append(dict(zip(header, row)))
    return rows


def determine_source(online_profile: str, linkedin_url: str) -> str:
    """Guess where a lead came from by the profile URLs on the row."""
    online_profile = online_profile or ""
    if "zillow.com" in online_profile:
        return LeadSource.ZILLOW.value
    if "linkedin.com" in (linkedin_url or ""):
        return LeadSource.LINKEDIN.value
    if "realtor.com" in online_profile:
        return LeadSource.REALTOR.value
    return COLD_OUTREACH


def parse_csv(content: Union[str, bytes]) -> List[CSVLead]:
    """Parse a lead upload into CSVLead rows, in file order."""
    leads = []
    for row in _read_rows(content):
        fields = {field: row.get(column, "") or "" for column, field in LEAD_COLUMNS.items()}
        fields["source"] = determine_source(fields["online_profile"], fields["linkedin_url"])
        fields["website_quality"] = "8" if row.get("Website?", "") in ("Yes", "yes") else "0"
        leads.append(CSVLead(**fields))
    return leads


def extract_city(city_state: str) -> str:
    """'Burbank, CA,' -> 'Burbank'"""
    return city_state.strip().rstrip(",").split(",")[0].strip()


def _is_blank(value: Optional[str]) -> bool:
    return not value or not value.strip()


def validate_leads(leads: Sequence[CSVLead]) -> Tuple[List[CSVLead], List[InvalidLeadRow]]:
    """
    Split rows into valid and invalid.

    Every reason a row fails is collected, not just the first. Valid rows
    come back with their City/State value reduced to the city.
    """
    valid: List[CSVLead] = []
    invalid: List[InvalidLeadRow] = []

    for index, lead in enumerate(leads):
        errors = []

        if _is_blank(lead.first_name):
            errors.append("Missing first name")
        if _is_blank(lead.last_name):
            errors.append("Missing last name")
        if _is_blank(lead.email):
            errors.append("Missing email address")
        elif not EMAIL_RE.fullmatch(lead.email):
            errors.append("Invalid email format")
        if not _is_blank(lead.phone) and not PHONE_RE.fullmatch(PHONE_STRIP_RE.sub("", lead.phone)):
            errors.append("Invalid phone number format")

        if errors:
            invalid.append(InvalidLeadRow(lead=lead, errors=errors, row_index=index + 2))
        else:
            valid.append(lead.model_copy(update={"city": extract_city(lead.city)}))

    return valid, invalid


def deduplicate_leads(leads: Iterable[CSVLead], existing_emails: Iterable[str] = ()) -> List[CSVLead]:
    """Drop rows whose email (case-insensitive) is already stored or appeared earlier."""
    seen: Set[str] = {email.lower() for email in existing_emails if email}
    unique = []
    for lead in leads:
        email = lead.email.lower()
        if email in seen:
            continue
        seen.add(email)
        unique.append(lead)
    return unique


def map_city(city: Optional[str]) -> Optional[str]:
    if _is_blank(city):
        return None
    return CITY_MAP.get(city.split(",")[0].strip().lower(), "Other")


def map_source(source: Optional[str]) -> str:
    return SOURCE_MAP.get((source or "").strip().lower(), LeadSource.OTHER.value)


def convert_to_lead_insert(csv_lead: CSVLead) -> dict:
    """Persistable lead fields for a validated row."""
    return {
        "first_name": csv_lead.first_name.strip(),
        "last_name": csv_lead.last_name.strip(),
        "email": csv_lead.email.strip().lower(),
        "phone": csv_lead.phone.strip() or None,
        "city": map_city(csv_lead.city),
        "state": "CA",
        "company": csv_lead.company.strip() or None,
        "linkedin_url": csv_lead.linkedin_url.strip() or None,
        "website_url": csv_lead.website_url.strip() or None,
        "online_profile": csv_lead.online_profile.strip() or None,
        "source": map_source(csv_lead.source),
    }


def _is_yes(value: str) -> bool:
    return value.strip().lower() in ("yes", "true")


def convert_to_lead_status_insert(
    csv_lead: CSVLead,
    lead_id: uuid.UUID,
    campaign_id: Optional[uuid.UUID] = None
) -> dict:
    """Outreach state a row carried in its Email Sent? / Call Made? / Response columns."""
    email_sent = _is_yes(csv_lead.email_sent)
    call_made = _is_yes(csv_lead.call_made)
    response = csv_lead.response.strip() or None

    if response:
        status = "Responded"
    elif call_made:
        status = "Call Made"
    elif email_sent:
        status = "Email Sent"
    else:
        status = "Not Contacted"

    return {
        "lead_id": lead_id,
        "campaign_id": campaign_id,
        "status": status,
        "email_sent": email_sent,
        "call_made": call_made,
        "response": response,
        "next_step": csv_lead.next_step.strip() or None,
        "touch_count": int(email_sent) + int(call_made),
    }


def export_to_csv(leads: Iterable, filename: str = DEFAULT_EXPORT_FILENAME) -> Tuple[str, str]:
    """
    Render leads (models or response objects) as CSV.

    Returns (file name with .csv extension, CSV text).
    """
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(EXPORT_COLUMNS)

    for lead in leads:
        writer.writerow([
            lead.first_name,
            lead.last_name,
            lead.email or "",
            lead.phone or "",
            f"{lead.city}, CA" if lead.city else "",
            lead.company or "",
            lead.linkedin_url or "",
            lead.website_url or "",
            lead.online_profile or "",
            lead.source or "",
            status_label(lead.status or LeadStatus.NOT_CONTACTED.value),
        ])

    if not filename.endswith(".csv"):
        filename = f"{filename}.csv"
    return filename, output.getvalue()


# District uploads

DISTRICT_REQUIRED_COLUMNS = ["School District Name", "County", "First Name", "Last Name", "Title"]


def parse_district_csv(content: Union[str, bytes]) -> List[Dict[str, str]]:
    """Rows that carry every required district/contact column."""
    rows = []
    for row in _read_rows(content):
        row = {key: (value or "").strip() for key, value in row.items()}
        if all(row.get(column) for column in DISTRICT_REQUIRED_COLUMNS):
            rows.append(row)
    return rows


def _contact_status(raw: str) -> str:
    raw = raw.lower()
    if "not found" in raw:
        return ContactStatus.NOT_FOUND.value
    if "null" in raw:
        return ContactStatus.NULL.value
    return ContactStatus.VALID.value


def process_district_data(rows: Iterable[Dict[str, str]]) -> List[ProcessedDistrict]:
    """Group contact rows by district name and county, keeping file order."""
    districts: Dict[Tuple[str, str], ProcessedDistrict] = {}

    for row in rows:
        key = (row["School District Name"], row["County"])
        if key not in districts:
            districts[key] = ProcessedDistrict(
                name=key[0],
                county=key[1],
                staff_directory_link=row.get("Staff Directory Link") or None,
            )

        email = row.get("Email Address", "")
        phone = row.get("Phone Number", "")
        districts[key].contacts.append(ProcessedContact(
            first_name=row["First Name"],
            last_name=row["Last Name"],
            title=row["Title"],
            email=email if email and EMAIL_RE.fullmatch(email) else None,
            phone=phone or None,
            status=_contact_status(row.get("Status", "")),
        ))

    return list(districts.values())


def contact_errors(contact: ProcessedContact, position: int) -> List[str]:
    """Problems with one contact; `position` is 1-based within its district."""
    errors = []
    if _is_blank(contact.first_name):
        errors.append(f"Contact {position}: First name is required")
    if _is_blank(contact.last_name):
        errors.append(f"Contact {position}: Last name is required")
    if _is_blank(contact.title):
        errors.append(f"Contact {position}: Title is required")
    if _is_blank(contact.email) and _is_blank(contact.phone):
        errors.append(f"Contact {position}: Either email or phone number is required")
    return errors


def validate_district_data(
    districts: Iterable[ProcessedDistrict]
) -> Tuple[List[ProcessedDistrict], List[InvalidDistrict], List[str]]:
    """
    Split districts into valid and invalid, plus warnings.

    A district needs a name, a county and at least one usable contact.
    Problems with individual contacts of a valid district become warnings;
    valid districts come back holding only their usable contacts.
    """
    valid: List[ProcessedDistrict] = []
    invalid: List[InvalidDistrict] = []
    warnings: List[str] = []

    for district in districts:
        errors = []
        if _is_blank(district.name):
            errors.append("District name is required")
        if _is_blank(district.county):
            errors.append("County is required")
        if not district.contacts:
            errors.append("At least one contact is required")

        usable = []
        contact_warnings = []
        for position, contact in enumerate(district.contacts, start=1):
            problems = contact_errors(contact, position)
            if problems:
                contact_warnings.extend(problems)
            else:
                usable.append(contact)

        if not errors and usable:
            valid.append(district.model_copy(update={"contacts": usable}))
            if contact_warnings:
                label = f"{district.name} ({district.county})"
                warnings.append(
                    f"{label}: District has {len(usable)} valid contact(s) "
                    f"out of {len(district.contacts)} total"
                )
                warnings.extend(f"{label}: {warning}" for warning in contact_warnings)
        else:
            if district.contacts and not usable:
                errors.append("No valid contacts found - all contacts have errors")
            invalid.append(InvalidDistrict(
                name=district.name,
                county=district.county,
                errors=errors + contact_warnings,
            ))

    return valid, invalid, warnings
