"""
Outreach scheduling - turns sequence steps into dated touchpoints.

Days are counted in business days (Monday to Friday) and every touchpoint
is scheduled at 09:00 UTC on its day. Datetimes are naive UTC.
"""
import re
from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable, List, Optional, Union

from lead_manager.core.vocabulary import TouchpointType

SEND_TIME = time(9, 0)

TEMPLATE_FALLBACKS: Dict[str, str] = {
    "first_name": "[First Name]",
    "last_name": "[Last Name]",
    "city": "[City]",
    "company": "[Company]",
}

TEMPLATE_RE = re.compile(r"\{\{(first_name|last_name|city|company)\}\}")

Day = Union[date, datetime]


def is_business_day(day: Day) -> bool:
    return day.weekday() < 5


def add_business_days(day: Day, days: int) -> Day:
    """
    Move forward `days` business days, skipping Saturdays and Sundays.

    Zero returns `day` unchanged, even when it falls on a weekend.
    """
    result = day
    while days > 0:
        result += timedelta(days=1)
        if is_business_day(result):
            days -= 1
    return result


def next_business_day(day: Day) -> Day:
    return add_business_days(day, 1)


def replace_template_variables(text: Optional[str], values: Dict[str, Optional[str]]) -> str:
    """Fill {{first_name}}, {{last_name}}, {{city}} and {{company}}; blanks get a bracketed label."""
    if not text:
        return ""
    return TEMPLATE_RE.sub(lambda m: values.get(m.group(1)) or TEMPLATE_FALLBACKS[m.group(1)], text)


def schedule_steps(start: Day, steps: Iterable, values: Dict[str, Optional[str]]) -> List[dict]:
    """
    Touchpoint fields (type, subject, content, scheduled_at) for each step.

    Steps are taken in step_order. The first step, and any step without a
    days_after_previous gap, lands `day_offset` business days after `start`;
    the others land their gap after the step before them.
    """
    start_day = start.date() if isinstance(start, datetime) else start
    scheduled = []
    previous = start_day

    for step in sorted(steps, key=lambda s: s.step_order):
        if step.step_order == 1 or not step.days_after_previous:
            day = add_business_days(start_day, step.day_offset)
        else:
            day = add_business_days(previous, step.days_after_previous)
        previous = day

        scheduled.append({
            "type": step.type,
            "subject": replace_template_variables(step.name, values),
            "content": replace_template_variables(step.content_link, values),
            "scheduled_at": datetime.combine(day, SEND_TIME),
        })
    return scheduled


def can_reach(step_type: str, email: Optional[str], phone: Optional[str]) -> bool:
    """Email steps need an email and call steps a phone number; anything else always applies."""
    if step_type == TouchpointType.EMAIL:
        return bool(email and email.strip())
    if step_type == TouchpointType.CALL:
        return bool(phone and phone.strip())
    return True
