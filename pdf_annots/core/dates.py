import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Optional

logger = logging.getLogger(__name__)

# D:YYYYMMDDHHmmSSOHH'mm' where everything after the year is optional and
# the offset shows up as "+01'00'", "+0100", "Z", "Z00'00'" or not at all.
_PDF_DATE = re.compile(
    r"^(?:D:)?(?P<year>\d{4})(?P<month>\d{2})?(?P<day>\d{2})?"
    r"(?P<hour>\d{2})?(?P<minute>\d{2})?(?P<second>\d{2})?"
    r"(?P<tz>[Zz+\-])?(?P<tzh>\d{2})?(?P<tzm>\d{2})?"
)


def parse_pdf_date(value: Optional[str]) -> Optional[datetime]:
    """Parse a PDF date string into an aware datetime.

    Returns None for missing or unreadable values; a date is advisory and
    never a reason to fail. Dates without an offset are taken as UTC.
    """
    if not value:
        return None
    text = str(value).strip().replace("'", "")
    m = _PDF_DATE.match(text)
    if not m:
        logger.debug(f"Unreadable PDF date: {value!r}")
        return None

    tz = timezone.utc
    sign = m.group("tz")
    if sign in ("+", "-"):
        offset = timedelta(hours=int(m.group("tzh") or 0), minutes=int(m.group("tzm") or 0))
        tz = timezone(-offset if sign == "-" else offset)

    try:
        return datetime(
            int(m.group("year")),
            int(m.group("month") or 1),
            int(m.group("day") or 1),
            int(m.group("hour") or 0),
            int(m.group("minute") or 0),
            int(m.group("second") or 0),
            tzinfo=tz,
        )
    except ValueError:
        logger.debug(f"Out of range PDF date: {value!r}")
        return None


def parse_cutoff(value: str) -> datetime:
    """Parse an ISO 8601 command-line date; naive values are taken as UTC."""
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_date(value: datetime) -> str:
    """RFC3339 with seconds precision, "Z" for UTC."""
    text = value.replace(microsecond=0).isoformat()
    return text[:-6] + "Z" if text.endswith("+00:00") else text
