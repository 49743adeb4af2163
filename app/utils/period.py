import re
from typing import Tuple

MONTH_NAMES = {
    # French labels used on payslips
    "janvier": 1, "février": 2, "fevrier": 2, "mars": 3, "avril": 4, "mai": 5, "juin": 6,
    "juillet": 7, "août": 8, "aout": 8, "septembre": 9, "octobre": 10, "novembre": 11,
    "décembre": 12, "decembre": 12,
    # English
    "january": 1, "february": 2, "march": 3, "april": 4, "may": 5, "june": 6,
    "july": 7, "august": 8, "september": 9, "october": 10, "november": 11, "december": 12,
}

ISO_PERIOD_PATTERN = re.compile(r"^(\d{4})-(\d{1,2})$")
NUMERIC_PERIOD_PATTERN = re.compile(r"^(\d{1,2})[/.-](\d{4})$")
NAMED_PERIOD_PATTERN = re.compile(r"^([^\W\d_]+)\s+(\d{4})$", re.UNICODE)


def validate_period(year: int, month: int) -> Tuple[int, int]:
    if not 1 <= month <= 12:
        raise ValueError("Month must be between 1 and 12")
    if year < 2000:
        raise ValueError("Year must be 2000 or later")
    return year, month


def parse_period(label: str) -> Tuple[int, int]:
    """
    Convert a pay-period label into (year, month).

    Accepts "2024-05", "05/2024" and month-name forms such as "Mai 2024" or
    "May 2024".
    """
    text = (label or "").strip().lower()

    match = ISO_PERIOD_PATTERN.match(text)
    if match:
        return validate_period(int(match.group(1)), int(match.group(2)))

    match = NUMERIC_PERIOD_PATTERN.match(text)
    if match:
        return validate_period(int(match.group(2)), int(match.group(1)))

    match = NAMED_PERIOD_PATTERN.match(text)
    if match and match.group(1) in MONTH_NAMES:
        return validate_period(int(match.group(2)), MONTH_NAMES[match.group(1)])

    raise ValueError(f"Unrecognised pay period '{label}'")


def format_period(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"
