"""
Request field normalization and format checks.
"""

import re
from datetime import datetime
from typing import Any, List, Optional, Tuple

from monitoring import ValidationError


DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}\Z', re.ASCII)
TIME_PATTERN = re.compile(r'^\d{2}:\d{2}\Z', re.ASCII)
NUMBER_PATTERN = re.compile(r'^\d+\Z', re.ASCII)

MIN_YEAR = 2000
MAX_YEAR = 2100


def clean_string(value: Any) -> str:
    """Trimmed string value, or '' for anything that is not a string."""
    return value.strip() if isinstance(value, str) else ''


def sanitize_member_names(values: Any) -> List[str]:
    """Trim names, drop blanks and case-insensitive duplicates (first wins)."""
    if not isinstance(values, list):
        return []
    names = []
    seen = set()
    for value in values:
        name = clean_string(value)
        if not name or name.lower() in seen:
            continue
        seen.add(name.lower())
        names.append(name)
    return names


def is_valid_date(value: str) -> bool:
    """YYYY-MM-DD that names a real calendar day."""
    if not isinstance(value, str) or not DATE_PATTERN.match(value):
        return False
    try:
        datetime.strptime(value, '%Y-%m-%d')
    except ValueError:
        return False
    return True


def is_valid_time(value: str) -> bool:
    """HH:MM with hour < 24 and minute < 60."""
    if not isinstance(value, str) or not TIME_PATTERN.match(value):
        return False
    hour, minute = (int(part) for part in value.split(':'))
    return 0 <= hour < 24 and 0 <= minute < 60


def is_valid_year(value: Any) -> bool:
    return isinstance(value, int) and MIN_YEAR <= value <= MAX_YEAR


def is_valid_month(value: Any) -> bool:
    return isinstance(value, int) and 1 <= value <= 12


def _parse_number(value: Optional[str], default: int) -> Optional[int]:
    if value is None:
        return default
    if not isinstance(value, str) or not NUMBER_PATTERN.match(value):
        return None
    return int(value)


def parse_year_month(year: Optional[str], month: Optional[str],
                     today: Optional[datetime] = None) -> Tuple[int, int]:
    """
    Parse query-string year/month. A missing value defaults to the current
    one; an empty value is invalid.

    Raises:
        ValidationError: non-numeric or out-of-range values
    """
    today = today or datetime.now()
    parsed_year = _parse_number(year, today.year)
    parsed_month = _parse_number(month, today.month)

    if not is_valid_year(parsed_year) or not is_valid_month(parsed_month):
        raise ValidationError("year または month の値が不正です。")
    return parsed_year, parsed_month
