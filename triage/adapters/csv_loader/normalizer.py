"""CSV column normalization — handles BOM, trailing spaces, encoding quirks."""

from __future__ import annotations

import logging
import re
from datetime import date, datetime

logger = logging.getLogger(__name__)

DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d %H:%M:%S",
    "%d.%m.%Y",
    "%d.%m.%Y %H:%M",
    "%d.%m.%Y %H:%M:%S",
    "%d/%m/%Y",
    "%m/%d/%Y",
)


def normalize_column_name(name: str) -> str:
    """Normalize a CSV column name.

    - Strips leading/trailing whitespace
    - Removes BOM characters (\\ufeff)
    - Replaces multiple spaces / non-breaking spaces with single underscore
    - Lowercases
    - Strips non-alphanumeric characters (except underscore)
    """
    name = name.replace("\ufeff", "")
    name = name.strip()
    name = re.sub(r"[\s\u00a0]+", "_", name)
    name = name.lower()
    # Keep Cyrillic letters
    name = re.sub(r"[^\w]", "", name, flags=re.UNICODE)
    return name


def clean_string(value: str | None) -> str | None:
    """Strip whitespace and return None for empty strings."""
    if value is None:
        return None
    value = value.strip()
    return value if value else None


def parse_skills(raw: str | None) -> set[str]:
    """Parse skill strings like 'VIP, KZ, ENG' into a set of skill codes.

    Handles various separators (comma, semicolon, space) and normalizes each skill.
    """
    if not raw:
        return set()
    parts = re.split(r"[,;\s]+", raw.strip())
    return {p.strip().upper() for p in parts if p.strip()}


def parse_int(value: str | None) -> int:
    """Workload counters come as "4" or "4.0"; anything else is 0."""
    if not value:
        return 0
    try:
        return int(float(str(value).replace(",", ".").strip()))
    except ValueError:
        return 0


def parse_date(raw: str | None) -> date | None:
    """Parse dates in various formats."""
    if not raw:
        return None
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(raw.strip(), fmt).date()
        except ValueError:
            continue
    logger.debug("Could not parse date: %s", raw)
    return None


def normalize_building(value: str | None) -> str | None:
    """House numbers exported as "9.0" become "9"."""
    if not value:
        return value
    v = str(value).strip()
    try:
        f = float(v.replace(",", "."))
    except ValueError:
        return v
    return str(int(f)) if f.is_integer() else v
