"""Row normalization: one raw spreadsheet row -> one LetterRecord (or nothing).

Headers vary between exports, so every logical field is looked up through an
ordered list of accepted column names. Rows that lack a usable date, country or
region are dropped silently; only the pipeline decides what an empty result means.
"""

from __future__ import annotations

import math
import numbers
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Mapping, Optional, Sequence

import numpy as np
import pandas as pd


MONTH_NAMES = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

DATE_COLUMNS = ("Requested Date", "RequestedDate", "Date")
COUNTRY_COLUMNS = ("Country Name", "Country", "CountryName")
REGION_COLUMNS = ("Region",)
LETTER_ID_COLUMNS = ("Letter ID", "LetterId", "ID")

# 1900 date system: serial 1 is 1900-01-01 and serial 60 is the phantom 1900-02-29.
EXCEL_EPOCH = date(1899, 12, 31)
EXCEL_LEAP_BUG_SERIAL = 60
EXCEL_MAX_SERIAL = 2958465  # 9999-12-31
SECONDS_PER_DAY = 86400

# pandas resolves these against the clock; a spreadsheet cell should not.
RELATIVE_DATE_WORDS = ("now", "today", "tomorrow", "yesterday")


@dataclass(frozen=True)
class LetterRecord:
    """One accepted letter request. Month, year and month name derive from the date."""

    requested_date: date
    country: str
    region: str
    letter_id: str

    @property
    def month(self) -> int:
        """Zero-based month (0 = January)."""
        return self.requested_date.month - 1

    @property
    def year(self) -> int:
        return self.requested_date.year

    @property
    def month_name(self) -> str:
        return MONTH_NAMES[self.month]


def is_blank(value: object) -> bool:
    """True for values a spreadsheet row treats as "not filled in".

    Covers None, NaN/NaT, empty strings and numeric zero / False.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    try:
        if pd.isna(value):
            return True
    except (TypeError, ValueError):
        return False
    if isinstance(value, (bool, np.bool_, numbers.Number)):
        return value == 0
    return False


def resolve_field(row: Mapping[str, object], aliases: Sequence[str]) -> Optional[object]:
    """Return the value of the first alias that is present with a non-blank value."""
    for alias in aliases:
        value = row.get(alias)
        if not is_blank(value):
            return value
    return None


def excel_serial_to_date(serial: float) -> Optional[date]:
    """Convert a spreadsheet day-count serial into a calendar date.

    The time-of-day part only matters in the last 100 microseconds before
    midnight, where it rolls over into the next day.
    Returns None for negative, non-finite or out-of-range serials.
    """
    if not math.isfinite(serial) or serial < 0 or serial > EXCEL_MAX_SERIAL:
        return None
    days = int(math.floor(serial))
    seconds = SECONDS_PER_DAY * (serial - days)
    whole_seconds = math.floor(seconds)
    if seconds - whole_seconds > 0.9999 and whole_seconds + 1 == SECONDS_PER_DAY:
        days += 1
    if days == EXCEL_LEAP_BUG_SERIAL:
        return date(1900, 3, 1)
    if days > EXCEL_LEAP_BUG_SERIAL:
        days -= 1
    try:
        return EXCEL_EPOCH + timedelta(days=days)
    except OverflowError:
        return None


def parse_requested_date(value: object) -> Optional[date]:
    """Coerce a raw cell value into a calendar date, or None when it is not one."""
    if isinstance(value, (bool, np.bool_)):
        return None
    if isinstance(value, datetime):
        # pd.Timestamp is a datetime subclass; NaT is filtered by is_blank upstream
        if pd.isna(value):
            return None
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, np.datetime64):
        ts = pd.Timestamp(value)
        return None if pd.isna(ts) else ts.date()
    if isinstance(value, numbers.Real):
        return excel_serial_to_date(float(value))
    if isinstance(value, str):
        text = value.strip()
        if not text or text.lower() in RELATIVE_DATE_WORDS:
            return None
        parsed = pd.to_datetime(text, errors="coerce")
        if pd.isna(parsed):
            return None
        return parsed.date()
    return None


def format_letter_id(value: object) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _clean_text(value: object) -> Optional[str]:
    text = str(value).strip()
    return text or None


def _random_letter_id() -> str:
    return uuid.uuid4().hex


def normalize_row(
    row: Mapping[str, object],
    *,
    generate_id: Optional[Callable[[], str]] = None,
) -> Optional[LetterRecord]:
    """Normalize one header-keyed row.

    Args:
        row: Mapping from column header to cell value.
        generate_id: Called for a placeholder when the row has no letter id.

    Returns:
        A LetterRecord, or None when the row must be skipped.
    """
    raw_date = resolve_field(row, DATE_COLUMNS)
    raw_country = resolve_field(row, COUNTRY_COLUMNS)
    raw_region = resolve_field(row, REGION_COLUMNS)
    if raw_date is None or raw_country is None or raw_region is None:
        return None

    requested = parse_requested_date(raw_date)
    if requested is None:
        return None

    country = _clean_text(raw_country)
    region = _clean_text(raw_region)
    if country is None or region is None:
        return None

    raw_id = resolve_field(row, LETTER_ID_COLUMNS)
    if raw_id is not None:
        letter_id = format_letter_id(raw_id)
    else:
        letter_id = (generate_id or _random_letter_id)()

    return LetterRecord(requested_date=requested, country=country, region=region, letter_id=letter_id)
