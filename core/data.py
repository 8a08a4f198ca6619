from __future__ import annotations

import io
import itertools
import logging
import time
from dataclasses import dataclass
from datetime import date, datetime, timezone
from functools import cached_property
from pathlib import Path
from typing import IO, Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import pandas as pd

from core.errors import EmptyResultError, LetterEaseError, ParseError, ReadError
from core.normalize import LetterRecord, normalize_row


logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".xlsx", ".xls")

PARSE_HINT = "Failed to parse Excel file. Please check the format."
READ_HINT = "Failed to read file."
EMPTY_HINT = "No valid data found in the Excel file"

FRAME_COLUMNS = ["requested_date", "country", "region", "letter_id", "year", "month", "month_name"]

WorkbookSource = Union[str, Path, bytes, bytearray, IO[bytes]]


@dataclass(frozen=True)
class Dataset:
    """Normalized letter records plus the distinct years/regions/countries they cover."""

    records: Tuple[LetterRecord, ...]
    years: Tuple[int, ...]
    regions: Tuple[str, ...]
    countries: Tuple[str, ...]
    last_updated: datetime

    @cached_property
    def frame(self) -> pd.DataFrame:
        return records_frame(self.records)

    @property
    def latest_year(self) -> Optional[int]:
        return self.years[0] if self.years else None

    def __len__(self) -> int:
        return len(self.records)


def records_frame(records: Iterable[LetterRecord]) -> pd.DataFrame:
    rows = [
        {
            "requested_date": r.requested_date,
            "country": r.country,
            "region": r.region,
            "letter_id": r.letter_id,
            "year": r.year,
            "month": r.month,
            "month_name": r.month_name,
        }
        for r in records
    ]
    return pd.DataFrame(rows, columns=FRAME_COLUMNS)


# ---------------- Workbook input ----------------
def is_supported_workbook(filename: Optional[str]) -> bool:
    if not filename:
        return False
    return Path(filename).suffix.lower() in SUPPORTED_EXTENSIONS


def read_workbook_bytes(source: WorkbookSource) -> bytes:
    """Read the whole workbook into memory. I/O failures become ReadError."""
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    try:
        if isinstance(source, (str, Path)):
            return Path(source).read_bytes()
        return source.read()
    except OSError as exc:
        raise ReadError(READ_HINT) from exc


def read_first_sheet_rows(content: bytes) -> List[Dict[str, object]]:
    """Decode the first worksheet into header-keyed rows (blank cells -> None).

    The reader (openpyxl or xlrd) is picked from the file signature, not its name.
    """
    try:
        df = pd.read_excel(io.BytesIO(content), sheet_name=0)
    except Exception as exc:
        raise ParseError(PARSE_HINT) from exc
    df = df.astype(object).where(df.notna(), None)
    df.columns = [str(c) for c in df.columns]
    return df.to_dict(orient="records")


def _id_generator():
    stamp = int(time.time() * 1000)
    counter = itertools.count(1)
    return lambda: f"{stamp}-{next(counter)}"


def build_dataset(rows: Iterable[Mapping[str, object]], *, now: Optional[datetime] = None) -> Dataset:
    generate_id = _id_generator()
    records: List[LetterRecord] = []
    for row in rows:
        record = normalize_row(row, generate_id=generate_id)
        if record is not None:
            records.append(record)
    return dataset_from_records(records, now=now)


def dataset_from_records(records: Sequence[LetterRecord], *, now: Optional[datetime] = None) -> Dataset:
    return Dataset(
        records=tuple(records),
        years=tuple(sorted({r.year for r in records}, reverse=True)),
        regions=tuple(sorted({r.region for r in records})),
        countries=tuple(sorted({r.country for r in records})),
        last_updated=now or datetime.now(timezone.utc),
    )


def load_letter_workbook(source: WorkbookSource, *, filename: Optional[str] = None) -> Dataset:
    """Run the whole ingestion pipeline over one workbook.

    Args:
        source: Path, raw bytes or a binary file object.
        filename: Original file name, used in log lines only.

    Returns:
        A Dataset; its record list may be empty (see ``require_records``).

    Raises:
        ReadError: The workbook could not be read.
        ParseError: The bytes are not a spreadsheet, or row extraction failed.
    """
    if filename is None and isinstance(source, (str, Path)):
        filename = Path(source).name
    content = read_workbook_bytes(source)
    try:
        rows = read_first_sheet_rows(content)
        dataset = build_dataset(rows)
    except LetterEaseError:
        raise
    except Exception as exc:
        raise ParseError(PARSE_HINT) from exc
    logger.info(
        "Ingested %s: %d rows read, %d records kept, %d dropped",
        filename or "workbook",
        len(rows),
        len(dataset.records),
        len(rows) - len(dataset.records),
    )
    return dataset


def require_records(dataset: Dataset) -> Dataset:
    if not dataset.records:
        raise EmptyResultError(EMPTY_HINT)
    return dataset


# ---------------- Persisted JSON shape ----------------
def dataset_to_payload(dataset: Dataset) -> Dict[str, Any]:
    return {
        "records": [
            {
                "requestedDate": r.requested_date.isoformat(),
                "country": r.country,
                "region": r.region,
                "letterId": r.letter_id,
                "month": r.month,
                "year": r.year,
                "monthName": r.month_name,
            }
            for r in dataset.records
        ],
        "years": list(dataset.years),
        "regions": list(dataset.regions),
        "countries": list(dataset.countries),
        "lastUpdated": dataset.last_updated.isoformat(),
    }


def _parse_iso_date(value: object) -> date:
    if not isinstance(value, str):
        raise ParseError(f"Stored record has an invalid requestedDate: {value!r}")
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    ts = pd.to_datetime(value, errors="coerce")
    if pd.isna(ts):
        raise ParseError(f"Stored record has an invalid requestedDate: {value!r}")
    return ts.date()


def _parse_timestamp(value: object) -> datetime:
    ts = pd.to_datetime(value, errors="coerce", utc=True) if isinstance(value, str) else pd.NaT
    if pd.isna(ts):
        raise ParseError(f"Stored dataset has an invalid lastUpdated: {value!r}")
    return ts.to_pydatetime()


def dataset_from_payload(payload: Mapping[str, Any]) -> Dataset:
    """Rebuild a Dataset from its JSON shape.

    Derived fields and the distinct-value indices are recomputed from the records.
    """
    if not isinstance(payload, Mapping) or not isinstance(payload.get("records"), list):
        raise ParseError("Stored dataset is missing its records list.")
    records: List[LetterRecord] = []
    for item in payload["records"]:
        if not isinstance(item, Mapping):
            raise ParseError("Stored dataset contains a malformed record.")
        country = str(item.get("country") or "").strip()
        region = str(item.get("region") or "").strip()
        if not country or not region:
            raise ParseError("Stored record is missing its country or region.")
        letter_id = item.get("letterId")
        records.append(
            LetterRecord(
                requested_date=_parse_iso_date(item.get("requestedDate")),
                country=country,
                region=region,
                letter_id=str(letter_id) if letter_id is not None else "",
            )
        )
    last_updated = payload.get("lastUpdated")
    now = _parse_timestamp(last_updated) if last_updated is not None else None
    return dataset_from_records(records, now=now)
