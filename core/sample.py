"""Sample letter-request workbook for trying the dashboard without real data."""

from __future__ import annotations

import io
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd


SAMPLE_SHEET_NAME = "Letters Data"

_SAMPLE = [
    # MEA
    ("2024-01-15", "UAE", "MEA"),
    ("2024-01-20", "UAE", "MEA"),
    ("2024-02-10", "UAE", "MEA"),
    ("2024-02-25", "Saudi Arabia", "MEA"),
    ("2024-03-05", "Egypt", "MEA"),
    ("2024-03-12", "UAE", "MEA"),
    ("2024-04-08", "Qatar", "MEA"),
    ("2024-04-18", "Kuwait", "MEA"),
    ("2024-05-02", "UAE", "MEA"),
    ("2024-05-15", "Saudi Arabia", "MEA"),
    # APAC
    ("2024-01-10", "Singapore", "APAC"),
    ("2024-01-25", "India", "APAC"),
    ("2024-02-14", "Australia", "APAC"),
    ("2024-02-28", "Singapore", "APAC"),
    ("2024-03-10", "India", "APAC"),
    ("2024-03-22", "Japan", "APAC"),
    ("2024-04-05", "Singapore", "APAC"),
    ("2024-04-20", "Australia", "APAC"),
    # EMEA
    ("2024-01-12", "UK", "EMEA"),
    ("2024-01-28", "Germany", "EMEA"),
    ("2024-02-08", "France", "EMEA"),
    ("2024-02-22", "UK", "EMEA"),
    ("2024-03-15", "Germany", "EMEA"),
    ("2024-03-28", "Spain", "EMEA"),
    # Americas
    ("2024-01-18", "USA", "Americas"),
    ("2024-01-30", "Canada", "Americas"),
    ("2024-02-12", "USA", "Americas"),
    ("2024-02-26", "Brazil", "Americas"),
    ("2024-03-08", "USA", "Americas"),
    ("2024-03-20", "Mexico", "Americas"),
    # 2025
    ("2025-01-10", "UAE", "MEA"),
    ("2025-01-20", "Singapore", "APAC"),
    ("2025-01-25", "UK", "EMEA"),
    ("2025-02-05", "USA", "Americas"),
    ("2025-02-15", "India", "APAC"),
    ("2025-03-10", "Germany", "EMEA"),
]

SAMPLE_ROWS: List[Dict[str, str]] = [
    {"Requested Date": d, "Country Name": c, "Region": r, "Letter ID": f"L{i:03d}"}
    for i, (d, c, r) in enumerate(_SAMPLE, start=1)
]


def write_sample_workbook(
    target: Optional[Union[str, Path]] = None,
    rows: Optional[List[Dict[str, object]]] = None,
    sheet_name: str = SAMPLE_SHEET_NAME,
) -> bytes:
    """Write rows (default: SAMPLE_ROWS) to an .xlsx workbook.

    Returns the workbook bytes; also writes them to ``target`` when given.
    """
    df = pd.DataFrame(SAMPLE_ROWS if rows is None else rows)
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=sheet_name, index=False)
    content = buffer.getvalue()
    if target is not None:
        Path(target).write_bytes(content)
    return content
