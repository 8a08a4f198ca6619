"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict, List

import pytest


PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from core.data import Dataset, build_dataset  # noqa: E402
from core.sample import SAMPLE_ROWS, write_sample_workbook  # noqa: E402


@pytest.fixture()
def scenario_rows() -> List[Dict[str, object]]:
    """Three MEA rows: two UAE in January, one Egypt in February."""
    return [
        {"Requested Date": "2024-01-15", "Country Name": "UAE", "Region": "MEA"},
        {"Requested Date": "2024-01-20", "Country Name": "UAE", "Region": "MEA"},
        {"Requested Date": "2024-02-10", "Country Name": "Egypt", "Region": "MEA"},
    ]


@pytest.fixture()
def scenario_dataset(scenario_rows: List[Dict[str, object]]) -> Dataset:
    return build_dataset(scenario_rows)


@pytest.fixture()
def sample_dataset() -> Dataset:
    return build_dataset(SAMPLE_ROWS)


@pytest.fixture()
def sample_workbook(tmp_path: Path) -> Path:
    path = tmp_path / "letters.xlsx"
    write_sample_workbook(path)
    return path
