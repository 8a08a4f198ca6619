"""Year-scoped aggregates over letter records.

Every function is a pure function of its arguments. The shared scope step is:
year first, then regions, then countries; an empty selection means "no filter"
on that dimension.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Union

import pandas as pd

from core.data import Dataset, records_frame
from core.normalize import MONTH_NAMES, LetterRecord


RecordSource = Union[Dataset, pd.DataFrame, Iterable[LetterRecord]]


@dataclass(frozen=True)
class MonthlyAggregate:
    month_number: int
    month: str
    counts: Dict[str, int] = field(default_factory=dict)

    def to_chart_row(self) -> Dict[str, object]:
        """Flat row for multi-series charts: month keys plus one key per country."""
        row: Dict[str, object] = {"month": self.month, "monthNumber": self.month_number}
        row.update(self.counts)
        return row


@dataclass(frozen=True)
class CountryCount:
    country: str
    count: int


def _as_frame(source: RecordSource) -> pd.DataFrame:
    if isinstance(source, pd.DataFrame):
        return source
    if isinstance(source, Dataset):
        return source.frame
    return records_frame(source)


def scope_frame(
    source: RecordSource,
    year: int,
    regions: Optional[Iterable[str]] = None,
    countries: Optional[Iterable[str]] = None,
) -> pd.DataFrame:
    df = _as_frame(source)
    df = df[df["year"] == year]
    regions = list(regions or [])
    if regions:
        df = df[df["region"].isin(regions)]
    countries = list(countries or [])
    if countries:
        df = df[df["country"].isin(countries)]
    return df


def monthly_data_for_year(
    source: RecordSource,
    year: int,
    regions: Optional[Iterable[str]] = None,
    countries: Optional[Iterable[str]] = None,
) -> List[MonthlyAggregate]:
    """Twelve entries (Jan..Dec) with per-country counts; months without records stay empty."""
    scoped = scope_frame(source, year, regions, countries)
    by_month: Dict[int, Dict[str, int]] = {}
    if not scoped.empty:
        counts = scoped.groupby(["month", "country"], sort=False).size()
        for (month, country), n in counts.items():
            by_month.setdefault(int(month), {})[str(country)] = int(n)
    return [
        MonthlyAggregate(month_number=m, month=MONTH_NAMES[m], counts=by_month.get(m, {}))
        for m in range(12)
    ]


def total_for_year(
    source: RecordSource,
    year: int,
    regions: Optional[Iterable[str]] = None,
    countries: Optional[Iterable[str]] = None,
) -> int:
    return int(len(scope_frame(source, year, regions, countries)))


def country_breakdown_for_year(
    source: RecordSource,
    year: int,
    regions: Optional[Iterable[str]] = None,
    countries: Optional[Iterable[str]] = None,
) -> List[CountryCount]:
    """Per-country counts, highest first; ties keep first-seen order."""
    scoped = scope_frame(source, year, regions, countries)
    if scoped.empty:
        return []
    counts = scoped.groupby("country", sort=False).size()
    pairs = [CountryCount(country=str(c), count=int(n)) for c, n in counts.items()]
    return sorted(pairs, key=lambda p: -p.count)


def countries_for_regions(source: RecordSource, regions: Optional[Iterable[str]] = None) -> List[str]:
    """Distinct sorted countries over all years, optionally restricted to some regions."""
    df = _as_frame(source)
    regions = list(regions or [])
    if regions:
        df = df[df["region"].isin(regions)]
    return sorted({str(c) for c in df["country"].tolist()})
