from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from core.errors import NotFoundError


@dataclass(frozen=True)
class ScopeFilters:
    year: int
    selected_regions: List[str] = field(default_factory=list)
    selected_countries: List[str] = field(default_factory=list)


def _as_str_list(values: Optional[Iterable[object]]) -> List[str]:
    if not values:
        return []
    if isinstance(values, str):
        values = [values]
    out: List[str] = []
    for v in values:
        if v is None:
            continue
        s = str(v).strip()
        if s and s not in out:
            out.append(s)
    return out


def _as_year(value: object) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def normalize_filters(raw: dict, *, available_years: Optional[Sequence[int]] = None) -> ScopeFilters:
    """Build ScopeFilters from loosely-typed input (query params, JSON bodies, widgets).

    A missing or unparseable year falls back to the latest available year. A year that
    parses but is not available is kept as-is so callers can report "no data for year".
    """
    available_years = sorted(available_years or [], reverse=True)
    year = _as_year(raw.get("year"))
    if year is None:
        if not available_years:
            raise NotFoundError("No data available")
        year = available_years[0]

    return ScopeFilters(
        year=year,
        selected_regions=_as_str_list(raw.get("selected_regions")),
        selected_countries=_as_str_list(raw.get("selected_countries")),
    )
