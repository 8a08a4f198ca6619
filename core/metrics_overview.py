from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List

from core.aggregation import (
    countries_for_regions,
    country_breakdown_for_year,
    monthly_data_for_year,
    total_for_year,
)
from core.charts import country_breakdown_chart, monthly_country_chart, to_vega_spec
from core.data import Dataset
from core.errors import NotFoundError
from core.filters import ScopeFilters


def compute_dashboard(filters: ScopeFilters, dataset: Dataset) -> Dict[str, Any]:
    """Chart-ready payload for one year-scoped dashboard view."""
    if filters.year not in dataset.years:
        raise NotFoundError(f"No data for {filters.year}")

    regions = filters.selected_regions
    countries = filters.selected_countries

    monthly = monthly_data_for_year(dataset, filters.year, regions, countries)
    breakdown = country_breakdown_for_year(dataset, filters.year, regions, countries)
    chart_countries = [b.country for b in breakdown]

    return {
        "filters": asdict(filters),
        "year": filters.year,
        "available_years": list(dataset.years),
        "regions": list(dataset.regions),
        "available_countries": countries_for_regions(dataset, regions),
        "total": total_for_year(dataset, filters.year, regions, countries),
        "monthly": [asdict(m) for m in monthly],
        "monthly_rows": [m.to_chart_row() for m in monthly],
        "country_breakdown": [asdict(b) for b in breakdown],
        "last_updated": dataset.last_updated.isoformat(),
        "charts": {
            "monthly_trend": to_vega_spec(monthly_country_chart(monthly, chart_countries)),
            "country_breakdown": to_vega_spec(country_breakdown_chart(breakdown)),
        },
    }


def compute_year_summaries(dataset: Dataset) -> List[Dict[str, Any]]:
    df = dataset.frame
    out: List[Dict[str, Any]] = []
    for year in dataset.years:
        year_df = df[df["year"] == year]
        out.append(
            {
                "year": int(year),
                "records": int(len(year_df)),
                "countries": int(year_df["country"].nunique()),
            }
        )
    return out
