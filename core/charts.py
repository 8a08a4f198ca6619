from __future__ import annotations

from typing import Any, Dict, List, Sequence

import altair as alt
import pandas as pd

from core.aggregation import CountryCount, MonthlyAggregate
from core.normalize import MONTH_NAMES

alt.data_transformers.disable_max_rows()

COUNTRY_PALETTE = [
    "#06b6d4",
    "#3b82f6",
    "#8b5cf6",
    "#ec4899",
    "#f97316",
    "#10b981",
    "#eab308",
    "#ef4444",
    "#14b8a6",
    "#f59e0b",
]


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def monthly_long_frame(monthly: Sequence[MonthlyAggregate], countries: Sequence[str]) -> pd.DataFrame:
    """One row per (month, country), zero-filled so every line spans Jan..Dec."""
    rows: List[Dict[str, Any]] = []
    for entry in monthly:
        for country in countries:
            rows.append(
                {
                    "month": entry.month,
                    "month_number": entry.month_number,
                    "country": country,
                    "letters": int(entry.counts.get(country, 0)),
                }
            )
    return pd.DataFrame(rows, columns=["month", "month_number", "country", "letters"])


def monthly_country_chart(monthly: Sequence[MonthlyAggregate], countries: Sequence[str]) -> alt.Chart:
    data = monthly_long_frame(monthly, countries)
    return (
        alt.Chart(data)
        .mark_line(point=True)
        .encode(
            x=alt.X("month:N", sort=list(MONTH_NAMES), title="Month"),
            y=alt.Y("letters:Q", title="Letters Requested", axis=alt.Axis(tickMinStep=1)),
            color=alt.Color(
                "country:N",
                title="Country",
                sort=list(countries),
                scale=alt.Scale(domain=list(countries), range=COUNTRY_PALETTE),
            ),
            tooltip=["month:N", "country:N", alt.Tooltip("letters:Q", format=",")],
        )
    )


def country_breakdown_chart(breakdown: Sequence[CountryCount]) -> alt.Chart:
    data = pd.DataFrame([{"country": b.country, "count": b.count} for b in breakdown], columns=["country", "count"])
    order = [b.country for b in breakdown]
    return (
        alt.Chart(data)
        .mark_bar()
        .encode(
            x=alt.X("count:Q", title="Letters"),
            y=alt.Y("country:N", sort=order, title="Country"),
            color=alt.Color("country:N", legend=None, scale=alt.Scale(domain=order, range=COUNTRY_PALETTE)),
            tooltip=["country:N", alt.Tooltip("count:Q", format=",")],
        )
    )
