"""Unit tests for year-scoped aggregates."""

from __future__ import annotations

from typing import Dict, List

from core.aggregation import (
    CountryCount,
    countries_for_regions,
    country_breakdown_for_year,
    monthly_data_for_year,
    scope_frame,
    total_for_year,
)
from core.data import Dataset, build_dataset
from core.normalize import MONTH_NAMES


def _rows(*items: tuple) -> List[Dict[str, object]]:
    return [{"Date": d, "Country": c, "Region": r} for d, c, r in items]


def test_scenario_totals_monthly_and_breakdown(scenario_dataset: Dataset) -> None:
    monthly = monthly_data_for_year(scenario_dataset, 2024)

    assert total_for_year(scenario_dataset, 2024, [], []) == 3
    assert monthly[0].counts == {"UAE": 2}
    assert monthly[1].counts == {"Egypt": 1}
    assert country_breakdown_for_year(scenario_dataset, 2024, [], []) == [
        CountryCount("UAE", 2),
        CountryCount("Egypt", 1),
    ]


def test_monthly_data_always_has_twelve_ordered_months(scenario_dataset: Dataset) -> None:
    monthly = monthly_data_for_year(scenario_dataset, 2024)

    assert [m.month_number for m in monthly] == list(range(12))
    assert [m.month for m in monthly] == list(MONTH_NAMES)
    assert all(m.counts == {} for m in monthly[2:])


def test_monthly_chart_rows_flatten_country_counts(scenario_dataset: Dataset) -> None:
    rows = [m.to_chart_row() for m in monthly_data_for_year(scenario_dataset, 2024)]

    assert rows[0] == {"month": "Jan", "monthNumber": 0, "UAE": 2}
    assert rows[11] == {"month": "Dec", "monthNumber": 11}


def test_row_missing_region_is_excluded_from_total() -> None:
    rows = _rows(("2024-01-15", "UAE", "MEA"), ("2024-01-16", "UAE", "MEA"))
    rows.append({"Date": "2024-01-17", "Country": "UAE"})

    dataset = build_dataset(rows)

    assert total_for_year(dataset, 2024) == 2


def test_absent_year_yields_zero_and_empty_aggregates(scenario_dataset: Dataset) -> None:
    assert total_for_year(scenario_dataset, 1999) == 0
    assert country_breakdown_for_year(scenario_dataset, 1999) == []
    monthly = monthly_data_for_year(scenario_dataset, 1999)
    assert len(monthly) == 12
    assert all(m.counts == {} for m in monthly)


def test_trailing_whitespace_coalesces_countries() -> None:
    dataset = build_dataset(_rows(("2024-01-15", "UAE", "MEA"), ("2024-03-15", "UAE ", "MEA")))

    assert country_breakdown_for_year(dataset, 2024) == [CountryCount("UAE", 2)]
    assert dataset.countries == ("UAE",)


def test_breakdown_ties_keep_first_seen_order() -> None:
    dataset = build_dataset(
        _rows(
            ("2024-01-01", "Qatar", "MEA"),
            ("2024-01-02", "Oman", "MEA"),
            ("2024-01-03", "Brazil", "Americas"),
            ("2024-01-04", "Brazil", "Americas"),
            ("2024-02-01", "Oman", "MEA"),
            ("2024-02-02", "Qatar", "MEA"),
        )
    )

    breakdown = country_breakdown_for_year(dataset, 2024)

    assert [b.country for b in breakdown] == ["Qatar", "Oman", "Brazil"]
    assert [b.count for b in breakdown] == [2, 2, 2]


def test_region_and_country_filters_narrow_scope(sample_dataset: Dataset) -> None:
    assert total_for_year(sample_dataset, 2024) == 30
    assert total_for_year(sample_dataset, 2024, ["MEA"]) == 10
    assert total_for_year(sample_dataset, 2024, ["MEA", "APAC"]) == 18
    assert total_for_year(sample_dataset, 2024, ["MEA"], ["UAE"]) == 5
    # Country outside the selected region: both filters apply, nothing matches.
    assert total_for_year(sample_dataset, 2024, ["MEA"], ["Japan"]) == 0
    assert total_for_year(sample_dataset, 2024, [], ["Japan", "UK"]) == 3


def test_empty_selection_means_no_filter(sample_dataset: Dataset) -> None:
    assert total_for_year(sample_dataset, 2025, [], []) == total_for_year(sample_dataset, 2025) == 6
    assert len(scope_frame(sample_dataset, 2025, None, None)) == 6


def test_monthly_counts_respect_filters(sample_dataset: Dataset) -> None:
    monthly = monthly_data_for_year(sample_dataset, 2024, ["MEA"])

    assert monthly[0].counts == {"UAE": 2}
    assert monthly[1].counts == {"UAE": 1, "Saudi Arabia": 1}
    assert monthly[4].counts == {"UAE": 1, "Saudi Arabia": 1}
    assert monthly[5].counts == {}


def test_monthly_data_is_idempotent(sample_dataset: Dataset) -> None:
    first = monthly_data_for_year(sample_dataset, 2024, ["APAC"], [])
    second = monthly_data_for_year(sample_dataset, 2024, ["APAC"], [])

    assert first == second


def test_countries_for_regions_spans_all_years(sample_dataset: Dataset) -> None:
    everything = countries_for_regions(sample_dataset, [])

    assert everything == list(sample_dataset.countries)
    assert countries_for_regions(sample_dataset, ["EMEA"]) == ["France", "Germany", "Spain", "UK"]
    assert countries_for_regions(sample_dataset, ["Nowhere"]) == []


def test_countries_for_regions_is_monotonic(sample_dataset: Dataset) -> None:
    everything = set(countries_for_regions(sample_dataset))

    for region in sample_dataset.regions:
        assert set(countries_for_regions(sample_dataset, [region])) <= everything


def test_aggregates_accept_plain_record_lists(scenario_dataset: Dataset) -> None:
    records = list(scenario_dataset.records)

    assert total_for_year(records, 2024) == 3
    assert countries_for_regions(records) == ["Egypt", "UAE"]


def test_aggregates_on_empty_dataset() -> None:
    dataset = build_dataset([])

    assert total_for_year(dataset, 2024) == 0
    assert country_breakdown_for_year(dataset, 2024) == []
    assert countries_for_regions(dataset) == []
    assert len(monthly_data_for_year(dataset, 2024)) == 12
