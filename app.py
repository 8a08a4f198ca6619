import altair as alt
import pandas as pd
import streamlit as st
from contextlib import contextmanager
from typing import List, Optional

from core.aggregation import (
    countries_for_regions,
    country_breakdown_for_year,
    monthly_data_for_year,
    total_for_year,
)
from core.charts import country_breakdown_chart, monthly_country_chart
from core.config import Settings
from core.data import (
    Dataset,
    dataset_from_payload,
    dataset_to_payload,
    is_supported_workbook,
    load_letter_workbook,
    require_records,
)
from core.errors import LetterEaseError
from core.filters import normalize_filters
from core.metrics_overview import compute_year_summaries
from core.sample import write_sample_workbook
from core.store import DatasetStore, build_store

alt.data_transformers.disable_max_rows()


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;margin-bottom: 8px;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(f"<div class='card'><div class='card-title'>{title}</div>", unsafe_allow_html=True)
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def format_filter_summary(year: int, selected_regions: List[str], selected_countries: List[str]) -> str:
    region_chip = f"Region: {', '.join(selected_regions)}" if selected_regions else "Region: All"
    country_chip = f"Country: {', '.join(selected_countries)}" if selected_countries else "Country: All"
    return "".join([f"<span class='chip'>{txt}</span>" for txt in [f"Year: {year}", region_chip, country_chip]])


@st.cache_resource
def get_store() -> DatasetStore:
    return build_store(Settings.from_env())


def load_active_dataset(store: DatasetStore) -> Optional[Dataset]:
    doc = store.load()
    if doc is None:
        return None
    key = doc.updated_at.isoformat()
    cached = st.session_state.get("_dataset_cache")
    if cached and cached[0] == key:
        return cached[1]
    dataset = dataset_from_payload(doc.data)
    st.session_state["_dataset_cache"] = (key, dataset)
    return dataset


# ---------- UI setup ----------
st.set_page_config(page_title="LetterEase Reporting Dashboard", layout="wide")
inject_base_styles()
st.title("LetterEase Reporting Dashboard")
st.caption("Monthly letter requests by country, one dashboard per year.")

store = get_store()

with st.sidebar:
    st.markdown("### Admin")
    password = st.text_input("Admin password", type="password")
    uploaded = st.file_uploader("Upload letters workbook", type=["xlsx", "xls"])
    if uploaded is not None and st.button("Process upload"):
        try:
            if not is_supported_workbook(uploaded.name):
                st.error("Please upload a valid Excel file (.xlsx or .xls)")
            else:
                dataset = require_records(load_letter_workbook(uploaded.getvalue(), filename=uploaded.name))
                store.save(dataset_to_payload(dataset), password)
                st.success(f"Successfully processed {len(dataset.records)} records from {len(dataset.years)} years")
        except LetterEaseError as exc:
            st.error(str(exc))
    if st.button("Clear all data"):
        try:
            store.clear(password)
            st.success("All data has been cleared")
        except LetterEaseError as exc:
            st.error(str(exc))
    st.download_button(
        "Download sample Excel",
        data=write_sample_workbook(),
        file_name="LetterEase_Sample_Data.xlsx",
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )

try:
    data = load_active_dataset(store)
except LetterEaseError as exc:
    st.error(str(exc))
    st.stop()

if data is None or not data.records:
    st.info("No data uploaded yet. An administrator can upload a workbook from the sidebar.")
    st.stop()

# ----- Year overview -----
summaries = compute_year_summaries(data)
cols = st.columns(max(1, min(4, len(summaries))))
for idx, s in enumerate(summaries):
    cols[idx % len(cols)].metric(f"{s['year']}", f"{s['records']:,} letters", help=f"{s['countries']} countries")

# ----- Filters -----
with st.sidebar:
    st.markdown("---")
    st.markdown("### Filters")
    year_choice = st.selectbox("Year", options=list(data.years), index=0)
    selected_regions = st.multiselect("Region", options=list(data.regions), default=[])
    country_options = countries_for_regions(data, selected_regions)
    selected_countries = st.multiselect("Country", options=country_options, default=[])

filters = normalize_filters(
    {"year": year_choice, "selected_regions": selected_regions, "selected_countries": selected_countries},
    available_years=data.years,
)
st.markdown(
    f"<div class='chip-row'>{format_filter_summary(filters.year, filters.selected_regions, filters.selected_countries)}</div>",
    unsafe_allow_html=True,
)

if filters.year not in data.years:
    st.warning(f"No data for {filters.year}. Available years: {', '.join(str(y) for y in data.years)}")
    st.stop()

monthly = monthly_data_for_year(data, filters.year, filters.selected_regions, filters.selected_countries)
breakdown = country_breakdown_for_year(data, filters.year, filters.selected_regions, filters.selected_countries)
total = total_for_year(data, filters.year, filters.selected_regions, filters.selected_countries)

st.metric(f"Total letters in {filters.year}", f"{total:,}")

if total == 0:
    st.info("No data to display")
    st.stop()

with card("Monthly letter requests by country"):
    st.altair_chart(
        monthly_country_chart(monthly, [b.country for b in breakdown]).properties(height=380),
        use_container_width=True,
    )

with card("Country breakdown"):
    left, right = st.columns([3, 2])
    with left:
        st.altair_chart(country_breakdown_chart(breakdown), use_container_width=True)
    with right:
        breakdown_df = pd.DataFrame([{"Country": b.country, "Letters": b.count} for b in breakdown])
        breakdown_df["Share"] = breakdown_df["Letters"] / total
        st.dataframe(breakdown_df, hide_index=True, use_container_width=True)

st.caption(f"Last updated {data.last_updated:%Y-%m-%d %H:%M} UTC")
