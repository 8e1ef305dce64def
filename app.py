import pandas as pd
import streamlit as st
from contextlib import contextmanager
from typing import List, Optional

from gong_core.data import filter_options, load_dashboard_data
from gong_core.charts import build_metric_chart
from gong_core.filters import FilterSelection, normalize_filters, normalize_options
from gong_core.metrics_dashboard import export_filtered_records
from gong_core.series import METRIC_SECTIONS, chart_rows_for_metric, visible_metrics
from gong_core.settings import configure_logging
from gong_core.teams import TEAMS

configure_logging()

FILTER_KEYS = {
    "reps": "filter_reps",
    "metrics": "filter_metrics",
    "months": "filter_months",
    "quarters": "filter_quarters",
}


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        .team-roster {padding: 10px 12px;border-radius: 6px;font-size: 0.8rem;margin-bottom: 8px;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(f"<div class='card-title'>{title}</div>", unsafe_allow_html=True)
    body = container.container()
    with body:
        yield body


def format_filter_summary(selection: FilterSelection) -> str:
    def _chip(label: str, values) -> str:
        if not values:
            return f"{label}: All"
        if len(values) > 3:
            return f"{label}: {len(values)} selected"
        return f"{label}: {', '.join(sorted(values))}"

    chips = [
        _chip("Reps", selection.reps),
        _chip("Metrics", selection.metrics),
        _chip("Months", selection.months),
        _chip("Quarters", selection.quarters),
    ]
    return "".join([f"<span class='chip'>{txt}</span>" for txt in chips])


def clear_all_filters():
    for key in FILTER_KEYS.values():
        st.session_state[key] = []


def render_team_rosters():
    cols = st.columns(len(TEAMS))
    for col, team in zip(cols, TEAMS.values()):
        col.markdown(
            f"<div class='team-roster' style='border-left: 4px solid {team.color};background: #f9fafb;'>"
            f"<b>{team.label}:</b><br>{', '.join(team.members)}</div>",
            unsafe_allow_html=True,
        )


def render_metric_section(title: str, metrics: List[str], records: pd.DataFrame, selection, options):
    st.header(title)
    for metric in visible_metrics(metrics, selection):
        rows = chart_rows_for_metric(records, metric, selection, options)
        chart = build_metric_chart(rows, metric, options)
        if chart is None:
            continue
        with card(metric):
            st.altair_chart(chart, use_container_width=True)


# ---------- UI setup ----------
st.set_page_config(page_title="Gong Sales Dashboard", layout="wide")
inject_base_styles()
st.title("Gong Sales Dashboard")
st.caption("Track sales rep performance and call metrics")

with st.spinner("Loading your Gong data..."):
    data_ctx = load_dashboard_data()

records: pd.DataFrame = data_ctx["records"]
if data_ctx.get("error"):
    st.error(f"Could not load call metrics: {data_ctx['error']}")
    st.stop()
if records.empty:
    st.warning("The data file loaded but contained no usable records.")
    st.stop()

st.caption(f"Loaded {len(records)} records")
options_lists = filter_options(records)
for key in FILTER_KEYS.values():
    st.session_state.setdefault(key, [])

# ----- Sidebar: view mode + filters -----
with st.sidebar:
    st.markdown("### View Mode")
    view_label = st.radio("View Mode", ["Individual Reps", "Team Average"], index=0, label_visibility="collapsed")
    view_mode = "individual" if view_label == "Individual Reps" else "team"

    show_team_average = False
    team_filter = "all"
    if view_mode == "individual":
        show_team_average = st.checkbox("Show Team Averages", value=False)
        if show_team_average:
            team_label = st.radio("Team Selection", ["All Teams"] + [t.label for t in TEAMS.values()], horizontal=True)
            team_filter = next((k for k, t in TEAMS.items() if t.label == team_label), "all")

    st.markdown("---")
    st.markdown("### Filters")
    st.button("Clear All", on_click=clear_all_filters)
    st.multiselect("Sales Reps", options=options_lists["reps"], key=FILTER_KEYS["reps"])
    st.multiselect("Metrics", options=options_lists["metrics"], key=FILTER_KEYS["metrics"])
    st.multiselect("Months", options=options_lists["months"], key=FILTER_KEYS["months"])
    st.multiselect("Quarters", options=options_lists["quarters"], key=FILTER_KEYS["quarters"])

selection = normalize_filters({name: st.session_state[key] for name, key in FILTER_KEYS.items()})
options = normalize_options(
    {"view_mode": view_mode, "show_team_average": show_team_average, "team_filter": team_filter}
)

st.markdown(f"<div class='chip-row'>{format_filter_summary(selection)}</div>", unsafe_allow_html=True)
if options.show_team_average:
    render_team_rosters()

export_df: Optional[pd.DataFrame] = export_filtered_records(selection, data_ctx)
if not export_df.empty:
    st.download_button(
        "Export CSV",
        data=export_df.to_csv(index=False).encode("utf-8"),
        file_name="gong_records.csv",
        mime="text/csv",
    )

for section_title, section_metrics in METRIC_SECTIONS.items():
    render_metric_section(section_title, section_metrics, records, selection, options)
