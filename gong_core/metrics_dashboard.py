from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import pandas as pd

from gong_core.aggregates import compute_team_averages
from gong_core.charts import build_metric_chart, series_keys, to_vega_spec
from gong_core.data import empty_records
from gong_core.filters import DashboardOptions, FilterSelection, apply_filters
from gong_core.series import (
    METRIC_SECTIONS,
    chart_rows_for_metric,
    get_benchmark_value,
    metric_format,
    visible_metrics,
)
from gong_core.teams import TEAMS, team_for_rep


def _records(ctx: Dict[str, Any]) -> pd.DataFrame:
    records = ctx.get("records")
    if records is None:
        return empty_records()
    return records


def compute_metric(
    metric: str,
    selection: FilterSelection,
    options: DashboardOptions,
    ctx: Dict[str, Any],
    *,
    include_chart: bool = True,
) -> Dict[str, Any]:
    rows = chart_rows_for_metric(_records(ctx), metric, selection, options)
    keys = series_keys(rows)
    payload: Dict[str, Any] = {
        "metric": metric,
        "view_mode": options.view_mode,
        "benchmark": get_benchmark_value(metric),
        "format": metric_format(metric),
        "rep_series": keys["reps"],
        "team_series": keys["team"],
        "rows": [row.to_record() for row in rows],
        "chart": None,
    }
    if include_chart:
        chart = build_metric_chart(rows, metric, options)
        payload["chart"] = to_vega_spec(chart) if chart is not None else None
    return payload


def compute_dashboard(
    selection: FilterSelection,
    options: DashboardOptions,
    ctx: Dict[str, Any],
    *,
    include_charts: bool = True,
) -> Dict[str, Any]:
    records = _records(ctx)
    sections = []
    for title, metrics in METRIC_SECTIONS.items():
        payloads = []
        for metric in visible_metrics(metrics, selection):
            payload = compute_metric(metric, selection, options, ctx, include_chart=include_charts)
            if payload["rows"]:
                payloads.append(payload)
        sections.append({"title": title, "metrics": payloads})
    return {
        "filters": selection.as_dict(),
        "options": asdict(options),
        "record_count": int(len(records)),
        "load_error": ctx.get("error"),
        "sections": sections,
    }


def compute_team_average_table(metric: str, selection: FilterSelection, ctx: Dict[str, Any]) -> Dict[str, Any]:
    table = compute_team_averages(_records(ctx), metric, selection)
    return {
        "metric": metric,
        "filters": selection.without_reps().as_dict(),
        "months": [{"month": month, **averages} for month, averages in table.items()],
        "load_error": ctx.get("error"),
    }


def compute_debug(ctx: Dict[str, Any]) -> Dict[str, Any]:
    records = _records(ctx)
    payload: Dict[str, Any] = {
        "files": ctx.get("files", []),
        "load_error": ctx.get("error"),
        "data_quality": ctx.get("dq", {}),
        "records_per_month": [],
        "team_coverage": {},
        "reps_without_team": [],
    }
    if records.empty:
        return payload

    per_month = records.groupby("month", sort=True).agg(records=("value", "size"), reps=("rep_name", "nunique")).reset_index()
    payload["records_per_month"] = per_month.to_dict(orient="records")

    reps = sorted(records["rep_name"].unique().tolist())
    payload["team_coverage"] = {
        key: sorted(r for r in reps if r in team.members) for key, team in TEAMS.items()
    }
    payload["reps_without_team"] = [r for r in reps if team_for_rep(r) is None]
    return payload


def export_filtered_records(selection: FilterSelection, ctx: Dict[str, Any]) -> pd.DataFrame:
    return apply_filters(_records(ctx), selection)
