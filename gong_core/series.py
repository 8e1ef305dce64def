from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional

import pandas as pd

from gong_core.aggregates import MonthlyAverageTable, compute_team_averages
from gong_core.filters import DashboardOptions, FilterSelection, TeamFilter, apply_filters
from gong_core.teams import BUYSIDE, OVERALL_AVG_LABEL, SELLSIDE, TEAM_AVERAGE_LABEL

ValueFormat = Literal["percent", "seconds", "plain"]

ACTIVITY_METRICS = [
    "Total Calls",
    "Calls per Week",
    "Total Call Time (Avg min)",
    "Avg Call Duration (Avg min)",
    "Call Time per Week (Avg min)",
]

INTERACTION_METRICS = [
    "Avg Talk %",
    "Longest Monologue (sec)",
    "Longest Interview (sec)",
    "Interactivity Score",
    "Patience (sec)",
    "Questions/hr",
]

METRIC_SECTIONS = {
    "Activity Metrics": ACTIVITY_METRICS,
    "Interaction Metrics": INTERACTION_METRICS,
}

# Reference lines drawn on the chart; not derived from the data.
BENCHMARKS = {
    "Avg Talk %": 65,
    "Longest Monologue (sec)": 150,  # 2:30
    "Longest Interview (sec)": 60,
    "Interactivity Score": 5,
    "Patience (sec)": 0.6,
    "Questions/hr": 18,
}

PERCENT_METRIC = "Avg Talk %"


@dataclass
class SeriesRow:
    """One chart row: a month plus rep and team-average series values."""

    month: str
    reps: Dict[str, float] = field(default_factory=dict)
    team: Dict[str, float] = field(default_factory=dict)

    def to_record(self) -> Dict[str, object]:
        return {"month": self.month, **self.reps, **self.team}


def get_benchmark_value(metric: str) -> Optional[float]:
    return BENCHMARKS.get(metric)


def metric_format(metric: str) -> ValueFormat:
    if metric == PERCENT_METRIC:
        return "percent"
    if "(sec)" in metric:
        return "seconds"
    return "plain"


def format_metric_value(value: object, metric: str) -> object:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    fmt = metric_format(metric)
    if fmt == "percent":
        return f"{value}%"
    if fmt == "seconds":
        return f"{value}s"
    return value


def visible_metrics(section_metrics: List[str], selection: FilterSelection) -> List[str]:
    if not selection.metrics:
        return list(section_metrics)
    return [m for m in section_metrics if m in selection.metrics]


def team_columns(team_filter: TeamFilter) -> List[str]:
    columns = []
    if team_filter in ("all", "buyside"):
        columns.append(BUYSIDE.avg_label)
    if team_filter in ("all", "sellside"):
        columns.append(SELLSIDE.avg_label)
    if team_filter == "all":
        columns.append(OVERALL_AVG_LABEL)
    return columns


def shape_rep_series(
    filtered: pd.DataFrame,
    metric: str,
    *,
    team_averages: Optional[MonthlyAverageTable] = None,
    team_filter: TeamFilter = "all",
) -> List[SeriesRow]:
    """Pivot filtered records into one row per month, one column per rep.

    Months appear in first-encounter order. A rep with no record in a month
    has no key in that row; duplicates for the same rep and month keep the
    last value. ``team_averages`` adds the team columns picked by
    ``team_filter`` to months present in the table.
    """
    if filtered.empty:
        return []
    metric_data = filtered[filtered["metric"] == metric]

    grouped: Dict[str, SeriesRow] = {}
    for rep_name, month, value in metric_data[["rep_name", "month", "value"]].itertuples(index=False):
        row = grouped.setdefault(month, SeriesRow(month=month))
        row.reps[rep_name] = float(value)

    rows = list(grouped.values())
    if team_averages is not None:
        columns = team_columns(team_filter)
        for row in rows:
            averages = team_averages.get(row.month)
            if not averages:
                continue
            for col in columns:
                if col in averages:
                    row.team[col] = averages[col]
    return rows


def shape_team_series(team_averages: MonthlyAverageTable) -> List[SeriesRow]:
    rows = []
    for month, averages in team_averages.items():
        row = SeriesRow(month=month)
        if OVERALL_AVG_LABEL in averages:
            row.team[TEAM_AVERAGE_LABEL] = averages[OVERALL_AVG_LABEL]
        rows.append(row)
    return rows


def chart_rows_for_metric(
    records: pd.DataFrame,
    metric: str,
    selection: FilterSelection,
    options: DashboardOptions,
) -> List[SeriesRow]:
    if options.view_mode == "team":
        return shape_team_series(compute_team_averages(records, metric, selection))

    filtered = apply_filters(records, selection)
    team_averages = compute_team_averages(records, metric, selection) if options.show_team_average else None
    return shape_rep_series(filtered, metric, team_averages=team_averages, team_filter=options.team_filter)


def rows_to_frame(rows: List[SeriesRow]) -> pd.DataFrame:
    return pd.DataFrame([row.to_record() for row in rows])
