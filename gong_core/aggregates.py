from __future__ import annotations

from typing import Dict, List

import pandas as pd

from gong_core.data import round_half_up
from gong_core.filters import FilterSelection, apply_filters
from gong_core.teams import OVERALL_AVG_LABEL, TEAMS

MonthlyAverageTable = Dict[str, Dict[str, float]]


def _mean(values: List[float]) -> float:
    return round_half_up(sum(values) / len(values), 2)


def compute_team_averages(records: pd.DataFrame, metric: str, selection: FilterSelection) -> MonthlyAverageTable:
    """Per-month team averages for one metric across every rep.

    Only the metric, month and quarter parts of ``selection`` apply; the rep
    selection is ignored so the baseline stays the whole team. Months keep
    the order in which they first appear in ``records``. A team with no
    values in a month gets no key, and a month with no values is absent.
    """
    if records.empty:
        return {}
    team_data = apply_filters(records, selection.without_reps(), include_reps=False)
    team_data = team_data[team_data["metric"] == metric]

    grouped: Dict[str, Dict[str, List[float]]] = {}
    for rep_name, month, value in team_data[["rep_name", "month", "value"]].itertuples(index=False):
        buckets = grouped.setdefault(month, {"all": [], **{key: [] for key in TEAMS}})
        buckets["all"].append(float(value))
        for key, team in TEAMS.items():
            if rep_name in team.members:
                buckets[key].append(float(value))

    result: MonthlyAverageTable = {}
    for month, buckets in grouped.items():
        entry: Dict[str, float] = {}
        for key, team in TEAMS.items():
            if buckets[key]:
                entry[team.avg_label] = _mean(buckets[key])
        if buckets["all"]:
            entry[OVERALL_AVG_LABEL] = _mean(buckets["all"])
        result[month] = entry
    return result
