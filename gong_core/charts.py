from __future__ import annotations

from typing import Any, Dict, List, Optional

import altair as alt
import pandas as pd

from gong_core.filters import DashboardOptions
from gong_core.series import SeriesRow, format_metric_value, get_benchmark_value, metric_format
from gong_core.teams import OVERALL_COLOR, TEAM_AVERAGE_LABEL, team_line_color

alt.data_transformers.disable_max_rows()

CHART_HEIGHT = 400
BENCHMARK_COLOR = "#10B981"

_AXIS_LABEL_EXPR = {
    "percent": "datum.value + '%'",
    "seconds": "datum.value + 's'",
}


def to_vega_spec(chart: alt.Chart | alt.LayerChart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def series_keys(rows: List[SeriesRow]) -> Dict[str, List[str]]:
    """Rep and team series names across all rows, in first-seen order."""
    reps: Dict[str, None] = {}
    team: Dict[str, None] = {}
    for row in rows:
        reps.update(dict.fromkeys(row.reps))
        team.update(dict.fromkeys(row.team))
    return {"reps": list(reps), "team": list(team)}


def rep_colors(reps: List[str]) -> List[str]:
    n = len(reps)
    return [f"hsl({(i * 360) / n:g}, 70%, 50%)" for i in range(n)]


def _long_frame(rows: List[SeriesRow], metric: str) -> pd.DataFrame:
    out = []
    for row in rows:
        for name, value in row.reps.items():
            out.append({"month": row.month, "series": name, "kind": "rep", "value": value})
        for name, value in row.team.items():
            out.append({"month": row.month, "series": name, "kind": "team", "value": value})
    df = pd.DataFrame(out, columns=["month", "series", "kind", "value"])
    df["display"] = df["value"].map(lambda v: str(format_metric_value(v, metric)))
    return df


def _y_axis(metric: str) -> alt.Axis:
    label_expr = _AXIS_LABEL_EXPR.get(metric_format(metric))
    if label_expr:
        return alt.Axis(title=None, labelExpr=label_expr, gridDash=[3, 3])
    return alt.Axis(title=None, gridDash=[3, 3])


def _benchmark_layer(metric: str) -> Optional[alt.Chart]:
    benchmark = get_benchmark_value(metric)
    if benchmark is None:
        return None
    return (
        alt.Chart(pd.DataFrame({"benchmark": [benchmark]}))
        .mark_rule(color=BENCHMARK_COLOR, strokeDash=[3, 3], opacity=0.6, strokeWidth=2)
        .encode(y="benchmark:Q", tooltip=[alt.Tooltip("benchmark:Q", title="Benchmark")])
    )


def build_metric_chart(rows: List[SeriesRow], metric: str, options: DashboardOptions) -> Optional[alt.LayerChart]:
    """Bars per rep with dashed team-average lines, or team-average bars.

    Returns None when there is nothing to draw for ``metric``.
    """
    if not rows:
        return None

    long_df = _long_frame(rows, metric)
    if long_df.empty:
        return None
    months = [row.month for row in rows]
    keys = series_keys(rows)
    tooltip = [
        alt.Tooltip("month:N", title="Month"),
        alt.Tooltip("series:N", title="Series"),
        alt.Tooltip("display:N", title=metric),
    ]
    x = alt.X("month:N", title=None, sort=months, axis=alt.Axis(labelAngle=0))
    y = alt.Y("value:Q", axis=_y_axis(metric))

    layers = []
    if options.view_mode == "team":
        bars = (
            alt.Chart(long_df[long_df["series"] == TEAM_AVERAGE_LABEL])
            .mark_bar(color=OVERALL_COLOR)
            .encode(
                x=x,
                y=y,
                color=alt.Color(
                    "series:N",
                    title=None,
                    scale=alt.Scale(domain=[TEAM_AVERAGE_LABEL], range=[OVERALL_COLOR]),
                ),
                tooltip=tooltip,
            )
        )
        layers.append(bars)
    else:
        domain = keys["reps"] + keys["team"]
        palette = rep_colors(keys["reps"]) + [team_line_color(k) for k in keys["team"]]
        color = alt.Color("series:N", title=None, scale=alt.Scale(domain=domain, range=palette))
        if keys["reps"]:
            bars = (
                alt.Chart(long_df[long_df["kind"] == "rep"])
                .mark_bar()
                .encode(x=x, xOffset=alt.XOffset("series:N", sort=keys["reps"]), y=y, color=color, tooltip=tooltip)
            )
            layers.append(bars)
        if keys["team"]:
            lines = (
                alt.Chart(long_df[long_df["kind"] == "team"])
                .mark_line(strokeWidth=4, strokeDash=[8, 4], point=alt.OverlayMarkDef(filled=True, size=80))
                .encode(x=x, y=y, color=color, detail="series:N", tooltip=tooltip)
            )
            layers.append(lines)

    benchmark = _benchmark_layer(metric)
    if benchmark is not None:
        layers.append(benchmark)
    if not layers:
        return None
    return alt.layer(*layers).properties(title=metric, height=CHART_HEIGHT)
