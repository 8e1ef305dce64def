from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import FrozenSet, Iterable, Literal, Optional

import pandas as pd

from gong_core.teams import TEAM_FILTERS

ViewMode = Literal["individual", "team"]
TeamFilter = Literal["all", "buyside", "sellside"]

VIEW_MODES = ("individual", "team")

# Month token fragment -> quarter label.
QUARTER_BY_MONTH = {
    "2025-01": "Q1 2025",
    "2025-02": "Q1 2025",
    "2025-03": "Q1 2025",
    "2025-04": "Q2 2025",
    "2025-05": "Q2 2025",
    "2025-06": "Q2 2025",
}


@dataclass(frozen=True)
class FilterSelection:
    reps: FrozenSet[str] = field(default_factory=frozenset)
    metrics: FrozenSet[str] = field(default_factory=frozenset)
    months: FrozenSet[str] = field(default_factory=frozenset)
    quarters: FrozenSet[str] = field(default_factory=frozenset)

    def without_reps(self) -> "FilterSelection":
        return replace(self, reps=frozenset())

    def as_dict(self) -> dict:
        return {
            "reps": sorted(self.reps),
            "metrics": sorted(self.metrics),
            "months": sorted(self.months),
            "quarters": sorted(self.quarters),
        }


@dataclass(frozen=True)
class DashboardOptions:
    view_mode: ViewMode = "individual"
    show_team_average: bool = False
    team_filter: TeamFilter = "all"


def _as_str_set(values: Optional[Iterable[object]]) -> FrozenSet[str]:
    if not values:
        return frozenset()
    if isinstance(values, str):
        values = [values]
    out = set()
    for v in values:
        if v is None:
            continue
        s = str(v).strip()
        if s:
            out.add(s)
    return frozenset(out)


def normalize_filters(raw: Optional[dict]) -> FilterSelection:
    raw = raw or {}
    return FilterSelection(
        reps=_as_str_set(raw.get("reps")),
        metrics=_as_str_set(raw.get("metrics")),
        months=_as_str_set(raw.get("months")),
        quarters=_as_str_set(raw.get("quarters")),
    )


def clear_filters() -> FilterSelection:
    return FilterSelection()


def normalize_options(raw: Optional[dict]) -> DashboardOptions:
    raw = raw or {}
    view_mode = str(raw.get("view_mode") or "individual").strip().lower()
    if view_mode not in VIEW_MODES:
        view_mode = "individual"
    team_filter = str(raw.get("team_filter") or "all").strip().lower()
    if team_filter not in TEAM_FILTERS:
        team_filter = "all"
    return DashboardOptions(
        view_mode=view_mode,  # type: ignore[arg-type]
        show_team_average=bool(raw.get("show_team_average", False)),
        team_filter=team_filter,  # type: ignore[arg-type]
    )


def quarter_for_month(month: object) -> Optional[str]:
    """Map a month token such as "2025-02" to its quarter label, or None."""
    if month is None or pd.isna(month):
        return None
    s = str(month)
    for token, quarter in QUARTER_BY_MONTH.items():
        if token in s:
            return quarter
    return None


def apply_filters(records: pd.DataFrame, selection: FilterSelection, *, include_reps: bool = True) -> pd.DataFrame:
    """Return the records matching every non-empty field of ``selection``.

    With ``include_reps=False`` the rep field is ignored; team averages are
    computed this way so they always reflect the whole team.
    """
    if records.empty:
        return records.copy()

    mask = pd.Series(True, index=records.index)
    if include_reps and selection.reps:
        mask &= records["rep_name"].isin(selection.reps)
    if selection.metrics:
        mask &= records["metric"].isin(selection.metrics)
    if selection.months:
        mask &= records["month"].isin(selection.months)
    if selection.quarters:
        quarters = records["month"].map(quarter_for_month)
        mask &= quarters.isin(selection.quarters)
    mask &= records["value"].notna()
    return records[mask].copy()
