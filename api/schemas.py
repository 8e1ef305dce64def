from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, Field


class FilterSelectionModel(BaseModel):
    reps: List[str] = Field(default_factory=list)
    metrics: List[str] = Field(default_factory=list)
    months: List[str] = Field(default_factory=list)
    quarters: List[str] = Field(default_factory=list)


class DashboardOptionsModel(BaseModel):
    view_mode: Literal["individual", "team"] = "individual"
    show_team_average: bool = False
    team_filter: Literal["all", "buyside", "sellside"] = "all"


class DashboardRequest(BaseModel):
    filters: FilterSelectionModel = Field(default_factory=FilterSelectionModel)
    options: DashboardOptionsModel = Field(default_factory=DashboardOptionsModel)
    include_charts: bool = True


class TeamModel(BaseModel):
    key: str
    label: str
    avg_label: str
    color: str
    members: List[str]
