from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class Team:
    key: str
    label: str
    avg_label: str
    color: str
    members: Tuple[str, ...]


BUYSIDE = Team(
    key="buyside",
    label="Buyside Team",
    avg_label="Buyside Team Avg",
    color="#10B981",
    members=(
        "Arturo Alvarado",
        "Brandon Monroe",
        "Courtney Close",
        "Isabella Diaz",
        "Kyle Schaefer",
        "Mark Romeo",
    ),
)

SELLSIDE = Team(
    key="sellside",
    label="Sellside Team",
    avg_label="Sellside Team Avg",
    color="#F59E0B",
    members=(
        "Gabby Steele",
        "Jack O'Connell",
        "Josh Huntsman",
        "Louise Ryan",
        "Marlon Sabo",
        "Tabatha Silva",
    ),
)

TEAMS: Dict[str, Team] = {BUYSIDE.key: BUYSIDE, SELLSIDE.key: SELLSIDE}

OVERALL_AVG_LABEL = "Overall Team Avg"
OVERALL_COLOR = "#8B5CF6"
TEAM_AVERAGE_LABEL = "Team Average"
FALLBACK_COLOR = "#6B7280"

TEAM_FILTERS = ("all", "buyside", "sellside")


def team_for_rep(rep_name: str) -> Optional[Team]:
    for team in TEAMS.values():
        if rep_name in team.members:
            return team
    return None


def team_line_color(series_name: str) -> str:
    """Line colour for a team-average series, matched on its label."""
    if "Buyside" in series_name:
        return BUYSIDE.color
    if "Sellside" in series_name:
        return SELLSIDE.color
    if "Overall" in series_name:
        return OVERALL_COLOR
    return FALLBACK_COLOR
