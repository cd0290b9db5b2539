"""Config-backed team directory.

Implements TeamDirectoryPort from a static id -> name mapping, for running
the store outside the host platform.
"""

from __future__ import annotations

from typing import Mapping

from core.errors import TeamLookupError
from core.models import Team


class StaticTeamDirectory:
    """Team directory built from the `teams` section of config.json."""

    def __init__(self, teams: Mapping[str, str]) -> None:
        self._teams = dict(teams)

    def get_team(self, team_id: str) -> Team:
        name = self._teams.get(team_id)
        if name is None:
            raise TeamLookupError(f"unknown team: {team_id}")
        return Team(id=team_id, name=name)
