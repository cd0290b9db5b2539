"""Enabled-team policy (core domain).

Bridging is only permitted for teams named in the configured list. A list
holding a single empty string means the list was left blank, which opens
bridging to every team.
"""

from __future__ import annotations

import logging
from typing import Sequence

from core.errors import TeamLookupError
from core.ports import TeamDirectoryPort

LOGGER = logging.getLogger(__name__)


def is_open_mode(enabled_teams: Sequence[str]) -> bool:
    """Return True when the configured list allows every team."""

    return len(enabled_teams) == 1 and enabled_teams[0] == ""


def is_team_enabled(team_name: str, enabled_teams: Sequence[str]) -> bool:
    """Exact, case-sensitive membership test against the configured names."""

    if is_open_mode(enabled_teams):
        return True
    return team_name in enabled_teams


def check_enabled_team(
    team_id: str,
    enabled_teams: Sequence[str],
    directory: TeamDirectoryPort,
) -> bool:
    """Resolve a team id through the host directory and apply the policy.

    Open mode never touches the directory. A failed lookup fails closed.
    """

    if is_open_mode(enabled_teams):
        return True

    try:
        team = directory.get_team(team_id)
    except TeamLookupError as exc:
        LOGGER.warning("Team lookup failed for %s, treating as disabled: %s", team_id, exc)
        return False

    return is_team_enabled(team.name, enabled_teams)
