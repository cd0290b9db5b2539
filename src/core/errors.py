"""Exceptions raised by the store and its collaborators."""

from __future__ import annotations


class StoreError(Exception):
    """Base class for every error the store raises."""


class NotFoundError(StoreError):
    """No row matched the lookup."""


class NotAuthorizedError(NotFoundError):
    """The row exists but its team is not enabled for bridging.

    Subclassing NotFoundError keeps a single "denied" outcome for callers
    that only catch NotFoundError.
    """

    def __init__(self, team_id: str) -> None:
        super().__init__(f"link not enabled for team {team_id}")
        self.team_id = team_id


class TokenDecodeError(StoreError):
    """A stored token blob is not a well-formed token."""


class BackendError(StoreError):
    """The database driver rejected a statement or the connection failed.

    The driver message is kept as-is and the driver exception is chained.
    """


class TeamLookupError(Exception):
    """Raised by team directories when a team id cannot be resolved."""
