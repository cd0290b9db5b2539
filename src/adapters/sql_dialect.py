"""SQL dialect strategy.

Placeholder style differs between drivers (sqlite3 uses qmark, psycopg uses
format). The dialect is resolved once from the driver name when the store
is built, instead of inspecting the connection on every query.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Dialect:
    """Driver-specific bits of SQL text."""

    name: str
    placeholder: str

    def placeholders(self, count: int) -> str:
        """Comma-separated placeholders for a VALUES clause."""

        return ", ".join([self.placeholder] * count)


SQLITE = Dialect(name="sqlite", placeholder="?")
POSTGRES = Dialect(name="postgres", placeholder="%s")

_DIALECTS = {
    "sqlite": SQLITE,
    "sqlite3": SQLITE,
    "postgres": POSTGRES,
    "postgresql": POSTGRES,
}


def resolve_dialect(driver_name: str) -> Dialect:
    """Map a configured driver name onto its dialect."""

    try:
        return _DIALECTS[driver_name.strip().lower()]
    except KeyError:
        raise ValueError(f"Unsupported database driver: {driver_name}") from None
