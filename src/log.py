"""Logging setup for the bridgestore CLI.

Store modules only create module loggers; handlers are attached here, once,
from the `logging` section of config.json. Secret values named in
`redact.patterns` (env var names) are masked in every formatted line.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Mapping, Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_LOG_FILE = "logs/bridgestore.log"
MASK = "***"


class RedactingFormatter(logging.Formatter):
    """Formatter that replaces known secret values with a mask."""

    def __init__(self, secrets: list[str], fmt: str = LOG_FORMAT, datefmt: Optional[str] = DATE_FORMAT) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        # Longest first so a secret containing another is masked whole.
        self._secrets = sorted({secret for secret in secrets if secret}, key=len, reverse=True)

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, MASK)
        return message


def redaction_values(config: Mapping, environ: Mapping[str, str] = os.environ) -> list[str]:
    """Resolve the env var names listed under redact.patterns to their values."""

    redact_cfg = config.get("redact", {})
    if not redact_cfg.get("enabled", False):
        return []
    return [environ[name] for name in redact_cfg.get("patterns", []) if environ.get(name)]


def _file_handler(file_cfg: Mapping, project_root: str) -> logging.Handler:
    path = file_cfg.get("path", DEFAULT_LOG_FILE)
    if not os.path.isabs(path):
        path = os.path.join(project_root, path)
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    return RotatingFileHandler(
        path,
        maxBytes=int(file_cfg.get("max_bytes", 5 * 1024 * 1024)),
        backupCount=int(file_cfg.get("backup_count", 5)),
        encoding="utf-8",
    )


def build_handlers(config: Mapping, project_root: str) -> list[logging.Handler]:
    """Create the console and file handlers the config asks for."""

    if not config.get("enabled", False):
        return []

    level = getattr(logging, str(config.get("level", "INFO")).upper(), logging.INFO)
    formatter = RedactingFormatter(redaction_values(config))

    handlers: list[logging.Handler] = []
    if config.get("console", True):
        handlers.append(logging.StreamHandler())
    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        handlers.append(_file_handler(file_cfg, project_root))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    return handlers


def configure_logging(config: Optional[Mapping], project_root: str) -> None:
    """Install handlers on the root logger; no-op when logging is disabled."""

    handlers = build_handlers(config or {}, project_root)
    if not handlers:
        return
    logging.basicConfig(level=min(handler.level for handler in handlers), handlers=handlers)
