"""
Logging configuration — central setup for the provision entrypoint.

Called once at startup by main.py.  Every module that does
``logger = logging.getLogger(__name__)`` inherits this config.

Console lines look like::

    [2026-10-19T08:15:02Z] [INFO]  Detected OS: Ubuntu 22.04.4 LTS
    [2026-10-19T08:15:02Z] [STEP 2] >>> Determine privilege escalation method

INFO/DEBUG go to stdout, WARNING and above to stderr, so an agent
driving the run can tell progress from problems by stream alone.
`provision run --json` sends progress to stderr too, leaving stdout
to the report.

Levels are resolved in precedence order:
    CLI flag  >  PROVISION_LOG_LEVEL env var  >  INFO (default)

Optional file output via PROVISION_LOG_FILE / PROVISION_LOG_FILE_LEVEL.
"""

from __future__ import annotations

import logging
import sys
import time
from typing import TextIO

# ── Format strings ──────────────────────────────────────────────

_DATEFMT_UTC = "%Y-%m-%dT%H:%M:%SZ"

# File output: always full detail, UTC like the console
_FMT_FILE = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d - %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%SZ"

# Severity tags as printed on the console
_LEVEL_TAGS = {
    "DEBUG": "DEBUG",
    "INFO": "INFO",
    "WARNING": "WARN",
    "ERROR": "ERROR",
    "CRITICAL": "ERROR",
}


class TaggedFormatter(logging.Formatter):
    """``[<utc timestamp>] [<tag>] message``.

    The tag is the severity unless the record carries an explicit
    ``tag`` extra (the reporter uses ``STEP n``).
    """

    converter = time.gmtime

    def __init__(self, *, debug: bool = False) -> None:
        super().__init__(datefmt=_DATEFMT_UTC)
        self._debug = debug

    def format(self, record: logging.LogRecord) -> str:
        tag = getattr(record, "tag", None) or _LEVEL_TAGS.get(record.levelname, record.levelname)
        message = record.getMessage()
        if self._debug:
            message = f"{record.name}:{record.lineno} - {message}"
        line = f"[{self.formatTime(record, self.datefmt)}] {f'[{tag}]':<7} {message}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


class _BelowWarning(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < logging.WARNING


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    log_file_level: str | None = None,
    progress_stream: TextIO | None = None,
) -> None:
    """Configure Python logging for the entire process.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to a log file.
        log_file_level: Optional separate level for the log file.
            Defaults to the same as ``level``.
        progress_stream: Where INFO/DEBUG lines go (default: stdout).
            Machine-readable output modes pass stderr to keep stdout clean.
    """
    numeric_level = _parse_level(level)
    formatter = TaggedFormatter(debug=numeric_level <= logging.DEBUG)

    # ── Console handlers (stdout for progress, stderr for problems) ──
    out = logging.StreamHandler(progress_stream or sys.stdout)
    out.setLevel(numeric_level)
    out.addFilter(_BelowWarning())
    out.setFormatter(formatter)

    err = logging.StreamHandler(sys.stderr)
    err.setLevel(max(numeric_level, logging.WARNING))
    err.setFormatter(formatter)

    # ── Root logger ─────────────────────────────────────────────
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(out)
    root.addHandler(err)

    # Effective root level = minimum of console and file levels
    effective_level = numeric_level

    # ── File handler (optional) ─────────────────────────────────
    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else numeric_level
        effective_level = min(effective_level, file_level)

        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        file_formatter = logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE)
        file_formatter.converter = time.gmtime
        fh.setFormatter(file_formatter)
        root.addHandler(fh)

    root.setLevel(effective_level)

    # Don't propagate exceptions from logging itself
    logging.raiseExceptions = False


def _parse_level(level: str | None) -> int:
    """Convert a level name string to its numeric constant."""
    if not level:
        return logging.INFO
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.INFO
    return numeric
