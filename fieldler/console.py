# fieldler/fieldler/console.py
"""
Console presentation of the `fieldler` log hierarchy for the command line.

Library modules log through plain `logging.getLogger(__name__)` loggers. This module
decides how those records look on a terminal: warnings and errors get a mark, and the
command line adds `step` and `ok` records that carry their own mark.
"""
from __future__ import annotations
import logging
import os
import sys
from typing import Optional, TextIO, Tuple

ROOT = "fieldler"

_ANSI = {
    "reset": "\x1b[0m",
    "green": "\x1b[32m",
    "yellow": "\x1b[33m",
    "red": "\x1b[31m",
    "cyan": "\x1b[36m",
    "gray": "\x1b[90m",
}

Mark = Tuple[str, str]

STEP: Mark = ("→", "cyan")
OK: Mark = ("✓", "green")
_LEVEL_MARKS = {
    logging.WARNING: ("⚠", "yellow"),
    logging.ERROR: ("✖", "red"),
    logging.CRITICAL: ("✖", "red"),
}

_VERBOSITY_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)


def _supports_color(stream: TextIO) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty()) and os.environ.get("TERM") not in (None, "dumb")


class ConsoleFormatter(logging.Formatter):
    """
    Formats `%(message)s`, prefixed by the record's mark. A record gets its mark from
    `extra={"mark": ...}` or, failing that, from its level. An optional `detail` extra is
    appended in gray.
    """

    def __init__(self, color: bool = False):
        super().__init__("%(message)s")
        self.color = color

    def paint(self, text: str, color: str) -> str:
        if not self.color:
            return text
        return f"{_ANSI[color]}{text}{_ANSI['reset']}"

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        detail = getattr(record, "detail", "")
        if detail:
            message = f"{message} {self.paint(detail, 'gray')}"
        mark = getattr(record, "mark", None) or _LEVEL_MARKS.get(record.levelno)
        if mark is None:
            return message
        symbol, color = mark
        return f"{self.paint(symbol, color)} {message}"


def setup_logging(verbosity: int = 0, log_file: Optional[str] = None) -> logging.Logger:
    """Configure the `fieldler` hierarchy. Verbosity: 0→WARNING, 1→INFO, 2+→DEBUG."""
    level = _VERBOSITY_LEVELS[min(max(verbosity, 0), len(_VERBOSITY_LEVELS) - 1)]

    logger = logging.getLogger(ROOT)
    logger.handlers.clear()
    logger.setLevel(level)

    sh = logging.StreamHandler(stream=sys.stdout)
    sh.setFormatter(ConsoleFormatter(color=_supports_color(sys.stdout)))
    logger.addHandler(sh)

    if log_file:
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setFormatter(ConsoleFormatter())
        logger.addHandler(fh)
    return logger


def step(logger: logging.Logger, label: str, value: str = "") -> None:
    logger.info(label, extra={"mark": STEP, "detail": value})


def ok(logger: logging.Logger, msg: str) -> None:
    logger.info(msg, extra={"mark": OK})
