"""Logging configuration for defi-positions.

Logs go to stderr so the report and ``--show-config`` output on stdout can be
piped. Level names are coloured only when stderr is a terminal.
"""

import logging
import sys
from typing import TextIO

# below DEBUG; shows raw upstream payloads
TRACE = 5
logging.addLevelName(TRACE, "TRACE")

LEVELS = {
    "TRACE": TRACE,
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# HTTP and RPC client loggers, silenced below WARNING unless tracing
HTTP_LOGGERS = ("urllib3", "requests", "web3")


class ColoredFormatter(logging.Formatter):
    """Formatter that colours the level name with ANSI codes."""

    COLORS = {
        "TRACE": "\033[90m",
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[1;35m",
    }
    RESET = "\033[0m"

    def __init__(self, fmt: str, datefmt: str | None = None, use_color: bool = True):
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        if self.use_color and levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def parse_level(name: str) -> int:
    """Numeric level for a level name, case-insensitive.

    Raises:
        ValueError: If the name is not one of ``LEVELS``
    """
    try:
        return LEVELS[name.upper()]
    except KeyError:
        raise ValueError(
            f"Unknown log level '{name}'. Available: {', '.join(LEVELS)}"
        ) from None


def setup_logging(log_level: str = "INFO", stream: TextIO | None = None) -> None:
    """Route all logging to one stderr handler at the configured level."""
    level = parse_level(log_level)
    stream = stream or sys.stderr

    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        ColoredFormatter(
            fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
            datefmt="%H:%M:%S",
            use_color=stream.isatty(),
        )
    )
    logging.basicConfig(level=level, handlers=[handler], force=True)

    http_level = TRACE if level == TRACE else max(level, logging.WARNING)
    for name in HTTP_LOGGERS:
        logging.getLogger(name).setLevel(http_level)
