from __future__ import annotations

import logging
import sys

from skusync.models.finding import DuplicateSkuFinding, MissingValueFinding

"""Logging for the skusync command line tool.

All output goes to stdout through the `skusync` logger, one labeled line per
record:

    INFO imported 2 sheet(s), regenerated 0 SKU cell(s)
    WARN sheet=Products row=2 col=1 missing-value Value "Purple" does not exist ...
    SUMMARY sheets=1 rows=5 missing_values=1 duplicate_skus=0 regenerated=0 elapsed_sec=0.1

Modules log through `logging.getLogger(__name__)` and propagate here.
"""

__all__ = [
    "LOGGER_NAME",
    "SUMMARY_LEVEL",
    "LabeledFormatter",
    "get_logger",
    "log_finding",
    "log_summary",
    "reset_logging",
    "setup_logging",
]

LOGGER_NAME = "skusync"

# INFO(20) と WARNING(30) の間
SUMMARY_LEVEL = 25

_logger: logging.Logger | None = None


class LabeledFormatter(logging.Formatter):
    """`<LABEL> <message>`; WARNING is shortened to WARN to match the findings output."""

    LEVEL_LABELS = {
        logging.DEBUG: "DEBUG",
        logging.INFO: "INFO",
        logging.WARNING: "WARN",
        logging.ERROR: "ERROR",
        logging.CRITICAL: "CRITICAL",
        SUMMARY_LEVEL: "SUMMARY",
    }

    def format(self, record: logging.LogRecord) -> str:
        label = self.LEVEL_LABELS.get(record.levelno, record.levelname)
        return f"{label} {record.getMessage()}"


def setup_logging(debug: bool = False) -> logging.Logger:
    """Configure the `skusync` logger once; later calls may only raise verbosity to DEBUG."""
    global _logger

    if _logger is None:
        logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")
        logger = logging.getLogger(LOGGER_NAME)
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(LabeledFormatter())
        logger.addHandler(handler)
        # ルートロガーへ流すと二重出力になる
        logger.propagate = False
        _set_level(logger, logging.INFO)
        _logger = logger

    if debug:
        _set_level(_logger, logging.DEBUG)
    return _logger


def _set_level(logger: logging.Logger, level: int) -> None:
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)


def get_logger() -> logging.Logger:
    return setup_logging()


def log_finding(sheet_name: str, finding: MissingValueFinding | DuplicateSkuFinding) -> None:
    """One WARN line per validation finding, located by sheet, row and column."""
    get_logger().warning(
        f"sheet={sheet_name} row={finding.row} col={finding.column} "
        f"{finding.type.value} {finding.message}"
    )


def log_summary(message: str) -> None:
    """Log `message` at SUMMARY level (the label is added by the formatter)."""
    get_logger().log(SUMMARY_LEVEL, message)


def reset_logging() -> None:
    """Forget the configured logger so the next setup starts fresh (tests)."""
    global _logger
    _logger = None
