"""Logging utilities for cellskel: handler setup plus per-cell decision records."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from .models import SkeletonResult

_LOGGER_NAME = "cellskel"

DECISION_DUPLICATE = "duplicate"
DECISION_VARIANT = "variant"
DECISION_VERBATIM = "verbatim"
DECISION_FALLBACK = "fallback"
DECISION_SKELETON = "skeleton"


class DecisionFormatter(logging.Formatter):
    """Appends ``[cell N: decision]`` to records emitted through :func:`log_decision`."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        decision = getattr(record, "decision", None)
        if decision is None:
            return message
        return f"{message} [cell {getattr(record, 'cell_index', '?')}: {decision}]"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the cellskel hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Install the console handler and optional file sink on the cellskel logger.

    Verbose mode lowers the level to DEBUG, which is where per-cell decisions
    are reported.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(DecisionFormatter("[cellskel] %(levelname)s %(message)s"))
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setLevel(level)
        sink.setFormatter(DecisionFormatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(sink)

    return logger


def log_decision(logger: logging.Logger, cell_index: int, decision: str, message: str, *args: object) -> None:
    """Emit a DEBUG record tagged with the cell index and the pipeline decision."""
    if not logger.isEnabledFor(logging.DEBUG):
        return
    logger.debug(message, *args, extra={"cell_index": cell_index, "decision": decision})


def log_run_summary(logger: logging.Logger, results: Iterable[SkeletonResult]) -> None:
    """Report cell counts and total line reduction for one document at INFO."""
    results = list(results)
    original = sum(result.original_lines for result in results)
    skeleton = sum(result.skeleton_lines for result in results)
    logger.info(
        "Skeletonized %d cells (%d duplicates, %d variants): %d→%d lines",
        len(results),
        sum(1 for result in results if result.duplicate_of is not None),
        sum(1 for result in results if result.variant_of is not None),
        original,
        skeleton,
    )


__all__ = [
    "DECISION_DUPLICATE",
    "DECISION_FALLBACK",
    "DECISION_SKELETON",
    "DECISION_VARIANT",
    "DECISION_VERBATIM",
    "DecisionFormatter",
    "configure_logging",
    "get_logger",
    "log_decision",
    "log_run_summary",
]
