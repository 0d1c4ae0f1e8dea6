"""Logging helpers for the batch runs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

from ..decider.logging import EVENT_LOGGER_NAME
from ..types import DeciderResult

RUN_LOGGER_NAME = EVENT_LOGGER_NAME


def configure_run_logger(path: Path | str, *, level: int = logging.INFO) -> logging.Logger:
    """Attach a message-only file handler to the run logger (once per path)."""
    logger = logging.getLogger(RUN_LOGGER_NAME)
    logger.setLevel(level)
    target = str(Path(path).resolve())
    for handler in logger.handlers:
        if isinstance(handler, logging.FileHandler) and handler.baseFilename == target:
            return logger
    handler = logging.FileHandler(target, mode="w", encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def close_run_logger() -> None:
    logger = logging.getLogger(RUN_LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def log_run_header(*, run: str, database: str, n_machines: int, cfg: Dict[str, Any]) -> None:
    settings = " ".join(f"{key}={value}" for key, value in sorted(cfg.items()))
    print(f"[run] name={run} database={database} machines={n_machines} {settings}")


def log_machine_result(index: int, table_text: str, result: DeciderResult) -> None:
    logger = logging.getLogger(RUN_LOGGER_NAME)
    line = (
        f"[machine] index={index} table={table_text} verdict={result.verdict.value} "
        f"reason={result.reason} coefficient={result.coefficient} constant={result.constant} "
        f"halt_time={result.halt_time}"
    )
    if logger.handlers:
        logger.info(line)
    if result.runtime_mismatch:
        print(f"[mismatch] index={index} table={table_text} predicted={result.predict()} actual={result.halt_time}")


def log_summary(summary: Any) -> None:
    print(
        f"[summary] decided={summary.decided} translated_cyclers={summary.translated_cyclers} "
        f"not_translated_cyclers={summary.not_translated_cyclers} undetermined={summary.undetermined} "
        f"rejected_matches={summary.rejected_matches} runtime_mismatches={summary.runtime_mismatches} "
        f"max_halt_time={summary.max_halt_time} elapsed={summary.elapsed:.3f}s"
    )
    if summary.max_halt_index is not None:
        print(f"[summary] longest_halting_index={summary.max_halt_index}")
