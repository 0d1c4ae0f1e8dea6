"""
Decider event logging.

Warnings go to the ``slammers.decider`` logger. Structured events (cycle
found, bounce, halt) are serialised as JSON onto the harness logger, and only
when that logger has been given a handler, so a bare ``decide`` call pays
nothing for them.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any

DECIDER_LOGGER = logging.getLogger("slammers.decider")
# Run logger shared with the harness, which attaches its file handler.
EVENT_LOGGER_NAME = "slammers_harness"
EVENT_LOGGER = logging.getLogger(EVENT_LOGGER_NAME)
EVENT_LOGGER_START = time.perf_counter()


def _log_decider_event(event: str, details: dict[str, Any]) -> None:
    """Emit a JSON payload when the harness logger is configured."""
    if not EVENT_LOGGER.handlers:
        return
    payload: dict[str, Any] = {"event": event}
    payload["timestamp"] = float(time.perf_counter() - EVENT_LOGGER_START)
    payload.update(details)
    EVENT_LOGGER.info(json.dumps(payload, sort_keys=True, default=str))


def warn_runtime_mismatch(*, predicted: int, actual: int, coefficient: int, constant: int, tape_length: int) -> None:
    DECIDER_LOGGER.warning(
        "runtime mismatch: predicted=%s actual=%s coefficient=%s constant=%s tape_length=%s",
        predicted,
        actual,
        coefficient,
        constant,
        tape_length,
    )
