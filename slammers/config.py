"""
slammers/config.py

Decider configuration.

What this file does
-------------------
This module defines :class:`DeciderConfig`, an immutable (frozen) dataclass
that collects every knob the decider and the batch harness read. The decider
itself keeps no module-level counters or limits: whatever a run is allowed to
do is passed in through one of these objects.

This file exists to:
  - centralize the limits (tape length, time limit, configuration bound),
  - provide defaults matching the halting-LBA runs the decider was written for
    (30-cell tapes, machines of at most five states),
  - make invalid parameters fail fast via validate().

Notes on defaults
-----------------
``time_limit = None`` lets a run proceed until the machine halts or one of the
internal invariants is violated. ``use_configuration_bound`` caps a run at
``2^L * L * N`` steps, the number of distinct configurations of an N-state
machine on an L-cell binary tape; a machine still running past that point
repeats a configuration and never halts.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace as dc_replace
from typing import Any, Dict, Optional

from .types import MAX_STATES


@dataclass(frozen=True)
class DeciderConfig:
    """
    Immutable configuration for a decider run.

    Inputs
    ------
    This dataclass is typically constructed either:
      - directly (e.g., DeciderConfig(tape_length=12)), or
      - via :func:`default_config` and then :meth:`replace`.

    Outputs
    -------
    An immutable configuration object read by the decider and the harness.
    """

    # =========================================================================
    # Tape
    # =========================================================================
    # Number of cells of the bounded tape (the LBA memory capacity).
    tape_length: int = 30

    # =========================================================================
    # Run limits
    # =========================================================================
    # Steps after which a still-running machine is reported as undetermined.
    time_limit: Optional[int] = None

    # Stop machines that exceed 2^L * L * N steps (they provably never halt).
    use_configuration_bound: bool = True

    # Largest number of states a transition table may use.
    max_states: int = MAX_STATES

    # =========================================================================
    # Diagnostics
    # =========================================================================
    # Replay the derived cost function against the observed halting time and
    # flag (never fail) a mismatch.
    check_runtime: bool = True

    # Emit JSON decider events (cycle found, bounce, halt) to the harness logger.
    log_events: bool = False

    def validate(self) -> None:
        """
        Validate parameter ranges.

        Raises
        ------
        ValueError
            If any field is outside its allowed range.
        """
        if not isinstance(self.tape_length, int) or self.tape_length < 1:
            raise ValueError("tape_length must be a positive int.")
        if self.time_limit is not None and self.time_limit < 0:
            raise ValueError("time_limit must be >= 0 or None.")
        if not (1 <= self.max_states <= MAX_STATES):
            raise ValueError(f"max_states must be in [1, {MAX_STATES}].")

    def replace(self, **overrides: Any) -> "DeciderConfig":
        """
        Create a modified copy of this config (immutable update).

        Inputs
        ------
        overrides:
            Keyword arguments mapping field names to new values.

        Outputs
        -------
        DeciderConfig:
            A new config instance with the specified overrides applied.
        """
        return dc_replace(self, **overrides)

    def to_dict(self) -> Dict[str, Any]:
        """Convert this configuration to a plain (JSON-serializable) dict."""
        return asdict(self)


def default_config() -> DeciderConfig:
    """
    Return the default DeciderConfig.

    Outputs
    -------
    DeciderConfig:
        A validated config populated with the defaults defined in this module.
    """
    cfg = DeciderConfig()
    cfg.validate()
    return cfg
