"""slammers/types.py

Shared contract across the slammers modules.

This file holds the plain data structures that the machine, records and
decider layers pass to each other: rules, step outcomes, tape snapshots
(records) and the decider's tagged result. It intentionally contains no
decision logic; only types and small, local helpers.

WARNING:
- Do not change field semantics without scanning for
  `from slammers.types import ...` call sites; the batch runner pickles
  `DeciderResult` across worker processes and the CLI serialises it.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum, IntEnum
from typing import Any, Dict, NamedTuple, Optional

import numpy as np

# =============================================================================
# Core constants
# =============================================================================

# Largest machine the 30-byte encoding can describe.
MAX_STATES = 5

# Binary alphabet.
N_SYMBOLS = 2

# Reserved next-state value: the transition is undefined and the machine halts.
HALT_STATE = 0

# last_visit value of a cell the head has never stood on.
NEVER_VISITED = -1


class Direction(IntEnum):
    """Head movement, numbered as in the bbchallenge byte encoding."""

    RIGHT = 0
    LEFT = 1

    @property
    def letter(self) -> str:
        return "RL"[int(self)]


class Rule(NamedTuple):
    """One entry of a transition table: what to write, where to go, which state next."""

    write: int
    direction: Direction
    next_state: int

    @property
    def halts(self) -> bool:
        return self.next_state == HALT_STATE


# =============================================================================
# Execution
# =============================================================================


class StepResult(NamedTuple):
    """Outcome of a single call to the stepping engine.

    When ``halted`` is True the tape was not touched: ``symbol`` is the symbol
    read, ``state`` and ``position`` are the pre-step values and ``steps`` is
    the elapsed step count including the halting transition. Otherwise
    ``symbol`` is the written symbol, ``state`` and ``position`` are the next
    values and ``steps`` is the elapsed step count after the move.
    """

    halted: bool
    symbol: int
    state: int
    position: int
    steps: int
    direction: Direction


class HaltStatus(Enum):
    """Classification of a plain simulation run."""

    HALT = "halt"
    NO_HALT = "no_halt"
    UNDECIDED_TIME = "undecided_time"


class SimulationResult(NamedTuple):
    status: HaltStatus
    state: int
    symbol: int
    steps: int
    space: int


@dataclass(frozen=True)
class TapeCell:
    symbol: int
    last_visit: int = NEVER_VISITED

    @property
    def visited(self) -> bool:
        return self.last_visit != NEVER_VISITED


@dataclass(frozen=True)
class Record:
    """Full tape snapshot taken when the head reaches a new extreme position.

    ``symbols`` and ``last_visit`` are read-only copies of the tape columns at
    ``time`` (before the step at ``time`` is executed); ``position`` is the
    head position at that moment.
    """

    symbols: np.ndarray
    last_visit: np.ndarray
    time: int
    position: int

    @property
    def tape_length(self) -> int:
        return int(self.symbols.size)

    @property
    def symbol(self) -> int:
        """Symbol under the head at capture time."""
        return int(self.symbols[self.position])


# =============================================================================
# Decider outcome
# =============================================================================


class Verdict(Enum):
    TRANSLATED_CYCLER = "translated_cycler"
    NOT_TRANSLATED_CYCLER = "not_translated_cycler"
    UNDETERMINED = "undetermined"


@dataclass(frozen=True)
class DeciderResult:
    """Tagged decider outcome.

    Fields:
      - verdict: the classification.
      - coefficient, constant: cost function ``coefficient * L + constant``.
        Only meaningful for TRANSLATED_CYCLER; kept for every verdict for
        diagnostics.
      - tape_length: the ``L`` the run used.
      - halt_time: number of completed steps when the halting transition was
        reached (None when the run did not halt).
      - reason: short machine-readable cause (``cycle``, ``constant_only``,
        ``halted_without_cycle``, ``non_divisible_period``,
        ``bound_exceeded``, ``time_limit``, ``non_halting``).
      - cycles_found / bounces / rejected_matches: run statistics.
      - runtime_mismatch: the cost function did not reproduce ``halt_time``.
    """

    verdict: Verdict
    coefficient: int = 0
    constant: int = 0
    tape_length: int = 0
    halt_time: Optional[int] = None
    reason: str = ""
    cycles_found: int = 0
    bounces: int = 0
    rejected_matches: int = 0
    runtime_mismatch: bool = False

    @property
    def is_translated_cycler(self) -> bool:
        return self.verdict is Verdict.TRANSLATED_CYCLER

    def predict(self, tape_length: int | None = None) -> int:
        """Predicted halting time for a tape of ``tape_length`` cells."""
        L = self.tape_length if tape_length is None else int(tape_length)
        return int(self.coefficient) * L + int(self.constant)

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["verdict"] = self.verdict.value
        return out
