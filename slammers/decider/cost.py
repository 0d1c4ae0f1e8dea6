"""slammers/decider/cost.py

Linear cost function ``total_steps = coefficient * L + constant``.

A run on an L-cell tape is cut into sections at the edge bounces. A section
in which a translated cycle with ``period`` steps per ``distance`` cells is
found costs ``rate * L + c`` steps with ``rate = period // distance``:

  - ``open_section`` adds ``rate`` to the coefficient and moves into the
    constant the steps spent before the cycle began, minus the share of
    ``rate * L`` that covers cells the head had already crossed by then,
    plus the edge adjustment: the offset of the first clamped move within
    one period of the cycle (see ``edge_adjustment``);
  - the translated run is then expected to bounce at
    ``cycle_start + rate * (L - traversed) + edge_adjust``. ``close_section``
    compares that with the bounce actually observed and accumulates the
    difference in ``drift``; the formula itself is not corrected.

A section without a cycle is pure constant. A non-zero ``drift`` makes the
prediction miss the observed halting time, which the decider reports as a
runtime mismatch.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from ..machine.stepping import ExecutionState, step
from ..machine.table import TransitionTable


def edge_adjustment(offsets: Sequence[int], rate: int) -> int:
    """Edge term of a translated cycle from its head offsets over one period.

    ``offsets[j]`` is the head position ``j`` steps after the cycle start,
    relative to the start position and oriented along the scan direction
    (``offsets[0] == 0``, ``offsets[-1] == distance``). Repetition ``k`` of
    step ``j`` first pushes the head over the edge when
    ``start + k * distance + offsets[j + 1] == L``; with
    ``k * period == rate * (L - start - offsets[j + 1])`` the bounce comes at
    ``rate * (L - start) + (j + 1 - rate * offsets[j + 1])``. The earliest
    forward step wins. The term is exact when ``distance`` divides the
    remaining cells and otherwise leaves a drift of less than one period.
    """
    candidates = [
        j + 1 - rate * offsets[j + 1]
        for j in range(len(offsets) - 1)
        if offsets[j + 1] > offsets[j]
    ]
    return min(candidates) if candidates else 0


@dataclass
class CostAccumulator:
    tape_length: int
    coefficient: int = 0
    constant: int = 0
    expected_section_end: Optional[int] = None
    drift: int = 0

    @property
    def in_periodic_section(self) -> bool:
        return self.expected_section_end is not None

    def open_section(
        self,
        rate: int,
        cycle_start: int,
        traversed: int,
        section_start: int,
        edge_adjust: int = 0,
    ) -> None:
        """Account for a translated cycle found in the section that began at ``section_start``.

        Args:
          rate: steps per cell of translation (period // distance).
          cycle_start: capture time of the earlier of the two equivalent records.
          traversed: cells between the edge the scan started from and the
            earlier record's position.
          section_start: time of the previous bounce (0 for the first section).
          edge_adjust: see ``edge_adjustment``.
        """
        self.coefficient += int(rate)
        self.constant += (int(cycle_start) - int(section_start)) - int(rate) * int(traversed) + int(edge_adjust)
        self.expected_section_end = (
            int(cycle_start) + int(rate) * (self.tape_length - int(traversed)) + int(edge_adjust)
        )

    def close_section(self, time: int) -> int:
        """End the periodic section at ``time``; returns the drift from the expected end."""
        if self.expected_section_end is None:
            return 0
        gap = int(time) - self.expected_section_end
        self.drift += gap
        self.expected_section_end = None
        return gap

    def fold_halt(self, halt_time: int, section_start: int) -> None:
        """Close the last section at the halting step."""
        if self.expected_section_end is not None:
            self.close_section(halt_time)
        else:
            self.constant += int(halt_time) - int(section_start)

    def predict(self, tape_length: int | None = None) -> int:
        L = self.tape_length if tape_length is None else int(tape_length)
        return self.coefficient * L + self.constant


def replay_halt_time(table: TransitionTable, tape_length: int, max_steps: int) -> Optional[int]:
    """Run ``table`` for up to ``max_steps`` completed steps.

    Returns the number of completed steps at which the halting transition is
    reached, or None if the machine is still running after ``max_steps``.
    """
    run = ExecutionState.start(tape_length)
    while run.time <= max_steps:
        outcome = step(table, run.tape, run.state, run.position, run.time)
        if outcome.halted:
            return run.time
        run.advance(outcome)
    return None


def verify_prediction(table: TransitionTable, tape_length: int, coefficient: int, constant: int) -> bool:
    """True when running exactly ``coefficient * L + constant`` steps reaches the halting transition."""
    predicted = int(coefficient) * int(tape_length) + int(constant)
    if predicted < 0:
        return False
    return replay_halt_time(table, tape_length, predicted) == predicted
