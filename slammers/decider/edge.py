"""slammers/decider/edge.py

Cycle/edge state machine.

The tracker alternates between two phases over a run:

- SEARCHING_FOR_PERIOD: before every step, if the head stands further along
  the scan direction than its state has ever been since the last bounce, the
  tape is snapshotted into a Record, compared with the earlier records of the
  same ``(state, symbol)`` and stored. The first equivalent pair whose
  translation distance divides its period opens a periodic section of the
  cost function and switches to MOVING_TO_EDGE.
- MOVING_TO_EDGE: no records are taken; the machine is coasting along its
  translated cycle towards the tape edge.

Every edge bounce clears the records, the extents and the head path, and
points the scan direction away from the edge that clamped the move. A bounce
while moving to the edge also closes the periodic section and starts a new
one at the bounce time.

A section that ends while still searching but after rejecting a match
(distance not dividing the period) translated at a rate the linear cost
function cannot express; such sections are counted in
``non_periodic_sections``.
"""

from __future__ import annotations

from enum import Enum
from typing import List

from ..records.equivalence import records_equivalent
from ..records.store import PerStateExtent, RecordStore
from ..machine.tape import Tape
from ..types import Record
from .cost import CostAccumulator, edge_adjustment
from .logging import _log_decider_event


class Phase(Enum):
    SEARCHING_FOR_PERIOD = "searching_for_period"
    MOVING_TO_EDGE = "moving_to_edge"


class CycleTracker:
    """Per-run recognition state. One tracker per decider run; never shared."""

    def __init__(self, tape_length: int, n_states: int, *, log_events: bool = False) -> None:
        self.tape_length = int(tape_length)
        self.phase = Phase.SEARCHING_FOR_PERIOD
        self.moving_right = True
        self.store = RecordStore(n_states)
        self.extent = PerStateExtent(n_states, tape_length)
        self.cost = CostAccumulator(tape_length=self.tape_length)
        self.previous_cycle_end_time = 0
        self.cycles_found = 0
        self.bounces = 0
        self.rejected_matches = 0
        self.section_rejections = 0
        self.non_periodic_sections = 0
        # Head position before each step since the last bounce.
        self.path: List[int] = []
        self.log_events = bool(log_events)

    # ------------------------------------------------------------------
    # Per-step hooks
    # ------------------------------------------------------------------

    def bound_violated(self, position: int) -> bool:
        """Model invariants: head on the tape, tracked extents within the tape."""
        if position < 0 or position >= self.tape_length:
            return True
        return self.extent.max_seen() >= self.tape_length or self.extent.min_seen() < 0

    def before_step(self, tape: Tape, state: int, position: int, time: int) -> bool:
        """Capture a record if ``position`` is a new extreme for ``state``.

        Returns True when the capture completed a translated cycle.
        """
        if self.phase is not Phase.SEARCHING_FOR_PERIOD:
            return False
        self.path.append(int(position))
        if not self.extent.is_new_extreme(state, position, self.moving_right):
            return False

        symbol = tape.read(position)
        current = tape.snapshot(time, position)
        accepted = False
        for past in self.store.records(state, symbol):
            if not records_equivalent(past, current, self.moving_right):
                continue
            if self._accept_cycle(past, current, state):
                accepted = True
                break

        self.store.append(state, symbol, current)
        self.extent.update(state, position, self.moving_right)
        if accepted:
            self.phase = Phase.MOVING_TO_EDGE
        return accepted

    def on_bounce(self, time: int, toward_right: bool) -> None:
        """Handle a clamped move at step ``time`` (the step count after the move)."""
        self.bounces += 1
        drift = 0
        if self.phase is Phase.MOVING_TO_EDGE:
            drift = self.cost.close_section(time)
            self.phase = Phase.SEARCHING_FOR_PERIOD
            self.previous_cycle_end_time = int(time)
        else:
            # Aperiodic time since the last section stays in the next constant.
            self._close_search()
        self.moving_right = not toward_right
        self.reset_evidence()
        if self.log_events:
            _log_decider_event(
                "bounce",
                {
                    "time": int(time),
                    "moving_right": self.moving_right,
                    "drift": int(drift),
                    "previous_cycle_end_time": self.previous_cycle_end_time,
                },
            )

    def on_halt(self, halt_time: int) -> None:
        if self.phase is Phase.SEARCHING_FOR_PERIOD:
            self._close_search()
        self.cost.fold_halt(halt_time, self.previous_cycle_end_time)
        if self.log_events:
            _log_decider_event(
                "halt",
                {
                    "time": int(halt_time),
                    "coefficient": self.cost.coefficient,
                    "constant": self.cost.constant,
                    "drift": self.cost.drift,
                },
            )

    def reset_evidence(self) -> None:
        self.store.clear()
        self.extent.clear()
        self.path = []

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _orient(self, position: int) -> int:
        return int(position) if self.moving_right else self.tape_length - 1 - int(position)

    def _close_search(self) -> None:
        if self.section_rejections:
            self.non_periodic_sections += 1
        self.section_rejections = 0

    def _cycle_offsets(self, past: Record, current: Record) -> List[int]:
        """Oriented head offsets from ``past.position`` for every step of one period."""
        first = len(self.path) - 1 - (current.time - past.time)
        origin = self._orient(past.position)
        return [self._orient(p) - origin for p in self.path[first:]]

    def _accept_cycle(self, past: Record, current: Record, state: int) -> bool:
        period = current.time - past.time
        distance = abs(current.position - past.position)
        if distance == 0 or period % distance != 0:
            self.rejected_matches += 1
            self.section_rejections += 1
            return False

        rate = period // distance
        traversed = self._orient(past.position)
        edge_adjust = edge_adjustment(self._cycle_offsets(past, current), rate)
        self.cost.open_section(
            rate=rate,
            cycle_start=past.time,
            traversed=traversed,
            section_start=self.previous_cycle_end_time,
            edge_adjust=edge_adjust,
        )
        self.cycles_found += 1
        self.section_rejections = 0
        if self.log_events:
            _log_decider_event(
                "cycle_found",
                {
                    "state": int(state),
                    "symbol": past.symbol,
                    "past_time": past.time,
                    "past_position": past.position,
                    "current_time": current.time,
                    "current_position": current.position,
                    "period": int(period),
                    "distance": int(distance),
                    "edge_adjust": int(edge_adjust),
                    "coefficient": self.cost.coefficient,
                    "constant": self.cost.constant,
                },
            )
        return True
