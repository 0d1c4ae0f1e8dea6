"""slammers/machine/stepping.py

Stepping engine for machines on a bounded tape.

``step`` is the single primitive every other layer builds on. It reads the
cell under the head, looks up the rule and either signals a halt (undefined
transition, tape untouched) or writes one cell, stamps its last-visit time and
moves the head by at most one cell. A move that would leave the tape is
clamped: the head stays put, so the same position is reported for two
consecutive steps. That repeated position is how callers detect an edge
bounce.

``simulate`` runs a machine from a blank tape in state 1 at position 0 and
classifies the run as halting, provably non-halting (more steps than there
are configurations) or out of time.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..types import Direction, HaltStatus, SimulationResult, StepResult
from .table import TransitionTable
from .tape import Tape

START_STATE = 1


@dataclass
class ExecutionState:
    """Mutable head configuration of one run: tape, position, state and elapsed steps."""

    tape: Tape
    position: int = 0
    state: int = START_STATE
    time: int = 0

    @classmethod
    def start(cls, tape_length: int) -> "ExecutionState":
        """Blank tape, state 1, head on the leftmost cell, no steps taken."""
        return cls(tape=Tape(tape_length))

    def advance(self, outcome: StepResult) -> None:
        self.state = outcome.state
        self.position = outcome.position
        self.time = outcome.steps


def configuration_bound(tape_length: int, n_states: int) -> int:
    """Number of distinct (tape, head, state) configurations: 2^L * L * N."""
    return (2 ** int(tape_length)) * int(tape_length) * int(n_states)


def step(table: TransitionTable, tape: Tape, state: int, position: int, time: int) -> StepResult:
    """Execute the transition for ``(state, tape[position])`` at step ``time``.

    Inputs:
      - table: transition table.
      - tape: mutated in place (one cell) unless the transition halts.
      - state, position: current head state and position.
      - time: number of steps completed so far.

    Outputs:
      - StepResult; see ``slammers.types.StepResult`` for field meanings.
    """
    symbol = int(tape.symbols[position])
    rule = table.rule(state, symbol)
    if rule.halts:
        return StepResult(
            halted=True,
            symbol=symbol,
            state=state,
            position=position,
            steps=time + 1,
            direction=rule.direction,
        )

    tape.write(position, rule.write, time)

    next_position = position
    if rule.direction == Direction.RIGHT:
        if position + 1 < tape.length:
            next_position = position + 1
    elif position > 0:
        next_position = position - 1

    return StepResult(
        halted=False,
        symbol=rule.write,
        state=rule.next_state,
        position=next_position,
        steps=time + 1,
        direction=rule.direction,
    )


def simulate(
    table: TransitionTable,
    tape_length: int,
    time_limit: Optional[int] = None,
    *,
    use_configuration_bound: bool = True,
) -> SimulationResult:
    """Run ``table`` from a blank tape and report how the run ended.

    Returns SimulationResult(status, state, symbol, steps, space) with:
      - status: HALT, NO_HALT (configuration bound exceeded) or UNDECIDED_TIME.
      - state, symbol: the undefined transition that was reached (0, 0 otherwise).
      - steps: elapsed steps, counting the halting transition when there is one.
      - space: number of distinct cells between the extreme head positions.
    """
    run = ExecutionState.start(tape_length)
    bound = configuration_bound(run.tape.length, table.n_states) if use_configuration_bound else None
    min_pos = max_pos = run.position

    while True:
        if bound is not None and run.time > bound:
            return SimulationResult(HaltStatus.NO_HALT, 0, 0, run.time, max_pos - min_pos + 1)
        if time_limit is not None and run.time > time_limit:
            return SimulationResult(HaltStatus.UNDECIDED_TIME, 0, 0, run.time, max_pos - min_pos + 1)

        min_pos = min(min_pos, run.position)
        max_pos = max(max_pos, run.position)

        outcome = step(table, run.tape, run.state, run.position, run.time)
        if outcome.halted:
            return SimulationResult(HaltStatus.HALT, outcome.state, outcome.symbol, outcome.steps, max_pos - min_pos + 1)
        run.advance(outcome)
