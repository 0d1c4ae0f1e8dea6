import itertools

import numpy as np
import pytest

from slammers.machine.stepping import ExecutionState, configuration_bound, simulate, step
from slammers.machine.table import TransitionTable
from slammers.machine.tape import Tape
from slammers.types import NEVER_VISITED, Direction, HaltStatus


def _all_one_state_tables():
    """Every fully defined one-state table (no halting transition)."""
    triplets = [(w, d, 1) for w in (0, 1) for d in ("R", "L")]
    for t0, t1 in itertools.product(triplets, repeat=2):
        yield TransitionTable.from_triplets([[t0, t1]])


@pytest.mark.parametrize("tape_length", [1, 2, 5])
def test_head_stays_on_tape(tape_length: int) -> None:
    for table in _all_one_state_tables():
        tape = Tape(tape_length)
        state, position = 1, 0
        for time in range(4 * tape_length + 3):
            outcome = step(table, tape, state, position, time)
            assert not outcome.halted
            assert 0 <= outcome.position < tape_length
            assert abs(outcome.position - position) <= 1
            assert outcome.steps == time + 1
            state, position = outcome.state, outcome.position


def test_step_stamps_last_visit() -> None:
    table = TransitionTable.from_text("1RB---_0LA---")
    tape = Tape(4)
    outcome = step(table, tape, 1, 0, 0)
    assert (outcome.symbol, outcome.state, outcome.position) == (1, 2, 1)
    assert tape.cell(0).symbol == 1
    assert tape.cell(0).last_visit == 0
    assert not tape.cell(1).visited

    outcome = step(table, tape, 2, 1, 1)
    assert tape.cell(1).last_visit == 1
    assert outcome.position == 0
    assert outcome.direction == Direction.LEFT


def test_clamped_move_reports_same_position() -> None:
    table = TransitionTable.from_text("1LA1LA")
    tape = Tape(3)
    outcome = step(table, tape, 1, 0, 0)
    assert outcome.position == 0
    assert outcome.direction == Direction.LEFT
    assert not outcome.halted


def test_halt_leaves_tape_untouched() -> None:
    table = TransitionTable.from_text("---1RA")
    tape = Tape(5)
    outcome = step(table, tape, 1, 2, 7)
    assert outcome.halted
    assert (outcome.state, outcome.symbol, outcome.position, outcome.steps) == (1, 0, 2, 8)
    assert np.all(tape.symbols == 0)
    assert np.all(tape.last_visit == NEVER_VISITED)


def test_snapshot_is_independent_copy() -> None:
    tape = Tape(3)
    tape.write(1, 1, 4)
    record = tape.snapshot(5, 2)
    tape.write(1, 0, 6)
    assert record.symbols.tolist() == [0, 1, 0]
    assert record.last_visit.tolist() == [NEVER_VISITED, 4, NEVER_VISITED]
    assert record.symbol == 0
    with pytest.raises(ValueError):
        record.symbols[0] = 1


def test_tape_length_must_be_positive() -> None:
    with pytest.raises(ValueError):
        Tape(0)


def test_execution_state_follows_steps() -> None:
    table = TransitionTable.from_text("1RB---_1LA---")
    run = ExecutionState.start(3)
    assert (run.state, run.position, run.time) == (1, 0, 0)
    assert not run.tape.symbols.any()

    run.advance(step(table, run.tape, run.state, run.position, run.time))
    assert (run.state, run.position, run.time) == (2, 1, 1)
    assert run.tape.read(0) == 1

    run.advance(step(table, run.tape, run.state, run.position, run.time))
    assert (run.state, run.position, run.time) == (1, 0, 2)
    # Both cells written, the halting rule is next.
    assert step(table, run.tape, run.state, run.position, run.time).halted


def test_simulate_single_rule_halts_at_first_step() -> None:
    table = TransitionTable.from_triplets([[(1, "R", 0), None]])
    result = simulate(table, 5)
    assert result.status is HaltStatus.HALT
    assert (result.state, result.symbol, result.steps, result.space) == (1, 0, 1, 1)


def test_simulate_right_scan_halts_after_edge() -> None:
    result = simulate(TransitionTable.from_text("1RB---_1RA---"), 10)
    assert result.status is HaltStatus.HALT
    assert result.steps == 11
    assert result.space == 10


def test_simulate_non_halting_and_time_limit() -> None:
    table = TransitionTable.from_text("0RA0LA")
    assert configuration_bound(4, 1) == 64
    assert simulate(table, 4).status is HaltStatus.NO_HALT
    limited = simulate(table, 4, time_limit=10)
    assert limited.status is HaltStatus.UNDECIDED_TIME
    assert limited.steps == 11
