import json
import logging

import pytest

from slammers.config import DeciderConfig, default_config
from slammers.decider import CostAccumulator, decide, replay_halt_time, verify_prediction
from slammers.decider import core as decider_core
from slammers.decider.cost import edge_adjustment
from slammers.decider.logging import warn_runtime_mismatch
from slammers.harness.logging import close_run_logger, configure_run_logger
from slammers.machine.stepping import simulate
from slammers.machine.table import TransitionTable
from slammers.types import Direction, StepResult, Verdict

SWEEPER = "1RA1LB_---0LB"
ZIGZAG = "1RB---_0LC---_---1RA"
RIGHT_SCAN = "1RB---_1RA---"
NON_DIVISIBLE = "1RB---_1RC---_1RD---_0LE---_---1RA"
NON_HALTING = "0RA0LA"
EDGE_DRIFT = "1RB---_1LC---_---1RD_---1RA"
RETURN_SWEEP_3_PER_5 = "1RA0LD_---1LD_1LD0RA_0LB1LC"


def make_cfg(**overrides) -> DeciderConfig:
    return default_config().replace(**overrides)


def test_single_rule_machine_is_not_a_translated_cycler() -> None:
    table = TransitionTable.from_triplets([[(1, "R", 0), None]])
    result = decide(table, make_cfg(tape_length=5))
    assert result.verdict is Verdict.NOT_TRANSLATED_CYCLER
    assert (result.coefficient, result.constant) == (0, 0)
    assert result.halt_time == 0
    assert result.reason == "halted_without_cycle"
    assert simulate(table, 5).steps == 1


@pytest.mark.parametrize("tape_length", [7, 10])
def test_right_scan_then_halt(tape_length: int) -> None:
    result = decide(TransitionTable.from_text(RIGHT_SCAN), tape_length=tape_length)
    assert result.verdict is Verdict.TRANSLATED_CYCLER
    assert (result.coefficient, result.constant) == (1, 0)
    assert result.halt_time == tape_length
    assert result.reason == "cycle"
    assert result.bounces == 1


@pytest.mark.parametrize(
    "text,coefficient,constant",
    [(SWEEPER, 2, 0), (ZIGZAG, 3, -2)],
)
def test_translated_cyclers_have_length_invariant_cost(text: str, coefficient: int, constant: int) -> None:
    table = TransitionTable.from_text(text)
    for tape_length in (5, 8, 13, 30):
        result = decide(table, make_cfg(tape_length=tape_length))
        assert result.is_translated_cycler
        assert (result.coefficient, result.constant) == (coefficient, constant)
        assert result.halt_time == coefficient * tape_length + constant
        assert result.predict() == result.halt_time
        assert not result.runtime_mismatch
        assert verify_prediction(table, tape_length, result.coefficient, result.constant)
    # The formula carries over to tapes it was not derived on.
    assert verify_prediction(table, 21, coefficient, constant)
    assert not verify_prediction(table, 21, coefficient, constant + 1)


def test_sweeper_bounces_twice() -> None:
    result = decide(TransitionTable.from_text(SWEEPER), tape_length=6)
    assert result.cycles_found == 2
    assert result.bounces == 2
    assert result.halt_time == 12


def test_short_halting_run_is_constant_only() -> None:
    result = decide(TransitionTable.from_text("1RB---_1LA---"), tape_length=6)
    assert result.verdict is Verdict.TRANSLATED_CYCLER
    assert result.reason == "constant_only"
    assert (result.coefficient, result.constant) == (0, 2)
    assert result.cycles_found == 0


def test_non_divisible_period_is_rejected() -> None:
    result = decide(TransitionTable.from_text(NON_DIVISIBLE), tape_length=8)
    assert result.verdict is Verdict.NOT_TRANSLATED_CYCLER
    assert result.reason == "non_divisible_period"
    assert result.cycles_found == 0
    assert result.rejected_matches == 9
    assert result.halt_time == 12


def test_non_halting_machine_hits_configuration_bound() -> None:
    result = decide(TransitionTable.from_text(NON_HALTING), tape_length=4)
    assert result.verdict is Verdict.NOT_TRANSLATED_CYCLER
    assert result.reason == "non_halting"
    assert result.halt_time is None


def test_time_limit_is_undetermined() -> None:
    result = decide(TransitionTable.from_text(NON_HALTING), make_cfg(tape_length=4, time_limit=10))
    assert result.verdict is Verdict.UNDETERMINED
    assert result.reason == "time_limit"


def test_invalid_inputs_raise() -> None:
    table = TransitionTable.from_text(SWEEPER)
    with pytest.raises(ValueError):
        decide(table, tape_length=0)
    with pytest.raises(ValueError):
        decide(table, make_cfg(max_states=1))
    with pytest.raises(ValueError):
        make_cfg(time_limit=-1).validate()


def test_result_to_dict() -> None:
    payload = decide(TransitionTable.from_text(SWEEPER), tape_length=5).to_dict()
    assert payload["verdict"] == "translated_cycler"
    assert payload["coefficient"] == 2
    json.dumps(payload)


def test_cost_accumulator_sections() -> None:
    cost = CostAccumulator(tape_length=10)
    cost.open_section(rate=3, cycle_start=4, traversed=1, section_start=0)
    assert (cost.coefficient, cost.constant) == (3, 1)
    assert cost.expected_section_end == 31
    # A bounce off the expected end is recorded as drift; the formula stays.
    assert cost.close_section(29) == -2
    assert cost.constant == 1
    assert cost.drift == -2
    assert not cost.in_periodic_section
    cost.fold_halt(35, section_start=29)
    assert cost.constant == 7
    assert cost.predict() == 37
    assert cost.predict(20) == 67


@pytest.mark.parametrize(
    "offsets,rate,expected",
    [([0, 1], 1, 0), ([0, 1, 0, 1], 3, -2), ([0, 1, 0, 1, 2], 2, -1), ([0], 1, 0)],
)
def test_edge_adjustment(offsets, rate: int, expected: int) -> None:
    assert edge_adjustment(offsets, rate) == expected


@pytest.mark.parametrize("tape_length", [6, 8, 12])
def test_edge_drift_is_reported_as_runtime_mismatch(tape_length: int, caplog) -> None:
    # Two cells per four-step cycle: the bounce lands one step late whenever
    # the distance does not divide the cells left to cross.
    table = TransitionTable.from_text(EDGE_DRIFT)
    with caplog.at_level(logging.WARNING, logger="slammers.decider"):
        result = decide(table, make_cfg(tape_length=tape_length))
    assert result.verdict is Verdict.TRANSLATED_CYCLER
    assert (result.coefficient, result.constant) == (2, -1)
    assert result.halt_time == 2 * tape_length
    assert result.predict() == result.halt_time - 1
    assert result.runtime_mismatch
    assert "runtime mismatch" in caplog.text
    assert not verify_prediction(table, tape_length, result.coefficient, result.constant)


@pytest.mark.parametrize("tape_length", [7, 9])
def test_edge_term_is_exact_when_distance_divides(tape_length: int) -> None:
    table = TransitionTable.from_text(EDGE_DRIFT)
    result = decide(table, make_cfg(tape_length=tape_length))
    assert (result.coefficient, result.constant) == (2, -1)
    assert result.halt_time == 2 * tape_length - 1
    assert not result.runtime_mismatch
    assert verify_prediction(table, tape_length, 2, -1)


def test_runtime_check_can_be_disabled() -> None:
    result = decide(TransitionTable.from_text(EDGE_DRIFT), make_cfg(tape_length=6, check_runtime=False))
    assert result.halt_time == 12
    assert not result.runtime_mismatch


@pytest.mark.parametrize("tape_length", [10, 11, 12, 17])
def test_section_with_only_rejected_matches_is_not_a_translated_cycler(tape_length: int) -> None:
    # The return sweep translates three cells every five steps.
    result = decide(TransitionTable.from_text(RETURN_SWEEP_3_PER_5), make_cfg(tape_length=tape_length))
    assert result.verdict is Verdict.NOT_TRANSLATED_CYCLER
    assert result.reason == "non_divisible_period"
    assert result.cycles_found == 1
    assert result.rejected_matches > 0


def test_return_sweep_halt_time() -> None:
    result = decide(TransitionTable.from_text(RETURN_SWEEP_3_PER_5), make_cfg(tape_length=10))
    assert result.halt_time == 35
    # Right edge, then the left edge twice in a row.
    assert result.bounces == 3


def test_step_leaving_the_tape_is_undetermined(monkeypatch) -> None:
    def unclamped_step(table, tape, state, position, time):
        return StepResult(
            halted=False,
            symbol=0,
            state=state,
            position=position + 1,
            steps=time + 1,
            direction=Direction.RIGHT,
        )

    monkeypatch.setattr(decider_core, "step", unclamped_step)
    result = decide(TransitionTable.from_text(SWEEPER), make_cfg(tape_length=4))
    assert result.verdict is Verdict.UNDETERMINED
    assert result.reason == "bound_exceeded"
    assert result.halt_time is None


def test_step_skipping_cells_is_undetermined(monkeypatch) -> None:
    def jumping_step(table, tape, state, position, time):
        return StepResult(
            halted=False,
            symbol=0,
            state=state,
            position=position + 2,
            steps=time + 1,
            direction=Direction.RIGHT,
        )

    monkeypatch.setattr(decider_core, "step", jumping_step)
    result = decide(TransitionTable.from_text(SWEEPER), make_cfg(tape_length=8))
    assert result.verdict is Verdict.UNDETERMINED
    assert result.reason == "bound_exceeded"


def test_replay_halt_time() -> None:
    table = TransitionTable.from_text(SWEEPER)
    assert replay_halt_time(table, 7, 14) == 14
    assert replay_halt_time(table, 7, 13) is None
    assert not verify_prediction(table, 7, 0, -1)


def test_runtime_mismatch_is_a_warning(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="slammers.decider"):
        warn_runtime_mismatch(predicted=10, actual=12, coefficient=1, constant=0, tape_length=10)
    assert "runtime mismatch" in caplog.text


def test_decider_events_are_written_to_run_log(tmp_path) -> None:
    log_path = tmp_path / "events.txt"
    configure_run_logger(log_path)
    try:
        decide(TransitionTable.from_text(SWEEPER), make_cfg(tape_length=5, log_events=True))
    finally:
        close_run_logger()
    events = [json.loads(line)["event"] for line in log_path.read_text(encoding="utf-8").splitlines()]
    assert events == ["cycle_found", "bounce", "cycle_found", "bounce", "halt"]
