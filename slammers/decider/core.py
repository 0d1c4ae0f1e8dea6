"""slammers/decider/core.py

Decider entry point.

``decide`` drives the stepping engine under the cycle/edge state machine
until the machine halts or a limit is hit, and returns a DeciderResult. All
outcomes, including limit violations, are returned as values: the only
exceptions raised are for invalid inputs (config or table).

Verdicts:
  - TRANSLATED_CYCLER(coefficient, constant) when the accumulated cost
    function is non-trivial (``coefficient > 0 or constant > 0``);
  - NOT_TRANSLATED_CYCLER when it is trivial, when a section between bounces
    only produced candidate cycles whose translation distance does not divide
    their period, or when the run exceeded the configuration bound (the
    machine never halts);
  - UNDETERMINED when the time limit was reached or a step left the bounded
    model (head off the tape or moved by more than one cell).

The prediction ``coefficient * L + constant`` is derived from the cycles and
is not corrected by the bounces actually observed; when it misses the halting
time the result carries ``runtime_mismatch=True``.
"""

from __future__ import annotations

from typing import Optional

from ..config import DeciderConfig, default_config
from ..machine.stepping import ExecutionState, configuration_bound, step
from ..machine.table import TransitionTable
from ..types import Direction, DeciderResult, Verdict
from .edge import CycleTracker
from .logging import warn_runtime_mismatch


def _result(
    tracker: CycleTracker,
    verdict: Verdict,
    reason: str,
    *,
    halt_time: Optional[int] = None,
    runtime_mismatch: bool = False,
) -> DeciderResult:
    return DeciderResult(
        verdict=verdict,
        coefficient=int(tracker.cost.coefficient),
        constant=int(tracker.cost.constant),
        tape_length=tracker.tape_length,
        halt_time=halt_time,
        reason=reason,
        cycles_found=tracker.cycles_found,
        bounces=tracker.bounces,
        rejected_matches=tracker.rejected_matches,
        runtime_mismatch=runtime_mismatch,
    )


def decide(
    table: TransitionTable,
    cfg: DeciderConfig | None = None,
    *,
    tape_length: int | None = None,
) -> DeciderResult:
    """Decide whether ``table`` is a halting translated cycler on a bounded tape.

    Inputs:
      - table: transition table of at most ``cfg.max_states`` states.
      - cfg: DeciderConfig (defaults to ``default_config()``).
      - tape_length: optional override of ``cfg.tape_length``.

    Outputs:
      - DeciderResult. ``halt_time`` counts the steps completed before the
        halting transition, which is what the cost function predicts.
    """
    if cfg is None:
        cfg = default_config()
    if tape_length is not None:
        cfg = cfg.replace(tape_length=int(tape_length))
    cfg.validate()
    if table.n_states > cfg.max_states:
        raise ValueError(f"table has {table.n_states} states; max_states is {cfg.max_states}.")

    L = cfg.tape_length
    run = ExecutionState.start(L)
    tracker = CycleTracker(L, table.n_states, log_events=cfg.log_events)
    bound = configuration_bound(L, table.n_states) if cfg.use_configuration_bound else None

    while True:
        if cfg.time_limit is not None and run.time > cfg.time_limit:
            return _result(tracker, Verdict.UNDETERMINED, "time_limit")
        if bound is not None and run.time > bound:
            return _result(tracker, Verdict.NOT_TRANSLATED_CYCLER, "non_halting")

        tracker.before_step(run.tape, run.state, run.position, run.time)

        outcome = step(table, run.tape, run.state, run.position, run.time)
        if outcome.halted:
            break
        # Step boundary: the head moves at most one cell and stays on the tape.
        if abs(outcome.position - run.position) > 1 or tracker.bound_violated(outcome.position):
            return _result(tracker, Verdict.UNDETERMINED, "bound_exceeded")
        if outcome.position == run.position:
            tracker.on_bounce(outcome.steps, toward_right=outcome.direction == Direction.RIGHT)
        run.advance(outcome)

    halt_time = run.time
    tracker.on_halt(halt_time)
    coefficient = tracker.cost.coefficient
    constant = tracker.cost.constant

    mismatch = False
    if cfg.check_runtime:
        predicted = tracker.cost.predict()
        if predicted != halt_time:
            mismatch = True
            warn_runtime_mismatch(
                predicted=predicted,
                actual=halt_time,
                coefficient=coefficient,
                constant=constant,
                tape_length=L,
            )

    if tracker.non_periodic_sections:
        return _result(
            tracker,
            Verdict.NOT_TRANSLATED_CYCLER,
            "non_divisible_period",
            halt_time=halt_time,
            runtime_mismatch=mismatch,
        )
    if coefficient > 0 or constant > 0:
        reason = "cycle" if tracker.cycles_found else "constant_only"
        return _result(tracker, Verdict.TRANSLATED_CYCLER, reason, halt_time=halt_time, runtime_mismatch=mismatch)
    return _result(
        tracker,
        Verdict.NOT_TRANSLATED_CYCLER,
        "halted_without_cycle",
        halt_time=halt_time,
        runtime_mismatch=mismatch,
    )
