"""Harness runner: decide every machine of a database."""

from __future__ import annotations

import time
from concurrent.futures import ProcessPoolExecutor
from dataclasses import asdict, dataclass
from typing import BinaryIO, Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from ..config import DeciderConfig, default_config
from ..decider import decide
from ..machine.table import TransitionTable
from ..types import DeciderResult, Verdict
from .database import append_index, get_machine, machine_count

TASK_DIVISORS = (1, 2, 4, 8)


@dataclass
class RunSummary:
    decided: int = 0
    translated_cyclers: int = 0
    not_translated_cyclers: int = 0
    undetermined: int = 0
    rejected_matches: int = 0
    runtime_mismatches: int = 0
    max_halt_time: int = 0
    max_halt_index: Optional[int] = None
    elapsed: float = 0.0

    def add(self, index: int, result: DeciderResult) -> None:
        self.decided += 1
        if result.verdict is Verdict.TRANSLATED_CYCLER:
            self.translated_cyclers += 1
        elif result.verdict is Verdict.NOT_TRANSLATED_CYCLER:
            self.not_translated_cyclers += 1
        else:
            self.undetermined += 1
        self.rejected_matches += result.rejected_matches
        if result.runtime_mismatch:
            self.runtime_mismatches += 1
        if result.halt_time is not None and (self.max_halt_index is None or result.halt_time > self.max_halt_time):
            self.max_halt_time = int(result.halt_time)
            self.max_halt_index = int(index)

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


def select_indices(
    n_machines: int,
    *,
    task_divisor: int = 1,
    task_id: int = 0,
    limit: int | None = None,
) -> List[int]:
    """Machine indices handled by task ``task_id`` out of ``task_divisor``."""
    if task_divisor not in TASK_DIVISORS:
        raise ValueError(f"task_divisor must be one of {TASK_DIVISORS}.")
    if not (0 <= task_id < task_divisor):
        raise ValueError(f"task_id must be in [0, {task_divisor}).")
    if limit is not None and limit < 0:
        raise ValueError("limit must be >= 0 or None.")
    indices = list(range(task_id, n_machines, task_divisor))
    if limit is not None:
        indices = indices[:limit]
    return indices


def _decide_one(job: Tuple[int, bytes, int, DeciderConfig]) -> Tuple[int, DeciderResult]:
    index, code, n_states, cfg = job
    return index, decide(TransitionTable.from_bytes(code, n_states), cfg)


def _jobs(
    db: bytes,
    indices: Iterable[int],
    cfg: DeciderConfig,
    header_bytes: int,
) -> Iterator[Tuple[int, bytes, int, DeciderConfig]]:
    for index in indices:
        table = get_machine(db, index, header_bytes=header_bytes)
        yield index, table.to_bytes(), table.n_states, cfg


def decide_database(
    db: bytes,
    cfg: DeciderConfig | None = None,
    *,
    indices: Sequence[int] | None = None,
    header_bytes: int = 0,
    workers: int = 1,
    output: BinaryIO | None = None,
    on_result: Callable[[int, TransitionTable, DeciderResult], None] | None = None,
) -> RunSummary:
    """Decide the selected machines and append translated-cycler indices to ``output``.

    Results are consumed in index order whichever the worker count, so the
    output stream is deterministic.
    """
    if cfg is None:
        cfg = default_config()
    cfg.validate()
    if workers < 1:
        raise ValueError("workers must be >= 1.")
    if indices is None:
        indices = range(machine_count(db, header_bytes=header_bytes))

    summary = RunSummary()
    start = time.perf_counter()
    jobs = _jobs(db, indices, cfg, header_bytes)

    def _consume(results: Iterable[Tuple[int, DeciderResult]]) -> None:
        for index, result in results:
            summary.add(index, result)
            if output is not None and result.is_translated_cycler:
                append_index(output, index)
            if on_result is not None:
                on_result(index, get_machine(db, index, header_bytes=header_bytes), result)

    if workers == 1:
        _consume(map(_decide_one, jobs))
    else:
        with ProcessPoolExecutor(max_workers=workers) as pool:
            _consume(pool.map(_decide_one, jobs, chunksize=64))

    summary.elapsed = time.perf_counter() - start
    return summary
