#!/usr/bin/env python3
"""tools/decide_slammers.py

Run the translated-cycler decider over a database of halting machines.

For every selected machine the decider runs on a tape of ``--tape-length``
cells. Indices of machines classified as translated cyclers are appended
(4-byte big-endian) to ``<output-dir>/<run>_translated_cyclers``; one line per
machine goes to ``<output-dir>/<run>.txt``.

Examples:
  tools/decide_slammers.py halting_machines_4_states.bin --tape-length 30
  tools/decide_slammers.py all_5_states_undecided_machines_with_global_header \
      --header-bytes 30 --divtask 4 --mytask 1 --workers 8
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from rich.console import Console

from slammers.config import DeciderConfig
from slammers.harness.database import load_database, machine_count, run_name
from slammers.harness.logging import (
    close_run_logger,
    configure_run_logger,
    log_machine_result,
    log_run_header,
    log_summary,
)
from slammers.harness.render import table_view
from slammers.harness.runner import TASK_DIVISORS, decide_database, select_indices
from slammers.machine.table import TransitionTable
from slammers.types import DeciderResult


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Decide translated cyclers on a bounded tape.")
    parser.add_argument("database", type=Path, help="Machine database (30 bytes per machine).")
    parser.add_argument("--header-bytes", type=int, default=0, help="Bytes to skip before the first machine.")
    parser.add_argument("--tape-length", type=int, default=30, help="Number of tape cells.")
    parser.add_argument("--time-limit", type=int, default=None, help="Give up on a machine after this many steps.")
    parser.add_argument("--workers", type=int, default=1, help="Worker processes.")
    parser.add_argument("--divtask", type=int, default=1, help=f"Split the database into this many tasks {TASK_DIVISORS}.")
    parser.add_argument("--mytask", type=int, default=0, help="Which task of --divtask to run.")
    parser.add_argument("--limit", type=int, default=None, help="Decide at most this many machines.")
    parser.add_argument("--output-dir", type=Path, default=Path("output"), help="Where run files are written.")
    parser.add_argument("--verbose", action="store_true", help="Print every translated cycler.")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.divtask not in TASK_DIVISORS:
        parser.error(f"--divtask must be one of {TASK_DIVISORS}")
    if not (0 <= args.mytask < args.divtask):
        parser.error("--mytask must be in [0, --divtask)")
    if args.workers < 1:
        parser.error("--workers must be >= 1")

    try:
        cfg = DeciderConfig(tape_length=args.tape_length, time_limit=args.time_limit)
        cfg.validate()
        db = load_database(args.database, header_bytes=args.header_bytes)
    except (OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    n_machines = machine_count(db, header_bytes=args.header_bytes)
    indices = select_indices(n_machines, task_divisor=args.divtask, task_id=args.mytask, limit=args.limit)

    run = run_name()
    if args.divtask > 1:
        run += f"_task_{args.mytask}_of_{args.divtask}"
    args.output_dir.mkdir(parents=True, exist_ok=True)
    configure_run_logger(args.output_dir / f"{run}.txt")
    log_run_header(run=run, database=str(args.database), n_machines=len(indices), cfg=cfg.to_dict())

    console = Console()

    def _report(index: int, table: TransitionTable, result: DeciderResult) -> None:
        log_machine_result(index, table.to_text(), result)
        if args.verbose and result.is_translated_cycler:
            console.print(table_view(table, title=f"#{index} {table.to_text()}"))
            console.print(
                f"coefficient={result.coefficient} constant={result.constant} halt_time={result.halt_time}"
            )

    try:
        with (args.output_dir / f"{run}_translated_cyclers").open("ab") as out:
            summary = decide_database(
                db,
                cfg,
                indices=indices,
                header_bytes=args.header_bytes,
                workers=args.workers,
                output=out,
                on_result=_report,
            )
    finally:
        close_run_logger()

    log_summary(summary)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
