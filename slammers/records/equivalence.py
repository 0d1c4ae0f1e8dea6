"""slammers/records/equivalence.py

Translational equivalence of two records.

Two records ``past`` and ``current`` (same state, same symbol under the head,
``current`` captured later and further along the scan direction) are
equivalent when the configuration at ``current`` is the configuration at
``past`` shifted by ``current.position - past.position`` cells, restricted to
the cells that can influence the machine from here on:

- trailing side (behind the direction of travel): cells the head touched
  between the two captures must match their translates. The walk outward
  from ``past.position`` stops at the first cell ``current`` still shows as
  untouched since ``past.time``; the head moves one cell at a time, so nothing
  beyond that cell was touched either.
- leading side (ahead of the direction of travel): every cell from
  ``current.position`` to the tape boundary must match its translate.

When both sides match, the run from ``past`` to ``current`` repeats shifted
by the same distance every period until the translated run reaches the tape
edge.

Leftward scans are evaluated on mirrored tapes so that a single rightward
rule covers both directions.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

from ..types import Record


def _oriented(record: Record, moving_right: bool) -> Tuple[np.ndarray, np.ndarray, int]:
    if moving_right:
        return record.symbols, record.last_visit, record.position
    return record.symbols[::-1], record.last_visit[::-1], record.tape_length - 1 - record.position


def trailing_span(past: Record, current: Record, moving_right: bool) -> int:
    """Number of cells behind ``past.position`` touched since ``past`` was captured."""
    _, cur_visit, _ = _oriented(current, moving_right)
    _, _, xp = _oriented(past, moving_right)
    # Cells xp-1, xp-2, ..., 0 (oriented), nearest first.
    untouched = cur_visit[:xp][::-1] < past.time
    stale = np.flatnonzero(untouched)
    return int(stale[0]) if stale.size else int(xp)


def records_equivalent(past: Record, current: Record, moving_right: bool) -> bool:
    """Return True when ``current`` is a translate of ``past`` for the scan direction.

    Precondition: ``past`` was captured no later than ``current`` and
    ``current`` lies at or beyond ``past`` in the direction of travel.
    Swapping the arguments is a caller error and raises ValueError.
    A record compared with an identical copy of itself is equivalent.
    """
    if past.tape_length != current.tape_length:
        raise ValueError("records come from tapes of different lengths.")
    if current.time < past.time:
        raise ValueError("past must be captured no later than current.")

    past_sym, _, xp = _oriented(past, moving_right)
    cur_sym, _, xc = _oriented(current, moving_right)
    if xc < xp:
        raise ValueError("current must lie at or beyond past in the direction of travel.")

    span = trailing_span(past, current, moving_right)
    if span and not np.array_equal(cur_sym[xc - span : xc], past_sym[xp - span : xp]):
        return False

    ahead = cur_sym.size - xc
    return bool(np.array_equal(cur_sym[xc:], past_sym[xp : xp + ahead]))
