"""Record store and per-state extents, both reset in bulk at every edge bounce."""

from __future__ import annotations

from typing import List

import numpy as np

from ..types import N_SYMBOLS, Record


class RecordStore:
    """``(state, symbol) -> [Record, ...]`` table of fixed size ``(n_states + 1) x 2``.

    Records under one key keep insertion order (oldest first). Records taken
    while scanning in one direction are no evidence once the scan reverses, so
    the decider clears the whole table at each bounce.
    """

    def __init__(self, n_states: int) -> None:
        self.n_states = max(1, int(n_states))
        self._table: List[List[List[Record]]] = []
        self.total = 0
        self.clear()

    def clear(self) -> None:
        self._table = [[[] for _ in range(N_SYMBOLS)] for _ in range(self.n_states + 1)]
        self.total = 0

    @property
    def size(self) -> int:
        return int(self.total)

    @property
    def is_empty(self) -> bool:
        return self.total == 0

    def records(self, state: int, symbol: int) -> List[Record]:
        return self._table[int(state)][int(symbol)]

    def append(self, state: int, symbol: int, record: Record) -> None:
        self._table[int(state)][int(symbol)].append(record)
        self.total += 1


class PerStateExtent:
    """Furthest position reached by each state in the current scan direction.

    ``max_position`` serves rightward scans and ``min_position`` leftward
    scans; untouched entries hold -1 and ``tape_length`` respectively.
    """

    def __init__(self, n_states: int, tape_length: int) -> None:
        self.tape_length = int(tape_length)
        self.max_position = np.full(max(1, int(n_states)) + 1, -1, dtype=np.int64)
        self.min_position = np.full(max(1, int(n_states)) + 1, self.tape_length, dtype=np.int64)

    def clear(self) -> None:
        self.max_position.fill(-1)
        self.min_position.fill(self.tape_length)

    @property
    def is_empty(self) -> bool:
        return bool(np.all(self.max_position == -1) and np.all(self.min_position == self.tape_length))

    def is_new_extreme(self, state: int, position: int, moving_right: bool) -> bool:
        if moving_right:
            return position > int(self.max_position[state])
        return position < int(self.min_position[state])

    def update(self, state: int, position: int, moving_right: bool) -> None:
        if moving_right:
            self.max_position[state] = max(int(self.max_position[state]), int(position))
        else:
            self.min_position[state] = min(int(self.min_position[state]), int(position))

    def max_seen(self) -> int:
        return int(self.max_position.max())

    def min_seen(self) -> int:
        return int(self.min_position.min())
