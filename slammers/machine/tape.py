"""Bounded tape: a fixed number of binary cells with last-visit bookkeeping."""

from __future__ import annotations

import numpy as np

from ..types import NEVER_VISITED, Record, TapeCell


class Tape:
    """Column-wise storage for ``length`` cells.

    ``symbols[i]`` is the last symbol written to cell ``i`` and
    ``last_visit[i]`` the step at which the head last executed a transition on
    it (``NEVER_VISITED`` until then). Only the stepping engine writes to a tape.
    """

    def __init__(self, length: int) -> None:
        length = int(length)
        if length < 1:
            raise ValueError("tape length must be >= 1.")
        self.symbols = np.zeros(length, dtype=np.uint8)
        self.last_visit = np.full(length, NEVER_VISITED, dtype=np.int64)

    @property
    def length(self) -> int:
        return int(self.symbols.size)

    def __len__(self) -> int:
        return self.length

    def read(self, position: int) -> int:
        return int(self.symbols[position])

    def write(self, position: int, symbol: int, time: int) -> None:
        self.symbols[position] = symbol
        self.last_visit[position] = time

    def cell(self, position: int) -> TapeCell:
        return TapeCell(symbol=int(self.symbols[position]), last_visit=int(self.last_visit[position]))

    def snapshot(self, time: int, position: int) -> Record:
        """Copy the whole tape into an immutable Record (O(length) per call)."""
        symbols = self.symbols.copy()
        last_visit = self.last_visit.copy()
        symbols.setflags(write=False)
        last_visit.setflags(write=False)
        return Record(symbols=symbols, last_visit=last_visit, time=int(time), position=int(position))

    def __str__(self) -> str:
        return "".join(str(int(s)) for s in self.symbols)
