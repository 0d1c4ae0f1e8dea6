"""Immutable transition tables for binary-alphabet machines with at most five states.

A table maps ``(state, symbol)`` to ``Rule(write, direction, next_state)``.
States are numbered ``1..n_states``; ``next_state == 0`` marks an undefined
transition, which the stepping engine treats as a halt.

Two interchange formats are supported:

- the bbchallenge byte encoding: 30 bytes, ``[write, move, next]`` for every
  ``(state, symbol)`` in order, ``move`` 0 for right and 1 for left, unused
  states zero-filled. The table

      +---+-----------+-----+
      | - |     0     |  1  |
      +---+-----------+-----+
      | A | 1RB       | 0LA |
      | B | undefined | 1RA |
      +---+-----------+-----+

  is encoded as ``1,0,2, 0,1,1, 0,0,0, 1,0,1`` followed by 18 zero bytes;
- the standard text format ``1RB0LA_---1RA`` (``---`` for undefined).
"""

from __future__ import annotations

from typing import Iterator, List, Sequence, Tuple

import numpy as np

from ..types import HALT_STATE, MAX_STATES, N_SYMBOLS, Direction, Rule

ENCODED_SIZE = MAX_STATES * N_SYMBOLS * 3

_DIRECTION_LETTERS = {"R": Direction.RIGHT, "L": Direction.LEFT}


def state_letter(state: int) -> str:
    """Printable name of a state: 1 -> 'A', 2 -> 'B', ..."""
    return chr(ord("A") + int(state) - 1)


def _parse_direction(raw: object) -> Direction:
    if isinstance(raw, str):
        key = raw.strip().upper()
        if key not in _DIRECTION_LETTERS:
            raise ValueError(f"Unknown direction {raw!r}; expected 'R' or 'L'.")
        return _DIRECTION_LETTERS[key]
    value = int(raw)  # type: ignore[arg-type]
    if value not in (Direction.RIGHT, Direction.LEFT):
        raise ValueError(f"Unknown direction {raw!r}; expected 0 (right) or 1 (left).")
    return Direction(value)


class TransitionTable:
    """Read-only ``(state, symbol) -> Rule`` lookup.

    Backed by a ``uint8`` array of shape ``(n_states + 1, 2, 3)``; row 0 is
    never addressed because state 0 is the halt sentinel.
    """

    __slots__ = ("_rules", "n_states")

    def __init__(self, rules: np.ndarray) -> None:
        arr = np.array(rules, dtype=np.int64, copy=True)
        if arr.ndim != 3 or arr.shape[1:] != (N_SYMBOLS, 3):
            raise ValueError(f"rules must have shape (n_states + 1, 2, 3); got {arr.shape}.")
        n_states = arr.shape[0] - 1
        if not (1 <= n_states <= MAX_STATES):
            raise ValueError(f"n_states must be in [1, {MAX_STATES}]; got {n_states}.")
        # Undefined transitions carry no write/move information.
        arr[arr[..., 2] == HALT_STATE] = 0
        body = arr[1:]
        if np.any((body[..., 0] < 0) | (body[..., 0] >= N_SYMBOLS)):
            raise ValueError("write symbols must be 0 or 1.")
        if np.any((body[..., 1] != Direction.RIGHT) & (body[..., 1] != Direction.LEFT)):
            raise ValueError("directions must be 0 (right) or 1 (left).")
        if np.any((body[..., 2] < 0) | (body[..., 2] > n_states)):
            raise ValueError(f"next states must be in [0, {n_states}].")
        arr[0] = 0
        table = arr.astype(np.uint8)
        table.setflags(write=False)
        self._rules = table
        self.n_states = int(n_states)

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_triplets(cls, rows: Sequence[Sequence[Tuple[int, object, int] | None]]) -> "TransitionTable":
        """Build a table from ``rows[state - 1][symbol] = (write, direction, next_state)``.

        ``None`` stands for an undefined transition. Directions may be given
        as ``'R'``/``'L'`` or as their numeric encoding.
        """
        if not rows:
            raise ValueError("a transition table needs at least one state.")
        arr = np.zeros((len(rows) + 1, N_SYMBOLS, 3), dtype=np.int64)
        for idx, row in enumerate(rows):
            if len(row) != N_SYMBOLS:
                raise ValueError(f"state {state_letter(idx + 1)} must define exactly {N_SYMBOLS} symbols.")
            for symbol, triplet in enumerate(row):
                if triplet is None:
                    continue
                write, direction, next_state = triplet
                arr[idx + 1, symbol] = (int(write), int(_parse_direction(direction)), int(next_state))
        return cls(arr)

    @classmethod
    def from_text(cls, text: str) -> "TransitionTable":
        """Parse the standard text format, e.g. ``1RB1LB_1LA---``."""
        rows = text.strip().split("_")
        parsed = []
        for row in rows:
            if len(row) != 3 * N_SYMBOLS:
                raise ValueError(f"Not in standard TM text format: {text!r}")
            cells = []
            for symbol in range(N_SYMBOLS):
                w, d, t = row[3 * symbol : 3 * symbol + 3]
                if t == "-":
                    cells.append(None)
                    continue
                if w not in "01" or not t.isalpha():
                    raise ValueError(f"Not in standard TM text format: {text!r}")
                cells.append((int(w), d, ord(t.upper()) - ord("A") + 1))
            parsed.append(cells)
        return cls.from_triplets(parsed)

    @classmethod
    def from_bytes(cls, code: bytes, n_states: int | None = None) -> "TransitionTable":
        """Decode the 30-byte bbchallenge encoding.

        When ``n_states`` is omitted it is inferred as the highest state that
        is either referenced or has a defined transition.
        """
        if len(code) != ENCODED_SIZE:
            raise ValueError(f"encoded machines are {ENCODED_SIZE} bytes; got {len(code)}.")
        full = np.frombuffer(bytes(code), dtype=np.uint8).astype(np.int64).reshape(MAX_STATES, N_SYMBOLS, 3)
        if n_states is None:
            defined = np.flatnonzero(np.any(full[..., 2] != HALT_STATE, axis=1))
            highest_defined = int(defined[-1]) + 1 if defined.size else 1
            n_states = max(1, highest_defined, int(full[..., 2].max()))
        if not (1 <= n_states <= MAX_STATES):
            raise ValueError(f"n_states must be in [1, {MAX_STATES}]; got {n_states}.")
        arr = np.zeros((n_states + 1, N_SYMBOLS, 3), dtype=np.int64)
        arr[1:] = full[:n_states]
        return cls(arr)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def rule(self, state: int, symbol: int) -> Rule:
        write, move, next_state = self._rules[state, symbol]
        return Rule(int(write), Direction(int(move)), int(next_state))

    def rules(self) -> Iterator[Tuple[int, int, Rule]]:
        """Yield ``(state, symbol, rule)`` for every entry, undefined ones included."""
        for state in range(1, self.n_states + 1):
            for symbol in range(N_SYMBOLS):
                yield state, symbol, self.rule(state, symbol)

    @property
    def array(self) -> np.ndarray:
        return self._rules

    def undefined_transitions(self) -> List[Tuple[int, int]]:
        return [(state, symbol) for state, symbol, rule in self.rules() if rule.halts]

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------

    def to_bytes(self) -> bytes:
        full = np.zeros((MAX_STATES, N_SYMBOLS, 3), dtype=np.uint8)
        full[: self.n_states] = self._rules[1:]
        return full.tobytes()

    def to_text(self) -> str:
        parts = []
        for state in range(1, self.n_states + 1):
            row = ""
            for symbol in range(N_SYMBOLS):
                rule = self.rule(state, symbol)
                row += "---" if rule.halts else f"{rule.write}{rule.direction.letter}{state_letter(rule.next_state)}"
            parts.append(row)
        return "_".join(parts)

    def __str__(self) -> str:
        return self.to_text()

    def __repr__(self) -> str:
        return f"TransitionTable.from_text({self.to_text()!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TransitionTable):
            return NotImplemented
        return self.n_states == other.n_states and np.array_equal(self._rules, other._rules)

    def __hash__(self) -> int:
        return hash(self.to_bytes())

    def __getstate__(self) -> Tuple[bytes, int]:
        return self.to_bytes(), self.n_states

    def __setstate__(self, state: Tuple[bytes, int]) -> None:
        code, n_states = state
        rebuilt = TransitionTable.from_bytes(code, n_states=n_states)
        self._rules = rebuilt._rules
        self.n_states = rebuilt.n_states
