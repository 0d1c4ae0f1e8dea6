"""Machine databases and the append-only result stream.

A database is a flat sequence of 30-byte encoded machines, optionally after a
header (bbchallenge databases carry one 30-byte header; the halting-machine
dumps produced by the bounded-tape enumerator carry none). Positive decider
results are recorded as 4-byte big-endian machine indices appended to a
binary file.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import BinaryIO, List

from ..machine.table import ENCODED_SIZE, TransitionTable

INDEX_SIZE = 4
MAX_INDEX = 2 ** (8 * INDEX_SIZE) - 1


def run_name() -> str:
    """Timestamped run identifier, e.g. ``run_2025-01-14_12-25-37``."""
    return "run_" + time.strftime("%Y-%m-%d_%H-%M-%S")


def load_database(path: Path | str, *, header_bytes: int = 0) -> bytes:
    data = Path(path).read_bytes()
    if header_bytes < 0 or header_bytes > len(data):
        raise ValueError(f"header_bytes={header_bytes} does not fit a {len(data)}-byte database.")
    if (len(data) - header_bytes) % ENCODED_SIZE != 0:
        raise ValueError(
            f"database body is {len(data) - header_bytes} bytes, not a multiple of {ENCODED_SIZE}."
        )
    return data


def machine_count(db: bytes, *, header_bytes: int = 0) -> int:
    return (len(db) - header_bytes) // ENCODED_SIZE


def get_machine(db: bytes, index: int, *, header_bytes: int = 0) -> TransitionTable:
    count = machine_count(db, header_bytes=header_bytes)
    if not (0 <= index < count):
        raise ValueError(f"machine index {index} out of range [0, {count}).")
    start = header_bytes + ENCODED_SIZE * index
    return TransitionTable.from_bytes(db[start : start + ENCODED_SIZE])


def encode_index(index: int) -> bytes:
    if not (0 <= index <= MAX_INDEX):
        raise ValueError(f"machine index {index} does not fit in {INDEX_SIZE} bytes.")
    return int(index).to_bytes(INDEX_SIZE, byteorder="big", signed=False)


def append_index(handle: BinaryIO, index: int) -> None:
    handle.write(encode_index(index))


def read_indices(path: Path | str) -> List[int]:
    data = Path(path).read_bytes()
    if len(data) % INDEX_SIZE != 0:
        raise ValueError(f"index stream is {len(data)} bytes, not a multiple of {INDEX_SIZE}.")
    return [
        int.from_bytes(data[i : i + INDEX_SIZE], byteorder="big", signed=False)
        for i in range(0, len(data), INDEX_SIZE)
    ]
