"""Rendering helpers for transition tables and tapes."""

from __future__ import annotations

from rich.table import Table
from rich.text import Text

from ..machine.table import TransitionTable, state_letter
from ..machine.tape import Tape
from ..types import N_SYMBOLS, Rule

__all__ = ["state_letter", "transition_text", "table_view", "tape_text", "tape_string"]

HEAD_STYLE = "bold black on yellow"
VISITED_STYLE = "cyan"
BLANK_STYLE = "grey50"


def transition_text(rule: Rule) -> str:
    if rule.halts:
        return "---"
    return f"{rule.write}{rule.direction.letter}{state_letter(rule.next_state)}"


def table_view(table: TransitionTable, *, title: str | None = None) -> Table:
    view = Table(title=title or table.to_text())
    view.add_column("-", style="bold")
    for symbol in range(N_SYMBOLS):
        view.add_column(str(symbol), justify="center")
    for state in range(1, table.n_states + 1):
        row = [state_letter(state)]
        for symbol in range(N_SYMBOLS):
            rule = table.rule(state, symbol)
            row.append(Text(transition_text(rule), style="red" if rule.halts else ""))
        view.add_row(*row)
    return view


def tape_string(tape: Tape, position: int, state: int) -> str:
    """Plain rendering, head cell shown as ``B[1]``."""
    cells = []
    for idx in range(tape.length):
        symbol = str(tape.read(idx))
        cells.append(f"{state_letter(state)}[{symbol}]" if idx == position else symbol)
    return " ".join(cells)


def tape_text(tape: Tape, position: int, state: int) -> Text:
    txt = Text()
    for idx in range(tape.length):
        if idx:
            txt.append(" ")
        symbol = str(tape.read(idx))
        if idx == position:
            txt.append(f"{state_letter(state)}[{symbol}]", style=HEAD_STYLE)
        elif tape.cell(idx).visited:
            txt.append(symbol, style=VISITED_STYLE)
        else:
            txt.append(symbol, style=BLANK_STYLE)
    return txt
