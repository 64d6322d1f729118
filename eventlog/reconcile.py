"""eventlog.reconcile

Side-by-side view of the server's instant-channel history and the local
journal, built once a session is closed.

The default pairing is positional: row ``i`` holds the ``i``-th server
record and the ``i``-th journal entry, and the shorter side is padded. It
uses neither ``seq`` nor ids, so one lost or duplicated delivery shifts
every later row. ``align="seq"`` joins on ``seq`` instead.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass
from itertools import zip_longest
from typing import Any, Literal

from eventlog.core.models import LocalJournalEntry

Align = Literal["position", "seq"]


def _seq_label(seq: Any) -> str:
    if isinstance(seq, int) and not isinstance(seq, bool):
        return f"#{seq}"
    return ""


def format_server_cell(record: dict[str, Any] | None) -> str:
    if not record:
        return ""
    time = record.get("serverTimeLocal") or record.get("serverTime") or ""
    client_time = record.get("clientTime")
    parts = [
        _seq_label(record.get("seq")),
        str(time),
        f"client:{client_time}" if client_time else "",
        str(record.get("message") or ""),
    ]
    return " ".join(p for p in parts if p)


def format_local_cell(entry: LocalJournalEntry | None) -> str:
    if entry is None:
        return ""
    parts = [_seq_label(entry.seq), entry.local_time or "", entry.message or ""]
    return " ".join(p for p in parts if p)


@dataclass(frozen=True, slots=True)
class ReconciliationRow:
    server: dict[str, Any] | None
    local: LocalJournalEntry | None

    @property
    def server_cell(self) -> str:
        return format_server_cell(self.server)

    @property
    def local_cell(self) -> str:
        return format_local_cell(self.local)


def _by_position(
    server: Sequence[dict[str, Any]], local: Sequence[LocalJournalEntry]
) -> list[ReconciliationRow]:
    return [ReconciliationRow(server=s, local=loc) for s, loc in zip_longest(server, local)]


def _by_seq(server: Sequence[dict[str, Any]], local: Sequence[LocalJournalEntry]) -> list[ReconciliationRow]:
    server_by_seq: dict[int, list[dict[str, Any]]] = defaultdict(list)
    unkeyed: list[dict[str, Any]] = []
    for record in server:
        seq = record.get("seq")
        if isinstance(seq, int) and not isinstance(seq, bool):
            server_by_seq[seq].append(record)
        else:
            unkeyed.append(record)

    local_by_seq: dict[int, list[LocalJournalEntry]] = defaultdict(list)
    for entry in local:
        local_by_seq[entry.seq].append(entry)

    rows: list[ReconciliationRow] = []
    for seq in sorted(server_by_seq.keys() | local_by_seq.keys()):
        # Resubmitted events (at-least-once) show up as extra server-only rows.
        for s, loc in zip_longest(server_by_seq.get(seq, []), local_by_seq.get(seq, [])):
            rows.append(ReconciliationRow(server=s, local=loc))
    rows.extend(ReconciliationRow(server=s, local=None) for s in unkeyed)
    return rows


@dataclass(frozen=True, slots=True)
class ReconciliationView:
    rows: list[ReconciliationRow]
    align: Align = "position"

    @classmethod
    def build(
        cls,
        server: Sequence[dict[str, Any]],
        local: Sequence[LocalJournalEntry],
        *,
        align: Align = "position",
    ) -> ReconciliationView:
        if align == "seq":
            return cls(rows=_by_seq(server, local), align=align)
        if align != "position":
            raise ValueError(f"unknown alignment: {align}")
        return cls(rows=_by_position(server, local), align=align)

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def is_empty(self) -> bool:
        return not self.rows

    def cells(self) -> list[tuple[str, str]]:
        return [(r.server_cell, r.local_cell) for r in self.rows]

    def render(self, *, headers: tuple[str, str] = ("server", "local")) -> str:
        """Plain-text two-column table."""

        cells = self.cells()
        width = max([len(headers[0])] + [len(s) for s, _ in cells])
        lines = [f"{headers[0]:<{width}} | {headers[1]}", f"{'-' * width}-+-{'-' * len(headers[1])}"]
        lines.extend(f"{s:<{width}} | {loc}".rstrip() for s, loc in cells)
        return "\n".join(lines)
