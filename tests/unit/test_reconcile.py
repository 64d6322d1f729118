from __future__ import annotations

import pytest

from eventlog.core.models import LocalJournalEntry
from eventlog.reconcile import ReconciliationView, format_local_cell, format_server_cell


def _local(seq: int, message: str) -> LocalJournalEntry:
    return LocalJournalEntry(seq=seq, message=message, local_time=f"2026-03-01T12:00:0{seq}.000Z")


def _server(seq: int, message: str) -> dict:
    return {
        "seq": seq,
        "message": message,
        "serverTimeLocal": f"2026-03-01 14:00:0{seq}",
        "clientTime": f"2026-03-01T12:00:0{seq}.000Z",
    }


def test_cells_omit_missing_parts() -> None:
    assert format_server_cell(None) == ""
    assert format_local_cell(None) == ""
    assert format_server_cell({"message": "x", "serverTime": "2026-03-01T12:00:00.000Z"}) == (
        "2026-03-01T12:00:00.000Z x"
    )
    assert format_server_cell(_server(1, "Play clicked")) == (
        "#1 2026-03-01 14:00:01 client:2026-03-01T12:00:01.000Z Play clicked"
    )
    assert format_local_cell(_local(2, "Start clicked")) == "#2 2026-03-01T12:00:02.000Z Start clicked"


def test_positional_pairing_pads_shorter_side() -> None:
    server = [_server(1, "a"), _server(2, "b")]
    local = [_local(1, "a"), _local(2, "b"), _local(3, "c")]

    view = ReconciliationView.build(server, local)

    assert len(view) == 3
    assert view.rows[2].server is None
    assert view.rows[2].server_cell == ""
    assert view.rows[2].local.seq == 3


def test_positional_pairing_misaligns_after_a_lost_delivery() -> None:
    server = [_server(1, "a"), _server(3, "c")]
    local = [_local(1, "a"), _local(2, "b"), _local(3, "c")]

    view = ReconciliationView.build(server, local)

    assert view.rows[1].server["seq"] == 3
    assert view.rows[1].local.seq == 2


def test_seq_alignment_keeps_gaps_visible() -> None:
    server = [_server(1, "a"), _server(3, "c"), _server(3, "c"), {"message": "no seq"}]
    local = [_local(1, "a"), _local(2, "b"), _local(3, "c")]

    view = ReconciliationView.build(server, local, align="seq")
    pairs = [
        (r.server.get("seq") if r.server else None, r.local.seq if r.local else None) for r in view.rows
    ]

    assert pairs == [(1, 1), (None, 2), (3, 3), (3, None), (None, None)]
    assert view.rows[-1].server == {"message": "no seq"}


def test_empty_inputs_give_empty_view() -> None:
    view = ReconciliationView.build([], [])
    assert view.is_empty


def test_unknown_alignment_is_rejected() -> None:
    with pytest.raises(ValueError):
        ReconciliationView.build([], [], align="id")  # type: ignore[arg-type]


def test_render_has_one_line_per_row_plus_header() -> None:
    view = ReconciliationView.build([_server(1, "a")], [_local(1, "a"), _local(2, "b")])
    lines = view.render().splitlines()
    assert len(lines) == 2 + 2
    assert lines[0].startswith("server")
    assert lines[3].endswith("#2 2026-03-01T12:00:02.000Z b")
