"""eventlog.cli

Command line interface entry point for eventlog.

Design constraints:
- argparse-based.
- Lazy imports: do not import heavy dependencies at parse time.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from eventlog.core.config import Config
    from eventlog.local.recorder import EventRecorder


@dataclass(frozen=True)
class CliContext:
    repo_root: Path


def _repo_root_from_cwd() -> Path:
    return Path.cwd()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="eventlog",
        description="Record events over an instant and a batch channel; compare what the server kept.",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit.",
    )

    sub = parser.add_subparsers(dest="command")

    p_api = sub.add_parser("api", help="Start the event API server")
    p_api.add_argument("--host", default=None)
    p_api.add_argument("--port", type=int, default=None)

    sub.add_parser("status", help="Print config, data files and record counts")

    p_log = sub.add_parser("log", help="Record one event (journal + instant send)")
    p_log.add_argument("message")
    p_log.add_argument("--type", dest="event_type", default=None, help="Event type label.")

    sub.add_parser("flush", help="Send journal entries not yet confirmed by a batch")

    p_rec = sub.add_parser("reconcile", help="Flush, then print server and local history side by side")
    p_rec.add_argument(
        "--align",
        choices=["position", "seq"],
        default="position",
        help="Pair rows by position (default) or by sequence number.",
    )

    sub.add_parser("clear", help="Wipe the local journal and both server logs")

    return parser


def _print_version() -> None:
    from eventlog import __version__

    print(f"eventlog v{__version__}")


def _load_config(ctx: CliContext) -> Config:
    from eventlog.core.config import Config
    from eventlog.core.logs import configure_logging

    config = Config.load(ctx.repo_root)
    configure_logging(config.logging)
    return config


def _open_recorder(ctx: CliContext) -> EventRecorder:
    from eventlog.local.recorder import EventRecorder

    config = _load_config(ctx)
    state_dir = config.client.state_dir
    if not state_dir.is_absolute():
        state_dir = ctx.repo_root / state_dir
    return EventRecorder.open(
        config.client,
        state_dir=state_dir,
        max_batch_events=config.server.max_batch_events,
    )


def _cmd_api(ctx: CliContext, args: argparse.Namespace) -> int:
    config = _load_config(ctx)

    host = args.host or config.server.host
    port = args.port or config.server.port

    import uvicorn

    uvicorn.run("api.main:app", host=host, port=port, reload=False, log_config=None)
    return 0


def _cmd_status(ctx: CliContext, args: argparse.Namespace) -> int:
    from eventlog.core.config import Config
    from eventlog.server.append_log import AppendLog

    cfg_path = ctx.repo_root / "config" / "default.yaml"
    try:
        config = Config.load(ctx.repo_root)
        config_status = str(cfg_path) if cfg_path.exists() else "built-in defaults"
    except Exception as e:
        print(f"- config: {cfg_path} (error: {e})")
        return 1

    print("eventlog status")
    print(f"- config: {config_status}")
    print(f"- timezone: {config.server.timezone}")
    for name, path in (("instant", config.instant_file), ("batch", config.batch_file)):
        file = path if path.is_absolute() else ctx.repo_root / path
        if not file.exists():
            print(f"- {name}: {file} (missing)")
            continue
        log = AppendLog(file)
        log.load()
        print(f"- {name}: {file} ({len(log)} records)")
    return 0


def _cmd_log(ctx: CliContext, args: argparse.Namespace) -> int:
    async def run() -> int:
        async with _open_recorder(ctx) as recorder:
            recorded = recorder.record(args.message, args.event_type)
            if recorded is None:
                print("error: message is required", file=sys.stderr)
                return 2
            outcome = await recorded.delivery
            state = "delivered" if outcome.ok else f"queued locally ({outcome.error})"
            print(f"#{recorded.entry.seq} {recorded.entry.message} [{state}]")
            return 0

    return asyncio.run(run())


def _cmd_flush(ctx: CliContext, args: argparse.Namespace) -> int:
    async def run() -> int:
        async with _open_recorder(ctx) as recorder:
            result = await recorder.flush_batch()
            print(f"sent {result.sent} event(s); batch cursor at #{result.cursor}")
            return 0 if result.delivery is None or result.delivery.ok else 1

    return asyncio.run(run())


def _cmd_reconcile(ctx: CliContext, args: argparse.Namespace) -> int:
    async def run() -> int:
        async with _open_recorder(ctx) as recorder:
            view = await recorder.close(align=args.align)
            if view.is_empty:
                print("No events recorded.")
                return 0
            print(view.render())
            return 0

    return asyncio.run(run())


def _cmd_clear(ctx: CliContext, args: argparse.Namespace) -> int:
    async def run() -> int:
        async with _open_recorder(ctx) as recorder:
            outcome = await recorder.clear()
            if not outcome.ok:
                print(f"local state cleared; server wipe failed: {outcome.error}", file=sys.stderr)
                return 1
            print("cleared")
            return 0

    return asyncio.run(run())


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        _print_version()
        return 0

    if not args.command:
        parser.print_help()
        return 2

    ctx = CliContext(repo_root=_repo_root_from_cwd())

    dispatch: dict[str, Callable[[CliContext, argparse.Namespace], int]] = {
        "api": _cmd_api,
        "status": _cmd_status,
        "log": _cmd_log,
        "flush": _cmd_flush,
        "reconcile": _cmd_reconcile,
        "clear": _cmd_clear,
    }

    fn = dispatch.get(str(args.command))
    if fn is None:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 2

    return int(fn(ctx, args))


if __name__ == "__main__":
    raise SystemExit(main())
