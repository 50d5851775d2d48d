"""CLI entry point for Vault Mirror.

Usage:
    python -m vault_mirror sync --source PATH [--target ROOT]
    python -m vault_mirror watch --source PATH [--target ROOT] [--interval SECONDS]
    python -m vault_mirror config --source PATH [--target ROOT] [--notify KIND=on|off ...]
    python -m vault_mirror status --source PATH [--json]

Commands:
    sync      Run one reconciliation pass and exit
    watch     Reconcile, then mirror changes until interrupted
    config    Show or change the stored settings
    status    Compare source and mirror contents

--target always updates the stored target root.
"""

import argparse
import json
import sys
import threading
from pathlib import Path
from typing import Tuple

from vault_mirror import EventKind, ManagerConfig, MirrorManager, __version__
from vault_mirror.config import DEFAULT_SETTINGS_FILE
from vault_mirror.target import resolve_target_root
from vault_mirror.utils.logging import configure_root_logger

_TRUE_VALUES = ("on", "true", "yes", "1")
_FALSE_VALUES = ("off", "false", "no", "0")


def parse_toggle(value: str) -> Tuple[EventKind, bool]:
    """Parse a KIND=on|off toggle argument.

    Raises:
        ValueError: If the kind or the value is not recognized
    """
    kind_name, sep, raw = value.partition("=")
    if not sep:
        raise ValueError(f"Expected KIND=on|off, got '{value}'")

    kind = EventKind(kind_name.strip().lower())
    raw = raw.strip().lower()
    if raw in _TRUE_VALUES:
        return kind, True
    if raw in _FALSE_VALUES:
        return kind, False
    raise ValueError(f"Expected on or off for '{kind.value}', got '{raw}'")


def positive_float(value: str) -> float:
    """argparse type for a strictly positive number of seconds."""
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: '{value}'")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0, got {value}")
    return number


def build_manager(args: argparse.Namespace) -> MirrorManager:
    """Create a MirrorManager from the common CLI arguments."""
    source_root = Path(args.source)
    settings_path = Path(args.settings) if args.settings else source_root / DEFAULT_SETTINGS_FILE

    config = ManagerConfig(
        source_root=source_root,
        settings_path=settings_path,
        poll_interval=getattr(args, "interval", 2.0),
    )
    manager = MirrorManager(config)

    if args.target is not None:
        manager.set_target_root(args.target)
    return manager


def cmd_sync(args: argparse.Namespace) -> int:
    """Handle the 'sync' command - run one reconciliation pass.

    Returns:
        Exit code (0 for success, 1 if the target was unreachable or the
        pass failed)
    """
    manager = build_manager(args)
    stats = manager.reconcile()

    if stats is None:
        print("Sync failed; see log for details", file=sys.stderr)
        return 1
    if not stats.target_available:
        target = resolve_target_root(manager.get_configuration())
        print(f"Target path '{target}' is not available", file=sys.stderr)
        return 1

    print(stats.summary_message())
    print(f"  Duration: {stats.duration_ms:.1f} ms")
    return 0


def cmd_watch(args: argparse.Namespace) -> int:
    """Handle the 'watch' command - reconcile, then mirror until Ctrl-C."""
    manager = build_manager(args)
    manager.start()

    stop_event = threading.Event()
    try:
        manager.run(stop_event)
    except KeyboardInterrupt:
        stop_event.set()
        print("Stopped.")
    return 0


def cmd_config(args: argparse.Namespace) -> int:
    """Handle the 'config' command - apply changes and print settings."""
    try:
        toggles = [parse_toggle(value) for value in args.notify or []]
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    manager = build_manager(args)
    for kind, enabled in toggles:
        manager.set_notify_toggle(kind, enabled)

    config = manager.get_configuration()
    if args.json:
        print(json.dumps(config.to_dict(), indent=2))
    else:
        print(f"Target directory: {config.target_root}")
        print(f"  Resolved: {resolve_target_root(config)}")
        for kind in EventKind:
            state = "on" if config.notify_enabled(kind) else "off"
            print(f"  Notify {kind.value}: {state}")
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    """Handle the 'status' command - compare source and mirror."""
    manager = build_manager(args)
    status = manager.status()

    if args.json:
        print(json.dumps(status, indent=2, default=str))
        return 0

    print(f"Source: {status['source_root']}")
    print(f"Target: {status['target_root']}")
    print(f"Target available: {status['target_available']}")
    differences = status["differences"]
    if differences is None:
        return 0

    print(f"In sync: {status['in_sync']}")
    print(f"  Identical: {differences['identical']}")
    for label, key in (
        ("Missing from mirror", "source_only"),
        ("Only in mirror", "mirror_only"),
        ("Modified", "modified"),
    ):
        if differences[key]:
            print(f"  {label}:")
            for path in differences[key]:
                print(f"    {path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="vault_mirror",
        description="Vault Mirror - one-way mirroring of a note vault into another directory",
    )
    parser.add_argument(
        "--version", action="version",
        version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable verbose output"
    )
    parser.add_argument("--json-logs", action="store_true", help="Log as JSON lines")
    parser.add_argument("--log-file", help="Also log to this file")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--source", required=True, help="Source tree (vault) to mirror")
    common.add_argument("--target", help="Target root; may contain $HOME (stored)")
    common.add_argument(
        "--settings",
        help=f"Settings file (default: <source>/{DEFAULT_SETTINGS_FILE})"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("sync", parents=[common], help="Run one reconciliation pass")

    watch_parser = subparsers.add_parser(
        "watch", parents=[common], help="Reconcile, then mirror changes until interrupted"
    )
    watch_parser.add_argument(
        "--interval", type=positive_float, default=2.0,
        help="Seconds between source scans (default: 2.0)"
    )

    config_parser = subparsers.add_parser("config", parents=[common], help="Show or change settings")
    config_parser.add_argument(
        "--notify", action="append", metavar="KIND=on|off",
        help="Notification toggle for create, modify, delete or rename (repeatable)"
    )
    config_parser.add_argument("--json", action="store_true", help="Output as JSON")

    status_parser = subparsers.add_parser("status", parents=[common], help="Compare source and mirror")
    status_parser.add_argument("--json", action="store_true", help="Output as JSON")

    return parser


def main(argv=None) -> int:
    """Main entry point for the CLI.

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    configure_root_logger(
        level="DEBUG" if args.verbose else "INFO",
        json_output=args.json_logs,
        log_file=Path(args.log_file) if args.log_file else None,
    )

    commands = {
        "sync": cmd_sync,
        "watch": cmd_watch,
        "config": cmd_config,
        "status": cmd_status,
    }
    return commands[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
