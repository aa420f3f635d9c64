# ruff: noqa: T201

from __future__ import annotations

import argparse
import logging
import sys
from functools import partial
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from rbxsync import __version__
from rbxsync.app import (
    build_roblox_service,
    check,
    init_project,
    list_remote,
    pull,
    rename,
    sync,
)
from rbxsync.config import ConfigurationError, configure_logging, get_project_paths
from rbxsync.domain.errors import RbxSyncError
from rbxsync.domain.model import ResourceType
from rbxsync.domain.reconciliation import ResolutionMode

from .report import format_check, format_listing, format_pull, format_rename, format_sync

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from rbxsync.app import RemoteFactory

log = logging.getLogger(__name__)


def _resource_type(value: str) -> ResourceType:
    try:
        return ResourceType.parse(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _resource_types(value: str) -> list[ResourceType]:
    types = [_resource_type(part) for part in value.split(",") if part.strip()]
    if not types:
        raise argparse.ArgumentTypeError("expected at least one resource type")
    return sorted(set(types), key=list(ResourceType).index)


def _non_negative(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}") from exc
    if number < 0:
        raise argparse.ArgumentTypeError("must not be negative")
    return number


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rbxsync", description="Sync Roblox game passes, badges and developer products"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to the project config file (default: ./rbxsync.toml)",
    )
    parser.add_argument(
        "--api-key",
        type=str,
        default=None,
        help="Open Cloud API key (defaults to RBXSYNC_API_KEY)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    init = subparsers.add_parser("init", help="Create a new project config")
    init.add_argument(
        "--from-remote",
        action="store_true",
        help="Build config and lockfile from the resources that already exist remotely",
    )
    init.add_argument(
        "--universe-id", type=_non_negative, help="Universe to import with --from-remote"
    )

    sync_parser = subparsers.add_parser("sync", help="Push local config to Roblox")
    sync_parser.add_argument(
        "--dry-run", action="store_true", help="Show the plan without changing anything"
    )
    sync_parser.add_argument(
        "--only",
        type=_resource_types,
        default=None,
        help="Comma separated resource types to sync (passes,badges,products)",
    )
    sync_parser.add_argument(
        "--badge-cost",
        type=_non_negative,
        default=None,
        help="Robux you expect to pay per badge creation (default: 0)",
    )

    pull_parser = subparsers.add_parser("pull", help="Merge remote state into the local files")
    resolution = pull_parser.add_mutually_exclusive_group()
    resolution.add_argument(
        "--dry-run", action="store_true", help="Show what would change without writing"
    )
    resolution.add_argument(
        "--accept-remote",
        action="store_true",
        help="Resolve icon conflicts by downloading the remote icon",
    )
    resolution.add_argument(
        "--accept-local",
        action="store_true",
        help="Resolve icon conflicts by re-uploading the local icon on the next sync",
    )

    subparsers.add_parser("check", help="Validate config and lockfile against remote state")

    rename_parser = subparsers.add_parser("rename", help="Rename a resource key")
    rename_parser.add_argument("type", type=_resource_type, help="passes, badges or products")
    rename_parser.add_argument("old", help="Current key")
    rename_parser.add_argument("new", help="New key")

    list_parser = subparsers.add_parser("list", help="List remote resources of one type")
    list_parser.add_argument("type", type=_resource_type, help="passes, badges or products")

    return parser


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = _build_parser()
    args = parser.parse_args(list(argv))
    if args.command == "init" and args.from_remote and args.universe_id is None:
        parser.error("init --from-remote requires --universe-id")
    if args.command == "init" and args.universe_id is not None and not args.from_remote:
        parser.error("--universe-id is only valid with --from-remote")
    return args


def _resolution_mode(args: argparse.Namespace) -> ResolutionMode:
    if args.accept_remote:
        return ResolutionMode.ACCEPT_REMOTE
    if args.accept_local:
        return ResolutionMode.ACCEPT_LOCAL
    return ResolutionMode.NONE


def _emit(lines: Sequence[str]) -> None:
    for line in lines:
        print(line)


def _run(args: argparse.Namespace, remote_factory: RemoteFactory) -> int:
    paths = get_project_paths(args.config)
    match args.command:
        case "init":
            result = init_project(
                paths,
                universe_id=args.universe_id,
                remote_factory=remote_factory if args.from_remote else None,
            )
            print(f"created {result.config_path}")
            if result.pull is not None:
                _emit(format_pull(result.pull, verbose=args.verbose))
                return 0 if result.pull.ok else 1
            return 0
        case "sync":
            sync_result = sync(
                paths,
                remote_factory=remote_factory,
                types=args.only,
                dry_run=args.dry_run,
                badge_cost=args.badge_cost,
            )
            _emit(format_sync(sync_result, verbose=args.verbose))
            return 0 if sync_result.ok else 1
        case "pull":
            pull_result = pull(
                paths,
                remote_factory=remote_factory,
                mode=_resolution_mode(args),
                dry_run=args.dry_run,
            )
            _emit(format_pull(pull_result, verbose=args.verbose))
            pull_result.raise_for_conflicts()
            return 1 if pull_result.failed else 0
        case "check":
            report = check(paths, remote_factory=remote_factory)
            _emit(format_check(report))
            report.raise_for_errors()
            return 0
        case "rename":
            _emit(format_rename(rename(paths, args.type, args.old, args.new)))
            return 0
        case "list":
            _emit(format_listing(list_remote(paths, args.type, remote_factory=remote_factory)))
            return 0
    raise ValueError(f"Unsupported command: {args.command}")


def main(
    argv: Sequence[str] | None = None,
    *,
    remote_factory: RemoteFactory | None = None,
) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO, force=True)

    factory = remote_factory or partial(build_roblox_service, api_key=parsed_args.api_key)
    try:
        code = _run(parsed_args, factory)
    except (RbxSyncError, ConfigurationError) as exc:
        log.error("%s", exc)  # noqa: TRY400
        sys.exit(1)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)
    if code:
        sys.exit(code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
