"""CLI entrypoint for docdedupe."""

from __future__ import annotations

import argparse
import sys
from importlib import metadata
from pathlib import Path

from .config import ConfigError, load_config
from .logging import LEVELS, configure_logging, default_log_path
from .orchestrator import Orchestrator
from .repair import available_policies, resolve_policy
from .stores import IndexLoadError


def _version() -> str:
    try:
        return metadata.version("docdedupe")
    except metadata.PackageNotFoundError:
        return "unknown"


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return number


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docdedupe",
        description=(
            "Remove duplicate members, duplicate documentation content and members "
            "missing from the framework index in a documentation XML corpus."
        ),
    )
    parser.add_argument(
        "-p",
        "--path",
        required=True,
        help="Root of the documentation corpus (contains the framework index).",
    )
    parser.add_argument(
        "-l",
        "--enable-logging",
        action="store_true",
        help="Also write the log to a timestamped file in the current directory.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Write the log to this file (implies --enable-logging).",
    )
    parser.add_argument(
        "--log-level",
        choices=sorted(LEVELS),
        default="info",
        help="Log verbosity (default: info).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Shortcut for --log-level debug.",
    )
    parser.add_argument(
        "--workers",
        type=_positive_int,
        default=None,
        help="Number of files repaired concurrently.",
    )
    parser.add_argument(
        "--policy",
        default=None,
        help=f"Losing-element policy for duplicate members ({', '.join(available_policies())}).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report what would change without writing or deleting files.",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 1 when any file could not be processed.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {_version()}")
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for docdedupe."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_file = args.log_file
    if log_file is None and args.enable_logging:
        log_file = default_log_path()
    logger = configure_logging(level=args.log_level, verbose=bool(args.verbose), log_file=log_file)
    logger.info("Document de-duplicator %s", _version())

    root = Path(args.path).expanduser()
    if not root.is_dir():
        parser.exit(1, f"Documentation path is not a directory: {root}\n")

    try:
        config = load_config(root)
        policy = resolve_policy(args.policy) if args.policy else None
    except (ConfigError, ValueError) as exc:
        parser.exit(1, f"{exc}\n")

    orchestrator = Orchestrator(policy=policy, dry_run=bool(args.dry_run), workers=args.workers)
    try:
        summary = orchestrator.run(root, config=config)
    except IndexLoadError as exc:
        parser.exit(1, f"docdedupe failed: {exc}\n")
    except Exception as exc:  # pragma: no cover - defensive guard
        parser.exit(1, f"docdedupe failed: {exc}\nRun with --verbose for more details.\n")

    counts = summary.counts()
    prefix = "Would have " if summary.dry_run else ""
    print(
        f"{prefix}rewritten {counts['rewritten']}, deleted {counts['deleted']}, "
        f"left {counts['unchanged']} unchanged, failed {counts['failed']}"
    )
    for failure in summary.failed:
        print(f"  failed: {failure.path}: {failure.error}", file=sys.stderr)

    if summary.failed and (args.strict or config.strict_exit):
        parser.exit(1)


if __name__ == "__main__":
    main(sys.argv[1:])
