"""CLI entrypoint for polydoc."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .builder import RootDocBuilder
from .config import ConfigError, load_config
from .logging import configure_logging
from .models import RootDocument
from .source_scanner import SourceScanner


def _add_log_options(parser: argparse.ArgumentParser, *, suppress_default: bool = False) -> None:
    default: object = argparse.SUPPRESS if suppress_default else False
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=default,
        help="Increase log verbosity for troubleshooting.",
    )
    group.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        default=default,
        help="Only log errors; skipped files are still counted on stderr.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="polydoc",
        description="Extract API documentation from Groovy and Java sources.",
    )
    _add_log_options(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser(
        "build",
        help="Parse sources and print the resolved documentation model.",
    )
    _add_log_options(build_parser, suppress_default=True)
    build_parser.add_argument(
        "files",
        nargs="*",
        help="Source-root relative files to document (defaults to every file found).",
    )
    build_parser.add_argument(
        "--sourcepath",
        action="append",
        default=None,
        help="Source root to search; repeat for several roots (defaults to the config).",
    )
    build_parser.add_argument(
        "--config",
        default=".",
        help="Path to .polydoc.yml or the directory containing it.",
    )
    build_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the full document model as JSON instead of a summary.",
    )
    build_parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write log output to this file.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for polydoc commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        configure_logging(verbose=bool(args.verbose), quiet=bool(args.quiet), log_file=args.log_file)
    except ValueError as exc:
        parser.error(str(exc))

    if args.command != "build":  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")

    try:
        config = load_config(Path(args.config))
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    sourcepath = [Path(entry) for entry in args.sourcepath] if args.sourcepath else config.sourcepath
    if not sourcepath:
        parser.exit(1, "No source path given. Pass --sourcepath or set sourcepath in .polydoc.yml.\n")

    files = args.files or SourceScanner(config.exclude_paths).scan(sourcepath)
    builder = RootDocBuilder.from_config(config, sourcepath=sourcepath)
    try:
        diagnostics = builder.build_tree(files)
    except OSError as exc:
        parser.exit(1, f"polydoc build failed: {exc}\n")
    root = builder.root_doc()

    if args.json:
        print(json.dumps(root.to_dict(), indent=2, sort_keys=True))
    else:
        print(_summary(root))
    if diagnostics:
        print(f"{len(diagnostics.skipped_files())} file(s) skipped", file=sys.stderr)


def _summary(root: RootDocument) -> str:
    lines = []
    for path, package in sorted(root.packages.items()):
        lines.append(f"{path} ({len(package.classes)} classes)")
        for name in sorted(package.classes):
            lines.append(f"  {name} [{package.classes[name].kind}]")
    lines.append(f"{len(root.packages)} packages, {len(root.classes)} classes")
    return "\n".join(lines)


if __name__ == "__main__":
    main(sys.argv[1:])
