"""CLI entrypoints for bunbind commands."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path

from .config import ConfigError
from .extractors import SignatureParseError, get_extractor
from .logging import configure_logging
from .models import STATUS_FAILED, STATUS_PARTIAL, GenerationReport
from .orchestrator import Orchestrator


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS if suppress_default else False,
        help="Increase log verbosity for troubleshooting.",
    )


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from exc
    if number < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return number


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bunbind",
        description="Generate bun:ffi TypeScript bindings from exported Rust functions.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate bindings for every Rust module and update index.ts.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    generate_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the library root containing rs/ (defaults to current directory).",
    )
    generate_parser.add_argument(
        "--platform",
        default=None,
        help="Target platform for library naming (win32, linux, darwin). Defaults to the host.",
    )
    generate_parser.add_argument(
        "--workers",
        type=_positive_int,
        default=None,
        help="Number of modules processed in parallel (overrides .bunbind.yml).",
    )
    generate_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report what would be written without touching disk.",
    )
    generate_parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit non-zero when any module fails to generate.",
    )
    generate_parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write logs to this file.",
    )

    inspect_parser = subparsers.add_parser(
        "inspect",
        help="Print the exported signatures found in one source file.",
    )
    _add_verbose_option(inspect_parser, suppress_default=True)
    inspect_parser.add_argument("file", type=Path, help="Rust source file to inspect.")
    inspect_parser.add_argument(
        "--json",
        action="store_true",
        help="Emit signatures as JSON.",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for bunbind commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose),
        log_file=getattr(args, "log_file", None),
    )

    if args.command == "generate":
        _run_generate(parser, args)
    elif args.command == "inspect":
        _run_inspect(parser, args)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _run_generate(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    orchestrator = Orchestrator()
    try:
        report = orchestrator.run(
            args.path,
            platform=args.platform,
            workers=args.workers,
            dry_run=bool(args.dry_run),
        )
    except (FileNotFoundError, NotADirectoryError) as exc:
        parser.exit(1, f"{exc}\n")
    except ConfigError as exc:
        parser.exit(1, f"Invalid configuration: {exc}\n")

    print(_summarise(report))
    if report.status == STATUS_FAILED:
        parser.exit(1, "bunbind generate failed. Run with --verbose for more details.\n")
    if report.status == STATUS_PARTIAL and args.strict:
        parser.exit(1, "Some modules were skipped (--strict).\n")


def _run_inspect(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    path: Path = args.file
    extractor = get_extractor(path)
    if extractor is None:
        parser.exit(1, f"No extractor supports {path.suffix or path.name!r} files\n")
    try:
        source = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        parser.exit(1, f"Cannot read {path}: {exc}\n")
    try:
        functions = extractor.extract(source)
    except SignatureParseError as exc:
        parser.exit(1, f"{path}: {exc}\n")

    if args.json:
        print(json.dumps([asdict(function) for function in functions], indent=2))
        return
    if not functions:
        print(f"No exported functions found in {path}")
        return
    for function in functions:
        params = ", ".join(
            f"{param.name}: {param.type}" if param.name else param.type for param in function.params
        )
        print(f"{function.name}({params}) -> {function.return_type}")


def _summarise(report: GenerationReport) -> str:
    verb = "Would write" if report.dry_run else "Wrote"
    index_state = "updated" if report.index_changed else "unchanged"
    if report.aborted:
        index_state = "not updated"
    return (
        f"{verb} {len(report.written)} binding(s); index {index_state}; "
        f"{len(report.warnings)} warning(s), {len(report.errors)} error(s) [{report.status}]"
    )


if __name__ == "__main__":
    main(sys.argv[1:])
