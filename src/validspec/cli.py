"""CLI entry point for ``validspec analyze``."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from validspec import __version__
from validspec.config import Settings
from validspec.constants import Consumer
from validspec.errors import (
    AnalysisError,
    GrammarUnavailableError,
    SourceParseError,
)
from validspec.logging_config import setup_logging
from validspec.services.analysis_service import StructAnalysis, analyze_source


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"validspec {__version__}")
        return

    if args.command == "analyze":
        _run_analyze(args)
    else:
        parser.print_help()


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="validspec",
        description=(
            "Compile #[validate]/#[modify] field annotations on Rust "
            "structs into validator descriptors."
        ),
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )

    sub = parser.add_subparsers(dest="command")

    analyze = sub.add_parser(
        "analyze",
        help="Analyse the structs of a Rust source file",
    )
    analyze.add_argument(
        "source",
        type=str,
        help="Path to a Rust source file",
    )
    analyze.add_argument(
        "--struct",
        "-s",
        dest="struct_name",
        default=None,
        help=(
            "Analyse only this item "
            "(default: every item deriving Validate/Validify)"
        ),
    )
    analyze.add_argument(
        "--consumer",
        "-c",
        choices=["validate", "validify"],
        default=None,
        help=(
            "Override the derive target: validate allows references, "
            "validify requires owned data"
        ),
    )
    analyze.add_argument(
        "--format",
        "-f",
        choices=["json", "text"],
        default="json",
        help="Output format (default: json)",
    )
    analyze.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose output",
    )

    return parser


def _run_analyze(args: argparse.Namespace) -> None:
    """Execute the analyze command."""
    settings = Settings()
    setup_logging("DEBUG" if args.verbose else settings.log_level)

    source_path = Path(args.source)
    if not source_path.is_file():
        print(f"Error: {source_path} does not exist", file=sys.stderr)
        sys.exit(1)

    consumer = {
        "validate": Consumer.VALIDATE,
        "validify": Consumer.VALIDIFY,
    }.get(args.consumer or "")

    try:
        results = analyze_source(
            source_path.read_text(encoding="utf-8"),
            file_path=str(source_path),
            struct_name=args.struct_name,
            consumer=consumer,
            settings=settings,
        )
    except (AnalysisError, SourceParseError) as exc:
        print(f"{exc.span}: error: {exc.message}", file=sys.stderr)
        sys.exit(1)
    except LookupError as exc:
        print(f"Error: {exc.args[0]}", file=sys.stderr)
        sys.exit(1)
    except GrammarUnavailableError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    if args.format == "json":
        print(
            json.dumps(
                [r.model_dump(mode="json") for r in results], indent=2
            )
        )
    else:
        print(_format_text(results))


def _format_text(results: list[StructAnalysis]) -> str:
    """Human-readable summary of the descriptors."""
    lines: list[str] = []
    for result in results:
        lines.append(f"{result.name} ({result.consumer})")
        for fld in result.fields:
            renamed = (
                f" [as {fld.original_name}]"
                if fld.original_name != fld.name
                else ""
            )
            lines.append(f"  {fld.name}: {fld.field_type.text}{renamed}")
            for rule in fld.validations:
                details = [f"{k}={p.value}" for k, p in rule.params.items()]
                if rule.code is not None:
                    details.append(f"code={rule.code}")
                if rule.message is not None:
                    details.append(f"message={rule.message!r}")
                lines.append(
                    f"    validate {rule.kind} {' '.join(details)}".rstrip()
                )
            for mod in fld.modifiers:
                details = [f"{k}={p.value}" for k, p in mod.params.items()]
                lines.append(
                    f"    modify {mod.kind} {' '.join(details)}".rstrip()
                )
    return "\n".join(lines)


if __name__ == "__main__":
    main()
