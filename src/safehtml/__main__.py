"""Command line entry point: `python -m safehtml [file]`.

Reads an HTML fragment from a file (or stdin) and writes the sanitized
fragment to stdout.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path

from .policy import SanitizerConfig
from .processor import HTMLProcessor
from .sanitizer import Sanitizer


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="safehtml", description="Sanitize an HTML fragment.")
    parser.add_argument("input", nargs="?", default="-", help="HTML file to read ('-' for stdin)")
    parser.add_argument(
        "--config",
        type=Path,
        help="JSON file with a sanitizer config record (camelCase or snake_case keys)",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--floor",
        action="store_true",
        help="Apply only the policy-independent safety floor (remove_unsafe)",
    )
    mode.add_argument("--check", action="store_true", help="Print a structure report instead of sanitizing")
    mode.add_argument(
        "--metadata",
        action="store_true",
        help="Print the sanitization result, including removed names, as JSON",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log what each pass removed")
    return parser.parse_args(argv)


def _load_config(fail, path: Path | None) -> SanitizerConfig | None:
    if path is None:
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        fail(f"cannot read config {path}: {exc}")
    if not isinstance(data, dict):
        fail(f"config {path} must contain a JSON object")
    return SanitizerConfig.from_mapping(data)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format="%(levelname)s %(message)s")

    def fail(message: str) -> None:
        print(f"safehtml: error: {message}", file=sys.stderr)
        raise SystemExit(2)

    config = _load_config(fail, args.config)
    if args.input == "-":
        html = sys.stdin.read()
    else:
        try:
            html = Path(args.input).read_text(encoding="utf-8")
        except OSError as exc:
            fail(f"cannot read {args.input}: {exc}")

    processor = HTMLProcessor(Sanitizer(config))
    if args.check:
        report = processor.check_structure(html)
        print(json.dumps(asdict(report), indent=2))
        return 0 if report.is_valid else 1
    if args.metadata:
        print(json.dumps(asdict(processor.process_with_metadata(html)), indent=2))
        return 0
    if args.floor:
        sys.stdout.write(processor.sanitizer.remove_unsafe(html) + "\n")
        return 0

    sys.stdout.write(processor.process(html) + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
