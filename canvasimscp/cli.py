#!/usr/bin/env python3
"""
cli.py - Import questions from a Canvas IMS Content Package.

Usage:
    canvasimscp <export.zip> [--output PATH] [--config PATH] [--quiet]

Options:
    --output    Write the question records as YAML to PATH (default: stdout)
    --config    Settings file (default: canvasimscp.yaml / $CANVASIMSCP_CONFIG)
    --quiet     Only print warnings and errors
"""

from __future__ import annotations

import argparse
import contextlib
import sys
from dataclasses import replace
from pathlib import Path

import yaml

from canvasimscp.config import load_settings
from canvasimscp.errors import ConfigurationError, Failure
from canvasimscp.format import CanvasImsCpFormat
from canvasimscp.icons import ERROR, SUCCESS, WARNING


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Import questions from a Canvas IMS Content Package"
    )
    parser.add_argument(
        "archive",
        type=Path,
        help="Path to the exported .zip package"
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        default=None,
        help="Write questions as YAML to this file (default: stdout)"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Settings file"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only print warnings and errors"
    )

    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.config)
    except ConfigurationError as e:
        print(f"{ERROR} {e}", file=sys.stderr)
        return 1

    if args.quiet:
        settings = replace(settings, verbose=False)

    if args.archive.suffix.lower() != ".zip":
        print(f"{WARNING} Warning: File does not have .zip extension", file=sys.stderr)

    fmt = CanvasImsCpFormat(settings=settings)
    # Keep stdout clean for the YAML output
    with contextlib.redirect_stdout(sys.stderr):
        result = fmt.import_questions(args.archive)

    if isinstance(result, Failure):
        print(f"{ERROR} Import failed: {result}", file=sys.stderr)
        return 1

    text = yaml.safe_dump(result, sort_keys=False, allow_unicode=True)
    if args.output is None:
        sys.stdout.write(text)
    else:
        args.output.write_text(text, encoding="utf-8")
        if not args.quiet:
            print(f"[import] {SUCCESS} Wrote {len(result)} question(s) to {args.output}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
