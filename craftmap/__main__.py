"""
craftmap entry point.

Usage:
    craftmap file.gcode ...              # annotate in place
    craftmap -f900 -l2 file.gcode        # short-segment feedrate / length
    python -m craftmap --config my.json file.gcode

In KISSlicer, put it on the Printer/Firmware tab post-process line:

    craftmap "<FILE>"
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from pydantic import ValidationError

from craftmap import __version__
from craftmap.config import load_settings
from craftmap.gcode.pipeline import run_batch


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="craftmap",
        description="Annotate KISSlicer G-code with CraftWare segment types "
                    "and normalize short-segment feedrates (in place).",
    )
    p.add_argument("files", nargs="*", metavar="gcode_file", help="G-code file(s) to rewrite in place")
    p.add_argument("-f", dest="min_feedrate", type=float, default=None, metavar="#",
                   help="feedrate for short segments (default 900)")
    p.add_argument("-l", dest="min_length", type=float, default=None, metavar="#",
                   help="length of short segments (default 2)")
    p.add_argument("--config", default=None, help="JSON settings file layered over the defaults")
    p.add_argument("--no-reprocess", dest="reprocess", action="store_false", default=None,
                   help="keep existing ;segType: lines instead of replacing them")
    p.add_argument("--strict", action="store_true",
                   help="exit with status 1 if any file fails")
    p.add_argument("-v", "--verbose", action="count", default=0, help="more output (-vv for debug)")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p


def _setup_logging(verbosity: int) -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root = logging.getLogger("craftmap")
    root.handlers[:] = [handler]
    root.propagate = False
    root.setLevel(logging.DEBUG if verbosity > 1 else logging.INFO if verbosity else logging.WARNING)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_intermixed_args(argv)

    if not args.files:
        parser.print_help(sys.stdout)
        return 1

    _setup_logging(args.verbose)

    try:
        settings = load_settings(
            args.config,
            min_feedrate=args.min_feedrate,
            min_length=args.min_length,
            reprocess=args.reprocess,
        )
    except (OSError, json.JSONDecodeError, ValidationError) as exc:
        print(f"Invalid settings: {exc}")
        return 2

    batch = run_batch(args.files, settings)
    if args.strict and not batch.ok:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
