#!/usr/bin/env python3
"""
Staff Directory Builder

Reads a JSON array of {firstName, email} entries and writes the generated
staff directory the server loads at startup.

Usage:
    python -m staff_relay.scripts.build_directory data/staff.json --output staff_relay/data/staff.py
    python -m staff_relay.scripts.build_directory data/staff.json --format json

Environment variables (or .env file):
    HASH_SECRET - identifier key, must match the running server (or pass --secret)

Exit codes:
    0 - directory written
    1 - input rejected (bad entry, invalid email, duplicate identifier)
    2 - usage error
"""
import argparse
import json
import os
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from staff_relay.core.exceptions import DirectoryError
from staff_relay.services.directory import (
    build_directory,
    read_entries,
    render_json,
    render_python_module,
)

RENDERERS = {
    "python": render_python_module,
    "json": render_json,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate the staff directory from a JSON list of staff entries"
    )
    parser.add_argument("source", type=Path, help="JSON array of {firstName, email} objects")
    parser.add_argument(
        "--secret",
        default=None,
        help="Identifier key (default: HASH_SECRET from the environment or .env)",
    )
    parser.add_argument(
        "--format",
        choices=sorted(RENDERERS),
        default="python",
        help="Output format (default: python)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="File to write (default: stdout)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    secret = args.secret or os.environ.get("HASH_SECRET")
    if not secret:
        parser.error("no secret given: pass --secret or set HASH_SECRET")

    try:
        entries = read_entries(args.source)
        directory = build_directory(entries, secret)
    except DirectoryError as e:
        print(f"ERROR: {e.message}", file=sys.stderr)
        return 1
    except json.JSONDecodeError as e:
        print(f"ERROR: {args.source} is not valid JSON: {e.msg} (line {e.lineno})", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"ERROR: cannot read {args.source}: {e.strerror}", file=sys.stderr)
        return 1

    output = RENDERERS[args.format](directory)

    if args.output:
        args.output.write_text(output, encoding="utf-8")
    else:
        sys.stdout.write(output)

    print(f"Generated {len(directory)} staff entries", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
