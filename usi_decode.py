"""
Purpose: Command-line decoder for captured USI engine output.
Usage: usi-decode engine.log            # one JSON object per input line
       some-engine | usi-decode --on-error skip
"""
from __future__ import annotations

import argparse
import json
import sys
from typing import Iterator, List, Optional

from usi_batch import LineAborted, decode_lines, result_json
from usi_settings import load_settings

PRINT_DBG = False

def _dbg(msg: str):
    # stderr: stdout carries the JSON stream
    if PRINT_DBG:
        print(f"[DBG] usi_decode: {msg}", file=sys.stderr, flush=True)


def _read_lines(paths: List[str]) -> Iterator[str]:
    if not paths:
        yield from sys.stdin
        return
    for path in paths:
        _dbg(f"reading {path}")
        with open(path, encoding="utf-8", errors="replace") as fh:
            yield from fh


def main(argv: Optional[List[str]] = None) -> int:
    global PRINT_DBG
    cfg = load_settings()

    parser = argparse.ArgumentParser(description="Decode USI engine output lines to JSON")
    parser.add_argument("files", nargs="*", help="Input files (default: stdin)")
    parser.add_argument("--on-error", choices=["skip", "report", "abort"], default=cfg.on_error,
                        help="What to do with lines that are not valid USI (default: %(default)s)")
    parser.add_argument("--debug", action="store_true", default=cfg.debug, help="Print breadcrumbs to stderr")
    args = parser.parse_args(argv)

    PRINT_DBG = args.debug
    _dbg(f"on_error={args.on_error} files={args.files or ['<stdin>']}")

    count = 0
    try:
        for result in decode_lines(_read_lines(args.files), args.on_error):
            print(json.dumps(result_json(result), separators=(",", ":")), flush=True)
            count += 1
    except LineAborted as e:
        print(f"usi-decode: {e}", file=sys.stderr)
        return 1
    _dbg(f"done, {count} results")
    return 0

if __name__ == "__main__":
    sys.exit(main())
