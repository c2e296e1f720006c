from __future__ import annotations

import argparse
import logging
import os
import re
import sys
from typing import Dict, List, Optional, Pattern

from . import __version__
from .errors import C4DartError
from .generator import render_header, write_output
from .naming import compile_template
from .options import DEFAULT_MATCH, DEFAULT_REPLACE, Options

LOG_LEVELS: Dict[str, int] = {
    "off": logging.CRITICAL + 1,
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
    "trace": logging.DEBUG,
}


def log_level(value: str) -> int:
    level = LOG_LEVELS.get(value.strip().lower())
    if level is None:
        raise argparse.ArgumentTypeError(f"unknown log level: {value!r} (choose from {', '.join(LOG_LEVELS)})")
    return level


def name_pattern(value: str) -> Pattern[str]:
    try:
        return re.compile(value)
    except re.error as exc:
        raise argparse.ArgumentTypeError(f"invalid name pattern {value!r}: {exc}") from exc


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="c4dart", description="Generate dart:ffi bindings from a C header")
    ap.add_argument("-V", "--version", action="store_true", help="print version number")
    ap.add_argument("input", nargs="?", help="C header to parse")
    ap.add_argument("-o", "--output", help="Dart source output (stdout when omitted or '-')")
    ap.add_argument("-c", "--class", dest="class_name", help="Dart library class name")
    ap.add_argument(
        "-l", "--log", type=log_level, default=os.environ.get("LOG", "off"), help="log level (env LOG, default off)"
    )
    ap.add_argument(
        "-m",
        "--match",
        type=name_pattern,
        default=os.environ.get("MATCH", DEFAULT_MATCH),
        help="name match pattern (env MATCH)",
    )
    ap.add_argument(
        "-r",
        "--replace",
        default=os.environ.get("REPLACE", DEFAULT_REPLACE),
        help="name replace template: $1, $name, ${name} or $$ (env REPLACE)",
    )
    ap.add_argument("-I", "--include", action="append", default=[], help="extra include path (repeatable)")
    ap.add_argument(
        "--no-system-includes", action="store_true", help="do not ask the compiler for system include paths"
    )
    ap.add_argument("--clang", default="clang", help="clang executable used to detect system include paths")
    return ap


def setup_logging(level: int) -> None:
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def default_class_name(input_path: str, output: Optional[str]) -> Optional[str]:
    for path in (input_path, output):
        if path and path != "-":
            stem = os.path.splitext(os.path.basename(path))[0]
            if stem:
                return stem
    return None


def main(argv: Optional[List[str]] = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)

    if args.version:
        print(f"Version: {__version__}")
        return 0

    setup_logging(args.log)

    if not args.input:
        ap.error("missing input C header")

    class_name = args.class_name or default_class_name(args.input, args.output)
    if not class_name:
        ap.error("missing library class name")

    options = Options(
        class_name=class_name,
        names_match=args.match,
        names_replace=args.replace,
        include_paths=list(args.include),
        detect_isystem=not args.no_system_includes,
        clang=args.clang,
    )

    try:
        compile_template(options.names_match, options.names_replace)
        text = render_header(options, args.input)
        if args.output and args.output != "-":
            write_output(args.output, text)
        else:
            sys.stdout.write(text)
    except C4DartError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code

    return 0
