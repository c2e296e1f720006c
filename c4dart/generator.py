from __future__ import annotations

import logging
from typing import List, TextIO

from . import __version__
from .clang_ast import parse_header
from .errors import InputOutputError
from .includes import include_args, system_include_paths
from .model import Decl
from .options import Options
from .translator import translate

logger = logging.getLogger(__name__)

PROGRAM = "c4dart"
BANNER = "/* This file was generated using {program} v{version} tool and should not be modified manually. */"


def generate(options: Options, root: Decl) -> str:
    coder = translate(options, root)
    banner = BANNER.format(program=PROGRAM, version=__version__)
    return f"{banner}\n{coder.render()}\n"


def clang_args(options: Options) -> List[str]:
    system_paths = system_include_paths(options.clang) if options.detect_isystem else []
    return include_args(system_paths, options.include_paths)


def render_header(options: Options, input_path: str) -> str:
    root = parse_header(input_path, clang_args(options))
    return generate(options, root)


def translate_header(options: Options, input_path: str, output: TextIO) -> None:
    text = render_header(options, input_path)
    try:
        output.write(text)
    except OSError as exc:
        raise InputOutputError(f"cannot write output: {exc}") from exc


def write_output(path: str, text: str) -> None:
    try:
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
    except OSError as exc:
        raise InputOutputError(f"cannot write {path}: {exc}") from exc
    logger.info("Wrote %s", path)
