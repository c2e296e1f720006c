"""
Tree-shaped source text builder.

A `Coder` collects lines, nested blocks and comments; indentation is only
decided when the tree is rendered, four spaces per nesting level.
"""

from __future__ import annotations

import io
from dataclasses import dataclass
from typing import Callable, List, TextIO, Tuple, Union

INDENT = "    "

_LINE_MARKERS = ("///", "//!", "//")
_DOC_MARKERS = ("*", "!")


@dataclass(frozen=True)
class Line:
    text: str


@dataclass(frozen=True)
class Comment:
    text: str


@dataclass(frozen=True)
class Block:
    header: str
    chunks: Tuple["Chunk", ...] = ()


Chunk = Union[Line, Block, Comment]


class Coder:
    def __init__(self) -> None:
        self.chunks: List[Chunk] = []

    def line(self, src: str = "") -> None:
        self.chunks.append(Line(src))

    def block(self, header: str, body: Union[Coder, Callable[[Coder], None], None] = None) -> None:
        """Append `header` with a nested body.

        `body` is either a finished `Coder`, whose chunks are copied in, or a
        callable that fills a fresh child coder.
        """
        if isinstance(body, Coder):
            child = body
        else:
            child = Coder()
            if body is not None:
                body(child)
        self.chunks.append(Block(header, tuple(child.chunks)))

    def comment(self, src: str) -> None:
        self.chunks.append(Comment(unroll_comment(src)))

    def format(self, out: TextIO, level: int = 0) -> None:
        for chunk in self.chunks:
            format_chunk(out, chunk, level)

    def render(self, level: int = 0) -> str:
        buf = io.StringIO()
        self.format(buf, level)
        return buf.getvalue()

    def __str__(self) -> str:
        return self.render()


def format_chunk(out: TextIO, chunk: Chunk, level: int) -> None:
    pad = INDENT * level

    if isinstance(chunk, Line):
        out.write(f"{pad}{chunk.text}\n" if chunk.text else "\n")
    elif isinstance(chunk, Block):
        if not chunk.chunks:
            out.write(f"{pad}{chunk.header} {{}}\n")
            return
        out.write(f"{pad}{chunk.header} {{\n")
        for sub in chunk.chunks:
            format_chunk(out, sub, level + 1)
        out.write(f"{pad}}}\n")
    elif isinstance(chunk, Comment):
        lines = chunk.text.split("\n")
        if len(lines) == 1:
            out.write(f"{pad}/* {chunk.text} */\n" if chunk.text else f"{pad}/* */\n")
            return
        out.write(f"{pad}/* {lines[0]}\n")
        for ln in lines[1:]:
            out.write(f"{pad} * {ln}\n" if ln else f"{pad} *\n")
        out.write(f"{pad} */\n")
    else:
        raise TypeError(f"unknown chunk: {chunk!r}")


def _strip_line_marker(line: str) -> str:
    s = line.lstrip()
    for m in _LINE_MARKERS:
        if s.startswith(m):
            return s[len(m):]
    return line


def _strip_star(line: str) -> str:
    s = line.lstrip()
    if not s.startswith("*"):
        return line
    s = s[1:]
    return s[1:] if s.startswith(" ") else s


def unroll_comment(src: str) -> str:
    src = src.strip()
    starred = False

    if src.startswith("//"):
        src = "\n".join(_strip_line_marker(ln) for ln in src.splitlines())
    elif src.startswith("/*") and src.endswith("*/") and len(src) > 3:
        src = src[2:-2]
        if src[:1] in _DOC_MARKERS:
            src = src[1:]
        starred = True

    lines = [ln.rstrip() for ln in src.strip().splitlines()]
    if starred:
        # ` * ` continuation markers of Javadoc style blocks.
        lines = [_strip_star(ln) for ln in lines]
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    if not lines:
        return ""

    # Blank lines do not count towards the shared indentation.
    widths = [len(ln) - len(ln.lstrip()) for ln in lines[1:] if ln.strip()]
    cut = min(widths) if widths else 0
    rest = [ln[cut:] if ln.strip() else "" for ln in lines[1:]]
    return "\n".join([lines[0].strip()] + rest)
