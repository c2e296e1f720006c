from __future__ import annotations

import re
from typing import Pattern, Set

from .errors import GenerationError

# `$1`, `$name`, `${name}` and `$$` replacement syntax. As with `${name}`, an
# unbraced reference takes the longest run of word characters: write `${1}_`,
# not `$1_`.
_RE_DOLLAR_GROUP = re.compile(r"\$(?:\{(\w+)\}|(\w+)|(\$))")

# Group references of a Python replacement template; other escapes are skipped.
_RE_TEMPLATE_REF = re.compile(r"\\(?:g<([^>]*)>|([1-9]\d?)|.)", re.S)


def convert_template(template: str) -> str:
    def repl(m: re.Match) -> str:
        if m.group(3):
            return "$"
        return f"\\g<{m.group(1) or m.group(2)}>"

    return _RE_DOLLAR_GROUP.sub(repl, template)


def compile_template(pattern: Pattern[str], template: str) -> str:
    """Convert `template` and check every group it refers to exists in `pattern`."""
    converted = convert_template(template)
    for m in _RE_TEMPLATE_REF.finditer(converted):
        ref = m.group(1) if m.group(1) is not None else m.group(2)
        if ref is None:
            continue
        known = int(ref) <= pattern.groups if ref.isdigit() else ref in pattern.groupindex
        if not known:
            raise GenerationError(
                f"replace template {template!r} refers to group {ref!r}, "
                f"which the match pattern {pattern.pattern!r} does not define"
            )
    return converted


class NamePolicy:
    def __init__(self, pattern: Pattern[str], template: str) -> None:
        self.pattern = pattern
        self.template = compile_template(pattern, template)
        self.exported: Set[str] = set()

    def matches(self, name: str) -> bool:
        return self.pattern.search(name) is not None

    def rewrite(self, name: str) -> str:
        try:
            return self.pattern.sub(self.template, name, count=1)
        except re.error as exc:
            raise GenerationError(f"cannot rewrite `{name}` with {self.template!r}: {exc}") from exc

    def export_once(self, name: str) -> bool:
        if name in self.exported:
            return False
        self.exported.add(name)
        return True
