from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Pattern

DEFAULT_MATCH = ".*"
DEFAULT_REPLACE = "$0"


@dataclass
class Options:
    class_name: str
    names_match: Pattern[str] = field(default_factory=lambda: re.compile(DEFAULT_MATCH))
    names_replace: str = DEFAULT_REPLACE
    include_paths: List[str] = field(default_factory=list)
    detect_isystem: bool = True
    clang: str = "clang"
