from __future__ import annotations

import logging
import subprocess
from typing import List, Sequence

from .errors import IncludeDetectionError

logger = logging.getLogger(__name__)

SEARCH_START = "#include <...> search starts here:"
SEARCH_END = "End of search list."


def parse_search_paths(text: str) -> List[str]:
    lines = iter(text.splitlines())

    for ln in lines:
        if ln.strip() == SEARCH_START:
            break
    else:
        raise IncludeDetectionError("include search list not found in compiler output")

    paths: List[str] = []
    for ln in lines:
        if ln.strip() == SEARCH_END:
            return paths
        # clang marks framework directories on macOS.
        path = ln.strip()
        if path.endswith("(framework directory)"):
            path = path[: -len("(framework directory)")].strip()
        paths.append(path)

    raise IncludeDetectionError("include search list is not terminated in compiler output")


def system_include_paths(clang: str = "clang") -> List[str]:
    cmd = [clang, "-E", "-xc", "-v", "-"]
    logger.debug("Detect system include paths: %s", " ".join(cmd))
    try:
        p = subprocess.run(cmd, stdin=subprocess.DEVNULL, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True)
    except OSError as exc:
        raise IncludeDetectionError(f"cannot run {clang}: {exc}") from exc
    if p.returncode != 0:
        raise IncludeDetectionError(f"{clang} failed:\n{p.stderr}")

    paths = parse_search_paths(p.stderr)
    logger.info("System include paths: %s", paths)
    return paths


def include_args(system_paths: Sequence[str], include_paths: Sequence[str]) -> List[str]:
    args = [f"-isystem{p}" for p in system_paths]
    args += [f"-I{p}" for p in include_paths]
    return args
