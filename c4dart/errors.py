from __future__ import annotations

from typing import Optional


class C4DartError(Exception):
    exit_code = 1


class GenerationError(C4DartError):
    exit_code = 1


class MalformedDeclarationError(GenerationError):
    def __init__(self, name: Optional[str], msg: str) -> None:
        super().__init__(f"{name or '<anonymous>'}: {msg}")
        self.name = name
        self.msg = msg


class InputOutputError(C4DartError):
    exit_code = 3


class IncludeDetectionError(C4DartError):
    exit_code = 4
