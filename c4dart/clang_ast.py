from __future__ import annotations

import logging
import os
from typing import Dict, List, Optional, Sequence, Tuple

from clang import cindex
from clang.cindex import Cursor, CursorKind, TranslationUnitLoadError

from .errors import GenerationError, InputOutputError
from .model import FUNCTION_KINDS, CType, Decl, DeclKind, TypeKind

logger = logging.getLogger(__name__)

_DECL_KINDS: Dict[CursorKind, DeclKind] = {
    CursorKind.TRANSLATION_UNIT: DeclKind.TRANSLATION_UNIT,
    CursorKind.ENUM_DECL: DeclKind.ENUM,
    CursorKind.STRUCT_DECL: DeclKind.STRUCT,
    CursorKind.TYPEDEF_DECL: DeclKind.TYPEDEF,
    CursorKind.FUNCTION_DECL: DeclKind.FUNCTION,
    CursorKind.FIELD_DECL: DeclKind.FIELD,
    CursorKind.ENUM_CONSTANT_DECL: DeclKind.ENUM_CONSTANT,
    CursorKind.PARM_DECL: DeclKind.PARAM,
}

_ANONYMOUS_MARKERS = ("unnamed at", "anonymous at")


def try_set_libclang() -> None:
    if cindex.Config.loaded:
        return
    lib_file = os.environ.get("LIBCLANG_FILE")
    lib_path = os.environ.get("LIBCLANG_PATH")
    if lib_file and os.path.exists(lib_file):
        cindex.Config.set_library_file(lib_file)
    elif lib_path and os.path.isdir(lib_path):
        cindex.Config.set_library_path(lib_path)


def decl_name(cur: Cursor) -> Optional[str]:
    s = (cur.spelling or "").strip()
    if not s or any(m in s for m in _ANONYMOUS_MARKERS):
        return None
    return s


class AstBuilder:
    """Converts a libclang cursor tree into `Decl`/`CType` values.

    Declarations are memoized by cursor hash so that records reached again
    through their own fields map to the same `Decl`.
    """

    def __init__(self) -> None:
        self._decls: Dict[Tuple[int, str, str], Decl] = {}

    def decl(self, cur: Cursor) -> Decl:
        if cur.kind == CursorKind.STRUCT_DECL:
            definition = cur.get_definition()
            if definition is not None:
                cur = definition

        key = (cur.hash, cur.kind.name, cur.spelling or "")
        cached = self._decls.get(key)
        if cached is not None:
            return cached

        kind = _DECL_KINDS.get(cur.kind, DeclKind.UNSUPPORTED)
        d = Decl(kind=kind, name=decl_name(cur), comment=cur.raw_comment, raw_kind=cur.kind.name)
        self._decls[key] = d

        if kind == DeclKind.TRANSLATION_UNIT:
            d.children = [self.decl(c) for c in cur.get_children()]
        elif kind == DeclKind.ENUM:
            d.underlying_type = self.type(cur.enum_type)
            d.children = [self.decl(c) for c in cur.get_children() if c.kind == CursorKind.ENUM_CONSTANT_DECL]
        elif kind == DeclKind.ENUM_CONSTANT:
            d.enum_value = cur.enum_value
        elif kind == DeclKind.STRUCT:
            d.children = [self.decl(c) for c in cur.get_children() if c.kind == CursorKind.FIELD_DECL]
        elif kind == DeclKind.TYPEDEF:
            d.underlying_type = self.type(cur.underlying_typedef_type)
        elif kind == DeclKind.FUNCTION:
            d.type = self.type(cur.type)
            d.result_type = self.type(cur.result_type)
            d.arguments = [self.decl(a) for a in cur.get_arguments()]
        elif kind in (DeclKind.FIELD, DeclKind.PARAM):
            d.type = self.type(cur.type)

        return d

    def type(self, t: cindex.Type, canonical: bool = False) -> CType:
        raw = t.kind.name
        kind = TypeKind.__members__.get(raw, TypeKind.UNSUPPORTED)
        ct = CType(kind=kind, spelling=t.spelling, raw_kind=raw)

        if not canonical:
            canon = t.get_canonical()
            if canon != t:
                ct.canonical_type = self.type(canon, canonical=True)

        if kind == TypeKind.POINTER:
            ct.pointee = self.type(t.get_pointee())
        elif kind in FUNCTION_KINDS:
            ct.result = self.type(t.get_result())
            if kind == TypeKind.FUNCTIONPROTO:
                ct.arguments = [self.type(a) for a in t.argument_types()]

        decl_cur = t.get_declaration()
        if decl_cur is not None and decl_cur.kind != CursorKind.NO_DECL_FOUND:
            ct.declaration = self.decl(decl_cur)

        return ct


def log_diagnostics(tu: cindex.TranslationUnit) -> None:
    for diag in tu.diagnostics:
        loc = diag.location
        where = f"{loc.file}:{loc.line}:{loc.column}" if loc.file else "<unknown>"
        if diag.severity >= cindex.Diagnostic.Error:
            logger.error("clang: %s: %s", where, diag.spelling)
        elif diag.severity >= cindex.Diagnostic.Warning:
            logger.warning("clang: %s: %s", where, diag.spelling)


def parse_header(path: str, args: Sequence[str] = ()) -> Decl:
    if not os.path.isfile(path) or not os.access(path, os.R_OK):
        raise InputOutputError(f"cannot read C header: {path}")

    try_set_libclang()

    clang_args: List[str] = ["-xc"] + list(args)
    logger.debug("Parse `%s` with %s", path, clang_args)

    idx = cindex.Index.create()
    try:
        tu = idx.parse(path, args=clang_args)
    except TranslationUnitLoadError as exc:
        raise GenerationError(f"clang failed to parse {path}: {exc}") from exc

    log_diagnostics(tu)
    return AstBuilder().decl(tu.cursor)
