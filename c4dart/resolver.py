from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional

from .errors import MalformedDeclarationError
from .model import FUNCTION_KINDS, CType, Decl, TypeKind

logger = logging.getLogger(__name__)

UNSUPPORTED_TYPE = "<unsupported_type_kind:{kind}>"
ANONYMOUS_RECORD = "<unsupported_anonymous_record>"

NATIVE_TYPES: Dict[TypeKind, str] = {
    TypeKind.VOID: "Void",
    TypeKind.BOOL: "Uint8",
    TypeKind.SCHAR: "Int8",
    TypeKind.CHAR_S: "Int8",
    TypeKind.UCHAR: "Uint8",
    TypeKind.CHAR_U: "Uint8",
    TypeKind.SHORT: "Int16",
    TypeKind.USHORT: "Uint16",
    TypeKind.INT: "Int32",
    TypeKind.UINT: "Uint32",
    TypeKind.LONG: "Int64",
    TypeKind.ULONG: "Uint64",
    TypeKind.LONGLONG: "Int64",
    TypeKind.ULONGLONG: "Uint64",
    TypeKind.FLOAT: "Float",
    TypeKind.DOUBLE: "Double",
}

LOGICAL_TYPES: Dict[TypeKind, str] = {
    TypeKind.VOID: "void",
    TypeKind.BOOL: "int",
    TypeKind.SCHAR: "int",
    TypeKind.CHAR_S: "int",
    TypeKind.UCHAR: "int",
    TypeKind.CHAR_U: "int",
    TypeKind.SHORT: "int",
    TypeKind.USHORT: "int",
    TypeKind.INT: "int",
    TypeKind.UINT: "int",
    TypeKind.LONG: "int",
    TypeKind.ULONG: "int",
    TypeKind.LONGLONG: "int",
    TypeKind.ULONGLONG: "int",
    TypeKind.FLOAT: "double",
    TypeKind.DOUBLE: "double",
}


def _enum_integer_type(t: CType) -> Optional[CType]:
    decl = t.declaration
    if decl is None or decl.underlying_type is None:
        return None
    return decl.underlying_type


def scalar_type(t: CType, native: bool) -> Optional[str]:
    canonical = t.canonical
    kind = canonical.kind

    if kind == TypeKind.ENUM:
        integer = _enum_integer_type(canonical)
        if integer is not None and integer.canonical.kind != TypeKind.ENUM:
            return scalar_type(integer, native)
        kind = TypeKind.INT

    table = NATIVE_TYPES if native else LOGICAL_TYPES
    return table.get(kind)


def field_annotation(t: CType) -> str:
    native = scalar_type(t, True)
    return f"@{native}()" if native else ""


def record_name(typenames: Mapping[str, str], t: CType) -> str:
    decl = t.declaration or t.canonical.declaration
    name = decl.name if decl is not None else None
    if not name:
        logger.warning("Anonymous record type: `%s`", t.spelling)
        return ANONYMOUS_RECORD

    xname = typenames.get(name)
    if xname is None:
        logger.error("Record `%s` referenced before it was translated", name)
        return name
    return xname


def resolve_type(typenames: Mapping[str, str], t: CType, native: bool) -> str:
    canonical = t.canonical

    logger.debug("Translate type: `%s` canonical: %s", t.spelling, canonical.kind_name)

    scalar = scalar_type(t, native)
    if scalar is not None:
        return scalar

    kind = canonical.kind

    if kind == TypeKind.POINTER:
        pointee = t.pointee if t.pointee is not None else canonical.pointee
        if pointee is None:
            logger.warning("Pointer type without pointee: `%s`", t.spelling)
            return UNSUPPORTED_TYPE.format(kind=canonical.kind_name)
        return f"Pointer<{resolve_type(typenames, pointee, True)}>"

    if kind == TypeKind.RECORD:
        return record_name(typenames, t)

    if kind in FUNCTION_KINDS:
        cb = FuncDef.from_prototype(typenames, canonical)
        return f"NativeFunction<{cb.native}>"

    logger.warning("Unsupported type kind: %s", canonical.kind_name)
    return UNSUPPORTED_TYPE.format(kind=canonical.kind_name)


def field_type(typenames: Mapping[str, str], t: CType) -> str:
    scalar = scalar_type(t, False)
    if scalar is not None:
        return scalar
    if t.canonical.kind in (TypeKind.POINTER, TypeKind.RECORD):
        return resolve_type(typenames, t, False)
    logger.warning("Unsupported field type kind: %s", t.canonical.kind_name)
    return ""


def resolve_types(typenames: Mapping[str, str], types: Iterable[CType], native: bool) -> str:
    return ", ".join(resolve_type(typenames, t, native) for t in types)


def resolve_args(typenames: Mapping[str, str], args: Iterable[Decl], native: bool) -> str:
    out: List[str] = []
    for a in args:
        if a.type is None:
            raise MalformedDeclarationError(a.name, "argument without a type")
        t = resolve_type(typenames, a.type, native)
        out.append(f"{t} {a.name}" if a.name else t)
    return ", ".join(out)


@dataclass
class FuncDef:
    name: Optional[str]
    comment: Optional[str]
    native: str
    logical: str

    @classmethod
    def from_function(cls, typenames: Mapping[str, str], decl: Decl) -> FuncDef:
        res = decl.result_type
        args = decl.arguments or []

        native_res = resolve_type(typenames, res, True) if res is not None else "Void"
        logical_res = resolve_type(typenames, res, False) if res is not None else "void"

        return cls(
            name=decl.name,
            comment=decl.comment,
            native=f"{native_res} Function({resolve_args(typenames, args, True)})",
            logical=f"{logical_res} Function({resolve_args(typenames, args, False)})",
        )

    @classmethod
    def from_prototype(
        cls,
        typenames: Mapping[str, str],
        proto: CType,
        name: Optional[str] = None,
        comment: Optional[str] = None,
    ) -> FuncDef:
        res = proto.result

        native_res = resolve_type(typenames, res, True) if res is not None else "Void"
        logical_res = resolve_type(typenames, res, False) if res is not None else "void"

        return cls(
            name=name,
            comment=comment,
            native=f"{native_res} Function({resolve_types(typenames, proto.arguments, True)})",
            logical=f"{logical_res} Function({resolve_types(typenames, proto.arguments, False)})",
        )
