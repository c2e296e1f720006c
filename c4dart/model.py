from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import List, Optional


class TypeKind(enum.Enum):
    VOID = "VOID"
    BOOL = "BOOL"
    CHAR_S = "CHAR_S"
    CHAR_U = "CHAR_U"
    SCHAR = "SCHAR"
    UCHAR = "UCHAR"
    SHORT = "SHORT"
    USHORT = "USHORT"
    INT = "INT"
    UINT = "UINT"
    LONG = "LONG"
    ULONG = "ULONG"
    LONGLONG = "LONGLONG"
    ULONGLONG = "ULONGLONG"
    FLOAT = "FLOAT"
    DOUBLE = "DOUBLE"
    POINTER = "POINTER"
    RECORD = "RECORD"
    ENUM = "ENUM"
    TYPEDEF = "TYPEDEF"
    ELABORATED = "ELABORATED"
    FUNCTIONPROTO = "FUNCTIONPROTO"
    FUNCTIONNOPROTO = "FUNCTIONNOPROTO"
    UNSUPPORTED = "UNSUPPORTED"


class DeclKind(enum.Enum):
    TRANSLATION_UNIT = "TRANSLATION_UNIT"
    ENUM = "ENUM"
    STRUCT = "STRUCT"
    TYPEDEF = "TYPEDEF"
    FUNCTION = "FUNCTION"
    FIELD = "FIELD"
    ENUM_CONSTANT = "ENUM_CONSTANT"
    PARAM = "PARAM"
    UNSUPPORTED = "UNSUPPORTED"


FUNCTION_KINDS = (TypeKind.FUNCTIONPROTO, TypeKind.FUNCTIONNOPROTO)


# Declarations and types form cycles through `CType.declaration`, so
# neither compares by value and the back reference stays out of repr().


@dataclass(eq=False)
class CType:
    kind: TypeKind
    spelling: str = ""
    raw_kind: str = ""
    # None when the type is already canonical.
    canonical_type: Optional[CType] = None
    pointee: Optional[CType] = None
    result: Optional[CType] = None
    arguments: List[CType] = field(default_factory=list)
    declaration: Optional[Decl] = field(default=None, repr=False)

    @property
    def canonical(self) -> CType:
        return self.canonical_type if self.canonical_type is not None else self

    @property
    def kind_name(self) -> str:
        return self.raw_kind or self.kind.value


@dataclass(eq=False)
class Decl:
    kind: DeclKind
    name: Optional[str] = None
    comment: Optional[str] = None
    type: Optional[CType] = None
    children: List[Decl] = field(default_factory=list)
    # FUNCTION only; None means the provider gave no result type / argument list.
    result_type: Optional[CType] = None
    arguments: Optional[List[Decl]] = None
    # ENUM_CONSTANT only.
    enum_value: Optional[int] = None
    # TYPEDEF: the aliased type. ENUM: the integer type backing the constants.
    underlying_type: Optional[CType] = None
    raw_kind: str = ""

    @property
    def kind_name(self) -> str:
        return self.raw_kind or self.kind.value
