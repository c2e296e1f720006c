"""
Declaration translator: C declarations to `dart:ffi` source.

One `Translator` holds the whole state of a run (export registry, type name
map, collected functions and callbacks, output tree). Top-level
declarations are visited in two passes:

1. functions; their result and argument types pull in every struct, enum and
   typedef they reference, each translated once, right before first use;
2. the remaining in-scope enums, structs and typedefs, in source order.

The library class binding all collected functions and callbacks closes the
output.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Set, Tuple

from .coder import Coder
from .errors import MalformedDeclarationError
from .model import FUNCTION_KINDS, CType, Decl, DeclKind, TypeKind
from .naming import NamePolicy
from .options import Options
from .resolver import FuncDef, field_annotation, field_type, scalar_type

logger = logging.getLogger(__name__)

_TYPE_DECLS = (DeclKind.ENUM, DeclKind.STRUCT, DeclKind.TYPEDEF)


def without_prefix(src: str, pfx: str) -> str:
    if pfx and src.lower().startswith(pfx.lower()):
        rest = src[len(pfx):].lstrip("_")
        # Keep the full name rather than produce an invalid identifier.
        if rest and not rest[0].isdigit():
            return rest
    return src


def function_pointee(t: CType) -> Optional[CType]:
    canonical = t.canonical
    if canonical.kind != TypeKind.POINTER or canonical.pointee is None:
        return None
    pointee = canonical.pointee.canonical
    return pointee if pointee.kind in FUNCTION_KINDS else None


class Translator:
    def __init__(self, options: Options) -> None:
        self.options = options
        self.names = NamePolicy(options.names_match, options.names_replace)
        self.typenames: Dict[str, str] = {}
        self.calls: List[Tuple[str, FuncDef]] = []
        self.callbacks: List[Tuple[str, FuncDef]] = []
        self.coder = Coder()
        self._functions: Set[str] = set()
        # Class emitted for each record or enum, anonymous ones included.
        self._classes: Dict[Decl, str] = {}

    def translate(self, root: Decl) -> Coder:
        self.coder.line("import 'dart:ffi';")
        self.coder.line("")

        for entity in root.children:
            if entity.kind == DeclKind.FUNCTION and self.in_scope(entity):
                self.parse_function(entity)

        for entity in root.children:
            if entity.kind in _TYPE_DECLS and self.in_scope(entity):
                self.export_decl(entity)

        self.make_class(self.options.class_name)
        return self.coder

    def in_scope(self, entity: Decl) -> bool:
        return bool(entity.name) and self.names.matches(entity.name)

    def parse_function(self, entity: Decl) -> None:
        name = entity.name
        logger.info("Parse function: `%s`", name)

        if entity.result_type is None:
            raise MalformedDeclarationError(name, "function without a result type")
        if entity.arguments is None:
            raise MalformedDeclarationError(name, "function without an argument list")

        if name in self._functions:
            logger.debug("Function `%s` already bound", name)
            return
        self._functions.add(name)

        xname = self.names.rewrite(name)

        self.parse_type(entity.result_type)

        num = 0
        for arg in entity.arguments:
            if arg.type is None:
                raise MalformedDeclarationError(name, f"argument `{arg.name or num}` without a type")

            proto = function_pointee(arg.type)
            if proto is not None:
                arg_name = arg.name
                if not arg_name:
                    arg_name = f"cb{num}"
                    num += 1
                self.parse_prototype(proto)
                self.callbacks.append((f"{xname}_{arg_name}", FuncDef.from_prototype(self.typenames, proto)))
                continue

            self.parse_type(arg.type)

        self.calls.append((xname, FuncDef.from_function(self.typenames, entity)))

    def parse_prototype(self, proto: CType) -> None:
        if proto.result is not None:
            self.parse_type(proto.result)
        for t in proto.arguments:
            self.parse_type(t)

    def parse_type(self, t: CType) -> None:
        if t.kind == TypeKind.POINTER:
            if t.pointee is not None:
                self.parse_type(t.pointee)
            return

        if t.kind in FUNCTION_KINDS:
            self.parse_prototype(t)
            return

        decl = t.declaration
        if decl is None or not decl.name:
            return

        logger.debug("Parse type: `%s` declared by `%s`", t.spelling, decl.name)
        self.export_decl(decl)

    def export_decl(self, entity: Decl) -> None:
        name = entity.name
        if not self.names.export_once(name):
            return

        xname = self.names.rewrite(name)

        if entity.kind == DeclKind.ENUM:
            self.typenames[name] = xname
            self._classes[entity] = xname
            self.translate_enum(name, xname, entity, entity.comment)
        elif entity.kind == DeclKind.STRUCT:
            self.typenames[name] = xname
            self._classes[entity] = xname
            self.translate_struct(name, xname, entity, entity.comment)
        elif entity.kind == DeclKind.TYPEDEF:
            self.translate_typedef(name, xname, entity)
        else:
            logger.warning("Unparsed type declaration %s: `%s`", entity.kind_name, name)

    def translate_enum(self, prefix: str, xname: str, entity: Decl, comment: Optional[str]) -> None:
        logger.info("Translate enum: `%s` as `%s`", prefix, xname)

        body = Coder()
        for item in entity.children:
            if item.kind != DeclKind.ENUM_CONSTANT:
                continue
            if not item.name or item.enum_value is None:
                raise MalformedDeclarationError(prefix, "enum constant without a name or value")
            body.line(f"static const {without_prefix(item.name, prefix)} = {item.enum_value};")

        if comment:
            self.coder.comment(comment)
        self.coder.block(f"class {xname}", body)

    def translate_struct(self, name: str, xname: str, entity: Decl, comment: Optional[str]) -> None:
        logger.info("Translate struct: `%s` as `%s`", name, xname)

        fields = [f for f in entity.children if f.kind == DeclKind.FIELD]
        for f in fields:
            if f.type is not None:
                self.parse_type(f.type)

        body = Coder()
        for f in fields:
            self.translate_field(body, name, f)

        if comment:
            self.coder.comment(comment)
        self.coder.block(f"class {xname} extends Struct", body)

    def translate_field(self, coder: Coder, owner: str, entity: Decl) -> None:
        if not entity.name:
            raise MalformedDeclarationError(owner, "struct field without a name")
        if entity.type is None:
            raise MalformedDeclarationError(owner, f"field `{entity.name}` without a type")

        logger.info("Translate field: `%s` of type `%s`", entity.name, entity.type.spelling)

        parts = (field_annotation(entity.type), field_type(self.typenames, entity.type), entity.name)

        if entity.comment:
            coder.comment(entity.comment)
        coder.line(" ".join(p for p in parts if p) + ";")

    def translate_typedef(self, name: str, xname: str, entity: Decl) -> None:
        underlying = entity.underlying_type
        if underlying is None:
            raise MalformedDeclarationError(name, "typedef without an underlying type")

        canonical = underlying.canonical
        kind = canonical.kind
        target = canonical.declaration

        if kind in (TypeKind.RECORD, TypeKind.ENUM) and target is not None:
            comment = entity.comment or target.comment

            existing = self._classes.get(target)
            if existing is None and target.name:
                existing = self.typenames.get(target.name)
            if existing is not None:
                logger.info("Translate typedef alias: `%s` as `%s`", name, xname)
                self.typenames[name] = xname
                if comment:
                    self.coder.comment(comment)
                self.coder.line(f"typedef {xname} = {existing};")
                return

            self.typenames[name] = xname
            self._classes[target] = xname
            # The tag name now resolves to the class emitted for the typedef.
            if target.name and self.names.export_once(target.name):
                self.typenames[target.name] = xname

            if kind == TypeKind.RECORD:
                logger.info("Translate typedef record: `%s` as `%s`", name, xname)
                self.translate_struct(name, xname, target, comment)
            else:
                logger.info("Translate typedef enum: `%s` as `%s`", name, xname)
                self.translate_enum(target.name or name, xname, target, comment)
            return

        proto = function_pointee(underlying)
        if proto is None and kind in FUNCTION_KINDS:
            proto = canonical

        if proto is not None:
            logger.info("Translate typedef callback: `%s` as `%s`", name, xname)
            self.parse_prototype(proto)
            cb = FuncDef.from_prototype(self.typenames, proto, name=name, comment=entity.comment)
            if entity.comment:
                self.coder.comment(entity.comment)
            self.coder.line(f"typedef {xname}Native = {cb.native};")
            self.coder.line(f"typedef {xname} = {cb.logical};")
            self.callbacks.append((xname, cb))
            return

        self.parse_type(underlying)

        if kind == TypeKind.POINTER or scalar_type(canonical, True) is not None:
            logger.debug("Typedef `%s` resolves through its canonical type %s", name, canonical.kind_name)
        else:
            logger.warning("Untranslated typedef %s: `%s` as `%s`", canonical.kind_name, name, xname)

    def make_class(self, name: str) -> None:
        body = Coder()

        body.comment("Callbacks")
        for cb_name, cb in self.callbacks:
            if cb.comment:
                body.comment(cb.comment)
            body.line(f"final Pointer<NativeFunction<{cb.native}>> _{cb_name};")

        body.comment("Functions")
        for fn_name, fn in self.calls:
            if fn.comment:
                body.comment(fn.comment)
            body.line(f"final {fn.logical} _{fn_name};")

        body.comment("Constructor")
        body.line(f"{name}(")
        body.line("    DynamicLibrary dylib")
        for cb_name, _ in self.callbacks:
            body.line(f"  , this._{cb_name}")
        body.line(")")

        body.comment("Init functions")
        for i, (fn_name, fn) in enumerate(self.calls):
            sep = ":" if i == 0 else ","
            body.line(f"{sep} _{fn_name} = dylib.lookup<NativeFunction<{fn.native}>>('{fn.name}').asFunction()")
        body.line("{}")

        self.coder.comment("Library class")
        self.coder.block(f"class {name}", body)


def translate(options: Options, root: Decl) -> Coder:
    return Translator(options).translate(root)
