from __future__ import annotations

import unittest

from factories import (
    CHAR,
    DOUBLE,
    FLOAT,
    INT,
    VOID,
    enum,
    enum_type,
    func,
    param,
    prim,
    proto,
    ptr,
    record,
    struct,
    typedef,
    typedef_type,
    unsupported,
)

from c4dart.errors import MalformedDeclarationError
from c4dart.model import CType, TypeKind
from c4dart.resolver import FuncDef, field_annotation, field_type, resolve_type


class ScalarTypeTests(unittest.TestCase):
    def test_native_and_logical_tables(self) -> None:
        cases = [
            (TypeKind.VOID, "Void", "void"),
            (TypeKind.BOOL, "Uint8", "int"),
            (TypeKind.CHAR_S, "Int8", "int"),
            (TypeKind.SCHAR, "Int8", "int"),
            (TypeKind.UCHAR, "Uint8", "int"),
            (TypeKind.SHORT, "Int16", "int"),
            (TypeKind.USHORT, "Uint16", "int"),
            (TypeKind.INT, "Int32", "int"),
            (TypeKind.UINT, "Uint32", "int"),
            (TypeKind.LONG, "Int64", "int"),
            (TypeKind.ULONG, "Uint64", "int"),
            (TypeKind.LONGLONG, "Int64", "int"),
            (TypeKind.ULONGLONG, "Uint64", "int"),
            (TypeKind.FLOAT, "Float", "double"),
            (TypeKind.DOUBLE, "Double", "double"),
        ]
        for kind, native, logical in cases:
            with self.subTest(kind=kind):
                self.assertEqual(resolve_type({}, prim(kind), True), native)
                self.assertEqual(resolve_type({}, prim(kind), False), logical)

    def test_typedef_resolves_through_canonical_type(self) -> None:
        uint32_t = typedef_type(typedef("uint32_t", prim(TypeKind.UINT)))
        self.assertEqual(resolve_type({}, uint32_t, True), "Uint32")
        self.assertEqual(resolve_type({}, uint32_t, False), "int")

    def test_enum_uses_its_integer_type(self) -> None:
        color = enum("color", ("COLOR_RED", 0), integer=prim(TypeKind.UINT))
        self.assertEqual(resolve_type({}, enum_type(color), True), "Uint32")
        self.assertEqual(resolve_type({}, enum_type(color), False), "int")

    def test_enum_without_integer_type_defaults_to_int32(self) -> None:
        bare = CType(kind=TypeKind.ENUM, spelling="enum e")
        self.assertEqual(resolve_type({}, bare, True), "Int32")


class CompoundTypeTests(unittest.TestCase):
    def test_pointer_always_wraps_native_pointee(self) -> None:
        self.assertEqual(resolve_type({}, ptr(INT), False), "Pointer<Int32>")
        self.assertEqual(resolve_type({}, ptr(DOUBLE), True), "Pointer<Double>")
        self.assertEqual(resolve_type({}, ptr(ptr(CHAR)), False), "Pointer<Pointer<Int8>>")

    def test_pointer_to_void(self) -> None:
        self.assertEqual(resolve_type({}, ptr(VOID), False), "Pointer<Void>")

    def test_record_uses_rewritten_name(self) -> None:
        point = struct("point")
        typenames = {"point": "Point"}
        self.assertEqual(resolve_type(typenames, record(point), False), "Point")
        self.assertEqual(resolve_type(typenames, ptr(record(point)), False), "Pointer<Point>")

    def test_record_not_yet_translated_falls_back_to_source_name(self) -> None:
        point = struct("point")
        with self.assertLogs("c4dart.resolver", level="ERROR"):
            self.assertEqual(resolve_type({}, record(point), True), "point")

    def test_function_pointer_is_always_native(self) -> None:
        cb = ptr(proto(VOID, INT, ptr(FLOAT)))
        expected = "Pointer<NativeFunction<Void Function(Int32, Pointer<Float>)>>"
        self.assertEqual(resolve_type({}, cb, False), expected)
        self.assertEqual(resolve_type({}, cb, True), expected)

    def test_unsupported_kind_yields_marker(self) -> None:
        with self.assertLogs("c4dart.resolver", level="WARNING") as logs:
            out = resolve_type({}, unsupported("CONSTANTARRAY"), True)
        self.assertEqual(out, "<unsupported_type_kind:CONSTANTARRAY>")
        self.assertIn("CONSTANTARRAY", logs.output[0])

    def test_unsupported_pointee_is_marked_inside_pointer(self) -> None:
        with self.assertLogs("c4dart.resolver", level="WARNING"):
            out = resolve_type({}, ptr(unsupported("LONGDOUBLE")), False)
        self.assertEqual(out, "Pointer<<unsupported_type_kind:LONGDOUBLE>>")


class FieldTypeTests(unittest.TestCase):
    def test_scalar_field(self) -> None:
        self.assertEqual(field_annotation(INT), "@Int32()")
        self.assertEqual(field_type({}, INT), "int")
        self.assertEqual(field_annotation(FLOAT), "@Float()")
        self.assertEqual(field_type({}, FLOAT), "double")

    def test_pointer_and_record_fields_have_no_annotation(self) -> None:
        point = struct("point")
        self.assertEqual(field_annotation(ptr(INT)), "")
        self.assertEqual(field_type({}, ptr(INT)), "Pointer<Int32>")
        self.assertEqual(field_annotation(record(point)), "")
        self.assertEqual(field_type({"point": "Point"}, record(point)), "Point")

    def test_unsupported_field_is_empty(self) -> None:
        with self.assertLogs("c4dart.resolver", level="WARNING"):
            self.assertEqual(field_type({}, unsupported("CONSTANTARRAY")), "")
        self.assertEqual(field_annotation(unsupported("CONSTANTARRAY")), "")


class FuncDefTests(unittest.TestCase):
    def test_add_signatures(self) -> None:
        add = func("add", INT, param(INT, "a"), param(INT, "b"), comment="/** Adds. */")
        fd = FuncDef.from_function({}, add)
        self.assertEqual(fd.name, "add")
        self.assertEqual(fd.comment, "/** Adds. */")
        self.assertEqual(fd.native, "Int32 Function(Int32 a, Int32 b)")
        self.assertEqual(fd.logical, "int Function(int a, int b)")

    def test_unnamed_arguments_are_types_only(self) -> None:
        fd = FuncDef.from_function({}, func("scale", DOUBLE, param(DOUBLE), param(FLOAT)))
        self.assertEqual(fd.native, "Double Function(Double, Float)")
        self.assertEqual(fd.logical, "double Function(double, double)")

    def test_no_arguments(self) -> None:
        fd = FuncDef.from_function({}, func("tick", VOID))
        self.assertEqual(fd.native, "Void Function()")
        self.assertEqual(fd.logical, "void Function()")

    def test_prototype(self) -> None:
        fd = FuncDef.from_prototype({}, proto(INT, ptr(VOID), INT), name="cmp")
        self.assertEqual(fd.name, "cmp")
        self.assertIsNone(fd.comment)
        self.assertEqual(fd.native, "Int32 Function(Pointer<Void>, Int32)")
        self.assertEqual(fd.logical, "int Function(Pointer<Void>, int)")

    def test_argument_without_type_is_fatal(self) -> None:
        broken = func("broken", VOID, param(None, "x"))  # type: ignore[arg-type]
        with self.assertRaises(MalformedDeclarationError):
            FuncDef.from_function({}, broken)


if __name__ == "__main__":
    unittest.main()
