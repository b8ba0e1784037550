"""Tests for building IR from the parse tree."""

import pytest

from apidl.core import ir
from apidl.core.builder import build_document, classify_enum, parse_int_literal
from apidl.core.diagnostics import DiagnosticReport
from apidl.core.dsl_parser_impl import parse_schema


def _build(text: str) -> tuple[ir.Document, DiagnosticReport]:
    return build_document(parse_schema(text, "test.api"), "test.api")


def _doc(text: str) -> ir.Document:
    document, _ = _build(text)
    return document


def _field_type(type_text: str) -> ir.TypeRef:
    return _doc(f"struct S {{ a: {type_text} }}").structs[0].fields[0].type


class TestDocCommentAttachment:
    """Tests for attaching ``///`` runs to the following item."""

    def test_canonical_docs(self, image_document):
        info = image_document.get("ImageInfo")
        assert info.doc == "Information about an image"
        assert [f.doc for f in info.fields] == ["width of the image", "height of the image"]
        image = image_document.get("Image")
        assert image.doc is None
        assert image.methods[2].doc == "Destroy the image"

    def test_multi_line_block_keeps_order(self):
        decl = _doc("/// line one\n/// line two\n/// line three\nstruct A {}").structs[0]
        assert decl.doc == "line one\nline two\nline three"
        assert decl.doc_lines == ["line one", "line two", "line three"]

    def test_blank_line_prevents_attachment(self):
        document = _doc("/// detached\n\nstruct A {}")
        assert document.structs[0].doc is None
        assert [(c.text, c.is_doc) for c in document.comments] == [("detached", True)]

    def test_plain_comment_breaks_run(self):
        document = _doc("/// about\n// plain\nstruct A {}")
        assert document.structs[0].doc is None
        assert [(c.text, c.is_doc) for c in document.comments] == [
            ("about", True),
            ("plain", False),
        ]

    def test_only_adjacent_part_of_run_attaches(self):
        document = _doc("/// far\n\n/// near\nstruct A {}")
        assert document.structs[0].doc == "near"
        assert [c.text for c in document.comments] == ["far"]

    def test_doc_above_attributes_attaches(self):
        decl = _doc("/// handle type\n#[attributes(Handle)]\nstruct A { f() }").structs[0]
        assert decl.doc == "handle type"

    def test_doc_between_attributes_and_keyword_is_dangling(self):
        document, report = _build("#[attributes(Handle)]\n/// lost\nstruct A { f() }")
        assert document.structs[0].doc is None
        assert len(report.with_code("dangling-doc-comment")) == 1

    def test_doc_keeps_inner_whitespace(self):
        decl = _doc("///   indented\n///\nstruct A {}").structs[0]
        assert decl.doc == "  indented\n"

    def test_member_docs(self):
        struct = _doc("struct A {\n  /// the a\n  a: u32,\n\n  /// lonely\n\n  f(),\n}").structs[0]
        assert struct.fields[0].doc == "the a"
        assert struct.methods[0].doc is None

    def test_dangling_member_doc_warns(self):
        _, report = _build("struct A {\n  a: u32,\n  /// at the end\n}")
        (warning,) = report.warnings
        assert warning.code == "dangling-doc-comment"
        assert warning.span.line == 3

    def test_trailing_comment_does_not_document_next_member(self):
        document, report = _build("struct A {\n  a: u32, /// about a\n  b: u32,\n}")
        assert [f.doc for f in document.structs[0].fields] == [None, None]
        assert len(report.with_code("dangling-doc-comment")) == 1

    def test_plain_comments_in_body_are_silent(self):
        _, report = _build("struct A {\n  // note\n  a: u32,\n}")
        assert len(report) == 0

    def test_enum_entry_docs(self):
        enum = _doc("enum E {\n  /// first\n  A,\n  B,\n}").enums[0]
        assert [e.doc for e in enum.entries] == ["first", None]


class TestAttributes:
    """Tests for expanding attribute lists into records."""

    def test_wrapper_expands(self):
        decl = _doc("#[attributes(Handle, Drop)]\nstruct A { f() }").structs[0]
        assert [(a.name, a.args) for a in decl.attributes] == [("Handle", []), ("Drop", [])]

    def test_item_with_args(self):
        decl = _doc("#[derive(Debug, Clone)]\nstruct A {}").structs[0]
        assert [(a.name, a.args) for a in decl.attributes] == [("derive", ["Debug", "Clone"])]

    def test_order_across_lists(self):
        text = "#[derive(Debug)]\n#[attributes(Handle), traits(Display)]\nstruct A {}"
        decl = _doc(text).structs[0]
        assert [a.name for a in decl.attributes] == ["derive", "Handle", "traits"]

    def test_string_args_are_unquoted(self):
        decl = _doc('#[derive("Hash Eq", 3)]\nstruct A {}').structs[0]
        assert decl.attributes[0].args == ["Hash Eq", "3"]

    def test_empty_args_warns(self):
        document, report = _build("#[derive()]\nstruct A {}")
        assert document.structs[0].attributes[0].args == []
        (warning,) = report.warnings
        assert warning.code == "empty-attribute-args"
        assert "derive" in warning.message

    def test_static_is_flag_not_attribute(self):
        method = _doc("struct A { [static] [manual] f() }").structs[0].methods[0]
        assert method.is_static
        assert [a.name for a in method.attributes] == ["manual"]
        assert method.has_attribute("manual")
        assert not method.has_receiver

    def test_attribute_spans(self):
        decl = _doc("#[derive(Debug)]\nstruct A {}").structs[0]
        span = decl.attributes[0].span
        assert (span.line, span.column, span.end_column) == (1, 3, 16)


class TestTypeMapping:
    """Tests for converting type nodes to TypeRefs."""

    def test_primitive(self):
        ref = _field_type("String")
        assert isinstance(ref, ir.PrimitiveType)
        assert ref.primitive == ir.PrimitiveKind.STRING

    @pytest.mark.parametrize("name", sorted(ir.PRIMITIVE_NAMES))
    def test_every_primitive_keyword(self, name):
        assert isinstance(_field_type(f"*const {name}").inner, ir.PrimitiveType)

    def test_named(self):
        assert _field_type("Image").model_dump() == {"kind": "named", "name": "Image"}

    def test_optional_const_pointer(self):
        expected = ir.OptionalType(
            inner=ir.PointerType(mutable=False, inner=ir.NamedType(name="X"))
        )
        assert _field_type("*const X?").model_dump() == expected.model_dump()

    def test_bare_star_is_mutable(self):
        ref = _field_type("*X")
        assert isinstance(ref, ir.PointerType)
        assert ref.mutable

    def test_reference(self):
        expected = ir.OptionalType(inner=ir.ReferenceType(inner=ir.NamedType(name="Image")))
        assert _field_type("&Image?").model_dump() == expected.model_dump()

    def test_reference_to_pointer(self):
        ref = _field_type("&*mut u8")
        assert isinstance(ref, ir.ReferenceType)
        assert ref.inner.mutable
        assert ref.span.column == 15

    def test_arrays(self):
        assert _field_type("[u8]").size is None
        fixed = _field_type("[f32; 16]")
        assert fixed.size == 16
        assert fixed.inner.primitive == ir.PrimitiveKind.F32

    def test_nested_modifiers(self):
        expected = ir.OptionalType(
            inner=ir.ArrayType(inner=ir.PointerType(mutable=True, inner=ir.NamedType(name="X")))
        )
        assert _field_type("[*mut X]?").model_dump() == expected.model_dump()

    def test_spans_recorded(self):
        ref = _field_type("*const X?")
        assert ref.span.column == 15
        assert ref.inner.inner.span.column == 22


class TestEnums:
    """Tests for enum value resolution and classification."""

    def test_auto_increment(self):
        enum = _doc("enum Color { Red, Green = 5, Blue, Alpha = 0x10 }").enums[0]
        assert [e.value for e in enum.entries] == [0, 5, 6, 16]
        assert [e.explicit for e in enum.entries] == [False, True, False, True]
        assert enum.enum_kind == ir.EnumKind.REGULAR

    def test_flags_name(self):
        enum = _doc("#[flags(Formats)]\nenum Format { A = 1, B = 2, C = 4 }").enums[0]
        assert enum.flags_name == "Formats"
        assert enum.enum_kind == ir.EnumKind.BITFLAGS

    def test_empty_enum(self):
        enum = _doc("enum E { }").enums[0]
        assert enum.entries == []
        assert enum.enum_kind == ir.EnumKind.REGULAR

    @pytest.mark.parametrize(
        "values,kind",
        [
            ([], ir.EnumKind.REGULAR),
            ([0, 1, 2], ir.EnumKind.REGULAR),
            ([3, 4, 5], ir.EnumKind.REGULAR),
            ([1, 2, 4, 8], ir.EnumKind.BITFLAGS),
            ([0, 1, 1], ir.EnumKind.BITFLAGS),
            ([1, 2, 4, 7], ir.EnumKind.BITFLAGS),
            ([0, 5, 9], ir.EnumKind.REGULAR),
            ([1, 2, 3, 5], ir.EnumKind.REGULAR),
        ],
    )
    def test_classify(self, values, kind):
        assert classify_enum(values) == kind

    @pytest.mark.parametrize(
        "text,value",
        [("42", 42), ("0x1F", 31), ("0X10", 16), ("-3", -3), ("1_000", 1000), ("0x_ff", 255)],
    )
    def test_int_literals(self, text, value):
        assert parse_int_literal(text) == value


class TestDeclarations:
    """Tests for the remaining declaration kinds."""

    def test_struct_members(self, image_document):
        image = image_document.get("Image")
        assert image.fields == []
        assert [m.name for m in image.static_methods] == [
            "create_from_file",
            "create_from_memory",
            "get_info",
        ]
        assert [m.name for m in image.instance_methods] == ["destroy"]
        assert image.methods[1].params[1].type.model_dump() == {
            "kind": "array",
            "inner": {"kind": "primitive", "primitive": "u8"},
            "size": None,
        }

    def test_param_defaults_verbatim(self):
        method = _doc('struct A { f(a: u32 = 0x10, s: String = "hi") }').structs[0].methods[0]
        assert [p.default for p in method.params] == ["0x10", '"hi"']

    def test_alias_const_callback(self):
        document = _doc(
            'type Id: u64\nconst NAME = "img"\ncallback Log(level: u32) -> bool'
        )
        assert document.aliases[0].target.primitive == ir.PrimitiveKind.U64
        assert document.consts[0].value == '"img"'
        callback = document.callbacks[0]
        assert [p.name for p in callback.params] == ["level"]
        assert callback.return_type.primitive == ir.PrimitiveKind.BOOL

    def test_union_fields(self):
        union = _doc("union Value { i: i64, f: f64 }").unions[0]
        assert [f.name for f in union.fields] == ["i", "f"]

    def test_spans(self):
        struct = _doc("struct A {\n  a: u32,\n}").structs[0]
        assert (struct.span.line, struct.span.end_line) == (1, 3)
        assert (struct.name_span.line, struct.name_span.column) == (1, 8)
        assert (struct.fields[0].span.line, struct.fields[0].span.column) == (2, 3)

    @pytest.mark.parametrize("count", [0, 1, 5])
    def test_declaration_count_matches_source(self, count):
        text = "\n".join(f"struct S{i} {{ }}" for i in range(count))
        document = _doc(text)
        assert len(document.declarations) == count
        assert set(document.names) == {f"S{i}" for i in range(count)}

    def test_builder_reports_into_given_report(self):
        report = DiagnosticReport(file="shared.api")
        _, returned = build_document(parse_schema("#[derive()]\nstruct A {}"), report=report)
        assert returned is report
        assert len(report) == 1
