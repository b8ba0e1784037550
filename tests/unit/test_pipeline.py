"""Tests for end-to-end schema compilation."""

import logging

import pytest

import apidl
from apidl import compile_schema as exported_compile_schema
from apidl.core.config import AttributeRule, default_config
from apidl.core.pipeline import DEFAULT_SOURCE_NAME, compile_schema


class TestSuccessfulCompile:
    def test_canonical_schema(self, image_schema):
        result = compile_schema(image_schema, "image.api")
        assert result.ok
        assert result.document.names == ["ImageInfo", "Image"]
        assert len(result.diagnostics) == 0
        assert result.diagnostics.file == "image.api"

    def test_default_source_name(self):
        result = compile_schema("struct A {}")
        assert result.diagnostics.file == DEFAULT_SOURCE_NAME

    def test_warnings_do_not_fail(self):
        result = compile_schema("struct A { f() -> void }")
        assert result.ok
        assert result.diagnostics.warning_count == 1

    def test_package_export(self):
        assert exported_compile_schema is compile_schema

    def test_version_is_a_string(self):
        assert isinstance(apidl.__version__, str)
        assert apidl.__version__


class TestFailedCompile:
    def test_lex_error(self):
        result = compile_schema("struct A { $ }")
        assert not result.ok
        assert result.document is None
        (error,) = result.diagnostics
        assert error.code == "lex-error"
        assert (error.span.line, error.span.column) == (1, 12)
        assert "'$'" in error.message

    def test_syntax_error(self):
        result = compile_schema("struct A {")
        assert result.document is None
        (error,) = result.diagnostics
        assert error.code == "syntax-error"
        assert error.message == "Expected '}' to close struct body, found end of input"

    def test_syntax_error_rendering(self):
        result = compile_schema("x", "bad.api")
        (line,) = result.diagnostics.render()
        assert line.startswith("bad.api:1:1: error[syntax-error]")

    @pytest.mark.parametrize(
        "text", ["enum E { A = \u00b2 }", "struct S { a: [u8; \u00b2] }"]
    )
    def test_non_ascii_digit_is_a_lex_diagnostic(self, text):
        result = compile_schema(text)
        assert result.document is None
        assert [d.code for d in result.diagnostics] == ["lex-error"]

    def test_only_first_syntax_error(self):
        result = compile_schema("struct { }\nstruct { }")
        assert len(result.diagnostics) == 1

    def test_validation_errors_keep_document(self):
        result = compile_schema("struct A { b: Missing }\nstruct A {}")
        assert not result.ok
        assert result.document is not None
        assert [d.code for d in result.diagnostics] == ["duplicate-name", "unresolved-type"]

    def test_builder_diagnostics_come_first(self):
        result = compile_schema("#[derive()]\nstruct A {}")
        codes = [d.code for d in result.diagnostics]
        assert codes == ["empty-attribute-args", "attribute-arity"]


class TestConfiguration:
    def test_custom_attribute(self):
        config = default_config().with_rule(
            "Singleton", AttributeRule(targets=frozenset({"struct"}))
        )
        text = "#[attributes(Singleton)]\nstruct A {}"
        assert compile_schema(text, config=config).ok
        assert not compile_schema(text).ok

    def test_reports_are_independent(self):
        first = compile_schema("struct A { b: Missing }")
        second = compile_schema("struct A {}")
        assert first.diagnostics is not second.diagnostics
        assert len(second.diagnostics) == 0

    def test_logs_summary(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="apidl"):
            compile_schema("struct A {}", "a.api")
        assert any("Compiled a.api" in record.getMessage() for record in caplog.records)
