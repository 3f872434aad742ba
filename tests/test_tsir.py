"""Tests for the TypeScript declaration model."""

import pytest

from sdr_codegen.compiler import BuiltinCompiler
from sdr_codegen.errors import CompileError
from sdr_codegen.tsir import AliasDecl, InterfaceDecl, Property, RawMember, parse_module, split_type_name

from conftest import book_schema

SOURCE = """\
export interface Book {
  /**
   * Book title
   */
  title?: Title;
  pages: number;
  meta?: {
    tag?: string;
    [k: string]: unknown;
  };
  [k: string]: unknown;
}

export type Title = string;

export type Status =
  | "DRAFT"
  | "PUBLISHED";
"""


class TestParseModule:
    """Compiler output is split into declarations and members."""

    @classmethod
    def setup_class(cls):
        cls.module = parse_module(SOURCE)

    def test_declarations(self):
        kinds = [(type(d).__name__, d.name) for d in self.module.declarations]
        assert kinds == [("InterfaceDecl", "Book"), ("AliasDecl", "Title"), ("AliasDecl", "Status")]

    def test_primary(self):
        assert self.module.primary.name == "Book"

    def test_optional_property(self):
        prop = self.module.primary.property("title")
        assert prop.type == "Title"
        assert prop.optional
        assert prop.doc == ["  /**", "   * Book title", "   */"]

    def test_required_property(self):
        prop = self.module.primary.property("pages")
        assert prop.type == "number"
        assert not prop.optional

    def test_multiline_property(self):
        prop = self.module.primary.property("meta")
        assert prop.type == "{\n    tag?: string;\n    [k: string]: unknown;\n  }"

    def test_index_signature_is_raw(self):
        last = self.module.primary.members[-1]
        assert isinstance(last, RawMember)
        assert last.text == "  [k: string]: unknown;"

    def test_multiline_alias(self):
        assert self.module.alias("Status").type == '\n  | "DRAFT"\n  | "PUBLISHED"'

    def test_round_trip(self):
        assert self.module.render() == SOURCE

    def test_compiler_output_round_trips(self):
        text = BuiltinCompiler().compile(book_schema(), "Book")
        assert parse_module(text).render() == text


class TestStringLiterals:
    """Brackets inside string literal types do not affect nesting."""

    def test_enum_values_with_brackets(self):
        schema = {
            "type": "object",
            "properties": {
                "fmt": {"type": "string", "enum": ["{x", "y"]},
                "honorific": {"type": "string", "enum": ["Mr (retired", "Ms"]},
            },
        }
        text = BuiltinCompiler().compile(schema, "Book")
        module = parse_module(text)
        assert module.primary.property("fmt").type == '"{x" | "y"'
        assert module.primary.property("honorific").type == '"Mr (retired" | "Ms"'
        assert module.render() == text

    def test_alias_with_brackets(self):
        module = parse_module("export interface Book {\n}\n\nexport type Fmt = \"}\" | '(';\n")
        assert module.alias("Fmt").type == "\"}\" | '('"

    def test_escaped_quote(self):
        module = parse_module('export interface Book {\n  fmt?: "a\\"{" | "b";\n}\n')
        assert module.primary.property("fmt").type == '"a\\"{" | "b"'


class TestImports:
    def test_parse_import(self):
        module = parse_module("import { Author } from './author';\n\nexport interface Book {\n}\n")
        assert [(i.name, i.module) for i in module.imports] == [("Author", "./author")]

    def test_add_import_once(self):
        module = parse_module("export interface Book {\n}\n")
        assert module.add_import("Author", "./author")
        assert not module.add_import("Author", "./author")
        assert module.render_imports() == "import { Author } from './author';"

    def test_render_with_imports(self):
        module = parse_module("export interface Book {\n}\n")
        module.add_import("Author", "./author")
        assert module.render() == "import { Author } from './author';\n\nexport interface Book {\n}\n"


class TestEdits:
    def test_remove_alias_exact_name(self):
        module = parse_module("export type Author = string;\n\nexport type AuthorName = string;\n")
        assert module.remove_declaration("Author")
        assert [d.name for d in module.declarations] == ["AuthorName"]

    def test_remove_missing_declaration(self):
        module = parse_module("export interface Book {\n}\n")
        assert not module.remove_declaration("Author")

    def test_remove_secondary_interface(self):
        module = parse_module(
            "export interface IBook {\n  author?: Author;\n}\n\n"
            "export interface Author {\n  name?: string;\n}\n"
        )
        assert module.remove_declaration("Author")
        assert module.interface("Author") is None
        assert [d.name for d in module.declarations] == ["IBook"]

    def test_primary_interface_kept(self):
        module = parse_module("export interface Cover {\n}\n")
        assert not module.remove_declaration("Cover")
        assert module.interface("Cover") is not None

    def test_render_members(self):
        decl = InterfaceDecl("IBook", [Property("title", "string", optional=True), RawMember("  [k: string]: unknown;")])
        assert decl.render_members() == "  title?: string;\n  [k: string]: unknown;"

    def test_render_alias(self):
        assert AliasDecl("Title", "string").render() == "export type Title = string;\n"


class TestSplitTypeName:
    def test_plain(self):
        assert split_type_name("Author") == ("Author", 0)

    def test_array(self):
        assert split_type_name("Books[]") == ("Books", 1)

    def test_union(self):
        assert split_type_name("string | null") is None


class TestParseErrors:
    def test_no_interface(self):
        with pytest.raises(CompileError):
            parse_module("export type A = string;\n").primary

    def test_unterminated_interface(self):
        with pytest.raises(CompileError):
            parse_module("export interface Book {\n  a?: string;\n")

    def test_unknown_statement(self):
        with pytest.raises(CompileError):
            parse_module("declare const x: number;\n")
