"""A small structural model of generated TypeScript declarations.

Compiler output is parsed into a TypeModule: ordered interface and type
alias declarations plus an import table. Rewrites happen on this model and
``render`` serializes it back to source text. Only the shapes the schema
compilers emit are understood:

    import { Author } from './author';
    export interface Book {
      /**
       * doc
       */
      title?: string;
      meta?: {
        [k: string]: unknown;
      };
      [k: string]: unknown;
    }
    export type Author = string;
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Union

from .errors import CompileError

_IMPORT = re.compile(r"^import \{ ?(?P<names>[^}]+?) ?\} from ['\"](?P<module>[^'\"]+)['\"];$")
_INTERFACE = re.compile(r"^export interface (?P<name>[\w$]+)(?P<heritage> extends [^{]+)? \{$")
_ALIAS = re.compile(r"^export type (?P<name>[\w$]+) = ?(?P<rest>.*)$", re.DOTALL)
_PROPERTY = re.compile(
    r"^(?P<indent>\s*)(?P<readonly>readonly )?(?P<name>\"[^\"]*\"|'[^']*'|[A-Za-z_$][\w$]*)"
    r"(?P<optional>\??): (?P<type>.*);$",
    re.DOTALL,
)
_TYPE_NAME = re.compile(r"^(?P<name>[A-Za-z_$][\w$]*)(?P<array>(?:\[\])*)$")
_STRING = re.compile(r"\"(?:[^\"\\]|\\.)*\"|'(?:[^'\\]|\\.)*'")


def _is_comment(line: str) -> bool:
    stripped = line.strip()
    return stripped.startswith(("/*", "*", "//"))


def _depth(text: str) -> int:
    """Net bracket nesting of a line, ignoring brackets inside string literals."""
    text = _STRING.sub("", text)
    return text.count("{") - text.count("}") + text.count("(") - text.count(")")


@dataclass
class Property:
    name: str
    type: str
    optional: bool = False
    readonly: bool = False
    indent: str = "  "
    doc: list[str] = field(default_factory=list)

    @property
    def key(self) -> str:
        """Property name without surrounding quotes."""
        return self.name.strip("\"'")

    def render(self) -> str:
        marker = "?" if self.optional else ""
        prefix = "readonly " if self.readonly else ""
        line = f"{self.indent}{prefix}{self.name}{marker}: {self.type};"
        return "\n".join([*self.doc, line])


@dataclass
class RawMember:
    """A member kept verbatim, such as an index signature."""

    text: str
    doc: list[str] = field(default_factory=list)

    def render(self) -> str:
        return "\n".join([*self.doc, self.text])


Member = Union[Property, RawMember]


@dataclass
class InterfaceDecl:
    name: str
    members: list[Member] = field(default_factory=list)
    heritage: str = ""
    doc: list[str] = field(default_factory=list)

    def property(self, key: str) -> Property | None:
        for member in self.members:
            if isinstance(member, Property) and member.key == key:
                return member
        return None

    def render_members(self) -> str:
        return "\n".join(m.render() for m in self.members)

    def render(self) -> str:
        lines = [*self.doc, f"export interface {self.name}{self.heritage} {{"]
        if self.members:
            lines.append(self.render_members())
        lines.append("}")
        return "\n".join(lines) + "\n"


@dataclass
class AliasDecl:
    name: str
    type: str
    doc: list[str] = field(default_factory=list)

    def render(self) -> str:
        separator = "=" if self.type.startswith("\n") else "= "
        return "\n".join([*self.doc, f"export type {self.name} {separator}{self.type};"]) + "\n"


Declaration = Union[InterfaceDecl, AliasDecl]


@dataclass
class Import:
    name: str
    module: str

    def render(self) -> str:
        return f"import {{ {self.name} }} from '{self.module}';"


@dataclass
class TypeModule:
    declarations: list[Declaration] = field(default_factory=list)
    imports: list[Import] = field(default_factory=list)

    @property
    def primary(self) -> InterfaceDecl:
        """The first interface: the resource's record shape."""
        for decl in self.declarations:
            if isinstance(decl, InterfaceDecl):
                return decl
        raise CompileError("Generated source contains no interface declaration")

    def interface(self, name: str) -> InterfaceDecl | None:
        for decl in self.declarations:
            if isinstance(decl, InterfaceDecl) and decl.name == name:
                return decl
        return None

    def alias(self, name: str) -> AliasDecl | None:
        for decl in self.declarations:
            if isinstance(decl, AliasDecl) and decl.name == name:
                return decl
        return None

    def remove_declaration(self, name: str) -> bool:
        """Delete the alias or non-primary interface declared with exactly this name."""
        decl: Declaration | None = self.alias(name)
        if decl is None:
            decl = self.interface(name)
            if decl is None or decl is self.primary:
                return False
        self.declarations.remove(decl)
        return True

    def has_import(self, name: str) -> bool:
        return any(imp.name == name for imp in self.imports)

    def add_import(self, name: str, module: str) -> bool:
        """Add ``import { name } from module`` unless name is already imported."""
        if self.has_import(name):
            return False
        self.imports.append(Import(name, module))
        return True

    def render_imports(self) -> str:
        return "\n".join(imp.render() for imp in self.imports)

    def render_declarations(self) -> str:
        return "\n".join(decl.render() for decl in self.declarations)

    def render(self) -> str:
        body = self.render_declarations()
        if self.imports:
            return self.render_imports() + "\n\n" + body
        return body


def split_type_name(type_text: str) -> tuple[str, int] | None:
    """Split ``Name[][]`` into ("Name", 2); None for non-name types."""
    match = _TYPE_NAME.match(type_text.strip())
    if not match:
        return None
    return match.group("name"), len(match.group("array")) // 2


def _parse_members(lines: list[str]) -> list[Member]:
    members: list[Member] = []
    doc: list[str] = []
    statement: list[str] = []
    depth = 0

    for line in lines:
        if not statement:
            if not line.strip():
                continue
            if _is_comment(line):
                doc.append(line)
                continue
        statement.append(line)
        if not _is_comment(line):
            depth += _depth(line)
        if depth > 0 or not line.rstrip().endswith((";", ",")):
            continue

        text = "\n".join(statement)
        match = _PROPERTY.match(text)
        if match:
            members.append(Property(
                name=match.group("name"),
                type=match.group("type"),
                optional=bool(match.group("optional")),
                readonly=bool(match.group("readonly")),
                indent=match.group("indent"),
                doc=doc,
            ))
        else:
            members.append(RawMember(text, doc))
        doc, statement, depth = [], [], 0

    if statement:
        raise CompileError(f"Unterminated interface member: {statement[0].strip()!r}")
    return members


def parse_module(text: str) -> TypeModule:
    """Parse compiler output into a TypeModule."""
    module = TypeModule()
    lines = text.splitlines()
    doc: list[str] = []
    i = 0

    while i < len(lines):
        line = lines[i]
        i += 1
        if not line.strip():
            continue
        if _is_comment(line):
            doc.append(line)
            continue

        match = _IMPORT.match(line)
        if match:
            for name in match.group("names").split(","):
                module.add_import(name.strip(), match.group("module"))
            continue

        match = _INTERFACE.match(line)
        if match:
            body: list[str] = []
            depth = 1
            while i < len(lines):
                if not _is_comment(lines[i]):
                    depth += _depth(lines[i])
                if depth <= 0:
                    break
                body.append(lines[i])
                i += 1
            else:
                raise CompileError(f"Unterminated interface {match.group('name')}")
            i += 1
            module.declarations.append(InterfaceDecl(
                name=match.group("name"),
                members=_parse_members(body),
                heritage=match.group("heritage") or "",
                doc=doc,
            ))
            doc = []
            continue

        match = _ALIAS.match(line)
        if match:
            statement = [line]
            depth = _depth(line)
            while depth > 0 or not statement[-1].rstrip().endswith(";"):
                if i >= len(lines):
                    raise CompileError(f"Unterminated type alias {match.group('name')}")
                statement.append(lines[i])
                depth += _depth(lines[i])
                i += 1
            rest = _ALIAS.match("\n".join(statement)).group("rest").rstrip()
            module.declarations.append(AliasDecl(match.group("name"), rest[:-1], doc))
            doc = []
            continue

        raise CompileError(f"Cannot parse generated declaration: {line.strip()!r}")

    return module
