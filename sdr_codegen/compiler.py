"""Compile JSON schemas into TypeScript declarations.

The output follows the shape of json-schema-to-typescript (no banner):

    export interface Book {
      title?: string;
      author?: Author;
      [k: string]: unknown;
    }
    export type Author = string;

The primary interface comes first, followed by one named declaration per
titled sub-schema or ``#/definitions`` target, in order of first use.
"""

from __future__ import annotations

import json
import logging
import re
import shutil
import subprocess
from typing import Any, Protocol

from .errors import CompileError
from .loader import resolve_ref
from .naming import to_class_name

logger = logging.getLogger(__name__)

INDENT = "  "

_IDENTIFIER = re.compile(r"^[A-Za-z_$][\w$]*$")

_PRIMITIVES: dict[str, str] = {
    "string": "string",
    "integer": "number",
    "number": "number",
    "boolean": "boolean",
    "null": "null",
    "any": "unknown",
}


class SchemaCompiler(Protocol):
    def compile(self, schema: dict[str, Any], name: str) -> str: ...


class BuiltinCompiler:
    """Pure-Python compiler producing json-schema-to-typescript style output."""

    def compile(self, schema: dict[str, Any], name: str) -> str:
        try:
            return _Compilation(schema).run(name)
        except (KeyError, TypeError, ValueError) as exc:
            raise CompileError(f"Could not compile schema '{name}': {exc!r}") from exc


class Json2TsCompiler:
    """Delegate to the ``json2ts`` executable from json-schema-to-typescript."""

    def __init__(self, executable: str = "json2ts") -> None:
        self.executable = executable

    def compile(self, schema: dict[str, Any], name: str) -> str:
        path = shutil.which(self.executable)
        if path is None:
            raise CompileError(f"'{self.executable}' not found on PATH")
        document = dict(schema, title=name)
        logger.debug("Running %s for %s", path, name)
        try:
            proc = subprocess.run(
                [path, "--bannerComment", ""],
                input=json.dumps(document),
                capture_output=True,
                text=True,
                check=True,
            )
        except subprocess.CalledProcessError as exc:
            raise CompileError(
                f"json2ts failed for '{name}': {exc.stderr.strip()}"
            ) from exc
        return proc.stdout.strip() + "\n"


def get_compiler(kind: str) -> SchemaCompiler:
    if kind == "json2ts":
        return Json2TsCompiler()
    return BuiltinCompiler()


def _quote_key(key: str) -> str:
    return key if _IDENTIFIER.match(key) else json.dumps(key)


def _doc_lines(description: str | None, indent: str) -> list[str]:
    if not description:
        return []
    lines = [f"{indent}/**"]
    lines.extend(f"{indent} * {line}".rstrip() for line in description.splitlines())
    lines.append(f"{indent} */")
    return lines


def _is_object(schema: dict[str, Any]) -> bool:
    return schema.get("type") == "object" or "properties" in schema


class _Compilation:
    """State for compiling one root schema."""

    def __init__(self, root: dict[str, Any]) -> None:
        self.root = root
        self.blocks: list[str] = []
        self.used_names: set[str] = set()
        self.by_identity: dict[int, str] = {}
        self.root_name = ""

    def run(self, name: str) -> str:
        self.root_name = self._reserve(name)
        self.by_identity[id(self.root)] = self.root_name
        self._declare(self.root_name, self.root)
        return "\n".join(self.blocks)

    def _reserve(self, name: str) -> str:
        base = to_class_name(name) or "Anonymous"
        candidate, n = base, 0
        while candidate in self.used_names:
            n += 1
            candidate = f"{base}{n}"
        self.used_names.add(candidate)
        return candidate

    def _declare(self, name: str, schema: dict[str, Any]) -> None:
        """Render a named declaration; nested declarations follow it."""
        slot = len(self.blocks)
        self.blocks.append("")
        lines = _doc_lines(schema.get("description"), "")
        if _is_object(schema) and not any(k in schema for k in ("allOf", "anyOf", "oneOf")):
            lines.append(f"export interface {name} {{")
            lines.extend(self._members(schema, 1))
            lines.append("}")
        else:
            lines.append(f"export type {name} = {self._inline(schema, 0)};")
        self.blocks[slot] = "\n".join(lines) + "\n"

    def _named(self, schema: dict[str, Any], name: str) -> str:
        key = id(schema)
        if key not in self.by_identity:
            self.by_identity[key] = self._reserve(name)
            self._declare(self.by_identity[key], schema)
        return self.by_identity[key]

    def _members(self, schema: dict[str, Any], level: int) -> list[str]:
        indent = INDENT * level
        required = schema.get("required")
        required = set(required) if isinstance(required, list) else set()
        lines: list[str] = []
        for key, prop in (schema.get("properties") or {}).items():
            if not isinstance(prop, dict):
                prop = {}
            marker = "" if key in required else "?"
            lines.extend(_doc_lines(prop.get("description"), indent))
            lines.append(f"{indent}{_quote_key(key)}{marker}: {self._type(prop, level)};")

        extra = schema.get("additionalProperties", True)
        if extra is not False:
            value = self._type(extra, level) if isinstance(extra, dict) and extra else "unknown"
            lines.append(f"{indent}[k: string]: {value};")
        return lines

    def _type(self, schema: Any, level: int) -> str:
        """Type expression for a sub-schema, declaring named types as needed."""
        if not isinstance(schema, dict):
            return "unknown"
        if "$ref" in schema:
            ref = schema["$ref"]
            if ref == "#":
                return self.root_name
            target = resolve_ref(self.root, ref)
            return self._named(target, target.get("title") or ref.rsplit("/", 1)[-1])
        if schema.get("title"):
            return self._named(schema, schema["title"])
        return self._inline(schema, level)

    def _inline(self, schema: dict[str, Any], level: int) -> str:
        if "enum" in schema:
            return " | ".join(json.dumps(v) for v in schema["enum"])
        if "allOf" in schema:
            return self._join(schema["allOf"], " & ", level)
        for key in ("anyOf", "oneOf"):
            if key in schema:
                return self._join(schema[key], " | ", level)

        kind = schema.get("type")
        if isinstance(kind, list):
            return " | ".join(
                self._inline(dict(schema, type=k) if k in ("object", "array") else {"type": k}, level)
                for k in kind
            )
        if kind == "array":
            return self._array(schema, level)
        if _is_object(schema):
            lines = self._members(schema, level + 1)
            if not lines:
                return "{}"
            return "{\n" + "\n".join(lines) + "\n" + INDENT * level + "}"
        return _PRIMITIVES.get(kind, "unknown")

    def _array(self, schema: dict[str, Any], level: int) -> str:
        items = schema.get("items")
        if isinstance(items, list):
            return "[" + ", ".join(self._type(i, level) for i in items) + "]"
        item_type = self._type(items, level) if items else "unknown"
        if " " in item_type and not item_type.startswith("{"):
            item_type = f"({item_type})"
        return f"{item_type}[]"

    def _join(self, schemas: list[Any], sep: str, level: int) -> str:
        parts = [self._type(s, level) for s in schemas]
        return sep.join(parts) if parts else "unknown"
