"""Configuration-driven schema mutations applied before compilation.

- no_additional_properties: top-level ``additionalProperties: false``
- no_trivial_types: drop ``title`` from every property that is not a
  ``$ref``, so primitives compile to ``string`` rather than ``export type
  Title = string``.
"""

from __future__ import annotations

from typing import Any, Iterable

from .config import GeneratorConfig


def close_object_shape(schema: dict[str, Any]) -> None:
    """Forbid extra fields on the top-level object only."""
    schema["additionalProperties"] = False


def remove_trivial_titles(schema: dict[str, Any]) -> None:
    """Strip titles from non-$ref properties, recursing into definitions.

    Definitions keep their own title so the structured type is still named.
    """
    for prop in (schema.get("properties") or {}).values():
        _strip_title(prop)
    for definition in (schema.get("definitions") or {}).values():
        if isinstance(definition, dict):
            remove_trivial_titles(definition)


def _strip_title(prop: Any) -> None:
    if not isinstance(prop, dict):
        return
    if "$ref" not in prop:
        prop.pop("title", None)
    # nested object shapes and array items carry their own property sets
    remove_trivial_titles(prop)
    items = prop.get("items")
    if isinstance(items, dict):
        _strip_title(items)


def normalize_schema(schema: dict[str, Any], config: GeneratorConfig) -> dict[str, Any]:
    if config.no_additional_properties:
        close_object_shape(schema)
    if config.no_trivial_types:
        remove_trivial_titles(schema)
    return schema


def normalize_schemas(schemas: Iterable[dict[str, Any]], config: GeneratorConfig) -> None:
    """Apply normalize_schema in place to every collected schema."""
    for schema in schemas:
        normalize_schema(schema, config)
