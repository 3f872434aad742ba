"""Rewrite references between entities in a generated TypeModule.

The schema compiler cannot tell a link to another repository from an
embedded value: an association such as ``author`` compiles to a generated
alias (``export type Author = string;``), an interface or a primitive. The
ALPS profile marks associations with an ``rt`` pointing at the target
representation:

    {"name": "author", "type": "SAFE",
     "rt": "http://host/profile/authors#author-representation"}

For every such descriptor the property is retyped to the target class
(``Author``, or ``Author[]`` when the property name is plural), the
declaration generated for it, alias or interface, is dropped and the
target class is imported once.

Constraint: declarations are removed by exact name, so the compiler must not
reuse one generated name for two different reference sites.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable

from .errors import ResolutionError
from .naming import is_plural, relation_target, to_class_name, to_kebab_case
from .tsir import TypeModule, split_type_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Reference:
    """An association from one entity property to another entity."""

    source_property: str
    target_name: str
    plural: bool

    @property
    def target_class(self) -> str:
        return to_class_name(self.target_name)

    @property
    def type(self) -> str:
        return self.target_class + ("[]" if self.plural else "")


def find_references(descriptors: Iterable[dict[str, Any]], entity: str = "") -> list[Reference]:
    """Build a Reference for every descriptor that carries an rt relation."""
    references: list[Reference] = []
    for descriptor in descriptors:
        rt = descriptor.get("rt")
        if not rt:
            continue
        name = descriptor.get("name", "")
        target = relation_target(rt)
        if not name or target is None:
            raise ResolutionError(
                f"Malformed relation on '{entity}.{name}': cannot read target from {rt!r}"
            )
        references.append(Reference(name, target, is_plural(name)))
    return references


def resolve_references(
    module: TypeModule,
    descriptors: Iterable[dict[str, Any]],
    known_entities: Iterable[str],
    entity: str = "",
) -> TypeModule:
    """Retype association properties of the primary interface, in place.

    ``known_entities`` holds the canonical names of every entity of the run.
    Re-running on an already resolved module changes nothing.
    """
    known = {to_class_name(n) for n in known_entities}
    primary = module.primary
    self_class = to_class_name(entity) if entity else ""

    for ref in find_references(descriptors, entity):
        if ref.target_class not in known:
            raise ResolutionError(
                f"'{entity}.{ref.source_property}' references unknown entity '{ref.target_name}'"
            )

        prop = primary.property(ref.source_property)
        if prop is None:
            raise ResolutionError(
                f"Property '{ref.source_property}' of '{entity}' not found in generated interface "
                f"{primary.name}"
            )

        old = split_type_name(prop.type)
        if old is not None:
            module.remove_declaration(old[0])
        prop.type = ref.type

        if ref.target_class != self_class:
            module.add_import(ref.target_class, f"./{to_kebab_case(ref.target_class)}")
        logger.debug("Resolved %s.%s -> %s", entity, ref.source_property, ref.type)

    return module
