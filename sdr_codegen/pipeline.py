"""Drive a full generation run.

    discover -> describe -> normalize -> (compile -> resolve -> render -> write)*
             -> aggregators

Entities are handled one at a time in repository order so that output is
deterministic and any failure names exactly one resource.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import httpx

from .codegen import (
    CLASS_TEMPLATE,
    MODELS_TEMPLATE,
    SERVICE_TEMPLATE,
    SERVICES_TEMPLATE,
    Renderer,
    prepare_output,
    write_file,
)
from .compiler import SchemaCompiler, get_compiler
from .config import GeneratorConfig
from .context_builder import (
    build_class_context,
    build_index_context,
    build_service_context,
    file_stem,
)
from .errors import DescriptionError
from .loader import Entity, load_entities
from .naming import to_interface_name
from .normalizer import normalize_schemas
from .resolver import resolve_references
from .session import open_session
from .tsir import TypeModule, parse_module

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    models: list[Path] = field(default_factory=list)
    services: list[Path] = field(default_factory=list)
    aggregators: list[Path] = field(default_factory=list)

    @property
    def files(self) -> list[Path]:
        return [*self.models, *self.services, *self.aggregators]


def check_unique_names(entities: list[Entity]) -> None:
    """Two repositories mapping to one class would overwrite each other's files."""
    seen: dict[str, str] = {}
    for entity in entities:
        stem = file_stem(entity)
        if stem in seen:
            raise DescriptionError(
                f"Repositories '{seen[stem]}' and '{entity.repository}' both map to {entity.class_name}"
            )
        seen[stem] = entity.repository


def build_type_module(
    entity: Entity,
    compiler: SchemaCompiler,
    known_entities: list[str],
) -> TypeModule:
    """Compile an entity's schema and resolve its references to other entities."""
    text = compiler.compile(entity.schema, entity.class_name)
    module = parse_module(text)
    module.primary.name = to_interface_name(entity.class_name)
    return resolve_references(module, entity.descriptors, known_entities, entity.name)


def generate(
    entities: dict[str, Entity],
    config: GeneratorConfig,
    compiler: SchemaCompiler | None = None,
    renderer: Renderer | None = None,
) -> GenerationResult:
    """Write model, service and aggregator files for the collected entities."""
    compiler = compiler or get_compiler(config.compiler)
    renderer = renderer or Renderer()
    ordered = [entities[key] for key in sorted(entities)]
    known = [entity.name for entity in ordered]
    result = GenerationResult()

    check_unique_names(ordered)
    prepare_output(config)
    normalize_schemas((entity.schema for entity in ordered), config)

    logger.info("Generating files.")
    for entity in ordered:
        module = build_type_module(entity, compiler, known)
        stem = file_stem(entity)

        rendered_class = renderer.render(CLASS_TEMPLATE, build_class_context(entity, module))
        result.models.append(write_file(config.model_path / f"{stem}.ts", rendered_class))

        rendered_service = renderer.render(SERVICE_TEMPLATE, build_service_context(entity, config))
        result.services.append(
            write_file(config.service_path / f"{stem}.service.ts", rendered_service)
        )
        logger.info("Generated %s (%s)", entity.class_name, entity.repository)

    index = build_index_context(ordered, config)
    output = Path(config.output_dir)
    result.aggregators.append(
        write_file(output / f"{config.model_dir}.ts", renderer.render(MODELS_TEMPLATE, index))
    )
    result.aggregators.append(
        write_file(output / f"{config.service_dir}.ts", renderer.render(SERVICES_TEMPLATE, index))
    )

    logger.info(
        "Generated %d models and %d services in %s",
        len(result.models),
        index["service_count"],
        output,
    )
    return result


async def run(
    config: GeneratorConfig,
    transport: httpx.AsyncBaseTransport | None = None,
    compiler: SchemaCompiler | None = None,
) -> GenerationResult:
    """Authenticate, collect every entity, then generate the output tree."""
    async with open_session(config, transport) as client:
        entities = await load_entities(client)
    return generate(entities, config, compiler)
