"""Build Jinja2 template contexts for the generated TypeScript files.

One class context and one service context per entity, and a single index
context shared by the models.ts and services.ts aggregators.
"""

from __future__ import annotations

from typing import Any, Iterable

from .config import GeneratorConfig
from .loader import Entity
from .naming import to_interface_name, to_kebab_case
from .tsir import TypeModule

SERVICE_SUFFIX = "Service"


def file_stem(entity: Entity) -> str:
    """File name (without extension) shared by an entity's model and service."""
    return to_kebab_case(entity.class_name)


def build_class_context(entity: Entity, module: TypeModule) -> dict[str, Any]:
    """Context for class.ts.j2 from the resolved type module."""
    primary = module.primary
    return {
        "imports": [imp.render() for imp in module.imports],
        "interface_definition": module.render_declarations(),
        "interface_name": primary.name,
        "class_name": entity.class_name,
        "class_attributes": primary.render_members(),
    }


def build_service_context(entity: Entity, config: GeneratorConfig) -> dict[str, Any]:
    return {
        "class_name": entity.class_name,
        "service_name": entity.class_name + SERVICE_SUFFIX,
        "file_stem": file_stem(entity),
        "model_dir": config.model_dir,
        "repository": entity.repository,
    }


def build_index_context(entities: Iterable[Entity], config: GeneratorConfig) -> dict[str, Any]:
    """Context for both aggregators: interface and class per model, one service each."""
    models: list[dict[str, str]] = []
    services: list[dict[str, str]] = []

    for entity in entities:
        stem = file_stem(entity)
        for model_class in (to_interface_name(entity.class_name), entity.class_name):
            models.append({
                "model_class": model_class,
                "model_dir": config.model_dir,
                "model_file": stem,
            })
        services.append({
            "service_class": entity.class_name + SERVICE_SUFFIX,
            "service_dir": config.service_dir,
            "model_file": stem,
        })

    return {
        "models": models,
        "services": services,
        "model_count": len(models),
        "service_count": len(services),
    }
