"""Render templates and write generated output.

Templates use ``$$@ expr @$$`` and ``$$% stmt %$$`` delimiters so that
TypeScript braces in the templates and in the embedded declarations are
never read as template syntax.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Any

import jinja2

from .config import GeneratorConfig
from .errors import EmissionError

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"

CLASS_TEMPLATE = "class.ts.j2"
SERVICE_TEMPLATE = "service.ts.j2"
MODELS_TEMPLATE = "models.ts.j2"
SERVICES_TEMPLATE = "services.ts.j2"


def create_environment(template_dir: Path = TEMPLATE_DIR) -> jinja2.Environment:
    return jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(template_dir)),
        variable_start_string="$$@",
        variable_end_string="@$$",
        block_start_string="$$%",
        block_end_string="%$$",
        comment_start_string="$$#",
        comment_end_string="#$$",
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=jinja2.StrictUndefined,
    )


class Renderer:
    """Render the generator's templates from a single environment."""

    def __init__(self, env: jinja2.Environment | None = None) -> None:
        self.env = env or create_environment()

    def render(self, template_name: str, context: dict[str, Any]) -> str:
        return self.env.get_template(template_name).render(**context)


def _clear_directory(path: Path) -> None:
    for child in path.iterdir():
        if child.is_dir() and not child.is_symlink():
            shutil.rmtree(child)
        else:
            child.unlink()


def prepare_output(config: GeneratorConfig) -> None:
    """Create the model and service directories and empty them."""
    for path in (config.model_path, config.service_path):
        try:
            path.mkdir(parents=True, exist_ok=True)
            _clear_directory(path)
        except OSError as exc:
            raise EmissionError(f"Cannot prepare output directory {path}: {exc}") from exc


def write_file(path: Path, content: str) -> Path:
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise EmissionError(f"Cannot write {path}: {exc}") from exc
    logger.debug("Wrote %s", path)
    return path
