"""Command-line interface for sdr_codegen."""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
from typing import Sequence

from .config import AUTH_METHODS, COMPILERS, OAUTH_FLOWS, GeneratorConfig, load_config_file
from .errors import ConfigError, GeneratorError
from .pipeline import run

__all__ = ["main"]

logger = logging.getLogger(__name__)


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_level = logging.DEBUG if args.verbose else getattr(logging, args.log_level.upper(), logging.INFO)
    logging.basicConfig(level=log_level, format="%(levelname)s:%(name)s:%(message)s")

    try:
        config = build_config(args)
    except ConfigError as exc:
        parser.error(str(exc))

    try:
        asyncio.run(run(config))
    except GeneratorError as exc:
        logger.error("%s", exc)
        return exc.exit_code
    return 0


def build_config(args: argparse.Namespace) -> GeneratorConfig:
    """Merge config file values and command-line flags, then validate."""
    config = GeneratorConfig()
    if args.config:
        config = config.merged(load_config_file(args.config))

    config = config.merged({
        "base_url": args.base_url,
        "auth_method": args.auth_method,
        "auth_endpoint": args.auth_endpoint,
        "username": args.username,
        "password": args.password,
        "oauth_flow": args.oauth_flow,
        "client_id": args.client_id,
        "client_password": args.client_password,
        "no_additional_properties": args.no_additional_properties or None,
        "no_trivial_types": args.no_trivial_types or None,
        "output_dir": args.output_dir,
        "model_dir": args.model_dir,
        "service_dir": args.service_dir,
        "compiler": args.compiler,
    })
    config.validate()
    return config


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sdr-codegen",
        description=(
            "Generate TypeScript models and services from a Spring Data REST "
            "server's JSON schemas and ALPS profiles."
        ),
    )
    parser.add_argument("-b", "--base-url", help="Base URL of the REST API (required)")
    parser.add_argument("--config", type=Path, help="JSON configuration file")
    parser.add_argument(
        "--auth-method",
        type=str.upper,
        choices=AUTH_METHODS,
        help="Authentication method (default NONE)",
    )
    parser.add_argument("-a", "--auth-endpoint", help="Login or token endpoint URL")
    parser.add_argument("-u", "--username", help="Username for authentication")
    parser.add_argument("-p", "--password", help="Password for authentication")
    parser.add_argument(
        "--oauth-flow",
        type=str.upper,
        choices=OAUTH_FLOWS,
        help="OAuth2 flow (only PASSWORD is supported)",
    )
    parser.add_argument("--client-id", help="OAuth2 client id")
    parser.add_argument("--client-password", help="OAuth2 client secret")
    parser.add_argument(
        "--no-additional-properties",
        action="store_true",
        help="Forbid additional properties on generated interfaces",
    )
    parser.add_argument(
        "--no-trivial-types",
        action="store_true",
        help="Do not generate named aliases for primitive properties",
    )
    parser.add_argument("-o", "--output-dir", help="Output directory (default src/app/api)")
    parser.add_argument("--model-dir", help="Model subdirectory name (default models)")
    parser.add_argument("--service-dir", help="Service subdirectory name (default services)")
    parser.add_argument(
        "--compiler",
        choices=COMPILERS,
        help="Schema compiler: builtin or the json2ts executable (default builtin)",
    )
    parser.add_argument(
        "--log-level",
        default="info",
        help="Set logging level (debug, info, warning, error, critical).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging.",
    )
    return parser
