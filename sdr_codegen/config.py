"""Generator configuration.

A single GeneratorConfig is built by the CLI (from flags and an optional
JSON file) and threaded through the whole pipeline.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from .errors import ConfigError

AUTH_METHODS = ("NONE", "COOKIE", "OAUTH2")
OAUTH_FLOWS = ("PASSWORD",)
COMPILERS = ("builtin", "json2ts")

DEFAULT_TIMEOUT = 10.0

# Keys accepted in a JSON config file -> GeneratorConfig field
_FILE_KEYS: dict[str, str] = {
    "baseURL": "base_url",
    "authMethod": "auth_method",
    "authEndpoint": "auth_endpoint",
    "username": "username",
    "password": "password",
    "oauthFlow": "oauth_flow",
    "clientId": "client_id",
    "clientPassword": "client_password",
    "noAdditionalProperties": "no_additional_properties",
    "noTrivialTypes": "no_trivial_types",
    "outputDir": "output_dir",
    "modelDir": "model_dir",
    "serviceDir": "service_dir",
    "compiler": "compiler",
}


@dataclass
class GeneratorConfig:
    base_url: str = ""
    auth_method: str = "NONE"
    auth_endpoint: str | None = None
    username: str | None = None
    password: str | None = None
    oauth_flow: str = "PASSWORD"
    client_id: str | None = None
    client_password: str | None = None
    no_additional_properties: bool = False
    no_trivial_types: bool = False
    output_dir: str = "src/app/api"
    model_dir: str = "models"
    service_dir: str = "services"
    compiler: str = "builtin"
    timeout: float = DEFAULT_TIMEOUT

    @property
    def model_path(self) -> Path:
        return Path(self.output_dir) / self.model_dir

    @property
    def service_path(self) -> Path:
        return Path(self.output_dir) / self.service_dir

    def merged(self, overrides: dict[str, Any]) -> GeneratorConfig:
        """Return a copy with every non-None override applied."""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return GeneratorConfig(**values)

    def validate(self) -> None:
        """Raise ConfigError describing every problem found."""
        problems: list[str] = []

        if not self.base_url:
            problems.append("base URL is required")

        method = self.auth_method.upper()
        if method not in AUTH_METHODS:
            problems.append(f"unknown auth method {self.auth_method!r}")
        if method in ("COOKIE", "OAUTH2"):
            for name in ("auth_endpoint", "username", "password"):
                if not getattr(self, name):
                    problems.append(f"{name} is required for {method} authentication")
        if method == "OAUTH2":
            if self.oauth_flow.upper() not in OAUTH_FLOWS:
                problems.append(f"unsupported OAuth2 flow {self.oauth_flow!r}")
            for name in ("client_id", "client_password"):
                if not getattr(self, name):
                    problems.append(f"{name} is required for OAUTH2 authentication")

        for name in ("model_dir", "service_dir"):
            value = getattr(self, name)
            if not value or "/" in value or "\\" in value:
                problems.append(f"{name} must be a plain directory name, got {value!r}")
        if self.model_dir == self.service_dir:
            problems.append("model_dir and service_dir must differ")

        if self.compiler not in COMPILERS:
            problems.append(f"unknown compiler {self.compiler!r}")

        if problems:
            raise ConfigError("; ".join(problems))

        self.auth_method = method
        self.oauth_flow = self.oauth_flow.upper()


def load_config_file(path: Path) -> dict[str, Any]:
    """Read a JSON config file into GeneratorConfig keyword arguments."""
    try:
        with open(path) as f:
            raw = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"cannot read config file {path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError(f"config file {path} must contain a JSON object")

    unknown = sorted(set(raw) - set(_FILE_KEYS))
    if unknown:
        raise ConfigError(f"unknown keys in config file {path}: {', '.join(unknown)}")

    return {_FILE_KEYS[key]: value for key, value in raw.items()}
