"""Discover the server's repositories and load their schemas and profiles.

The discovery endpoint (``profile``) lists one link per exported repository.
For every repository two representations are fetched from
``profile/<repository>``: the JSON schema and the ALPS profile.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from .errors import DescriptionError, DiscoveryFormatError, DiscoveryRequestError
from .naming import canonical_name, to_class_name

logger = logging.getLogger(__name__)

PROFILE_PATH = "profile"
SCHEMA_MEDIA_TYPE = "application/schema+json"
ALPS_MEDIA_TYPE = "application/alps+json"


@dataclass
class Entity:
    """One exported repository and everything collected about it."""

    repository: str
    name: str = ""
    schema: dict[str, Any] = field(default_factory=dict)
    profile: dict[str, Any] = field(default_factory=dict)

    @property
    def class_name(self) -> str:
        return to_class_name(self.name)

    @property
    def descriptors(self) -> list[dict[str, Any]]:
        """Property descriptors of the primary (representation) descriptor."""
        return get_primary_descriptor(self.profile).get("descriptor", [])


def get_primary_descriptor(profile: dict[str, Any]) -> dict[str, Any]:
    """Extract the first top-level descriptor of an ALPS document."""
    descriptors = profile.get("alps", {}).get("descriptor", [])
    return descriptors[0] if descriptors else {}


async def _get_json(client: httpx.AsyncClient, path: str, accept: str | None = None) -> Any:
    headers = {"Accept": accept} if accept else None
    logger.debug("GET %s (%s)", path, accept or "default")
    resp = await client.get(path, headers=headers)
    resp.raise_for_status()
    return resp.json()


async def list_repositories(client: httpx.AsyncClient) -> list[str]:
    """Return the repository names linked from the discovery endpoint, minus self."""
    try:
        data = await _get_json(client, PROFILE_PATH)
    except (httpx.HTTPError, ValueError) as exc:
        raise DiscoveryRequestError(f"Collecting entities failed: {exc}") from exc

    if not isinstance(data, dict) or not isinstance(data.get("_links"), dict):
        raise DiscoveryFormatError(
            "Response does not contain _links element. Could not collect entities."
        )

    return [key for key in data["_links"] if key != "self"]


async def describe_entity(client: httpx.AsyncClient, entity: Entity) -> Entity:
    """Fetch schema and profile for one repository and derive its name."""
    path = f"{PROFILE_PATH}/{entity.repository}"
    try:
        entity.schema = await _get_json(client, path, SCHEMA_MEDIA_TYPE)
    except (httpx.HTTPError, ValueError) as exc:
        raise DescriptionError(
            f"Could not collect schema for '{entity.repository}': {exc}"
        ) from exc
    try:
        entity.profile = await _get_json(client, path, ALPS_MEDIA_TYPE)
    except (httpx.HTTPError, ValueError) as exc:
        raise DescriptionError(
            f"Could not collect profile for '{entity.repository}': {exc}"
        ) from exc

    if not isinstance(entity.schema, dict) or not isinstance(entity.profile, dict):
        raise DescriptionError(f"Unexpected response shape for '{entity.repository}'")

    descriptor_id = get_primary_descriptor(entity.profile).get("id", "")
    name = canonical_name(descriptor_id)
    if name is None:
        raise DescriptionError(
            f"Malformed profile for '{entity.repository}': "
            f"descriptor id {descriptor_id!r} does not name an entity"
        )
    entity.name = name
    return entity


async def load_entities(client: httpx.AsyncClient) -> dict[str, Entity]:
    """List every repository and describe each one, strictly in sequence."""
    repositories = await list_repositories(client)
    logger.info("Collected list of %d entities.", len(repositories))

    entities: dict[str, Entity] = {}
    for repository in repositories:
        entities[repository] = await describe_entity(client, Entity(repository))
    logger.info("Collected schemas and profiles.")
    return entities


def resolve_ref(schema: dict[str, Any], ref: str) -> dict[str, Any]:
    """Resolve a local $ref pointer (``#/definitions/x``) inside a schema."""
    parts = ref.lstrip("#/").split("/")
    node: Any = schema
    for part in parts:
        node = node[part]
    return node
