"""Shared fixtures: a simulated Spring Data REST server.

The server exposes three repositories (books, authors, publishers) through
``/api/profile``; each answers ``/api/profile/<repo>`` with its JSON schema
or ALPS profile depending on the Accept header. Handlers run on
httpx.MockTransport so no network is involved.
"""

from __future__ import annotations

import copy
import json
from typing import Any, Callable

import httpx
import pytest

from sdr_codegen.config import GeneratorConfig
from sdr_codegen.loader import Entity

BASE_URL = "http://sdr.test/api/"
HOST = "http://sdr.test/api"


# ---------------------------------------------------------------------------
# Sample documents
# ---------------------------------------------------------------------------

def _prop(title: str, type_: str, **extra: Any) -> dict[str, Any]:
    return {"title": title, "readOnly": False, "type": type_, **extra}


def _rel(name: str, repository: str, entity: str) -> dict[str, Any]:
    return {
        "name": name,
        "type": "SAFE",
        "rt": f"{HOST}/profile/{repository}#{entity}-representation",
    }


def _profile(entity: str, repository: str, descriptors: list[dict[str, Any]]) -> dict[str, Any]:
    return {
        "alps": {
            "version": "1.0",
            "descriptor": [
                {
                    "id": f"{entity}-representation",
                    "href": f"{HOST}/profile/{repository}",
                    "descriptor": descriptors,
                },
                {
                    "id": f"get-{repository}",
                    "name": repository,
                    "type": "SAFE",
                    "rt": f"#{entity}-representation",
                },
            ],
        }
    }


def book_schema() -> dict[str, Any]:
    return {
        "title": "Book",
        "properties": {
            "title": _prop("Title", "string"),
            "pages": _prop("Pages", "integer"),
            "author": _prop("Author", "string", format="uri"),
            "publisher": _prop("Publisher", "string", format="uri"),
            "cover": {"title": "Cover", "readOnly": False, "$ref": "#/definitions/cover"},
        },
        "definitions": {
            "cover": {
                "type": "object",
                "properties": {"url": _prop("Url", "string")},
            },
        },
        "type": "object",
        "$schema": "http://json-schema.org/draft-04/schema#",
    }


def author_schema() -> dict[str, Any]:
    return {
        "title": "Author",
        "properties": {
            "name": _prop("Name", "string"),
            "books": _prop("Books", "array", uniqueItems=True, items={"type": "string", "format": "uri"}),
        },
        "definitions": {},
        "type": "object",
        "$schema": "http://json-schema.org/draft-04/schema#",
    }


def publisher_schema() -> dict[str, Any]:
    return {
        "title": "Publisher",
        "properties": {"name": _prop("Name", "string")},
        "definitions": {},
        "type": "object",
        "$schema": "http://json-schema.org/draft-04/schema#",
    }


def library_documents() -> dict[str, tuple[dict[str, Any], dict[str, Any]]]:
    """Repository -> (schema, profile) for the cross-referencing library."""
    return {
        "books": (
            book_schema(),
            _profile("book", "books", [
                {"name": "title", "type": "SEMANTIC"},
                {"name": "pages", "type": "SEMANTIC"},
                _rel("author", "authors", "author"),
                _rel("publisher", "publishers", "publisher"),
                {"name": "cover", "type": "SEMANTIC"},
            ]),
        ),
        "authors": (
            author_schema(),
            _profile("author", "authors", [
                {"name": "name", "type": "SEMANTIC"},
                _rel("books", "books", "book"),
            ]),
        ),
        "publishers": (
            publisher_schema(),
            _profile("publisher", "publishers", [{"name": "name", "type": "SEMANTIC"}]),
        ),
    }


def plain_documents() -> dict[str, tuple[dict[str, Any], dict[str, Any]]]:
    """Same three repositories without any cross references."""
    docs = library_documents()
    docs["books"][1]["alps"]["descriptor"][0]["descriptor"] = [
        {"name": "title", "type": "SEMANTIC"},
    ]
    docs["authors"][1]["alps"]["descriptor"][0]["descriptor"] = [
        {"name": "name", "type": "SEMANTIC"},
    ]
    return docs


# ---------------------------------------------------------------------------
# Simulated server
# ---------------------------------------------------------------------------

class FakeServer:
    """Request handler for httpx.MockTransport that records every request."""

    def __init__(
        self,
        documents: dict[str, tuple[dict[str, Any], dict[str, Any]]],
        root: dict[str, Any] | None = None,
    ) -> None:
        self.documents = documents
        self.root = root
        self.requests: list[httpx.Request] = []
        self.fail: set[tuple[str, str]] = set()

    def root_document(self) -> dict[str, Any]:
        if self.root is not None:
            return self.root
        links = {"self": {"href": f"{HOST}/profile"}}
        for repository in self.documents:
            links[repository] = {"href": f"{HOST}/profile/{repository}"}
        return {"_links": links}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == "/api/profile":
            return httpx.Response(200, json=self.root_document())

        repository = path.rsplit("/", 1)[-1]
        accept = request.headers.get("accept", "")
        if repository not in self.documents or (repository, accept) in self.fail:
            return httpx.Response(404, json={"error": "not found"})

        schema, profile = self.documents[repository]
        if accept == "application/schema+json":
            return httpx.Response(200, content=json.dumps(schema))
        if accept == "application/alps+json":
            return httpx.Response(200, content=json.dumps(profile))
        return httpx.Response(406)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def server() -> FakeServer:
    return FakeServer(library_documents())


@pytest.fixture
def make_client() -> Callable[[FakeServer], httpx.AsyncClient]:
    def _make(fake: FakeServer) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=BASE_URL, transport=fake.transport)
    return _make


@pytest.fixture
def config(tmp_path) -> GeneratorConfig:
    return GeneratorConfig(base_url=BASE_URL, output_dir=str(tmp_path / "api"))


@pytest.fixture
def library_entities() -> dict[str, Entity]:
    """Entities as the loader would produce them for the library server."""
    names = {"books": "book", "authors": "author", "publishers": "publisher"}
    return {
        repo: Entity(repo, names[repo], copy.deepcopy(schema), copy.deepcopy(profile))
        for repo, (schema, profile) in library_documents().items()
    }
