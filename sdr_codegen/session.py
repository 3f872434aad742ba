"""HTTP session setup and authentication.

One httpx.AsyncClient is built per run and passed to every fetch. Cookies
from a cookie login stay in the client's jar; an OAuth2 token is attached
as a default Authorization header.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx

from .config import GeneratorConfig
from .errors import AuthenticationError

logger = logging.getLogger(__name__)


def build_client(
    config: GeneratorConfig,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create the client bound to the configured base URL."""
    return httpx.AsyncClient(
        base_url=config.base_url,
        timeout=config.timeout,
        follow_redirects=True,
        transport=transport,
    )


async def authenticate_with_cookies(client: httpx.AsyncClient, config: GeneratorConfig) -> None:
    """POST the credentials as a form; the session cookie lands in the jar."""
    resp = await client.post(
        config.auth_endpoint,
        data={"username": config.username, "password": config.password},
    )
    resp.raise_for_status()


async def authenticate_with_oauth2(client: httpx.AsyncClient, config: GeneratorConfig) -> None:
    """Acquire a token with the password grant and attach it to the client."""
    resp = await client.post(
        config.auth_endpoint,
        data={
            "grant_type": "password",
            "username": config.username,
            "password": config.password,
            "client_id": config.client_id,
            "client_secret": config.client_password,
        },
        auth=(config.client_id or "", config.client_password or ""),
    )
    resp.raise_for_status()
    token = resp.json().get("access_token")
    if not token:
        raise AuthenticationError("Token response does not contain an access_token.")
    client.headers["Authorization"] = f"Bearer {token}"


async def login(client: httpx.AsyncClient, config: GeneratorConfig) -> None:
    """Authenticate the client according to config.auth_method."""
    if config.auth_method == "NONE":
        return
    try:
        if config.auth_method == "COOKIE":
            await authenticate_with_cookies(client, config)
        elif config.auth_method == "OAUTH2":
            await authenticate_with_oauth2(client, config)
    except (httpx.HTTPError, ValueError) as exc:
        raise AuthenticationError(f"Authentication failed: {exc}") from exc
    logger.info("Authenticated as user %s.", config.username)


@asynccontextmanager
async def open_session(
    config: GeneratorConfig,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield an authenticated client, closing it when the run ends."""
    async with build_client(config, transport) as client:
        await login(client, config)
        yield client
