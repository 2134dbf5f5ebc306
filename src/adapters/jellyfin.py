"""Jellyfin / Emby REST adapter.

Implements `core.interfaces.session.SessionProvider` and `CatalogSession`
over `httpx`. Transport and HTTP errors are translated into the project's
error taxonomy here so the core never sees `httpx` exceptions.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

import httpx
from pydantic import ValidationError

from adapters.http_client import build_async_client
from core.config import AppSettings
from core.domain.errors import AuthenticationError, DeletionError, RemoteQueryError
from core.domain.models import ItemKind, MediaItem, RemoteUser
from core.logging_config import get_project_logger

API_KEY_WARNING = (
    "If the API key was granted manually (Dashboard -> API Keys), the server may only "
    "allow it to read; use username/password or a key issued in a user context to delete items."
)


def _describe_http_error(exc: Exception) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        body = exc.response.text.strip()
        status = f"HTTP {exc.response.status_code}"
        return f"{status}: {body[:200]}" if body else status
    return str(exc) or type(exc).__name__


class JellyfinSession:
    """Authenticated session; owns its `httpx.AsyncClient`."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def __aenter__(self) -> "JellyfinSession":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get_json(self, path: str, params: dict[str, str] | None = None) -> Any:
        try:
            resp = await self._client.get(path, params=params)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as exc:
            # Token or API key rejected
            if exc.response.status_code in (401, 403):
                raise AuthenticationError(
                    f"Server rejected the credentials for {path}: {_describe_http_error(exc)}",
                    details={"path": path},
                ) from exc
            raise RemoteQueryError(
                f"Request to {path} failed: {_describe_http_error(exc)}",
                details={"path": path},
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise RemoteQueryError(
                f"Request to {path} failed: {_describe_http_error(exc)}",
                details={"path": path},
            ) from exc

    async def list_users(self) -> list[RemoteUser]:
        data = await self._get_json("/Users")
        if not isinstance(data, list):
            raise RemoteQueryError("Unexpected /Users payload", details={"type": type(data).__name__})
        try:
            return [RemoteUser.model_validate(raw) for raw in data]
        except ValidationError as exc:
            raise RemoteQueryError(f"Invalid user payload: {exc}") from exc

    async def query_watched_items(self, user_id: str, kinds: Iterable[ItemKind]) -> list[MediaItem]:
        params = {
            "IsPlayed": "true",
            "Recursive": "true",
            "SortBy": "DatePlayed",
            "SortOrder": "Ascending",
            "IncludeItemTypes": ",".join(kind.value for kind in kinds),
            "Fields": "CanDelete",
        }
        data = await self._get_json(f"/Users/{user_id}/Items", params=params)
        if not isinstance(data, dict):
            raise RemoteQueryError("Unexpected items payload", details={"type": type(data).__name__})
        try:
            return [MediaItem.model_validate(raw) for raw in data.get("Items") or []]
        except ValidationError as exc:
            raise RemoteQueryError(f"Invalid item payload: {exc}") from exc

    async def delete_item(self, item_id: str) -> None:
        try:
            resp = await self._client.delete(f"/Items/{item_id}")
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise DeletionError(_describe_http_error(exc), details={"item_id": item_id}) from exc


class JellyfinSessionProvider:
    """Builds a `JellyfinSession` from connection settings.

    - `api_key` set: the key is used as the access token directly.
    - otherwise: `POST /Users/AuthenticateByName` with username/password.
    """

    def __init__(
        self,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._transport = transport
        self._log = logger or get_project_logger()

    async def authenticate(self, settings: AppSettings) -> JellyfinSession:
        conn = settings.connection
        if conn.api_key:
            self._log.warning(API_KEY_WARNING)
            return JellyfinSession(build_async_client(settings, token=conn.api_key, transport=self._transport))

        token = await self._authenticate_by_name(settings)
        return JellyfinSession(build_async_client(settings, token=token, transport=self._transport))

    async def _authenticate_by_name(self, settings: AppSettings) -> str:
        conn = settings.connection
        payload = {"Username": conn.username, "Pw": conn.password or ""}
        try:
            async with build_async_client(settings, transport=self._transport) as client:
                resp = await client.post("/Users/AuthenticateByName", json=payload)
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise AuthenticationError(
                f"Could not authenticate {conn.username} against {conn.endpoint}: {_describe_http_error(exc)}",
                details={"endpoint": conn.endpoint, "username": conn.username},
            ) from exc

        token = data.get("AccessToken") if isinstance(data, dict) else None
        if not isinstance(token, str) or not token:
            raise AuthenticationError(
                "Authentication response did not contain an access token",
                details={"endpoint": conn.endpoint, "username": conn.username},
            )
        return token
