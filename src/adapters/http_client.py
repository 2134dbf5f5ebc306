"""httpx wrapper.

Why a wrapper:
- Standardizes timeouts, headers and the media server's auth header.
- Eases testing: a `transport` (e.g. `httpx.MockTransport`) can be injected.
"""

from __future__ import annotations

import httpx

from core.config import AppSettings


def build_authorization_header(settings: AppSettings, token: str | None = None) -> str:
    """`X-Emby-Authorization` value identifying this client to the server."""

    parts = [
        f'Client="{settings.client_name}"',
        f'Device="{settings.device_name}"',
        f'DeviceId="{settings.device_id}"',
        f'Version="{settings.client_version}"',
    ]
    if token:
        parts.append(f'Token="{token}"')
    return "MediaBrowser " + ", ".join(parts)


def build_async_client(
    settings: AppSettings,
    *,
    token: str | None = None,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create an `httpx.AsyncClient` bound to the configured server.

    Why a builder:
    - Every request shares the same base URL, timeout and identification.
    - Tests swap the network for a transport without touching the adapter.
    """

    headers: dict[str, str] = {
        "Accept": "application/json",
        "X-Emby-Authorization": build_authorization_header(settings, token),
    }
    if token:
        headers["X-Emby-Token"] = token
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        base_url=settings.connection.endpoint.rstrip("/"),
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        transport=transport,
    )
