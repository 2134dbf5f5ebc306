"""Contracts for the remote catalog service.

Why Protocol:
- A structural contract (duck typing) without rigid inheritance.
- The Jellyfin adapter and the test fakes are interchangeable, and the core
  never imports an HTTP library.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from core.domain.models import ItemKind, MediaItem, RemoteUser

if TYPE_CHECKING:
    from core.config import AppSettings


@runtime_checkable
class CatalogSession(Protocol):
    """Authenticated handle on the media server.

    Design rules:
    - every method is async because each one is a remote call
    - failures are raised as the project's error types
      (`RemoteQueryError`, `DeletionError`), never as transport exceptions
    """

    async def list_users(self) -> list[RemoteUser]:
        """Return every user visible to the session."""

        ...

    async def query_watched_items(self, user_id: str, kinds: Iterable[ItemKind]) -> list[MediaItem]:
        """Return the user's watched items of `kinds`, oldest watch first."""

        ...

    async def delete_item(self, item_id: str) -> None:
        """Delete one item from the library (and from disk)."""

        ...


@runtime_checkable
class SessionProvider(Protocol):
    """Builds an authenticated `CatalogSession`; raises `AuthenticationError`."""

    async def authenticate(self, settings: AppSettings) -> CatalogSession:
        ...
