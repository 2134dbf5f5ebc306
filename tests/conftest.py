from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone

import pytest

from core.domain.models import MediaItem, RemoteUser, RetentionPolicy

NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Empty working directory and user config dir; no `JELLYFIN_CLEANER_*` variables."""

    for key in list(os.environ):
        if key.upper().startswith("JELLYFIN_CLEANER_"):
            monkeypatch.delenv(key, raising=False)
    user_dir = tmp_path / "user-config"
    monkeypatch.setenv("JELLYFIN_CLEANER_HOME", str(user_dir))
    monkeypatch.chdir(tmp_path)
    return user_dir


def days_ago(days: float) -> datetime:
    return NOW - timedelta(days=days)


def make_movie(item_id: str, name: str, *, year: int | None = 2020, watched_days_ago: float | None = 40, can_delete=None):
    return MediaItem(
        id=item_id,
        kind="Movie",
        name=name,
        production_year=year,
        last_played=None if watched_days_ago is None else days_ago(watched_days_ago),
        can_delete=can_delete,
    )


def make_episode(item_id: str, series: str, name: str, *, watched_days_ago: float | None = 40, can_delete=None):
    return MediaItem(
        id=item_id,
        kind="Episode",
        name=name,
        series_name=series,
        last_played=None if watched_days_ago is None else days_ago(watched_days_ago),
        can_delete=can_delete,
    )


class FakeSession:
    def __init__(self, items=None, users=None) -> None:
        self.items = list(items or [])
        self.users = users if users is not None else [RemoteUser(id="u1", name="Alice")]
        self.failing_ids: dict[str, Exception] = {}
        self.deleted: list[str] = []
        self.queries: list[tuple[str, list]] = []
        self.closed = False

    async def list_users(self):
        return list(self.users)

    async def query_watched_items(self, user_id, kinds):
        self.queries.append((user_id, list(kinds)))
        return list(self.items)

    async def delete_item(self, item_id):
        if item_id in self.failing_ids:
            raise self.failing_ids[item_id]
        self.deleted.append(item_id)

    async def aclose(self):
        self.closed = True


class FakeProvider:
    def __init__(self, session: FakeSession) -> None:
        self.session = session
        self.calls = 0

    async def authenticate(self, settings):
        self.calls += 1
        return self.session


@pytest.fixture
def policy() -> RetentionPolicy:
    return RetentionPolicy(retention_days=30)


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()
