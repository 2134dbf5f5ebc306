"""Cleanup orchestration.

One sequential pass:
authenticate -> resolve user -> fetch watched items -> age filter ->
ignore filter -> delete (one item at a time) -> summary.

Fatal errors (`AuthenticationError`, `UserNotFoundError`, `RemoteQueryError`,
`UnsupportedKindError`) propagate to the caller before any summary is logged.
The CLI stays free of selection logic and only renders the `RunResult`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timezone

from core.config import AppSettings
from core.domain.errors import UserNotFoundError
from core.domain.models import ItemKind, MediaItem, RetentionPolicy, RunResult
from core.interfaces.session import CatalogSession, SessionProvider
from core.logging_config import get_project_logger
from core.services.deletion import DeletionExecutor
from core.services.eligibility import EligibilityFilter
from core.services.reporting import SummaryReporter, build_summary


async def resolve_user_id(session: CatalogSession, username: str) -> str:
    """Case-insensitive exact match; zero or several matches is an error."""

    wanted = username.lower()
    users = await session.list_users()
    matches = [user for user in users if user.name.lower() == wanted]
    if len(matches) != 1:
        raise UserNotFoundError(
            f"Could not find a user for name {username}",
            details={"username": username, "matches": len(matches)},
        )
    return matches[0].id


class ItemFetcher:
    def __init__(self, session: CatalogSession, logger: logging.Logger | None = None) -> None:
        self._session = session
        self._log = logger or get_project_logger()

    async def fetch(self, user_id: str, kinds: Iterable[ItemKind]) -> list[MediaItem]:
        kinds = list(kinds)
        items = await self._session.query_watched_items(user_id, kinds)
        self._log.debug(
            "Fetched %d watched items",
            len(items),
            extra={"payload": {"kinds": [kind.value for kind in kinds], "count": len(items)}},
        )
        return items


async def run_cleanup(
    session: CatalogSession,
    *,
    username: str,
    policy: RetentionPolicy,
    logger: logging.Logger | None = None,
    now: datetime | None = None,
) -> RunResult:
    """Run the selection-and-deletion pass against an authenticated session."""

    log = logger or get_project_logger()
    current = now or datetime.now(timezone.utc)

    user_id = await resolve_user_id(session, username)
    items = await ItemFetcher(session, log).fetch(user_id, policy.include_kinds)

    selection = EligibilityFilter(policy, log).evaluate(items, current)

    executor = DeletionExecutor(session, dry_run=policy.dry_run, logger=log)
    deletion = await executor.execute(selection.candidates)

    summary = build_summary(
        picked=selection.picked_count,
        candidate_count=len(selection.candidates),
        deleted=deletion.deleted,
        failed=deletion.failed,
    )
    SummaryReporter(log).report(summary)

    return RunResult(
        summary=summary,
        dry_run=policy.dry_run,
        outcomes=deletion.outcomes,
        ignored_names=[candidate.display_name for candidate in selection.ignored],
    )


async def clean(
    settings: AppSettings,
    provider: SessionProvider,
    *,
    logger: logging.Logger | None = None,
    now: datetime | None = None,
) -> RunResult:
    """Authenticate, run one cleanup pass and release the session."""

    session = await provider.authenticate(settings)
    try:
        return await run_cleanup(
            session,
            username=settings.connection.username,
            policy=settings.to_policy(),
            logger=logger,
            now=now,
        )
    finally:
        aclose = getattr(session, "aclose", None)
        if callable(aclose):
            await aclose()
