"""Per-item deletion with isolated failures.

Candidates are processed one at a time, in the order given. A failure on one
item (policy refusal or remote error) is logged, counted and never stops the
batch. No retries.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from core.domain.errors import DeletionError
from core.domain.models import ItemOutcome, OutcomeStatus
from core.interfaces.session import CatalogSession
from core.logging_config import get_project_logger
from core.services.eligibility import Candidate

NOT_DELETABLE_MESSAGE = "Item marked not to be deleted."


@dataclass
class DeletionReport:
    deleted: int = 0
    failed: int = 0
    outcomes: list[ItemOutcome] = field(default_factory=list)


class DeletionExecutor:
    def __init__(
        self,
        session: CatalogSession,
        *,
        dry_run: bool = False,
        logger: logging.Logger | None = None,
    ) -> None:
        self._session = session
        self._dry_run = dry_run
        self._log = logger or get_project_logger()

    async def execute(self, candidates: Iterable[Candidate]) -> DeletionReport:
        report = DeletionReport()
        for candidate in candidates:
            outcome = await self._process(candidate)
            if outcome.status is OutcomeStatus.DELETED:
                report.deleted += 1
            elif outcome.status is OutcomeStatus.FAILED:
                report.failed += 1
            report.outcomes.append(outcome)
        return report

    async def _process(self, candidate: Candidate) -> ItemOutcome:
        name = candidate.display_name
        item_id = candidate.item.id

        if self._dry_run:
            self._log.info("Picked - %s", name)
            return ItemOutcome(item_id=item_id, formatted_name=name, status=OutcomeStatus.PICKED)

        try:
            if not candidate.item.deletable:
                raise DeletionError(NOT_DELETABLE_MESSAGE, details={"item_id": item_id})
            await self._session.delete_item(item_id)
        except Exception as exc:
            self._log.error(
                "Could not delete %s: %s",
                name,
                exc,
                extra={"payload": {"item_id": item_id, "error_type": type(exc).__name__}},
            )
            return ItemOutcome(
                item_id=item_id,
                formatted_name=name,
                status=OutcomeStatus.FAILED,
                error=str(exc),
            )

        self._log.info("Deleted - %s", name)
        return ItemOutcome(item_id=item_id, formatted_name=name, status=OutcomeStatus.DELETED)
