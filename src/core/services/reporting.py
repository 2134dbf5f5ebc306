"""Run summary aggregation and the final summary log block."""

from __future__ import annotations

import logging

from core.domain.models import RunSummary
from core.logging_config import get_project_logger

_RULE = "==================="


def build_summary(*, picked: int, candidate_count: int, deleted: int, failed: int) -> RunSummary:
    """`ignored` is derived: age-eligible items that did not survive the ignore rules."""

    return RunSummary(
        picked=picked,
        ignored=picked - candidate_count,
        deleted=deleted,
        failed=failed,
    )


def format_summary(summary: RunSummary) -> str:
    return "\n".join(
        [
            "",
            _RULE,
            f"Picked Count - {summary.picked}",
            f"Deleted Count - {summary.deleted}",
            f"Ignored Count - {summary.ignored}",
            f"Failed Count - {summary.failed}",
            _RULE,
        ]
    )


class SummaryReporter:
    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._log = logger or get_project_logger()

    def report(self, summary: RunSummary) -> None:
        self._log.info(format_summary(summary), extra={"payload": summary.model_dump()})
