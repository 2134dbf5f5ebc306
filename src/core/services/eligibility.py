"""Selection of deletable items.

Two stages, each evaluated exactly once per run:

1. age: watched strictly before `now - retention_days`, ordered by display name
2. ignore: drop items whose matching key hits an ignore rule

Both stages return materialized lists, so counting and iterating never
re-run a rule (and never re-emit an "Ignored" log line).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from core.domain.errors import UnsupportedKindError
from core.domain.models import ItemKind, MediaItem, RetentionPolicy, UnknownKindPolicy
from core.logging_config import get_project_logger


def resolve_kind(item: MediaItem) -> ItemKind:
    try:
        return ItemKind(item.kind)
    except ValueError:
        raise UnsupportedKindError(item.kind, details={"item_id": item.id, "name": item.name}) from None


def matching_key(item: MediaItem) -> str:
    """Value the ignore rules are tested against: series for episodes, title for movies."""

    kind = resolve_kind(item)
    if kind is ItemKind.EPISODE:
        return item.series_name or ""
    if kind is ItemKind.MOVIE:
        return item.name
    raise UnsupportedKindError(item.kind)


def format_item_name(item: MediaItem) -> str:
    kind = resolve_kind(item)
    if kind is ItemKind.EPISODE:
        return f"{item.series_name or ''} - {item.name}"
    if kind is ItemKind.MOVIE:
        year = item.production_year if item.production_year is not None else ""
        return f"{item.name} - {year}"
    raise UnsupportedKindError(item.kind)


def retention_cutoff(now: datetime, retention_days: int) -> datetime:
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now - timedelta(days=retention_days)


def is_age_eligible(item: MediaItem, cutoff: datetime) -> bool:
    # No watch timestamp never means "infinitely old".
    if item.last_played is None:
        return False
    return item.last_played < cutoff


@dataclass(frozen=True)
class Candidate:
    """An age-eligible item with its derived names computed once."""

    item: MediaItem
    display_name: str
    match_key: str

    @classmethod
    def from_item(cls, item: MediaItem) -> "Candidate":
        return cls(item=item, display_name=format_item_name(item), match_key=matching_key(item))


@dataclass
class EligibilityResult:
    eligible: list[Candidate] = field(default_factory=list)
    candidates: list[Candidate] = field(default_factory=list)
    ignored: list[Candidate] = field(default_factory=list)

    @property
    def picked_count(self) -> int:
        return len(self.eligible)

    @property
    def ignored_count(self) -> int:
        return len(self.eligible) - len(self.candidates)


class EligibilityFilter:
    def __init__(self, policy: RetentionPolicy, logger: logging.Logger | None = None) -> None:
        self._policy = policy
        self._log = logger or get_project_logger()
        self._contains = tuple(entry.lower() for entry in policy.ignore_list_contains)
        self._equals = frozenset(entry.lower() for entry in policy.ignore_list_equals)

    def select_age_eligible(self, items: Iterable[MediaItem], now: datetime) -> list[Candidate]:
        cutoff = retention_cutoff(now, self._policy.retention_days)
        eligible: list[Candidate] = []
        for item in items:
            if not is_age_eligible(item, cutoff):
                continue
            try:
                eligible.append(Candidate.from_item(item))
            except UnsupportedKindError:
                if self._policy.unknown_kind_policy is not UnknownKindPolicy.SKIP:
                    raise
                self._log.warning(
                    "Skipped - %s (unsupported item type %s)",
                    item.name,
                    item.kind,
                    extra={"payload": {"item_id": item.id, "kind": item.kind}},
                )
        eligible.sort(key=lambda candidate: (candidate.display_name.casefold(), candidate.display_name))
        return eligible

    def is_ignored(self, candidate: Candidate) -> bool:
        key = candidate.match_key.lower()
        if any(entry in key for entry in self._contains):
            return True
        return key in self._equals

    def apply_ignore_rules(self, eligible: list[Candidate]) -> tuple[list[Candidate], list[Candidate]]:
        """Split `eligible` into (candidates, ignored), preserving order."""

        candidates: list[Candidate] = []
        ignored: list[Candidate] = []
        for candidate in eligible:
            if self.is_ignored(candidate):
                ignored.append(candidate)
                if self._policy.print_ignored:
                    self._log.info("Ignored - %s", candidate.display_name)
            else:
                candidates.append(candidate)
        return candidates, ignored

    def evaluate(self, items: Iterable[MediaItem], now: datetime) -> EligibilityResult:
        eligible = self.select_age_eligible(items, now)
        candidates, ignored = self.apply_ignore_rules(eligible)
        return EligibilityResult(eligible=eligible, candidates=candidates, ignored=ignored)
