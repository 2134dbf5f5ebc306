"""Domain models (Pydantic v2).

Why Pydantic in the domain:
- Strict validation and self-documenting fields (Field) without coupling the
  core to I/O libraries.
- The media server speaks PascalCase JSON; aliases normalize it at the edge.

Note:
- These models describe *what* the data is, not *how* it is fetched.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.config import ConfigDict


class ItemKind(str, Enum):
    """Item types the cleaner knows how to name and match."""

    MOVIE = "Movie"
    EPISODE = "Episode"


class UnknownKindPolicy(str, Enum):
    """What to do with an age-eligible item whose type is not an `ItemKind`."""

    REJECT = "reject"
    SKIP = "skip"


_FRACTION_RE = re.compile(r"\.(\d+)")


def parse_timestamp(value: Any) -> datetime | None:
    """Parse a server timestamp; naive values are taken as UTC.

    The server emits up to seven fractional digits and a trailing `Z`.
    Unparseable values yield None (never eligible).
    """

    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if not isinstance(value, str) or not value.strip():
        return None
    normalized = value.strip().replace("Z", "+00:00")
    # fromisoformat needs exactly six fractional digits on older interpreters
    normalized = _FRACTION_RE.sub(lambda m: "." + (m.group(1) + "000000")[:6], normalized, count=1)
    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


class RemoteUser(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    id: str = Field(..., alias="Id", min_length=1)
    name: str = Field(..., alias="Name")


class MediaItem(BaseModel):
    """A watched catalog entry as reported by the media server.

    `kind` keeps the raw `Type` string so that items of a type this tool does
    not know about can still be parsed and then rejected (or skipped) by policy.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    id: str = Field(..., alias="Id", min_length=1)
    kind: str = Field(..., alias="Type", description="Raw item type (Movie, Episode, ...).")
    name: str = Field(default="", alias="Name")
    series_name: str | None = Field(
        default=None,
        alias="SeriesName",
        description="Series title; meaningful only for episodes.",
    )
    production_year: int | None = Field(
        default=None,
        alias="ProductionYear",
        description="Release year; meaningful only for movies.",
    )
    last_played: datetime | None = Field(
        default=None,
        alias="LastPlayedDate",
        description="Last watch time for the queried user (from UserData).",
    )
    can_delete: bool | None = Field(
        default=None,
        alias="CanDelete",
        description="Server-side delete permission; absent means allowed.",
    )

    @model_validator(mode="before")
    @classmethod
    def _flatten_user_data(cls, data: Any) -> Any:
        if isinstance(data, dict) and "LastPlayedDate" not in data:
            user_data = data.get("UserData")
            if isinstance(user_data, dict):
                data = {**data, "LastPlayedDate": user_data.get("LastPlayedDate")}
        return data

    @field_validator("last_played", mode="before")
    @classmethod
    def _parse_last_played(cls, value: Any) -> datetime | None:
        return parse_timestamp(value)

    @property
    def deletable(self) -> bool:
        return True if self.can_delete is None else self.can_delete


class RetentionPolicy(BaseModel):
    """Selection rules for one run, derived from `AppSettings`."""

    model_config = ConfigDict(frozen=True)

    retention_days: int = Field(..., gt=0)
    include_kinds: tuple[ItemKind, ...] = Field(default=(ItemKind.MOVIE, ItemKind.EPISODE))
    ignore_list_contains: tuple[str, ...] = Field(default_factory=tuple)
    ignore_list_equals: tuple[str, ...] = Field(default_factory=tuple)
    dry_run: bool = False
    print_ignored: bool = False
    unknown_kind_policy: UnknownKindPolicy = UnknownKindPolicy.REJECT


class RunSummary(BaseModel):
    picked: int = Field(default=0, ge=0, description="Age-eligible before ignore filtering.")
    ignored: int = Field(default=0, ge=0, description="Age-eligible but protected by an ignore rule.")
    deleted: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)


class OutcomeStatus(str, Enum):
    PICKED = "picked"
    DELETED = "deleted"
    FAILED = "failed"


class ItemOutcome(BaseModel):
    item_id: str
    formatted_name: str
    status: OutcomeStatus
    error: str | None = None


class RunResult(BaseModel):
    """Everything a run produced: counters plus per-item detail for reports."""

    summary: RunSummary
    dry_run: bool = False
    outcomes: list[ItemOutcome] = Field(default_factory=list)
    ignored_names: list[str] = Field(default_factory=list)
    finished_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
