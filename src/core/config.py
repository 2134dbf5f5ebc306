"""Core configuration.

Why here:
- Centralizes environment variables (pydantic-settings) without leaking into the CLI.
- Lets adapters (HTTP session) and services read config consistently.

Sources, highest precedence first: explicit overrides (CLI flags), the JSON
config file, `JELLYFIN_CLEANER_*` environment variables, then the `.env`
files returned by `settings_env_files()`.
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

from dotenv import set_key
from pydantic import BaseModel, Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.errors import ConfigurationError
from core.domain.models import ItemKind, RetentionPolicy, UnknownKindPolicy

APP_DIR_NAME = "jellyfin-cleaner"
USER_ENV_HEADER = "# jellyfin-cleaner connection, written by `jellyfin-cleaner doctor setup`"


def get_user_config_dir() -> Path:
    """Directory holding the per-user `.env`.

    `JELLYFIN_CLEANER_HOME` overrides the platform default.
    """

    override = os.environ.get("JELLYFIN_CLEANER_HOME")
    if override:
        return Path(override).expanduser()
    if sys.platform.startswith("win"):
        return Path(os.environ.get("APPDATA") or Path.home()) / APP_DIR_NAME
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_DIR_NAME
    return Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config") / APP_DIR_NAME


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def settings_env_files() -> tuple[Path, ...]:
    # Later files win: the user's config overrides a project-local .env
    return (Path(".env"), get_user_env_file())


def write_user_env_vars(values: dict[str, str | None]) -> Path:
    """Set keys in the user's `.env`, keeping every other line as it is."""

    env_path = get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)
    if not env_path.exists():
        env_path.write_text(USER_ENV_HEADER + "\n", encoding="utf-8")
        # Holds a password or API key
        env_path.chmod(0o600)

    for key, value in values.items():
        if value is not None:
            set_key(env_path, key, value)
    return env_path


class ConnectionSettings(BaseModel):
    endpoint: str = Field(
        default="",
        description="Base URL of the media server (e.g. http://localhost:8096).",
    )
    username: str = Field(
        default="",
        description="User whose watch history is inspected.",
    )
    password: str | None = Field(
        default=None,
        description="Password for username/password authentication.",
    )
    api_key: str | None = Field(
        default=None,
        description="API key; takes precedence over the password when set.",
    )


class AppSettings(BaseSettings):
    """Central application configuration.

    Why pydantic-settings:
    - Typed validation at the edge (env vars, .env, JSON file) keeps the core clean.
    - One configuration contract shared by the CLI, the adapter and the services.
    """

    model_config = SettingsConfigDict(
        env_prefix="JELLYFIN_CLEANER_",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
        env_file_encoding="utf-8",
    )

    connection: ConnectionSettings = Field(default_factory=ConnectionSettings)

    retention_days: int = Field(
        default=30,
        gt=0,
        description="Watched items older than this many days are removed.",
    )
    include_kinds: list[ItemKind] = Field(
        default_factory=lambda: [ItemKind.MOVIE, ItemKind.EPISODE],
        min_length=1,
        description="Item kinds queried from the server.",
    )
    ignore_list_contains: list[str] = Field(
        default_factory=list,
        description="Case-insensitive substrings that protect an item.",
    )
    ignore_list_equals: list[str] = Field(
        default_factory=list,
        description="Case-insensitive exact names that protect an item.",
    )
    test_mode: bool = Field(
        default=False,
        description="Only log what would be deleted.",
    )
    print_ignored: bool = Field(
        default=False,
        description="Log every item protected by the ignore lists.",
    )
    unknown_kind_policy: UnknownKindPolicy = Field(
        default=UnknownKindPolicy.REJECT,
        description="Reject the run or skip items of an unsupported type.",
    )

    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout per request (seconds).",
    )
    client_name: str = Field(default="JellyfinCleaner", min_length=1)
    device_name: str = Field(default="jellyfin-cleaner", min_length=1)
    device_id: str = Field(default="jellyfin-cleaner", min_length=1)
    client_version: str = Field(default="0.1.0", min_length=1)

    log_level: str = Field(default="INFO")
    log_format: str = Field(
        default="text",
        description="'text' or 'json' (one JSON object per line).",
    )

    @model_validator(mode="after")
    def _dedupe_kinds(self) -> "AppSettings":
        seen: list[ItemKind] = []
        for kind in self.include_kinds:
            if kind not in seen:
                seen.append(kind)
        self.include_kinds = seen
        return self

    def to_policy(self) -> RetentionPolicy:
        return RetentionPolicy(
            retention_days=self.retention_days,
            include_kinds=tuple(self.include_kinds),
            ignore_list_contains=tuple(self.ignore_list_contains),
            ignore_list_equals=tuple(self.ignore_list_equals),
            dry_run=self.test_mode,
            print_ignored=self.print_ignored,
            unknown_kind_policy=self.unknown_kind_policy,
        )


def load_settings(config_path: Path | None = None, **overrides: object) -> AppSettings:
    """Build `AppSettings` from the environment, an optional JSON file and overrides.

    Precedence (highest first): explicit overrides, JSON file, environment, .env files.
    """

    values: dict[str, object] = {}
    if config_path is not None:
        try:
            raw = json.loads(config_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigurationError(
                f"Could not read config file {config_path}: {exc}",
                details={"path": str(config_path)},
            ) from exc
        if not isinstance(raw, dict):
            raise ConfigurationError(
                f"Config file {config_path} must contain a JSON object",
                details={"path": str(config_path)},
            )
        values.update(raw)

    values.update({k: v for k, v in overrides.items() if v is not None})

    try:
        settings = AppSettings(_env_file=settings_env_files(), **values)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc

    if not settings.connection.endpoint.strip():
        raise ConfigurationError("connection.endpoint is required")
    if not settings.connection.username.strip():
        raise ConfigurationError("connection.username is required")
    return settings
