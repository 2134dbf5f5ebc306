from __future__ import annotations

import json

import pytest
from dotenv import dotenv_values

import core.config as config_module
from core.config import AppSettings, load_settings
from core.domain.errors import ConfigurationError
from core.domain.models import ItemKind, UnknownKindPolicy


def _write_config(tmp_path, payload):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_json_config_file_builds_policy(tmp_path):
    path = _write_config(
        tmp_path,
        {
            "connection": {"endpoint": "http://jf.local", "username": "alice", "password": "pw"},
            "retention_days": 14,
            "include_kinds": ["Episode"],
            "ignore_list_contains": ["Star"],
            "ignore_list_equals": ["The Office"],
            "test_mode": True,
            "print_ignored": True,
            "unknown_kind_policy": "skip",
        },
    )

    policy = load_settings(path).to_policy()

    assert policy.retention_days == 14
    assert policy.include_kinds == (ItemKind.EPISODE,)
    assert policy.ignore_list_contains == ("Star",)
    assert policy.ignore_list_equals == ("The Office",)
    assert policy.dry_run is True
    assert policy.print_ignored is True
    assert policy.unknown_kind_policy is UnknownKindPolicy.SKIP


def test_environment_variables_and_overrides(monkeypatch):
    monkeypatch.setenv("JELLYFIN_CLEANER_CONNECTION__ENDPOINT", "http://env.local")
    monkeypatch.setenv("JELLYFIN_CLEANER_CONNECTION__USERNAME", "bob")
    monkeypatch.setenv("JELLYFIN_CLEANER_RETENTION_DAYS", "60")
    monkeypatch.setenv("JELLYFIN_CLEANER_TEST_MODE", "true")

    settings = load_settings(retention_days=7, test_mode=None)

    assert settings.connection.endpoint == "http://env.local"
    assert settings.connection.username == "bob"
    assert settings.retention_days == 7
    assert settings.test_mode is True


def test_defaults_include_both_kinds():
    settings = AppSettings()
    assert settings.include_kinds == [ItemKind.MOVIE, ItemKind.EPISODE]
    assert settings.test_mode is False


def test_duplicate_kinds_are_collapsed():
    settings = AppSettings(include_kinds=["Movie", "Movie", "Episode"])
    assert settings.include_kinds == [ItemKind.MOVIE, ItemKind.EPISODE]


@pytest.mark.parametrize("days", [0, -3])
def test_retention_days_must_be_positive(tmp_path, days):
    path = _write_config(
        tmp_path,
        {"connection": {"endpoint": "http://jf.local", "username": "alice"}, "retention_days": days},
    )
    with pytest.raises(ConfigurationError, match="Invalid configuration"):
        load_settings(path)


def test_missing_endpoint_is_rejected(tmp_path):
    path = _write_config(tmp_path, {"connection": {"username": "alice"}})
    with pytest.raises(ConfigurationError, match="endpoint"):
        load_settings(path)


def test_unreadable_config_file(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigurationError, match="Could not read config file"):
        load_settings(path)


def test_write_user_env_vars_updates_keys_in_place(isolated_config):
    config_module.write_user_env_vars({"B_KEY": "2", "A_KEY": "1"})
    env_path = config_module.write_user_env_vars({"B_KEY": "3", "SKIPPED": None})

    assert env_path == isolated_config / ".env"
    assert env_path.read_text(encoding="utf-8").startswith(config_module.USER_ENV_HEADER)
    assert dotenv_values(env_path) == {"B_KEY": "3", "A_KEY": "1"}


def test_user_env_file_is_resolved_when_settings_load(monkeypatch, tmp_path):
    config_module.write_user_env_vars(
        {
            "JELLYFIN_CLEANER_CONNECTION__ENDPOINT": "http://saved.local",
            "JELLYFIN_CLEANER_CONNECTION__USERNAME": "saved",
        }
    )
    assert load_settings().connection.endpoint == "http://saved.local"

    monkeypatch.setenv("JELLYFIN_CLEANER_HOME", str(tmp_path / "other-user"))
    path = _write_config(tmp_path, {"connection": {"username": "alice"}})
    with pytest.raises(ConfigurationError, match="endpoint"):
        load_settings(path)


def test_project_env_file_is_overridden_by_user_env_file():
    with open(".env", "w", encoding="utf-8") as fh:
        fh.write("JELLYFIN_CLEANER_CONNECTION__ENDPOINT=http://project.local\n")
        fh.write("JELLYFIN_CLEANER_CONNECTION__USERNAME=project\n")
    config_module.write_user_env_vars({"JELLYFIN_CLEANER_CONNECTION__USERNAME": "saved"})

    settings = load_settings()

    assert settings.connection.endpoint == "http://project.local"
    assert settings.connection.username == "saved"
