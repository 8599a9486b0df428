from __future__ import annotations

import json
import logging
from types import SimpleNamespace

import hostguard.logging_config as logging_config
import hostguard.version as version_module
from hostguard.config import Settings


def _record() -> logging.LogRecord:
    record = logging.LogRecord(
        name="hostguard.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg="hello %s",
        args=("world",),
        exc_info=None,
    )
    record.resource_name = "web"
    return record


def test_json_formatter() -> None:
    formatter = logging_config.HostguardJSONFormatter(instance_id="guard-123")
    payload = json.loads(formatter.format(_record()))
    assert payload["service"] == "hostguard"
    assert payload["instance_id"] == "guard-123"
    assert payload["message"] == "hello world"
    assert payload["extra"]["resource_name"] == "web"


def test_text_formatter() -> None:
    formatter = logging_config.HostguardTextFormatter(instance_id="guard-123456789")
    message = formatter.format(_record())
    assert "guard-12" in message
    assert "guard-123" not in message
    assert "hello world" in message


def test_setup_logging(monkeypatch) -> None:
    root = logging.getLogger()
    monkeypatch.setattr(root, "handlers", list(root.handlers))
    monkeypatch.setattr(root, "level", root.level)
    monkeypatch.setattr(logging_config.settings, "log_level", "DEBUG")
    monkeypatch.setattr(logging_config.settings, "log_format", "text")
    logging_config.setup_logging(instance_id="guard-xyz")

    assert root.level == logging.DEBUG
    assert isinstance(root.handlers[-1].formatter, logging_config.HostguardTextFormatter)

    monkeypatch.setattr(logging_config.settings, "log_format", "json")
    logging_config.setup_logging(instance_id="guard-xyz")
    assert isinstance(logging.getLogger().handlers[-1].formatter, logging_config.HostguardJSONFormatter)


def test_settings_from_env(monkeypatch) -> None:
    monkeypatch.setenv("HOSTGUARD_NAMING_STRATEGY", "prefix-host")
    monkeypatch.setenv("HOSTGUARD_LOOKUP_TIMEOUT", "2.5")
    settings = Settings()
    assert settings.naming_strategy == "prefix-host"
    assert settings.lookup_timeout == 2.5


def test_version_git_tag_fallback(monkeypatch) -> None:
    monkeypatch.setattr(version_module.Path, "exists", lambda self: False)

    def _run(*args, **kwargs):
        return SimpleNamespace(returncode=0, stdout="v1.2.3\n")

    monkeypatch.setattr(version_module.subprocess, "run", _run)
    assert version_module.get_version() == "1.2.3"


def test_commit_from_env(monkeypatch) -> None:
    monkeypatch.setenv("HOSTGUARD_GIT_SHA", "abc123")
    assert version_module.get_commit() == "abc123"
