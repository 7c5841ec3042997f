"""Tests for core/config.py."""

import pytest
from pydantic import ValidationError

from clairreporter.core.config import Settings


def test_default_settings(monkeypatch):
    for name in ("LOG_LEVEL", "LOG_JSON", "HTTP_TIMEOUT", "ERROR_BODY_LIMIT", "UNMAPPED_POLICY"):
        monkeypatch.delenv(name, raising=False)
    s = Settings(_env_file=None)
    assert s.log_level == "INFO"
    assert s.log_json is False
    assert s.http_timeout == 30.0
    assert s.error_body_limit == 500
    assert s.unmapped_policy == "emit"


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("UNMAPPED_POLICY", "skip")
    monkeypatch.setenv("http_timeout", "5")
    s = Settings(_env_file=None)
    assert s.unmapped_policy == "skip"
    assert s.http_timeout == 5.0


def test_invalid_policy_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, unmapped_policy="ignore")
