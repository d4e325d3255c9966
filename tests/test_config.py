"""Tests for settings defaults and JSON overrides."""

from __future__ import annotations

import json

from fpm_supervisor import settings
from fpm_supervisor.config import MergedSettings


def test_defaults_come_from_settings(tmp_path):
    merged = MergedSettings(tmp_path / "missing.json")
    assert merged.READINESS_TIMEOUT == settings.READINESS_TIMEOUT
    assert merged.POLL_INTERVAL == settings.POLL_INTERVAL
    assert merged.PHPFPM_PATH == settings.PHPFPM_PATH
    assert merged.OVERRIDES_JSON_PATH == tmp_path / "missing.json"


def test_timing_defaults():
    assert settings.READINESS_TIMEOUT == 4.0
    assert settings.POLL_INTERVAL == 0.002


def test_overrides_apply_only_to_modifiable_settings(tmp_path, caplog):
    overrides = tmp_path / "overrides.json"
    overrides.write_text(json.dumps({
        "READINESS_TIMEOUT": "0.5",
        "PHPFPM_PATH": "/opt/php/sbin/php-fpm",
        "CONFIG_FILE_NAME": "other.conf",
        "NOT_A_SETTING": 1,
    }))

    merged = MergedSettings(overrides)

    assert merged.READINESS_TIMEOUT == 0.5
    assert merged.PHPFPM_PATH == "/opt/php/sbin/php-fpm"
    assert merged.CONFIG_FILE_NAME == settings.CONFIG_FILE_NAME
    assert not hasattr(merged, "NOT_A_SETTING")
    assert "non-modifiable setting 'CONFIG_FILE_NAME'" in caplog.text
    assert "'NOT_A_SETTING' not found" in caplog.text


def test_unconvertible_override_is_skipped(tmp_path):
    overrides = tmp_path / "overrides.json"
    overrides.write_text(json.dumps({"POLL_INTERVAL": "fast"}))
    assert MergedSettings(overrides).POLL_INTERVAL == settings.POLL_INTERVAL


def test_malformed_overrides_file_keeps_defaults(tmp_path, caplog):
    overrides = tmp_path / "overrides.json"
    overrides.write_text("{not json")
    merged = MergedSettings(overrides)
    assert merged.READINESS_TIMEOUT == settings.READINESS_TIMEOUT
    assert "Failed to load or parse overrides file" in caplog.text
