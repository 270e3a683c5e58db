from __future__ import annotations

import json
import logging

from hris_engine.common.logging_utils import JsonFormatter, setup_logging
from hris_engine.config import get_settings_module, load_settings


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="hris_engine.attendance.service",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Clock-in employee=%s",
        args=(7,),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_emits_one_object_with_extras():
    payload = json.loads(JsonFormatter().format(_record(employee_id=7)))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "hris_engine.attendance.service"
    assert payload["message"] == "Clock-in employee=7"
    assert payload["employee_id"] == 7
    assert "ts" in payload


def test_setup_logging_installs_a_single_handler():
    setup_logging("debug", json_output=True)

    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, JsonFormatter)

    setup_logging("INFO")
    assert len(root.handlers) == 1


def test_settings_module_follows_app_env(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    assert get_settings_module() == "hris_engine.config.production"

    monkeypatch.setenv("APP_ENV", "test")
    assert get_settings_module() == "hris_engine.config.testing"

    monkeypatch.delenv("APP_ENV")
    assert get_settings_module() == "hris_engine.config.development"


def test_testing_settings_load(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")

    settings = load_settings()

    assert settings.TESTING is True
    assert settings.DEFAULT_ANNUAL_QUOTA == 12
    assert "hr" in settings.HR_ROLES
    assert set(settings.DB_CONFIG) == {"host", "port", "user", "password", "database"}
