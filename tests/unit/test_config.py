import logging

import pytest
from pydantic import ValidationError

from app.common.tracing import set_workflow_id, setup_logging
from app.config import Settings, WorkflowDefaults, get_settings


def test_defaults_with_credentials_present():
    s = get_settings()
    assert s.OPENAI_API_KEY == "test-openai-key"
    assert s.DELAY_THRESHOLD_MINUTES == 30
    assert s.RETRY_MAX_ATTEMPTS == 3
    assert s.retry_base_delay_seconds == 0.5
    assert s.NOTIFICATION_SUBJECT == "Freight Delivery Delay Notice"
    assert get_settings() is s


@pytest.mark.parametrize("missing", ["OPENAI_API_KEY", "SENDGRID_API_KEY", "ORS_API_KEY"])
def test_missing_credential_is_rejected(monkeypatch, missing):
    monkeypatch.delenv(missing)
    with pytest.raises(ValidationError) as exc:
        Settings(_env_file=None)
    assert missing in str(exc.value)


def test_empty_credential_is_rejected(monkeypatch):
    monkeypatch.setenv("SENDGRID_API_KEY", "")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_overrides_from_environment(monkeypatch):
    monkeypatch.setenv("DELAY_THRESHOLD_MINUTES", "45")
    monkeypatch.setenv("RETRY_BASE_DELAY_MS", "250")
    s = Settings(_env_file=None)
    assert s.DELAY_THRESHOLD_MINUTES == 45
    assert s.retry_base_delay_seconds == 0.25


def test_workflow_defaults_load_without_credentials(monkeypatch):
    for key in ("OPENAI_API_KEY", "SENDGRID_API_KEY", "ORS_API_KEY"):
        monkeypatch.delenv(key)
    monkeypatch.setenv("DELAY_THRESHOLD_MINUTES", "20")
    defaults = WorkflowDefaults(_env_file=None)
    assert defaults.DELAY_THRESHOLD_MINUTES == 20
    assert defaults.LOG_LEVEL == "INFO"


def test_log_records_carry_workflow_id(caplog):
    setup_logging("INFO")
    set_workflow_id("wf-123")
    try:
        with caplog.at_level(logging.INFO, logger="freight.test"):
            logging.getLogger("freight.test").info("hello")
    finally:
        set_workflow_id(None)
    assert caplog.records[-1].workflow_id == "wf-123"
