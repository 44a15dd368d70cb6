import pytest

from myumc.utils.runtime import dev_mode_active, dev_mode_requested, sanitize_for_log


def test_dev_mode_off_by_default(monkeypatch):
    monkeypatch.delenv("DEV_MODE", raising=False)
    assert dev_mode_requested() is False
    assert dev_mode_active() is False


def test_dev_mode_allowed_for_localhost(monkeypatch):
    monkeypatch.setenv("DEV_MODE", "true")
    monkeypatch.setenv("APP_BASE_URL", "http://localhost:3000")
    assert dev_mode_active() is True


def test_dev_mode_rejected_for_remote_host(monkeypatch):
    monkeypatch.setenv("DEV_MODE", "true")
    monkeypatch.setenv("APP_BASE_URL", "https://myumc.example.org")
    with pytest.raises(RuntimeError, match="not permitted"):
        dev_mode_active()


def test_dev_mode_without_base_url_needs_explicit_allow(monkeypatch):
    monkeypatch.setenv("DEV_MODE", "true")
    monkeypatch.delenv("APP_BASE_URL", raising=False)
    monkeypatch.delenv("ALLOW_DEV_MODE", raising=False)
    monkeypatch.delenv("PYTEST_CURRENT_TEST", raising=False)
    with pytest.raises(RuntimeError, match="ALLOW_DEV_MODE"):
        dev_mode_active()
    monkeypatch.setenv("ALLOW_DEV_MODE", "true")
    assert dev_mode_active() is True


def test_sanitize_for_log_flattens_control_characters():
    assert sanitize_for_log("a\nb\rc\td") == "a b c d"
    assert sanitize_for_log(None) == ""
