import pytest
from pydantic import ValidationError

from kjoreskole_admin.app.config import DEFAULT_PAGE_SIZE, PAGE_SIZE_OPTIONS, Settings, load_settings


def test_defaults_without_env_file(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)

    settings = load_settings(str(tmp_path / "missing.env"))

    assert settings.API_BASE_URL == "http://localhost:3001/api"
    assert settings.RETRY_MAX_ATTEMPTS == 3
    assert settings.API_TOKEN is None
    assert DEFAULT_PAGE_SIZE in PAGE_SIZE_OPTIONS


def test_env_vars_override_defaults(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("KJORESKOLE_API_BASE_URL", "https://api.example.no")
    monkeypatch.setenv("KJORESKOLE_RETRY_MAX_ATTEMPTS", "5")
    monkeypatch.setenv("KJORESKOLE_VERIFY_SSL", "false")

    settings = load_settings(None)

    assert settings.API_BASE_URL == "https://api.example.no"
    assert settings.RETRY_MAX_ATTEMPTS == 5
    assert settings.VERIFY_SSL is False


def test_env_file_is_read(tmp_path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("KJORESKOLE_EXPORT_DIR=/tmp/eksport\nKJORESKOLE_LOG_LEVEL=DEBUG\n", encoding="utf-8")

    settings = load_settings(str(env_file))

    assert settings.EXPORT_DIR == "/tmp/eksport"
    assert settings.LOG_LEVEL == "DEBUG"


def test_invalid_timeout_is_rejected(monkeypatch) -> None:
    monkeypatch.setenv("KJORESKOLE_TIMEOUT_SECONDS", "0")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)
