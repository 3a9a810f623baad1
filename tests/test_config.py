import logging

from avocat_assist.config.config import Settings
from avocat_assist.config.log_config import configure_logging


def test_settings_defaults():
    settings = Settings(_env_file=None)

    assert settings.API_URL == "http://localhost:5050/api"
    assert settings.TOKEN_STORAGE_KEY == "token"
    assert settings.UPLOAD_PROGRESS_CAP == 95
    assert settings.SUGGESTION_LIMIT == 5
    assert settings.NOTIFICATION_HISTORY_LIMIT == 100


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("API_URL", "https://avocat.example/api")
    monkeypatch.setenv("UPLOAD_PROGRESS_STEP", "10")

    settings = Settings(_env_file=None)

    assert settings.API_URL == "https://avocat.example/api"
    assert settings.UPLOAD_PROGRESS_STEP == 10


def test_configure_logging_uses_level(monkeypatch):
    captured = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: captured.update(kwargs))

    configure_logging("DEBUG")

    assert captured["level"] == "DEBUG"
    assert captured["format"] == "%(levelname)s: %(name)s: %(message)s"
