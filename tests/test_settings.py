import logging

import pytest

import db
from logging_setup import setup_logger
from settings import ConfigError, load_config


def test_defaults(monkeypatch):
    for name in ("AI_MAX_ATTEMPTS", "AI_REQUEST_TIMEOUT", "OPENAI_MODEL", "CORS_ORIGINS", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    config = load_config()

    assert config.ai.max_attempts == 3
    assert config.ai.enabled is False
    assert config.supabase.configured is False
    assert config.cors_origins == ["http://localhost:8501", "http://127.0.0.1:8501"]


def test_values_from_environment(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("AI_MAX_ATTEMPTS", "5")
    monkeypatch.setenv("AI_RETRY_DELAY", "0.5")
    monkeypatch.setenv("CORS_ORIGINS", "https://habits.example.com, http://localhost:3000")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    config = load_config()

    assert config.ai.enabled is True
    assert config.ai.max_attempts == 5
    assert config.ai.retry_delay == 0.5
    assert config.cors_origins == ["https://habits.example.com", "http://localhost:3000"]
    assert config.log_level == "DEBUG"


@pytest.mark.parametrize("value", ["three", "-1", "0"])
def test_invalid_attempts(monkeypatch, value):
    monkeypatch.setenv("AI_MAX_ATTEMPTS", value)
    with pytest.raises(ConfigError):
        load_config()


def test_store_requires_supabase_settings():
    db.set_client(None)
    with pytest.raises(db.StoreError):
        db.get_client()


def test_setup_logger_writes_file_once(tmp_path):
    log_file = tmp_path / "logs" / "app.log"
    root = logging.getLogger()
    before = list(root.handlers)
    root.handlers = []
    try:
        setup_logger(str(log_file))
        count = len(root.handlers)
        setup_logger(str(log_file))
        assert len(root.handlers) == count
        logging.getLogger("habits.test").info("hello")
        for handler in root.handlers:
            handler.flush()
        assert "hello" in log_file.read_text(encoding="utf-8")
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers = before
