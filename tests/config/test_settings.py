"""Tests for Settings and logging configuration."""

from pathlib import Path

import pytest
import structlog

from semantic_memory.config.logging import configure_logging, get_logger
from semantic_memory.config.settings import Settings, get_settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    for name in [
        "OPENAI_API_KEY",
        "SEMANTIC_MEMORY_OPENAI_API_KEY",
        "SEMANTIC_MEMORY_STORAGE_PATH",
        "SEMANTIC_MEMORY_EMBEDDING_DIMENSIONS",
        "SEMANTIC_MEMORY_LOG_LEVEL",
    ]:
        monkeypatch.delenv(name, raising=False)
    # Keep a developer's .env out of the picture
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.openai_api_key is None
        assert settings.embedding_model == "text-embedding-3-small"
        assert settings.embedding_dimensions == 1536
        assert settings.default_limit == 10
        assert settings.default_threshold == 0.7
        assert settings.default_context_window == 3
        assert settings.storage_path == Path.home() / ".semantic-memory"

    def test_prefixed_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SEMANTIC_MEMORY_STORAGE_PATH", str(tmp_path / "m"))
        monkeypatch.setenv("SEMANTIC_MEMORY_EMBEDDING_DIMENSIONS", "256")
        monkeypatch.setenv("SEMANTIC_MEMORY_OPENAI_API_KEY", "sk-prefixed")

        settings = Settings()

        assert settings.storage_path == tmp_path / "m"
        assert settings.embedding_dimensions == 256
        assert settings.openai_api_key == "sk-prefixed"

    def test_plain_openai_key(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-plain")
        assert Settings().openai_api_key == "sk-plain"

    def test_dotenv_file(self, tmp_path):
        (tmp_path / ".env").write_text("SEMANTIC_MEMORY_LOG_LEVEL=DEBUG\nOPENAI_API_KEY=sk-file\n")
        settings = Settings()
        assert settings.log_level == "DEBUG"
        assert settings.openai_api_key == "sk-file"

    def test_to_config(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-plain")
        config = Settings(storage_path="~/mem").to_config()

        assert config.api_key == "sk-plain"
        assert config.storage_path == Path("~/mem").expanduser()
        assert config.embedding_dimensions == 1536

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()


class TestLogging:
    def test_console_logging(self, capsys):
        configure_logging("INFO")
        get_logger("test").info("hello.event", key="value")

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "hello.event" in captured.err

    def test_json_logging(self, capsys):
        configure_logging("INFO", json_logs=True)
        get_logger("test").info("json.event", n=1)

        err = capsys.readouterr().err
        assert '"event": "json.event"' in err
        assert '"n": 1' in err

    def test_level_filtering(self, capsys):
        configure_logging("WARNING")
        get_logger("test").info("quiet.event")
        assert "quiet.event" not in capsys.readouterr().err

    def test_bound_logger_is_level_filtered(self, capsys):
        configure_logging("WARNING")
        log = get_logger("test").bind(request="r1")
        log.info("bound.quiet")
        log.warning("bound.loud")

        err = capsys.readouterr().err
        assert "bound.quiet" not in err
        assert "bound.loud" in err
        assert "r1" in err

    def test_unknown_level_falls_back_to_info(self, capsys):
        configure_logging("LOUD")
        get_logger("test").info("fallback.event")
        assert "fallback.event" in capsys.readouterr().err

    def teardown_method(self):
        structlog.reset_defaults()
