"""Tests for settings loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from codeforge.config.settings import Settings, config_file


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """Run each test from an empty directory without provider keys."""
    monkeypatch.chdir(tmp_path)
    for var in ("GROQ_API_KEY", "HUGGINGFACE_API_KEY", "LOG_LEVEL", "MAX_STEPS"):
        monkeypatch.delenv(var, raising=False)


class TestSettings:
    """Settings sources and validation."""

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.groq_api_key is None
        assert settings.require_approval is True
        assert settings.auto_commit is False
        assert settings.max_steps == 100
        assert settings.enabled_workers() == [
            "codeGeneration",
            "codeReview",
            "errorFixing",
            "refactoring",
            "testing",
        ]

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("GROQ_API_KEY", "gsk_env")
        monkeypatch.setenv("MAX_STEPS", "7")

        settings = Settings(_env_file=None)

        assert settings.groq_api_key == "gsk_env"
        assert settings.max_steps == 7

    def test_yaml_file(self, tmp_path):
        (tmp_path / "codeforge.yaml").write_text(
            "log_level: DEBUG\nrefactoring_enabled: false\nmax_iterations: 4\n"
        )

        settings = Settings(_env_file=None)

        assert settings.log_level == "DEBUG"
        assert settings.max_iterations == 4
        assert "refactoring" not in settings.enabled_workers()

    def test_env_overrides_yaml(self, tmp_path, monkeypatch):
        (tmp_path / "codeforge.yaml").write_text("log_level: DEBUG\n")
        monkeypatch.setenv("LOG_LEVEL", "ERROR")

        assert Settings(_env_file=None).log_level == "ERROR"

    def test_log_format_validated(self):
        assert Settings(_env_file=None, log_format="JSON").log_format == "json"
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_format="xml")

    def test_max_steps_positive(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, max_steps=0)


class TestConfigFile:
    """Config file discovery."""

    def test_none_found(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path / "home"))

        assert config_file() is None

    def test_dot_directory(self, tmp_path):
        (tmp_path / ".codeforge").mkdir()
        (tmp_path / ".codeforge" / "config.yaml").write_text("max_steps: 5\n")

        assert config_file() == Path(".codeforge/config.yaml")
        assert Settings(_env_file=None).max_steps == 5

    def test_top_level_file_wins(self, tmp_path):
        (tmp_path / ".codeforge").mkdir()
        (tmp_path / ".codeforge" / "config.yaml").write_text("max_steps: 5\n")
        (tmp_path / "codeforge.yaml").write_text("max_steps: 9\n")

        assert config_file() == Path("codeforge.yaml")
        assert Settings(_env_file=None).max_steps == 9
