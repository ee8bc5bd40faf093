"""CodeForge settings.

Values come from, highest priority first: keyword arguments, environment
variables, a ``.env`` file, the first YAML config file found, field defaults.
YAML files are looked up relative to the working directory, then in the
user's home.
"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = ("codeforge.yaml", ".codeforge/config.yaml")

_VALID_LOG_FORMATS = ("text", "json")

# Registry key -> settings flag. The iterative generator has no flag and is
# always registered.
WORKER_FLAGS = {
    "codeGeneration": "code_generation_enabled",
    "codeReview": "code_review_enabled",
    "errorFixing": "error_fixing_enabled",
    "refactoring": "refactoring_enabled",
    "testing": "testing_enabled",
}


def config_file() -> Path | None:
    """Return the YAML config file in effect, if any."""
    candidates = [Path(name) for name in CONFIG_FILENAMES]
    candidates.append(Path.home() / ".codeforge" / "config.yaml")
    return next((path for path in candidates if path.is_file()), None)


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        path = config_file()
        if path is None:
            return init_settings, env_settings, dotenv_settings, file_secret_settings
        logger.debug("Reading settings from %s", path)
        yaml_settings = YamlConfigSettingsSource(settings_cls, yaml_file=path)
        return init_settings, env_settings, dotenv_settings, yaml_settings, file_secret_settings

    # Model providers
    groq_api_key: str | None = Field(None, description="Groq API key")
    groq_model: str = Field("llama2-70b-4096", description="Default Groq model")
    huggingface_api_key: str | None = Field(None, description="Hugging Face API key")
    huggingface_model: str = Field(
        "mistralai/Mixtral-8x7B-Instruct-v0.1", description="Default Hugging Face model"
    )
    provider_timeout: float = Field(120.0, description="Model provider HTTP timeout in seconds")

    # Workers
    code_generation_enabled: bool = Field(True, description="Register the code generation worker")
    code_review_enabled: bool = Field(True, description="Register the code review worker")
    error_fixing_enabled: bool = Field(True, description="Register the error fixing worker")
    refactoring_enabled: bool = Field(True, description="Register the refactoring worker")
    testing_enabled: bool = Field(True, description="Register the testing worker")
    max_iterations: int = Field(
        3, ge=1, description="Regeneration attempts for the iterative generation worker"
    )

    # Workflow execution
    workflows_dir: Path = Field(
        default_factory=lambda: Path.cwd() / ".codeforge" / "workflows",
        description="Directory holding user-defined workflow files",
    )
    auto_commit: bool = Field(False, description="Commit and push after a completed run")
    require_approval: bool = Field(
        True, description="Ask before continuing past a failed step"
    )
    strict_transitions: bool = Field(
        False, description="Fail runs whose next step id does not exist"
    )
    max_steps: int = Field(100, ge=1, description="Maximum steps visited in a single run")

    # Codebase snapshot
    max_file_bytes: int = Field(
        1024 * 1024, description="Skip source files larger than this when snapshotting"
    )

    # Logging
    log_level: str = Field("INFO", description="Root logger level name")
    log_format: str = Field("text", description="Handler output, text lines or JSON objects")
    sanitize_logs: bool = Field(True, description="Redact API keys and tokens in log messages")

    @field_validator("log_format")
    @classmethod
    def _check_log_format(cls, value: str) -> str:
        value = value.lower()
        if value not in _VALID_LOG_FORMATS:
            raise ValueError(f"log_format must be one of {', '.join(_VALID_LOG_FORMATS)}")
        return value

    def enabled_workers(self) -> list[str]:
        """Registry keys of the flag-controlled workers that are switched on."""
        return [key for key, flag in WORKER_FLAGS.items() if getattr(self, flag)]


@lru_cache
def get_settings() -> Settings:
    """Settings built once per process."""
    return Settings()
