"""eventlog.core.config

Two config surfaces only:
1) `config/default.yaml`, optionally overridden by `config/user.yaml`
2) Environment variables (`EVENTLOG_*`, nested with `__`)

Everything else is derived.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from eventlog.core.exceptions import ConfigError


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = dict(base)
    for k, v in overlay.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


class ServerConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 3000
    timezone: str = "Europe/Kyiv"
    max_body_bytes: int = 2 * 1024 * 1024
    max_batch_events: int = 5000
    fsync: bool = True

    @field_validator("max_body_bytes", "max_batch_events")
    @classmethod
    def limits_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("limits must be >= 1")
        return v


class ClientConfig(BaseModel):
    base_url: str = "http://127.0.0.1:3000"
    state_dir: Path = Path(".eventlog")
    timeout_s: float = 10.0
    max_response_bytes: int = 32 * 1024 * 1024


class LoggingConfig(BaseModel):
    level: str = "INFO"
    json_output: bool = False


class Config(BaseSettings):
    """Root configuration. Single source of truth."""

    data_dir: Path = Path("data")
    public_dir: Path = Path("public")

    server: ServerConfig = Field(default_factory=ServerConfig)
    client: ClientConfig = Field(default_factory=ClientConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"env_prefix": "EVENTLOG_", "env_nested_delimiter": "__"}

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # YAML values arrive as init kwargs; env vars must still win over them.
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @property
    def instant_file(self) -> Path:
        return self.data_dir / "events-instant.ndjson"

    @property
    def batch_file(self) -> Path:
        return self.data_dir / "events-batch.ndjson"

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")

        try:
            raw = yaml.safe_load(path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Config file is not valid YAML: {path}") from e

        user = path.parent / "user.yaml"
        if path.name == "default.yaml" and user.exists():
            user_data = yaml.safe_load(user.read_text()) or {}
            raw = _deep_merge(raw, user_data)

        return cls(**raw)

    @classmethod
    def from_repo_defaults(cls, repo_root: Path | None = None) -> Config:
        root = repo_root or Path.cwd()
        return cls.from_yaml(root / "config" / "default.yaml")

    @classmethod
    def load(cls, repo_root: Path | None = None) -> Config:
        """Repo defaults when `config/default.yaml` exists, built-in defaults otherwise."""

        root = repo_root or Path.cwd()
        if (root / "config" / "default.yaml").exists():
            return cls.from_repo_defaults(root)
        return cls()
