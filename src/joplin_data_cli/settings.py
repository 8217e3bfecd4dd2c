"""Application settings (env/.env/YAML settings file)."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

DEFAULT_CONFIG_FILE = Path("~/.joplin-data.yaml")
CONFIG_FILE_ENV = "JOPLIN_DATA_CONFIG"


def config_file_path() -> Path:
    """Location of the YAML settings file holding the API token."""
    return Path(os.environ.get(CONFIG_FILE_ENV) or DEFAULT_CONFIG_FILE).expanduser()


class Settings(BaseSettings):
    """Settings for locating and authenticating against the Joplin Data API."""

    model_config = SettingsConfigDict(
        env_prefix="JOPLIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_token: str = Field(default="")
    host: str = Field(default="localhost", min_length=1)
    port_min: int = Field(default=41184, ge=1, le=65535)
    port_max: int = Field(default=41194, ge=1, le=65535)

    timeout_seconds: float = Field(default=5.0, gt=0)
    poll_interval_seconds: float = Field(default=1.0, ge=0)
    max_waiting_polls: int = Field(default=20, ge=1)

    @model_validator(mode="after")
    def _check_port_range(self) -> Settings:
        if self.port_min > self.port_max:
            raise ValueError("port_min must not be greater than port_max")
        return self

    @property
    def ports(self) -> range:
        return range(self.port_min, self.port_max + 1)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=config_file_path()),
            file_secret_settings,
        )


def save_api_token(token: str, path: Path | None = None) -> Path:
    """Store ``token`` in the YAML settings file, keeping any other keys."""
    target = path or config_file_path()
    data: dict[str, Any] = {}
    if target.exists():
        loaded = yaml.safe_load(target.read_text(encoding="utf-8"))
        if isinstance(loaded, dict):
            data = loaded
    data["api_token"] = token
    target.parent.mkdir(parents=True, exist_ok=True)
    # Owner-only before the credential is written.
    target.touch(mode=0o600, exist_ok=True)
    target.chmod(0o600)
    target.write_text(yaml.safe_dump(data, default_flow_style=False), encoding="utf-8")
    return target
