"""Runtime settings for image selection."""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .provider_config import ProviderConfig


def env_field(default, env_name: str):
    return Field(default, validation_alias=env_name)


class SelectorSettings(BaseSettings):
    """Settings controlling where image mappings come from."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    provider: str = env_field("docker", "IMAGESEL_PROVIDER")
    selector: str = env_field("env", "IMAGESEL_SELECTOR")
    image_config_path: Optional[Path] = env_field(None, "IMAGESEL_IMAGE_CONFIG")
    log_level: str = env_field("INFO", "IMAGESEL_LOG_LEVEL")

    @field_validator("provider", "selector", mode="before")
    @classmethod
    def _strip_name(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("image_config_path", mode="before")
    @classmethod
    def _empty_path_as_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


def load_provider_config(
    settings: SelectorSettings,
    environ: Optional[Mapping[str, str]] = None,
) -> ProviderConfig:
    """Environment entries for the provider, overridden by the YAML file if set."""

    config = ProviderConfig.from_environ(settings.provider, environ)
    if settings.image_config_path is not None:
        config = config.merged(ProviderConfig.from_file(settings.image_config_path))
    return config
