from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import PydanticBaseSettingsSource, YamlConfigSettingsSource

from domain.models import START_NODE_SUFFIX

DEFAULT_CONFIG_PATH = Path("config/workflow_vis.yaml")


def normalize_log_level(value: object) -> str:
    level = str(value or "INFO").strip().upper()
    if level not in logging.getLevelNamesMapping():
        msg = f"Unknown log level: {value}"
        raise ValueError(msg)
    return level


class LayoutSettings(BaseModel):
    start_node_suffix: str = START_NODE_SUFFIX
    add_branch_affordance: bool = True

    @field_validator("start_node_suffix", mode="before")
    @classmethod
    def ensure_suffix(cls, value: object) -> str:
        suffix = str(value or "").strip()
        if not suffix:
            msg = "layout.start_node_suffix must not be empty"
            raise ValueError(msg)
        return suffix


class PathSettings(BaseModel):
    workflows_dir: Path = Path("data/workflows")
    layouts_dir: Path = Path("data/layouts")


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="WFVIS_", env_nested_delimiter="__")

    layout: LayoutSettings = LayoutSettings()
    paths: PathSettings = PathSettings()
    log_level: str = "INFO"

    _yaml_path: ClassVar[Path | None] = None

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, value: object) -> str:
        return normalize_log_level(value)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Workflow settings come from CLI overrides, WFVIS_* variables and one YAML file.
        if cls._yaml_path is None:
            return init_settings, env_settings
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=cls._yaml_path),
        )


def resolve_config_path(config_path: Path | None = None) -> Path | None:
    """Pick the YAML file: explicit path, then WFVIS_CONFIG_PATH, then the default."""
    if config_path is None:
        env_path = os.getenv("WFVIS_CONFIG_PATH")
        if env_path:
            config_path = Path(env_path)
        elif DEFAULT_CONFIG_PATH.exists():
            return DEFAULT_CONFIG_PATH
        else:
            return None
    if not config_path.exists():
        msg = f"Config file not found: {config_path}"
        raise FileNotFoundError(msg)
    return config_path


def load_settings(
    config_path: Path | None = None, log_level: str | None = None
) -> AppSettings:
    overrides = {"log_level": log_level} if log_level else {}
    AppSettings._yaml_path = resolve_config_path(config_path)
    try:
        return AppSettings(**overrides)
    finally:
        AppSettings._yaml_path = None
