from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import PydanticBaseSettingsSource, YamlConfigSettingsSource

from domain.models import Size
from domain.services.connection_paths import HIT_TOLERANCE
from domain.services.step_layout import StepLayoutConfig

DEFAULT_CONFIG_PATH = Path("config/toolverse.yaml")
CONFIG_PATH_ENV = "TOOLVERSE_CONFIG_PATH"


class StorageSettings(BaseModel):
    workflows_path: Path = Path("data/workflows.json")
    tools_path: Path = Path("data/tools.json")


class CanvasSettings(BaseModel):
    step_width: float = Field(300.0, gt=0)
    header_height: float = Field(44.0, gt=0)
    anchor_offset_y: float = Field(40.0, ge=0)
    port_radius: float = Field(10.0, gt=0)
    connection_hit_tolerance: float = Field(HIT_TOLERANCE, gt=0)
    default_view_width: float = Field(800.0, gt=0)
    default_view_height: float = Field(600.0, gt=0)

    def to_layout_config(self) -> StepLayoutConfig:
        return StepLayoutConfig(
            width=self.step_width,
            header_height=self.header_height,
            anchor_offset_y=self.anchor_offset_y,
            port_radius=self.port_radius,
        )

    def default_view_size(self) -> Size:
        return Size(self.default_view_width, self.default_view_height)


class ExportSettings(BaseModel):
    excalidraw_base_url: str = "https://excalidraw.com/"
    excalidraw_out_dir: Path = Path("data/excalidraw_out")
    excalidraw_max_url_length: int = 8000


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="TOOLVERSE_", env_nested_delimiter="__")

    storage: StorageSettings = StorageSettings()
    canvas: CanvasSettings = CanvasSettings()
    export: ExportSettings = ExportSettings()
    log_level: str = "INFO"

    _yaml_path: ClassVar[Path | None] = None

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: object) -> str:
        level = str(value or "INFO").strip().upper()
        if level not in logging.getLevelNamesMapping():
            msg = f"Unknown log level: {value}"
            raise ValueError(msg)
        return level

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Earlier sources win, so the YAML file only fills what env and init leave unset.
        sources = (init_settings, env_settings, dotenv_settings, file_secret_settings)
        if cls._yaml_path is None:
            return sources
        return (*sources, YamlConfigSettingsSource(settings_cls, yaml_file=cls._yaml_path))


def resolve_config_path(config_path: Path | None = None) -> Path | None:
    """Pick the YAML file to read: explicit argument, then env var, then the default location."""
    if config_path is None:
        from_env = os.getenv(CONFIG_PATH_ENV)
        if from_env:
            config_path = Path(from_env)
        elif DEFAULT_CONFIG_PATH.exists():
            return DEFAULT_CONFIG_PATH
        else:
            return None
    if not config_path.exists():
        msg = f"Config file not found: {config_path}"
        raise FileNotFoundError(msg)
    return config_path


def load_settings(config_path: Path | None = None) -> AppSettings:
    yaml_path = resolve_config_path(config_path)
    saved = AppSettings._yaml_path
    AppSettings._yaml_path = yaml_path
    try:
        return AppSettings()
    finally:
        AppSettings._yaml_path = saved
