from __future__ import annotations

import os
from pathlib import Path
from typing import ClassVar, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import PydanticBaseSettingsSource, YamlConfigSettingsSource

DEFAULT_CONFIG_PATH = Path("config/formula_diagrams.yaml")

OutputFormat = Literal["svg", "excalidraw"]

OUTPUT_SUFFIXES: dict[str, str] = {
    "svg": ".svg",
    "excalidraw": ".excalidraw",
}


class RenderSettings(BaseModel):
    ex_size: float = Field(default=6.0, gt=0)
    font_size: float = Field(default=12.0, gt=0)
    dpi: float = Field(default=72.0, gt=0)
    output_format: OutputFormat = "svg"
    style_path: Path | None = None
    input_dir: Path = Path("data/diagrams")
    output_dir: Path = Path("data/rendered")

    @field_validator("output_format", mode="before")
    @classmethod
    def normalize_output_format(cls, value: object) -> str:
        return str(value).strip().lower() if value else "svg"

    @property
    def output_suffix(self) -> str:
        return OUTPUT_SUFFIXES[self.output_format]


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="FDG_", env_nested_delimiter="__")

    render: RenderSettings = RenderSettings()

    _yaml_path: ClassVar[Path | None] = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: list[PydanticBaseSettingsSource] = [
            init_settings,
            env_settings,
            dotenv_settings,
            file_secret_settings,
        ]
        if cls._yaml_path:
            sources.append(YamlConfigSettingsSource(settings_cls, yaml_file=cls._yaml_path))
        return tuple(sources)


def load_settings(config_path: Path | None = None) -> AppSettings:
    env_path = os.getenv("FDG_CONFIG_PATH")
    resolved_path: Path | None = None

    if config_path is not None:
        resolved_path = config_path
    elif env_path:
        resolved_path = Path(env_path)
    elif DEFAULT_CONFIG_PATH.exists():
        resolved_path = DEFAULT_CONFIG_PATH

    previous = AppSettings._yaml_path
    try:
        if resolved_path is not None:
            if not resolved_path.exists():
                msg = f"Config file not found: {resolved_path}"
                raise FileNotFoundError(msg)
            AppSettings._yaml_path = resolved_path
        return AppSettings()
    finally:
        AppSettings._yaml_path = previous
