"""Runtime configuration via environment variables."""

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_PROJECTS_DIR = "./projects"
DEFAULT_PRESET = "Instagram Story"


class StudioConfig(BaseModel):
    """Settings resolved from the environment.

    ``export_url`` empty means the external export service is not configured;
    export tools report that instead of failing at import time.
    """
    projects_dir: str = Field(default=DEFAULT_PROJECTS_DIR)
    export_url: str = Field(default="")
    export_api_key: str = Field(default="")
    export_timeout: int = Field(default=30)
    asset_base_url: str = Field(default="")
    default_preset: str = Field(default=DEFAULT_PRESET)
    preview_fps: int = Field(default=30)
    log_level: str = Field(default="INFO")

    @field_validator("export_timeout", "preview_fps")
    @classmethod
    def validate_positive_ints(cls, value: int) -> int:
        if value < 1:
            raise ValueError("Value must be >= 1")
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        v = value.strip().upper()
        if v not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level '{value}'")
        return v

    @property
    def export_enabled(self) -> bool:
        return bool(self.export_url)

    @property
    def projects_path(self) -> Path:
        return Path(self.projects_dir)

    @classmethod
    def from_env(cls) -> "StudioConfig":
        """Build config from environment variables."""
        return cls(
            projects_dir=os.getenv("SCENEKIT_PROJECTS_DIR", DEFAULT_PROJECTS_DIR),
            export_url=os.getenv("SCENEKIT_EXPORT_URL", ""),
            export_api_key=os.getenv("SCENEKIT_EXPORT_API_KEY", ""),
            export_timeout=int(os.getenv("SCENEKIT_EXPORT_TIMEOUT", "30")),
            asset_base_url=os.getenv("SCENEKIT_ASSET_BASE_URL", ""),
            default_preset=os.getenv("SCENEKIT_DEFAULT_PRESET", DEFAULT_PRESET),
            preview_fps=int(os.getenv("SCENEKIT_PREVIEW_FPS", "30")),
            log_level=os.getenv("SCENEKIT_LOG_LEVEL", "INFO"),
        )


_config: Optional[StudioConfig] = None


def get_config() -> StudioConfig:
    """Return the process-wide config, reading the environment on first access."""
    global _config
    if _config is None:
        _config = StudioConfig.from_env()
    return _config


def reset_config() -> None:
    """Drop the cached config so the next get_config() re-reads the environment."""
    global _config
    _config = None
