"""
FlowLog profiler settings.
"""

from pathlib import Path
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="FLOWLOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    # Output
    output_dir: Path = Field(default=Path("."), description="Default report directory")
    report_filename: str = Field(
        default="flowlog_report.html",
        description="Report file name used when no output path is given",
    )

    # Inputs
    strict_log: bool = Field(
        default=True,
        description="Re-validate log index keys against row addresses before aggregation",
    )

    # Layout
    layout_char_width: float = Field(
        default=7.0, description="Average glyph width (px) for 12px labels"
    )
    layout_layer_gap: float = Field(default=120.0, description="Vertical gap between layers (px)")
    layout_min_width: float = Field(default=960.0, description="Minimum canvas width (px)")
    layout_slot_width: float = Field(
        default=220.0, description="Canvas width reserved per node of the widest layer (px)"
    )

    @property
    def default_report_path(self) -> Path:
        return self.output_dir / self.report_filename


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
