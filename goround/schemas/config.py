"""Pydantic models for application configuration.

The AppConfig captures storage capacity and location, autosave timing,
export presets and the default font settings. It is loaded from YAML
(``config/default.yaml``) and every value has a built-in default.
"""

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field

from goround.errors import NotFoundError

from .export_schema import ExportPreset
from .font_schema import FontSettings


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------

class StorageConfig(BaseModel):
    """Storage backend settings."""

    quota_bytes: int = Field(
        default=5 * 1024 * 1024,
        gt=0,
        description="Capacity of the key/value backend in bytes",
    )
    data_root: str = Field(
        default="~/.goround",
        description="Application-data root used by the filesystem backend",
    )
    recent_limit: int = Field(default=10, ge=1, description="Entries kept in the recent-projects list")
    large_font_warning_bytes: int = Field(
        default=1024 * 1024,
        description="Font uploads larger than this log a storage warning",
    )

    @property
    def data_root_path(self) -> Path:
        return Path(self.data_root).expanduser()


# ---------------------------------------------------------------------------
# Autosave
# ---------------------------------------------------------------------------

class AutoSaveConfig(BaseModel):
    enabled: bool = True
    delay_ms: int = Field(default=2000, ge=0, description="Debounce window in milliseconds")

    @property
    def delay_seconds(self) -> float:
        return self.delay_ms / 1000


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

def _default_presets() -> list[ExportPreset]:
    return [
        ExportPreset(id="instagram_square", name="Instagram Square", width=1080, height=1080),
        ExportPreset(id="instagram_portrait", name="Instagram Portrait", width=1080, height=1350),
        ExportPreset(id="linkedin", name="LinkedIn", width=1200, height=1500),
        ExportPreset(id="story", name="Story", width=1080, height=1920),
    ]


class ExportConfig(BaseModel):
    format: Literal["svg"] = "svg"
    include_metadata: bool = True
    default_preset: str = "instagram_square"
    presets: list[ExportPreset] = Field(default_factory=_default_presets)


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------

class AppConfig(BaseModel):
    """Complete application configuration."""

    name: str = "goround"
    storage: StorageConfig = Field(default_factory=StorageConfig)
    autosave: AutoSaveConfig = Field(default_factory=AutoSaveConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    default_font_settings: FontSettings = Field(default_factory=FontSettings)

    def get_preset(self, preset_id: str | None = None) -> ExportPreset:
        """Look up an export preset by id (default: the configured default preset)."""
        preset_id = preset_id or self.export.default_preset
        for preset in self.export.presets:
            if preset.id == preset_id:
                return preset
        raise NotFoundError("Export preset", preset_id)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "AppConfig":
        """Load configuration from a YAML file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return cls.model_validate(data or {})

    def to_yaml(self, path: str | Path) -> None:
        """Save configuration to a YAML file."""
        path = Path(path)
        data = self.model_dump(mode="json", by_alias=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)
