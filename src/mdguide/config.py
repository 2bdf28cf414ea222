"""Project configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator


CONFIG_FILE = "config.yaml"
BASE_LANG = "en"

_SCALAR_TYPES = (str, int, float, bool)


class LangConfig(BaseModel):
    code:    str
    version: str = Field(description="Dotted version of the translation, e.g. 25.1.0")

    @field_validator("version", mode="before")
    @classmethod
    def _version_str(cls, v: Any) -> str:
        return str(v)


class Settings(BaseModel):
    app_name:      str = "mdguide"
    mode:          str = Field(default="production", pattern="^(production|development)$")
    version:       str = Field(default="1.0.0", description="Version of the base (English) content")
    langs:         list[LangConfig] = Field(default_factory=list, description="Translated languages")
    out_dir:       str = Field(default="public", description="Output directory; <lang>/latest is appended")
    defs:          list[str] = Field(default_factory=list, description="Pages holding shared string definitions")
    pages:         list[str] = Field(default_factory=list, description="Pages in TOC order; '-' is a separator")
    untranslated:  list[str] = Field(default_factory=list, description="Pages not expected to be translated")
    formats:       list[str] = Field(default_factory=list, description="Download formats (accepted, not rendered)")
    parser_config: str = Field(default="gfm-like", description="MarkdownIt parser preset name")
    author:        Optional[str] = None
    warn_on_missing_def: bool = Field(default=False, description="Warn on text outside a def on translated pages")
    section_links:   bool  = Field(default=True, description="Inject anchors and permalink icons into headings")
    changelog_boost: float = Field(default=0.5, ge=0, description="Search boost for changelog pages")
    heading_boost:   float = Field(default=2.0, ge=0, description="Search boost for heading chunks")

    @field_validator("version", mode="before")
    @classmethod
    def _version_str(cls, v: Any) -> str:
        return str(v)

    @field_validator("langs", mode="before")
    @classmethod
    def _lang_pairs(cls, v: Any) -> Any:
        """Accept `[code, version]` pairs as well as mappings."""
        if isinstance(v, list):
            return [
                {"code": item[0], "version": item[1]} if isinstance(item, (list, tuple)) else item
                for item in v
            ]
        return v

    @property
    def lang_codes(self) -> list[str]:
        return [lang.code for lang in self.langs]


def load_config(project_dir: Union[str, Path] = ".", overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from <project_dir>/config.yaml, then MDGUIDE_<FIELD> env vars, then non-None overrides."""
    data: dict[str, Any] = {}
    config_path = Path(project_dir) / CONFIG_FILE
    if config_path.exists():
        try:
            data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping, got {type(data).__name__}")

    # Only scalar fields can be set from the environment
    for name, info in Settings.model_fields.items():
        if info.annotation not in _SCALAR_TYPES:
            continue
        if val := os.getenv(f"MDGUIDE_{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
