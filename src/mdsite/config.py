"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"


class Settings(BaseModel):
    app_name:     str = "mdsite"
    content_dir:  str = Field(default="content", description="Root directory holding the collection directories")
    output_dir:   str = Field(default="dist",    description="Directory for exported JSON views")
    db_url:       str = "sqlite:///mdsite.db"
    build_mode:   str = Field(default="production", pattern="^(production|development)$")
    show_drafts:  bool = Field(default=False, description="Force drafts visible in production builds")
    tags_file:       str = Field(default="tags.yaml",       description="Tag registry, relative to content_dir")
    ordering_file:   str = Field(default="ordering.yaml",   description="Ordering config, relative to content_dir")
    categories_file: str = Field(default="categories.yaml", description="Category registry, relative to content_dir")
    parser_config:         str = Field(default="gfm-like", description="MarkdownIt parser preset name")
    words_per_minute:      int = Field(default=200, ge=1)
    description_max_chars: int = Field(default=160, ge=20, description="Card description budget")
    base_path:    str = Field(default="", description="URL prefix for subdirectory deployments")
    max_workers:  int = Field(default=8, ge=1, description="Concurrent source reads")
    log_level:    str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR)$")

    def content_path(self, name: str) -> Path:
        """Resolve a registry file name against content_dir."""
        return Path(self.content_dir) / name


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then MDSITE_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping")

    for name in Settings.model_fields:
        if val := os.getenv(f"MDSITE_{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
