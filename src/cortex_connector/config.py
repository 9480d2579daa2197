"""Configuration models for the Cortex connector.

Instances are loaded once at process start, from environment variables
(``CORTEX_`` prefix) and an optional YAML file, and never change afterwards.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CortexInstanceConfig(BaseModel):
    """Configuration for a single analysis-engine instance."""

    name: str = Field(..., min_length=1)
    url: str
    api_key: Optional[str] = None
    timeout_ms: int = Field(default=5000, gt=0)
    max_retries: int = Field(default=1, ge=0)
    verify_ssl: bool = True

    @field_validator("url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    model_config = SettingsConfigDict(env_prefix="CORTEX_", env_nested_delimiter="__")

    environment: str = "dev"
    log_level: str = "INFO"
    instances: List[CortexInstanceConfig] = []

    def __init__(self, _env_file: Optional[str] = None, **values: Any) -> None:
        file_values: Dict[str, Any] = {}
        if _env_file:
            cfg_path = Path(_env_file)
            if cfg_path.exists():
                loaded = yaml.safe_load(cfg_path.read_text(encoding="utf-8")) or {}
                if isinstance(loaded, dict):
                    file_values = loaded
        merged = {**file_values, **values}
        super().__init__(**merged)

    @field_validator("instances")
    @classmethod
    def _unique_names(
        cls, instances: List[CortexInstanceConfig]
    ) -> List[CortexInstanceConfig]:
        seen: set[str] = set()
        for instance in instances:
            if instance.name in seen:
                raise ValueError(f"duplicate instance name: {instance.name}")
            seen.add(instance.name)
        return instances
