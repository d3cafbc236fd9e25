"""
Core configuration for Metabohyp.

Provides:
- Path constants (METABOHYP_HOME, METABOHYP_CONFIG_FILE)
- Configuration models (MetaboConfig, APIConfig, LLMSettings)
- Config loading/saving functions
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Path constants
# ---------------------------------------------------------------------------

METABOHYP_HOME: Path = Path.home() / ".metabohyp"
METABOHYP_CONFIG_FILE: Path = METABOHYP_HOME / "config.yaml"

DEFAULT_MODEL = "claude-sonnet-4-20250514"

_KEY_ENV_VARS = {
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
}


# ---------------------------------------------------------------------------
# Configuration models
# ---------------------------------------------------------------------------


class APIConfig(BaseModel):
    """API credentials for LLM providers."""

    default_provider: str = "anthropic"
    anthropic_api_key: str = ""
    openai_api_key: str = ""

    def get_key(self) -> str:
        """Get the API key for the default provider, falling back to the environment."""
        if self.default_provider == "anthropic":
            key = self.anthropic_api_key
        elif self.default_provider == "openai":
            key = self.openai_api_key
        else:
            return ""
        return key or os.environ.get(_KEY_ENV_VARS[self.default_provider], "")


class LLMSettings(BaseModel):
    """Sampling settings sent with every completion request."""

    model: str = DEFAULT_MODEL
    max_tokens: int = Field(default=2000, ge=1000, le=8000)
    temperature: float = Field(default=0.7, ge=0.0, le=1.0)
    timeout: float = Field(default=120.0, gt=0)  # seconds, transport-level


class MetaboConfig(BaseModel):
    """Main configuration for Metabohyp."""

    api: APIConfig = Field(default_factory=APIConfig)
    llm: LLMSettings = Field(default_factory=LLMSettings)


# ---------------------------------------------------------------------------
# Config loading/saving
# ---------------------------------------------------------------------------


def load_config(path: Path | None = None) -> MetaboConfig:
    """Load configuration from YAML file, or return defaults."""
    path = path or METABOHYP_CONFIG_FILE
    if path.exists():
        try:
            data = yaml.safe_load(path.read_text()) or {}
            return MetaboConfig(**data)
        except (yaml.YAMLError, ValidationError, TypeError):
            logger.warning("Ignoring unreadable config file %s", path, exc_info=True)
    return MetaboConfig()


def save_config(config: MetaboConfig, path: Path | None = None) -> None:
    """Save configuration to YAML file."""
    path = path or METABOHYP_CONFIG_FILE
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.dump(config.model_dump(), default_flow_style=False))


__all__ = [
    "METABOHYP_HOME",
    "METABOHYP_CONFIG_FILE",
    "DEFAULT_MODEL",
    "APIConfig",
    "LLMSettings",
    "MetaboConfig",
    "load_config",
    "save_config",
]
