"""Pydantic schema for retrace configuration validation.

Mirrors the YAML structure in config/default.yaml. Used when
``validate=True`` is passed to ``RetraceConfig.load()``.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


class SystemConfig(BaseModel):
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_file: str | None = None
    log_json: bool = False
    validate_config: bool = False


class HistorySectionConfig(BaseModel):
    max_size: int | None = Field(default=None, ge=0)
    equality: Literal["identity", "value", "deep"] = "identity"


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


class RetraceRootConfig(BaseModel):
    system: SystemConfig = Field(default_factory=SystemConfig)
    history: HistorySectionConfig = Field(default_factory=HistorySectionConfig)

    model_config = {"extra": "allow"}


class RetraceConfigSchema(BaseModel):
    """Top-level wrapper matching YAML root key ``retrace:``."""

    retrace: RetraceRootConfig

    model_config = {"extra": "allow"}


def validate_config(cfg_dict: dict) -> RetraceConfigSchema:
    """Validate a raw config dict (e.g. from OmegaConf) against the schema.

    Raises ``pydantic.ValidationError`` on invalid config.
    """
    return RetraceConfigSchema.model_validate(cfg_dict)
