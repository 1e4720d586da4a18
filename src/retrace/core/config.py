"""YAML configuration loading using OmegaConf."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from omegaconf import DictConfig, OmegaConf

from retrace.history.config import HistoryConfig


class RetraceConfig:
    """Loads a YAML config file and applies dot-path overrides.

    Example::

        config = RetraceConfig("config/default.yaml")
        cfg = config.load(validate=True)
        config.override("retrace.history.max_size", 20)
    """

    def __init__(self, config_path: str | Path = "config/default.yaml"):
        self._config_path = Path(config_path)
        self._config: DictConfig | None = None

    def load(self, validate: bool = False) -> DictConfig:
        """Load the config file.

        Args:
            validate: If True, validate the loaded config against the
                Pydantic schema and raise ``pydantic.ValidationError``
                on invalid values.
        """
        if not self._config_path.exists():
            raise FileNotFoundError(f"Config not found: {self._config_path}")

        base = OmegaConf.load(self._config_path)
        if not isinstance(base, DictConfig):
            raise ValueError(f"Config root must be a mapping: {self._config_path}")

        if validate or OmegaConf.select(base, "retrace.system.validate_config", default=False):
            from retrace.core.config_schema import validate_config

            validate_config(OmegaConf.to_container(base, resolve=True))

        self._config = base
        return self._config

    def override(self, dotpath: str, value: Any) -> None:
        """Override a config value using dot notation.

        Example: config.override("retrace.history.equality", "deep")
        """
        if self._config is None:
            raise RuntimeError("Config not loaded yet. Call load() first.")
        OmegaConf.update(self._config, dotpath, value)

    @property
    def cfg(self) -> DictConfig:
        if self._config is None:
            raise RuntimeError("Config not loaded yet. Call load() first.")
        return self._config

    def history_config(self) -> HistoryConfig:
        """The ``retrace.history`` section as a :class:`HistoryConfig`."""
        return HistoryConfig.from_omegaconf(
            OmegaConf.select(self.cfg, "retrace.history", default=None)
        )
