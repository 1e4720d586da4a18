"""History container configuration."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from retrace.history.container import check_max_size
from retrace.history.equality import EqualityPredicate, resolve_equality

logger = logging.getLogger(__name__)


@dataclass
class HistoryConfig:
    """Container bound and equality choice."""

    max_size: int | None = None  # None = unbounded
    equality: str = "identity"  # "identity", "value" or "deep"

    @classmethod
    def from_omegaconf(cls, cfg: Any) -> HistoryConfig:
        """Build from OmegaConf dict or plain dict."""
        if cfg is None:
            return cls()

        # Handle OmegaConf containers
        if hasattr(cfg, "_metadata"):
            from omegaconf import OmegaConf

            cfg = OmegaConf.to_container(cfg, resolve=True)

        if not isinstance(cfg, dict):
            cfg = dict(cfg)

        max_size = cfg.get("max_size")
        # Env-var interpolations resolve to strings
        if isinstance(max_size, str):
            try:
                max_size = int(max_size)
            except ValueError:
                raise ValueError(
                    f"max_size must be an integer, got {max_size!r}"
                ) from None
        max_size = check_max_size(max_size)

        equality = str(cfg.get("equality") or "identity")
        # Fail at load time rather than on first use
        resolve_equality(equality)

        return cls(max_size=max_size, equality=equality)

    def resolve_equals(self) -> EqualityPredicate:
        return resolve_equality(self.equality)
