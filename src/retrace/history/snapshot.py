"""HistorySnapshot — one point-in-time copy of a History's three sequences."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class HistorySnapshot:
    """Immutable copy of ``(past, present, future)``.

    ``past`` and ``future`` are stored as tuples, so neither the container
    that produced the snapshot nor whoever built it from lists can change
    it afterwards.  The values themselves are shared references; the core
    never clones them.
    """

    past: tuple[Any, ...] = field(default_factory=tuple)
    present: Any = None
    future: tuple[Any, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # Frozen dataclass: bypass __setattr__ to normalise the sequences.
        object.__setattr__(self, "past", tuple(self.past))
        object.__setattr__(self, "future", tuple(self.future))

    @property
    def past_length(self) -> int:
        return len(self.past)

    @property
    def future_length(self) -> int:
        return len(self.future)

    def to_dict(self) -> dict[str, Any]:
        """Plain dict view (lists instead of tuples) for JSON output."""
        return {
            "past": list(self.past),
            "present": self.present,
            "future": list(self.future),
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> HistorySnapshot:
        return cls(
            past=d.get("past", ()),
            present=d.get("present"),
            future=d.get("future", ()),
        )
