"""Bounded undo/redo history for retrace."""

from retrace.history.config import HistoryConfig
from retrace.history.container import BatchDraft, History
from retrace.history.equality import (
    EQUALITY_PREDICATES,
    deep_equals,
    identity_equals,
    resolve_equality,
    value_equals,
)
from retrace.history.snapshot import HistorySnapshot

__all__ = [
    "EQUALITY_PREDICATES",
    "BatchDraft",
    "History",
    "HistoryConfig",
    "HistorySnapshot",
    "deep_equals",
    "identity_equals",
    "resolve_equality",
    "value_equals",
]
