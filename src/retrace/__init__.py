"""retrace - bounded, equality-aware undo/redo history."""

from retrace.binding.state import StateBinding
from retrace.history.config import HistoryConfig
from retrace.history.container import History
from retrace.history.equality import deep_equals, identity_equals, value_equals
from retrace.history.snapshot import HistorySnapshot

__version__ = "0.1.0"

__all__ = [
    "History",
    "HistoryConfig",
    "HistorySnapshot",
    "StateBinding",
    "__version__",
    "deep_equals",
    "identity_equals",
    "value_equals",
]
