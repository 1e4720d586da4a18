"""View-layer binding around a History container."""

from retrace.binding.state import CHANGE_EVENT, StateBinding

__all__ = ["CHANGE_EVENT", "StateBinding"]
