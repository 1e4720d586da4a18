"""History — bounded, equality-aware undo/redo container."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from retrace.history.equality import EqualityPredicate, identity_equals
from retrace.history.snapshot import HistorySnapshot

if TYPE_CHECKING:
    from retrace.history.config import HistoryConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


def check_max_size(max_size: int | None) -> int | None:
    """Return *max_size* unchanged if it is None or a non-negative int."""
    if max_size is None:
        return None
    if isinstance(max_size, bool) or not isinstance(max_size, int):
        raise TypeError(
            f"max_size must be an int or None, got {type(max_size).__name__}"
        )
    if max_size < 0:
        raise ValueError(f"max_size must be >= 0, got {max_size}")
    return max_size


class BatchDraft(Generic[T]):
    """Mutable holder handed out by :meth:`History.batch`."""

    __slots__ = ("value",)

    def __init__(self, value: T) -> None:
        self.value = value


class History(Generic[T]):
    """Undo/redo history over opaque state values.

    State is three sequences: ``past`` (oldest first), ``present`` (exactly
    one value) and ``future`` (nearest first).  Forward progress (assign,
    batch update, redo) is the only way into ``past``; undo is the only way
    into ``future``.  ``len(past)`` never exceeds ``max_size``; the oldest
    entries are evicted first.

    Values are stored by reference.  Callers holding mutable composite
    values must hand over an independent copy, otherwise mutating the
    original silently rewrites history.  See
    :class:`retrace.binding.state.StateBinding` for a wrapper that clones.

    The default ``equals`` is :func:`identity_equals`: two distinct dicts
    with the same contents are *different* states and both get recorded.
    Pass ``value_equals`` or ``deep_equals`` for structural dedup.

    Not thread-safe; callers sharing one instance across threads must
    serialise access themselves.
    """

    def __init__(
        self,
        initial_state: T,
        max_size: int | None = None,
        equals: EqualityPredicate = identity_equals,
    ) -> None:
        if not callable(equals):
            raise TypeError("equals must be callable")
        self._max_size = check_max_size(max_size)
        self._equals = equals
        self._initial_state = initial_state
        self._past: deque[T] = deque()
        self._present = initial_state
        self._future: deque[T] = deque()

    @classmethod
    def from_config(cls, initial_state: T, config: HistoryConfig) -> History[T]:
        return cls(
            initial_state,
            max_size=config.max_size,
            equals=config.resolve_equals(),
        )

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def present(self) -> T:
        return self._present

    @present.setter
    def present(self, value: T) -> None:
        self.assign(value)

    @property
    def past(self) -> tuple[T, ...]:
        """Copy of past, oldest first."""
        return tuple(self._past)

    @property
    def future(self) -> tuple[T, ...]:
        """Copy of future, nearest first."""
        return tuple(self._future)

    @property
    def initial_state(self) -> T:
        return self._initial_state

    @property
    def equals(self) -> EqualityPredicate:
        return self._equals

    @property
    def can_undo(self) -> bool:
        return bool(self._past)

    @property
    def can_redo(self) -> bool:
        return bool(self._future)

    @property
    def max_size(self) -> int | None:
        return self._max_size

    @max_size.setter
    def max_size(self, value: int | None) -> None:
        """Change the bound.  Lowering it evicts the oldest entries now."""
        self._max_size = check_max_size(value)
        self._trim_past()

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def assign(self, new_value: T) -> bool:
        """Make *new_value* the present state.

        Returns ``False`` (and changes nothing) when ``equals(present,
        new_value)`` holds.  Otherwise the old present is pushed onto past,
        future is discarded, and ``True`` is returned.
        """
        if self._equals(self._present, new_value):
            logger.debug("Assignment suppressed: value equals present")
            return False
        self._push_past(self._present)
        self._present = new_value
        self._future.clear()
        return True

    def undo(self) -> bool:
        """Step back one state.  No-op when past is empty."""
        if not self._past:
            return False
        previous = self._past.pop()
        self._future.appendleft(self._present)
        self._present = previous
        return True

    def redo(self) -> bool:
        """Step forward one state.  No-op when future is empty.

        Uses the same past trimming as :meth:`assign`, so a long redo run
        against a small ``max_size`` permanently drops the oldest states.
        """
        if not self._future:
            return False
        following = self._future.popleft()
        self._push_past(self._present)
        self._present = following
        return True

    def clear(self) -> None:
        """Forget all history and return to the initial state."""
        self._past.clear()
        self._future.clear()
        self._present = self._initial_state

    def batch_update(self, update_fn: Callable[[T], T]) -> bool:
        """Apply *update_fn* to present and record the result as one step.

        However many fields *update_fn* touches, at most one past entry is
        recorded.  If *update_fn* raises, the history is left untouched.
        """
        candidate = update_fn(self._present)
        return self.assign(candidate)

    @contextmanager
    def batch(self) -> Iterator[BatchDraft[T]]:
        """Context-manager form of :meth:`batch_update`.

        Example::

            with history.batch() as draft:
                draft.value = {**draft.value, "x": 1}
                draft.value = {**draft.value, "y": 2}

        The final ``draft.value`` is committed on exit as a single step.
        Nothing is committed if the block raises.

        ``draft.value`` starts out as the live present object.  Replace it
        rather than mutating it in place: an in-place edit rewrites present
        directly and, being the same object, is never recorded.
        :meth:`retrace.binding.state.StateBinding.update` hands out a copy
        instead.
        """
        draft = BatchDraft(self._present)
        yield draft
        self.assign(draft.value)

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def take_snapshot(self) -> HistorySnapshot:
        return HistorySnapshot(
            past=tuple(self._past),
            present=self._present,
            future=tuple(self._future),
        )

    def restore_snapshot(self, snapshot: HistorySnapshot) -> None:
        """Replace all three sequences with copies of *snapshot*'s.

        Skips the equality check and the ``max_size`` trim: a restored past
        longer than ``max_size`` is kept as-is until the next forward step
        trims it.  The snapshot is not validated.
        """
        self._past = deque(snapshot.past)
        self._present = snapshot.present
        self._future = deque(snapshot.future)
        if self._max_size is not None and len(self._past) > self._max_size:
            logger.debug(
                "Restored past exceeds max_size (%d > %d)",
                len(self._past),
                self._max_size,
            )

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def get_status(self) -> dict[str, Any]:
        """Return sequence lengths and flags for display / logging."""
        return {
            "past_length": len(self._past),
            "future_length": len(self._future),
            "max_size": self._max_size,
            "can_undo": self.can_undo,
            "can_redo": self.can_redo,
        }

    def __repr__(self) -> str:
        return (
            f"History(past={len(self._past)}, future={len(self._future)}, "
            f"max_size={self._max_size})"
        )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _push_past(self, value: T) -> None:
        self._past.append(value)
        self._trim_past()

    def _trim_past(self) -> None:
        if self._max_size is None:
            return
        evicted = 0
        while len(self._past) > self._max_size:
            self._past.popleft()
            evicted += 1
        if evicted:
            logger.debug("Evicted %d oldest history entries", evicted)
