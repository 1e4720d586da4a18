"""StateBinding — clone-on-boundary wrapper that notifies on every change."""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from retrace.core.bus import EventBus
from retrace.history.config import HistoryConfig
from retrace.history.container import History
from retrace.history.equality import EqualityPredicate, identity_equals
from retrace.history.snapshot import HistorySnapshot

logger = logging.getLogger(__name__)

T = TypeVar("T")

CHANGE_EVENT = "change"


class StateBinding(Generic[T]):
    """Exposes a :class:`History` to a view layer.

    Every value crossing the boundary (the initial state, ``set`` and
    ``update`` results, snapshots in both directions) is passed through
    *clone*, so the caller can keep mutating its own objects without
    rewriting recorded states.

    After each mutating call, including calls the history suppressed as
    no-ops, a ``"change"`` event is published on the bus with ``state``,
    ``can_undo`` and ``can_redo`` keyword arguments.  Subscribers re-render
    from those; they should not mutate ``state`` in place.
    """

    def __init__(
        self,
        initial_state: T,
        max_size: int | None = None,
        equals: EqualityPredicate = identity_equals,
        clone: Callable[[T], T] = copy.deepcopy,
        bus: EventBus | None = None,
    ) -> None:
        self._clone = clone
        self._history: History[T] = History(
            clone(initial_state), max_size=max_size, equals=equals
        )
        self._bus = bus or EventBus()

    @classmethod
    def from_config(
        cls,
        initial_state: T,
        config: HistoryConfig,
        **kwargs: Any,
    ) -> StateBinding[T]:
        return cls(
            initial_state,
            max_size=config.max_size,
            equals=config.resolve_equals(),
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def state(self) -> T:
        return self._history.present

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    @property
    def history(self) -> History[T]:
        """The wrapped container.  Read from it; mutate through the binding."""
        return self._history

    @property
    def bus(self) -> EventBus:
        return self._bus

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, callback: Callable[..., Any]) -> Callable[[], None]:
        """Register *callback* for change events.  Returns an unsubscriber."""
        self._bus.subscribe(CHANGE_EVENT, callback)
        return lambda: self._bus.unsubscribe(CHANGE_EVENT, callback)

    def unsubscribe(self, callback: Callable[..., Any]) -> None:
        self._bus.unsubscribe(CHANGE_EVENT, callback)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def set(self, value: T) -> bool:
        changed = self._history.assign(self._clone(value))
        self._notify()
        return changed

    def update(self, update_fn: Callable[[T], T]) -> bool:
        """Batch update over a private copy of the present state.

        *update_fn* may mutate its argument in place and return it; the
        recorded present is never touched.  Under identity equality the
        copy is never identical to present, so every call records a step;
        use value or deep equality to drop updates that change nothing.
        """
        changed = self._history.batch_update(
            lambda present: update_fn(self._clone(present))
        )
        self._notify()
        return changed

    def undo(self) -> bool:
        moved = self._history.undo()
        self._notify()
        return moved

    def redo(self) -> bool:
        moved = self._history.redo()
        self._notify()
        return moved

    def clear(self) -> None:
        self._history.clear()
        self._notify()

    def snapshot(self) -> HistorySnapshot:
        """A cloned copy of the history; editing it never touches the binding."""
        return self._clone_snapshot(self._history.take_snapshot())

    def restore(self, snapshot: HistorySnapshot) -> None:
        self._history.restore_snapshot(self._clone_snapshot(snapshot))
        self._notify()

    def _clone_snapshot(self, snapshot: HistorySnapshot) -> HistorySnapshot:
        return HistorySnapshot(
            past=tuple(self._clone(v) for v in snapshot.past),
            present=self._clone(snapshot.present),
            future=tuple(self._clone(v) for v in snapshot.future),
        )

    def _notify(self) -> None:
        self._bus.publish(
            CHANGE_EVENT,
            state=self._history.present,
            can_undo=self._history.can_undo,
            can_redo=self._history.can_redo,
        )
