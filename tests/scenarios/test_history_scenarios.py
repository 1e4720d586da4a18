"""Scenario tests for the history container.

Walks realistic editing sessions: linear edits with branching-off after undo,
bounded history overflow, redundant edits, multi-field form updates, and
checkpoint/rollback with snapshots.  A seeded random walk checks the
structural invariants after every step.
"""

from __future__ import annotations

import random

import numpy as np
import pytest

from retrace.binding.state import StateBinding
from retrace.history.container import History
from retrace.history.equality import deep_equals, value_equals


# ---------------------------------------------------------------------------
# Editing sessions
# ---------------------------------------------------------------------------


class TestEditingSessions:
    def test_edit_undo_then_new_edit_drops_future(self):
        h = History(0)
        h.assign(1)
        h.assign(2)
        h.assign(3)
        assert h.past == (0, 1, 2)
        assert h.future == ()

        h.undo()
        h.undo()
        assert h.present == 1
        assert h.past == (0,)
        assert h.future == (2, 3)

        h.assign(4)
        assert h.present == 4
        assert h.past == (0, 1)
        assert h.future == ()

    def test_bounded_history_evicts_oldest(self):
        h = History(0, max_size=2)
        h.assign(1)
        h.assign(2)
        h.assign(3)
        assert h.past == (1, 2)
        assert h.present == 3

    def test_repeated_value_recorded_once(self):
        h = History(0, max_size=None, equals=lambda a, b: a == b)
        h.assign(5)
        h.assign(5)
        assert h.past == (0,)
        assert h.present == 5

    def test_multiple_undos_and_redos(self):
        h = History(0)
        for v in (1, 2, 3):
            h.assign(v)
        h.undo()
        h.undo()
        assert h.present == 1
        h.redo()
        assert h.present == 2
        h.assign(4)
        assert h.future == ()

    def test_clear_after_long_session(self):
        h = History("initial", max_size=10)
        for i in range(100):
            h.assign(f"edit-{i}")
            if i % 7 == 0:
                h.undo()
        h.clear()
        assert h.present == "initial"
        assert h.past == ()
        assert h.future == ()


# ---------------------------------------------------------------------------
# Composite states
# ---------------------------------------------------------------------------


class TestCompositeStates:
    def test_form_update_is_one_undo_step(self):
        h = History({"name": "", "email": "", "age": None}, equals=value_equals)
        h.batch_update(lambda s: {**s, "name": "Ada", "email": "ada@example.org", "age": 36})
        assert len(h.past) == 1
        h.undo()
        assert h.present == {"name": "", "email": "", "age": None}

    def test_identity_default_records_structurally_equal_states(self):
        h = History({"x": 1})
        h.assign({"x": 1})
        h.assign({"x": 1})
        assert len(h.past) == 2

    def test_deep_equality_with_arrays(self):
        h = History({"pos": np.zeros(3)}, equals=deep_equals)
        h.assign({"pos": np.zeros(3)})
        assert h.past == ()
        h.assign({"pos": np.ones(3)})
        assert len(h.past) == 1

    def test_binding_isolates_caller_mutation(self):
        doc = {"paragraphs": ["one"]}
        b = StateBinding(doc, equals=value_equals)
        doc["paragraphs"].append("two")
        b.set(doc)
        doc["paragraphs"].append("three")
        b.set(doc)
        b.undo()
        assert b.state == {"paragraphs": ["one", "two"]}
        b.undo()
        assert b.state == {"paragraphs": ["one"]}


# ---------------------------------------------------------------------------
# Checkpoints
# ---------------------------------------------------------------------------


class TestCheckpoints:
    def test_rollback_to_checkpoint(self):
        h = History(0)
        h.assign(1)
        checkpoint = h.take_snapshot()
        for v in range(2, 10):
            h.assign(v)
        h.undo()
        h.restore_snapshot(checkpoint)
        assert h.present == 1
        assert h.past == (0,)
        assert h.future == ()
        # Still fully usable afterwards
        h.undo()
        assert h.present == 0

    def test_checkpoint_survives_bound_change(self):
        h = History(0, max_size=10)
        for v in range(1, 8):
            h.assign(v)
        checkpoint = h.take_snapshot()
        h.max_size = 2
        assert len(h.past) == 2
        h.restore_snapshot(checkpoint)
        assert len(h.past) == 7


# ---------------------------------------------------------------------------
# Random walk
# ---------------------------------------------------------------------------


def _check_invariants(h: History, max_size: int | None) -> None:
    if max_size is not None:
        assert len(h.past) <= max_size
    assert h.can_undo == bool(h.past)
    assert h.can_redo == bool(h.future)


@pytest.mark.parametrize("seed", [0, 1, 2, 3, 4])
@pytest.mark.parametrize("max_size", [None, 0, 1, 5])
def test_random_walk_invariants(seed, max_size):
    rng = random.Random(seed)
    h = History(0, max_size=max_size)
    counter = 0

    for _ in range(300):
        op = rng.choice(["assign", "assign", "same", "undo", "redo", "batch", "clear"])
        before = h.take_snapshot()

        if op == "assign":
            counter += 1
            h.assign(counter)
            assert h.present == counter
            assert h.future == ()
            if max_size != 0:
                assert h.past[-1] == before.present
        elif op == "same":
            h.assign(h.present)
            assert h.take_snapshot() == before
        elif op == "undo":
            moved = h.undo()
            if before.past:
                assert moved
                assert h.present == before.past[-1]
                assert h.future[0] == before.present
                # Redo right away restores everything
                h.redo()
                assert h.present == before.present
                assert h.future == before.future
                h.undo()
            else:
                assert h.take_snapshot() == before
        elif op == "redo":
            moved = h.redo()
            if before.future:
                assert moved
                assert h.present == before.future[0]
                assert h.future == before.future[1:]
            else:
                assert h.take_snapshot() == before
        elif op == "batch":
            counter += 1
            target = counter
            h.batch_update(lambda _: target)
            assert h.present == target
            if max_size is None:
                assert len(h.past) == len(before.past) + 1
        else:
            h.clear()
            assert h.present == 0
            assert h.past == ()
            assert h.future == ()

        _check_invariants(h, max_size)
