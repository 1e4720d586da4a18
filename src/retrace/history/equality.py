"""Equality predicates deciding whether two states are "the same".

The container never compares values structurally on its own.  The default,
:func:`identity_equals`, only treats primitive scalars by value; composite
values (dicts, lists, dataclasses, arrays) are equal only when they are the
same object.  Callers that build a fresh dict for every edit and still want
redundant edits suppressed must opt in to :func:`value_equals` or
:func:`deep_equals`.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

import numpy as np

EqualityPredicate = Callable[[Any, Any], bool]

_PRIMITIVES = (type(None), bool, int, float, complex, str, bytes)


def identity_equals(a: Any, b: Any) -> bool:
    """Reference identity, with value comparison for primitive scalars.

    ``1 == 1.0`` is not enough: both sides must share the exact type, so
    ``True`` and ``1`` are different states.
    """
    if a is b:
        return True
    if type(a) is not type(b) or not isinstance(a, _PRIMITIVES):
        return False
    return a == b


def value_equals(a: Any, b: Any) -> bool:
    """Plain ``==`` comparison."""
    return bool(a == b)


def deep_equals(a: Any, b: Any) -> bool:
    """Recursive structural comparison that understands numpy arrays.

    ``==`` on a dict holding arrays raises (ambiguous truth value), so
    mappings and sequences are walked here and arrays are compared with
    :func:`numpy.array_equal`.
    """
    if a is b:
        return True
    if isinstance(a, np.ndarray) or isinstance(b, np.ndarray):
        return bool(np.array_equal(a, b))
    if isinstance(a, Mapping) and isinstance(b, Mapping):
        if a.keys() != b.keys():
            return False
        return all(deep_equals(a[k], b[k]) for k in a)
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        if type(a) is not type(b) or len(a) != len(b):
            return False
        return all(deep_equals(x, y) for x, y in zip(a, b))
    return bool(a == b)


EQUALITY_PREDICATES: dict[str, EqualityPredicate] = {
    "identity": identity_equals,
    "value": value_equals,
    "deep": deep_equals,
}


def resolve_equality(spec: str | EqualityPredicate) -> EqualityPredicate:
    """Return the predicate named by *spec*, or *spec* itself if callable."""
    if callable(spec):
        return spec
    try:
        return EQUALITY_PREDICATES[spec]
    except KeyError:
        valid = ", ".join(sorted(EQUALITY_PREDICATES))
        raise ValueError(
            f"Unknown equality predicate {spec!r} (expected one of: {valid})"
        ) from None
