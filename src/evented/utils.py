"""Small helpers shared by the event machinery."""

from __future__ import annotations

import functools
import itertools
from typing import Any, Callable, List, Mapping

_counter = itertools.count(1)


def unique_id(prefix: str = "") -> str:
    """Return a process-wide unique id such as ``l1``, ``l2`` ..."""

    return f"{prefix}{next(_counter)}"


def keys(mapping: Mapping[str, Any] | None) -> List[str]:
    """Snapshot the keys of ``mapping`` in enumeration order."""

    if not mapping:
        return []
    return list(mapping)


def once(function: Callable[..., Any]) -> Callable[..., Any]:
    """Wrap ``function`` so it runs at most once.

    Later calls return the result of the first call without invoking
    ``function`` again. The flag flips before the call so reentrant calls
    made from inside ``function`` are no-ops too.
    """

    called = False
    result: Any = None

    @functools.wraps(function)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        nonlocal called, result
        if called:
            return result
        called = True
        result = function(*args, **kwargs)
        return result

    return wrapper


__all__ = ["keys", "once", "unique_id"]
