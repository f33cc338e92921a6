"""Records kept in the handler registry and listening tracker."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional


@dataclass(slots=True, eq=False)
class Listening:
    """Bookkeeping for one (listener, emitter) pair.

    ``listening_to`` is the listener's own ``_listening_to`` mapping, kept so
    that removal driven from the emitter side can drop the relation on the
    listener side as well. ``count`` tracks the live handlers created through
    this relation; the relation is discarded from both sides when it hits 0.
    """

    obj: Any
    obj_id: str
    id: str
    listening_to: Dict[str, "Listening"]
    count: int = 0

    def forget(self, listeners: Optional[Dict[str, "Listening"]]) -> None:
        if listeners is not None:
            listeners.pop(self.id, None)
        self.listening_to.pop(self.obj_id, None)


@dataclass(slots=True, eq=False)
class Handler:
    """A single subscription bound to an event name."""

    callback: Callable[..., Any]
    context: Any = None
    ctx: Any = None
    listening: Optional[Listening] = None

    def matches(self, callback: Any, context: Any) -> bool:
        """Return True when every supplied filter selects this handler."""

        if callback and callback != self.callback and callback != getattr(
            self.callback, "original_callback", None
        ):
            return False
        if context is not None and context is not self.context:
            return False
        return True


@dataclass(slots=True)
class HandlerOptions:
    """Options threaded through the normalizer by ``on`` and ``off``."""

    context: Any = None
    ctx: Any = None
    listening: Optional[Listening] = None
    listeners: Optional[Dict[str, Listening]] = None


__all__ = ["Handler", "HandlerOptions", "Listening"]
