"""Normalizer and reducers behind the public event methods.

Every registration call shape (a single name, space separated names, or a
``{name: callback}`` mapping) is fanned out by :func:`events_api` into calls
of a single-event reducer. ``on``, ``off`` and ``once`` only differ in the
reducer they pass.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from contextvars import ContextVar
from typing import Any, Callable, Dict, List, Optional, TypeVar

from .logging import get_logger
from .models import Handler, HandlerOptions
from .utils import keys, once

LOGGER = get_logger("events")

ALL = "all"

_WHITESPACE = re.compile(r"\s")

_current_context: ContextVar[Any] = ContextVar("evented_current_context", default=None)

State = TypeVar("State")
Registry = Dict[str, List[Handler]]


def events_api(
    iteratee: Callable[[State, Any, Any, Any], State],
    events: State,
    name: Any,
    callback: Any,
    opts: Any,
) -> State:
    """Reduce ``events`` with ``iteratee`` once per individual event name."""

    if isinstance(name, Mapping):
        # In the mapping form the callback slot carries the context.
        if callback is not None and isinstance(opts, HandlerOptions) and opts.context is None:
            opts.context = callback
        for key in keys(name):
            events = events_api(iteratee, events, key, name[key], opts)
    elif name and isinstance(name, str) and _WHITESPACE.search(name):
        for single in name.split():
            events = iteratee(events, single, callback, opts)
    else:
        events = iteratee(events, name, callback, opts)
    return events


def split_names(name: Any) -> List[Any]:
    """Split a space separated name; anything else is a single event name."""

    if name and isinstance(name, str) and _WHITESPACE.search(name):
        return name.split()
    return [name]


def on_api(events: Registry, name: str, callback: Any, options: HandlerOptions) -> Registry:
    """Append a handler for ``name``; a missing callback is ignored."""

    if callback:
        handlers = events.setdefault(name, [])
        listening = options.listening
        if listening is not None:
            listening.count += 1
        handlers.append(
            Handler(
                callback=callback,
                context=options.context,
                ctx=options.context if options.context is not None else options.ctx,
                listening=listening,
            )
        )
    return events


def off_api(
    events: Optional[Registry], name: Any, callback: Any, options: HandlerOptions
) -> Optional[Registry]:
    """Remove the handlers selected by ``name``, ``callback`` and ``context``.

    With no filters at all every listening relation on the emitter is dropped
    and ``None`` is returned; the caller replaces the registry wholesale.
    """

    if events is None:
        return None

    context = options.context
    listeners = options.listeners

    if not name and not callback and context is None:
        for listener_id in keys(listeners):
            listening = listeners[listener_id]
            LOGGER.debug("dropping relation listener=%s emitter=%s", listening.id, listening.obj_id)
            listening.forget(listeners)
        return None

    names = [name] if name else keys(events)
    for event_name in names:
        handlers = events.get(event_name)
        if not handlers:
            break

        remaining = []
        for handler in handlers:
            if not handler.matches(callback, context):
                remaining.append(handler)
                continue
            listening = handler.listening
            if listening is not None:
                listening.count -= 1
                if listening.count == 0:
                    LOGGER.debug(
                        "relation exhausted listener=%s emitter=%s", listening.id, listening.obj_id
                    )
                    listening.forget(listeners)

        if remaining:
            events[event_name] = remaining
        else:
            del events[event_name]
    return events


def once_map(
    map_: Dict[str, Callable[..., Any]],
    name: str,
    callback: Any,
    offer: Callable[[str, Callable[..., Any]], Any],
) -> Dict[str, Callable[..., Any]]:
    """Collect ``{name: wrapper}`` where each wrapper unbinds itself via ``offer``."""

    if callback:
        def fire(*args: Any, **kwargs: Any) -> Any:
            offer(name, wrapper)
            return callback(*args, **kwargs)

        wrapper = map_[name] = once(fire)
        wrapper.original_callback = callback  # type: ignore[attr-defined]
    return map_


def trigger_api(
    obj_events: Optional[Registry], name: Any, args: tuple, kwargs: Dict[str, Any]
) -> Optional[Registry]:
    """Fire the handlers bound to ``name`` followed by the ``"all"`` handlers."""

    if obj_events is not None:
        handlers = obj_events.get(name)
        all_handlers = obj_events.get(ALL)
        if handlers and all_handlers:
            all_handlers = list(all_handlers)
        try:
            if handlers:
                trigger_events(handlers, args, kwargs)
            if all_handlers:
                trigger_events(all_handlers, (name, *args), kwargs)
        except Exception:
            LOGGER.debug("handler raised while triggering %r", name, exc_info=True)
            raise
    return obj_events


def trigger_events(handlers: List[Handler], args: tuple, kwargs: Dict[str, Any]) -> None:
    """Invoke ``handlers`` in order with their effective context active.

    The length is fixed up front: handlers appended while dispatching are
    not reached by this pass.
    """

    for index in range(len(handlers)):
        handler = handlers[index]
        token = _current_context.set(handler.ctx)
        try:
            handler.callback(*args, **kwargs)
        finally:
            _current_context.reset(token)


def current_context() -> Any:
    """Return the effective context of the handler currently being dispatched."""

    return _current_context.get()


__all__ = [
    "ALL",
    "current_context",
    "events_api",
    "off_api",
    "on_api",
    "once_map",
    "split_names",
    "trigger_api",
    "trigger_events",
]
