"""Event system mixin: ``on``/``off``/``trigger`` plus inversion-of-control listening."""

from __future__ import annotations

import types
from collections.abc import Mapping
from functools import partial
from typing import Any, Callable, Dict, Optional

from .api import LOGGER, events_api, off_api, on_api, once_map, split_names, trigger_api
from .config import get_settings
from .exceptions import EventNameError
from .models import HandlerOptions, Listening
from .utils import keys, unique_id


def _ensure_listen_id(obj: Any) -> str:
    listen_id = getattr(obj, "_listen_id", None)
    if listen_id is None:
        listen_id = unique_id(get_settings().id_prefix)
        obj._listen_id = listen_id
    return listen_id


def internal_on(
    obj: Any,
    name: Any,
    callback: Any,
    context: Any,
    listening: Optional[Listening] = None,
) -> Any:
    """Register on ``obj``; ``listening`` is only passed by ``listen_to``."""

    events = getattr(obj, "_events", None)
    obj._events = events_api(
        on_api,
        events if events is not None else {},
        name,
        callback,
        HandlerOptions(context=context, ctx=obj, listening=listening),
    )

    if listening is not None:
        listeners = getattr(obj, "_listeners", None)
        if listeners is None:
            listeners = obj._listeners = {}
        listeners[listening.id] = listening

    return obj


class Events:
    """Mixin giving any object named events, ``"all"`` and listening helpers.

    State is created lazily on first use, so subclasses need not call
    ``super().__init__()``.
    """

    _events: Optional[Dict[str, list]] = None
    _listeners: Optional[Dict[str, Listening]] = None
    _listening_to: Optional[Dict[str, Listening]] = None
    _listen_id: Optional[str] = None

    def on(self, name: Any, callback: Optional[Callable[..., Any]] = None, context: Any = None):
        """Bind ``callback`` to ``name``. Binding ``"all"`` fires on every event."""

        return internal_on(self, name, callback, context)

    def listen_to(self, obj: Any, name: Any, callback: Optional[Callable[..., Any]] = None):
        """Bind to events of ``obj`` while keeping track of it for ``stop_listening``."""

        if obj is None:
            return self
        obj_id = _ensure_listen_id(obj)
        listening_to = getattr(self, "_listening_to", None)
        if listening_to is None:
            listening_to = self._listening_to = {}
        listening = listening_to.get(obj_id)

        if listening is None:
            this_id = _ensure_listen_id(self)
            listening = listening_to[obj_id] = Listening(
                obj=obj, obj_id=obj_id, id=this_id, listening_to=listening_to
            )
            LOGGER.debug("listening listener=%s emitter=%s", this_id, obj_id)

        internal_on(obj, name, callback, self, listening)
        return self

    def off(self, name: Any = None, callback: Optional[Callable[..., Any]] = None, context: Any = None):
        """Remove callbacks.

        Without ``context`` every callback matching ``callback`` goes; without
        ``callback`` every callback for the event goes; without ``name`` every
        event is considered. With no arguments at all everything is removed.
        """

        events = getattr(self, "_events", None)
        if events is None:
            return self
        self._events = events_api(
            off_api,
            events,
            name,
            callback,
            HandlerOptions(context=context, listeners=getattr(self, "_listeners", None)),
        )
        return self

    def stop_listening(
        self, obj: Any = None, name: Any = None, callback: Optional[Callable[..., Any]] = None
    ):
        """Stop listening to ``obj``, or to every object when ``obj`` is omitted."""

        listening_to = getattr(self, "_listening_to", None)
        if not listening_to:
            return self

        ids = [getattr(obj, "_listen_id", None)] if obj is not None else keys(listening_to)
        for obj_id in ids:
            listening = listening_to.get(obj_id)
            # Not listening to this object: stop here rather than skip ahead.
            if listening is None:
                break
            listening.obj.off(name, callback, self)

        return self

    def once(self, name: Any, callback: Optional[Callable[..., Any]] = None, context: Any = None):
        """Bind ``callback`` so it fires at most once per event name."""

        events = events_api(once_map, {}, name, callback, self.off)
        if isinstance(name, str) and context is None:
            callback = None
        return self.on(events, callback, context)

    def listen_to_once(self, obj: Any, name: Any, callback: Optional[Callable[..., Any]] = None):
        """Inversion-of-control version of :meth:`once`."""

        events = events_api(once_map, {}, name, callback, partial(self.stop_listening, obj))
        return self.listen_to(obj, events)

    def trigger(self, name: Any, *args: Any, **kwargs: Any):
        """Fire ``name`` (or several space separated names) with ``args``.

        ``"all"`` handlers receive the event name as their first argument.
        """

        if isinstance(name, Mapping):
            raise EventNameError("trigger() accepts event names, not event maps")
        events = getattr(self, "_events", None)
        if events is None:
            return self

        for single in split_names(name):
            events = trigger_api(events, single, args, kwargs)
        return self

    bind = on
    unbind = off


EVENT_METHODS = (
    "on",
    "off",
    "once",
    "trigger",
    "listen_to",
    "listen_to_once",
    "stop_listening",
    "bind",
    "unbind",
)


def mixin(target: Any) -> Any:
    """Attach the :class:`Events` methods to an existing object and return it."""

    for method_name in EVENT_METHODS:
        setattr(target, method_name, types.MethodType(getattr(Events, method_name), target))
    return target


__all__ = ["EVENT_METHODS", "Events", "internal_on", "mixin"]
