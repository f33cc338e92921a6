"""evented: synchronous in-process events for any Python object."""

from .api import ALL, current_context
from .config import EventsSettings, configure, get_settings, load_settings
from .events import Events, mixin
from .exceptions import ConfigurationError, EventNameError, EventsError
from .introspection import describe, render

#: Process-wide bus for code that wants pubsub without owning an emitter.
bus = Events()

__all__ = [
    "ALL",
    "ConfigurationError",
    "EventNameError",
    "Events",
    "EventsError",
    "EventsSettings",
    "bus",
    "configure",
    "current_context",
    "describe",
    "get_settings",
    "load_settings",
    "mixin",
    "render",
]
