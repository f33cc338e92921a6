"""Read-only views over an object's handler registry and listening relations."""
from __future__ import annotations

import types
from typing import Any, Dict, List

from rich.console import Console
from rich.table import Table


def _callable_name(callback: Any) -> str:
    original = None
    if isinstance(callback, types.FunctionType):
        original = getattr(callback, "original_callback", None)
    if original is not None:
        return f"once({_callable_name(original)})"
    return getattr(callback, "__qualname__", None) or repr(callback)


def describe(obj: Any) -> Dict[str, Any]:
    """Return a plain snapshot of what ``obj`` emits and listens to."""

    events = getattr(obj, "_events", None) or {}
    listening_to = getattr(obj, "_listening_to", None) or {}
    listeners = getattr(obj, "_listeners", None) or {}

    handlers: Dict[str, List[Dict[str, Any]]] = {}
    for name, records in events.items():
        handlers[str(name)] = [
            {
                "callback": _callable_name(record.callback),
                "context": None if record.context is None else repr(record.context),
                "listener": record.listening.id if record.listening is not None else None,
            }
            for record in records
        ]

    return {
        "listen_id": getattr(obj, "_listen_id", None),
        "events": handlers,
        "listening_to": {obj_id: rel.count for obj_id, rel in listening_to.items()},
        "listeners": {listener_id: rel.count for listener_id, rel in listeners.items()},
    }


def render(obj: Any, console: Console | None = None) -> Dict[str, Any]:
    """Print :func:`describe` output for ``obj`` as tables and return the snapshot."""

    console = console or Console()
    snapshot = describe(obj)
    title = snapshot["listen_id"] or type(obj).__name__

    table = Table(title=f"Handlers on {title}")
    table.add_column("event")
    table.add_column("callback")
    table.add_column("context")
    table.add_column("listener")
    for name, records in snapshot["events"].items():
        for record in records:
            table.add_row(name, record["callback"], record["context"] or "-", record["listener"] or "-")
    console.print(table)

    if snapshot["listening_to"]:
        relations = Table(title=f"{title} is listening to")
        relations.add_column("emitter")
        relations.add_column("handlers", justify="right")
        for obj_id, count in snapshot["listening_to"].items():
            relations.add_row(obj_id, str(count))
        console.print(relations)
    return snapshot


__all__ = ["describe", "render"]
