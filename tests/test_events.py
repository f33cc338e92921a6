from __future__ import annotations

from typing import Any, List

import pytest

from evented import ALL, EventNameError, Events, bus, current_context, mixin


class Emitter(Events):
    pass


class Recorder:
    def __init__(self) -> None:
        self.calls: List[Any] = []

    def handle(self, *args: Any) -> None:
        self.calls.append(args)


def test_handlers_fire_in_registration_order() -> None:
    emitter = Emitter()
    calls: List[str] = []
    emitter.on("e", lambda: calls.append("f1"))
    emitter.on("e", lambda: calls.append("f2"))

    emitter.trigger("e")

    assert calls == ["f1", "f2"]


def test_space_separated_names_register_each_event() -> None:
    emitter = Emitter()
    calls: List[str] = []
    emitter.on("a b", lambda: calls.append("hit"))

    emitter.trigger("a")
    emitter.trigger("b")

    assert calls == ["hit", "hit"]
    assert set(emitter._events) == {"a", "b"}


def test_trigger_splits_space_separated_names() -> None:
    emitter = Emitter()
    calls: List[str] = []
    emitter.on("a", lambda value: calls.append(f"a:{value}"))
    emitter.on("b", lambda value: calls.append(f"b:{value}"))

    emitter.trigger("a  b", 7)

    assert calls == ["a:7", "b:7"]


def test_event_map_registration_and_context() -> None:
    emitter = Emitter()
    owner = object()
    calls: List[Any] = []
    emitter.on({"a": lambda: calls.append(("a", current_context())), "b c": lambda: calls.append("bc")}, owner)

    emitter.trigger("a")
    emitter.trigger("c")

    assert calls == [("a", owner), "bc"]
    assert emitter._events["a"][0].context is owner


def test_all_receives_event_name_first() -> None:
    emitter = Emitter()
    received: List[Any] = []
    emitter.on(ALL, lambda *args: received.append(args))

    emitter.trigger("change", 1, 2)

    assert received == [("change", 1, 2)]


def test_named_handlers_run_before_all() -> None:
    emitter = Emitter()
    order: List[str] = []
    emitter.on("all", lambda name: order.append(f"all:{name}"))
    emitter.on("x", lambda: order.append("x"))

    emitter.trigger("x")

    assert order == ["x", "all:x"]


def test_keyword_arguments_are_forwarded() -> None:
    emitter = Emitter()
    named: List[Any] = []
    wildcard: List[Any] = []
    emitter.on("save", lambda *args, **kwargs: named.append((args, kwargs)))
    emitter.on("all", lambda *args, **kwargs: wildcard.append((args, kwargs)))

    emitter.trigger("save", 1, force=True)

    assert named == [((1,), {"force": True})]
    assert wildcard == [(("save", 1), {"force": True})]


def test_all_handlers_are_snapshotted_before_named_handlers_run() -> None:
    emitter = Emitter()
    late: List[Any] = []

    def add_all_handler() -> None:
        emitter.on("all", lambda name: late.append(name))

    emitter.on("all", lambda name: None)
    emitter.on("x", add_all_handler)

    emitter.trigger("x")
    assert late == []

    emitter.off("x")
    emitter.trigger("y")
    assert late == ["y"]


def test_handler_added_during_dispatch_waits_for_next_trigger() -> None:
    emitter = Emitter()
    calls: List[str] = []

    def first() -> None:
        calls.append("first")
        emitter.on("e", lambda: calls.append("late"))

    emitter.on("e", first)
    emitter.trigger("e")
    assert calls == ["first"]

    calls.clear()
    emitter.off("e", first)
    emitter.trigger("e")
    assert calls == ["late"]


def test_handler_removing_itself_takes_effect_on_next_trigger() -> None:
    emitter = Emitter()
    calls: List[str] = []

    def second() -> None:
        calls.append("second")
        emitter.off("e", second)

    emitter.on("e", lambda: calls.append("first"))
    emitter.on("e", second)
    emitter.on("e", lambda: calls.append("third"))

    emitter.trigger("e")
    assert calls == ["first", "second", "third"]

    calls.clear()
    emitter.trigger("e")
    assert calls == ["first", "third"]


def test_nested_trigger_is_synchronous() -> None:
    emitter = Emitter()
    order: List[str] = []

    def outer() -> None:
        order.append("outer-start")
        emitter.trigger("inner")
        order.append("outer-end")

    emitter.on("outer", outer)
    emitter.on("inner", lambda: order.append("inner"))

    emitter.trigger("outer")

    assert order == ["outer-start", "inner", "outer-end"]


def test_handler_exception_aborts_remaining_handlers() -> None:
    emitter = Emitter()
    calls: List[str] = []

    def boom() -> None:
        raise ValueError("boom")

    emitter.on("e", boom)
    emitter.on("e", lambda: calls.append("after"))
    emitter.on("all", lambda name: calls.append("all"))

    with pytest.raises(ValueError, match="boom"):
        emitter.trigger("e")
    assert calls == []
    assert current_context() is None


def test_missing_callback_is_ignored() -> None:
    emitter = Emitter()
    assert emitter.on("e") is emitter
    assert emitter._events == {}
    emitter.trigger("e")


def test_trigger_without_registrations_is_noop() -> None:
    emitter = Emitter()
    assert emitter.trigger("e", 1) is emitter
    assert emitter.off("e") is emitter


def test_trigger_rejects_event_maps() -> None:
    emitter = Emitter()
    emitter.on("e", lambda: None)

    with pytest.raises(EventNameError):
        emitter.trigger({"e": None})
    with pytest.raises(TypeError):
        emitter.trigger({"e": None})


def test_effective_context_defaults_to_emitter() -> None:
    emitter = Emitter()
    owner = object()
    seen: List[Any] = []
    emitter.on("e", lambda: seen.append(current_context()))
    emitter.on("e", lambda: seen.append(current_context()), owner)

    emitter.trigger("e")

    assert seen == [emitter, owner]
    assert current_context() is None


def test_off_by_callback_matches_every_event() -> None:
    emitter = Emitter()
    recorder = Recorder()
    other = Recorder()
    emitter.on("a b", recorder.handle)
    emitter.on("a", other.handle)

    emitter.off(callback=recorder.handle)

    assert "b" not in emitter._events
    assert [handler.callback for handler in emitter._events["a"]] == [other.handle]


def test_off_by_context_uses_stored_context_only() -> None:
    emitter = Emitter()
    recorder = Recorder()
    first, second = object(), object()
    emitter.on("a", recorder.handle, first)
    emitter.on("a", recorder.handle, second)
    emitter.on("a", recorder.handle)

    emitter.off(None, None, first)

    contexts = [handler.context for handler in emitter._events["a"]]
    assert contexts == [second, None]

    emitter.off(None, None, emitter)
    assert len(emitter._events["a"]) == 2


def test_off_requires_every_supplied_filter_to_match() -> None:
    emitter = Emitter()
    keep, drop = Recorder(), Recorder()
    owner = object()
    emitter.on("a", keep.handle, owner)
    emitter.on("a", drop.handle, owner)

    emitter.off("a", drop.handle, owner)
    emitter.trigger("a", 1)

    assert keep.calls == [(1,)]
    assert drop.calls == []


def test_off_last_handler_deletes_event_key() -> None:
    emitter = Emitter()
    recorder = Recorder()
    emitter.on("a", recorder.handle)

    emitter.off("a", recorder.handle)

    assert emitter._events == {}


def test_off_everything() -> None:
    emitter = Emitter()
    recorder = Recorder()
    emitter.on("a b", recorder.handle)

    emitter.off()
    emitter.trigger("a")

    assert emitter._events is None
    assert recorder.calls == []
    emitter.on("a", recorder.handle).trigger("a")
    assert recorder.calls == [()]


def test_event_map_removal() -> None:
    emitter = Emitter()
    a, b = Recorder(), Recorder()
    emitter.on({"a": a.handle, "b": b.handle})

    emitter.off({"a": a.handle})
    emitter.trigger("a b")

    assert a.calls == []
    assert b.calls == [()]


def test_methods_chain() -> None:
    emitter = Emitter()
    recorder = Recorder()
    result = emitter.on("a", recorder.handle).trigger("a").off("a").once("b", recorder.handle)
    assert result is emitter


def test_bind_and_unbind_are_aliases() -> None:
    emitter = Emitter()
    recorder = Recorder()
    emitter.bind("a", recorder.handle)
    emitter.trigger("a")
    emitter.unbind("a", recorder.handle)
    emitter.trigger("a")

    assert Events.bind is Events.on
    assert Events.unbind is Events.off
    assert recorder.calls == [()]


def test_mixin_on_plain_object() -> None:
    class Plain:
        pass

    target = mixin(Plain())
    recorder = Recorder()
    target.on("ping", recorder.handle)
    target.trigger("ping", "pong")

    assert recorder.calls == [("pong",)]
    assert not isinstance(target, Events)


def test_global_bus() -> None:
    recorder = Recorder()
    bus.on("global:event", recorder.handle)
    try:
        bus.trigger("global:event", 42)
    finally:
        bus.off("global:event", recorder.handle)
    bus.trigger("global:event", 43)

    assert recorder.calls == [(42,)]


def test_trigger_rejects_event_maps_without_registrations() -> None:
    emitter = Emitter()

    with pytest.raises(EventNameError):
        emitter.trigger({"e": None})
