import pytest

from conftest import Recorder
from s3_poller.errors import ConfigurationError, InvalidListenerError
from s3_poller.listeners import ListenerRegistry


def test_add_rejects_non_callable_without_registering() -> None:
    registry = ListenerRegistry()
    with pytest.raises(InvalidListenerError) as exc_info:
        registry.add(Recorder(), 42)
    assert exc_info.value.listener == 42
    assert isinstance(exc_info.value, ConfigurationError)
    assert isinstance(exc_info.value, TypeError)
    assert len(registry) == 0


def test_notify_in_registration_order() -> None:
    registry = ListenerRegistry()
    order: list[str] = []
    registry.add(lambda v: order.append(f"a{v}"))
    registry.add(lambda v: order.append(f"b{v}"), lambda v: order.append(f"c{v}"))

    registry.notify(1)

    assert order == ["a1", "b1", "c1"]


def test_remove_drops_every_instance_and_ignores_unknown() -> None:
    registry = ListenerRegistry()
    a, b = Recorder(), Recorder()
    registry.add(a, b, a)

    registry.remove(a, Recorder())
    registry.notify("x")

    assert len(registry) == 1
    assert a.values == []
    assert b.values == ["x"]


def test_remove_matches_bound_methods() -> None:
    class Handler:
        def __init__(self) -> None:
            self.seen: list[object] = []

        def on_change(self, value: object) -> None:
            self.seen.append(value)

    handler = Handler()
    registry = ListenerRegistry()
    registry.add(handler.on_change)
    registry.remove(handler.on_change)

    assert len(registry) == 0


def test_self_removal_applies_from_next_pass() -> None:
    registry = ListenerRegistry()
    later = Recorder()

    def once(value: object) -> None:
        registry.remove(once, later)

    registry.add(once, later)
    registry.notify(1)
    registry.notify(2)

    assert later.values == [1]
    assert len(registry) == 0


def test_listener_added_during_notify_waits_for_next_pass() -> None:
    registry = ListenerRegistry()
    added = Recorder()

    def adder(value: object) -> None:
        registry.add(added)

    registry.add(adder)
    registry.notify(1)
    registry.notify(2)

    assert added.values == [2]


def test_clear() -> None:
    registry = ListenerRegistry()
    listener = Recorder()
    registry.add(listener, listener)
    registry.clear()
    registry.notify(1)
    assert listener.values == []
    assert len(registry) == 0


def test_remove_ignores_callables_that_only_compare_equal() -> None:
    class Greedy:
        def __call__(self, value: object) -> None:
            return None

        def __eq__(self, other: object) -> bool:
            return True

        __hash__ = object.__hash__

    registry = ListenerRegistry()
    kept = Recorder()
    registry.add(kept)

    registry.remove(Greedy())
    registry.notify(1)

    assert len(registry) == 1
    assert kept.values == [1]


def test_remove_keeps_bound_methods_of_other_instances() -> None:
    class Handler:
        def on_change(self, value: object) -> None:
            return None

    first, second = Handler(), Handler()
    registry = ListenerRegistry()
    registry.add(first.on_change, second.on_change)

    registry.remove(first.on_change)

    assert len(registry) == 1
