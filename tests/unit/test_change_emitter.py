"""Unit tests for the ordered change emitter."""

import pytest

from storex import ChangeEmitter


@pytest.mark.unit
@pytest.mark.emitter
def test_emitter_calls_listeners_in_registration_order():
    """emit() calls every listener in registration order with (new, old)"""
    emitter = ChangeEmitter()
    calls = []
    emitter.subscribe(lambda new, old: calls.append(("first", new, old)))
    emitter.subscribe(lambda new, old: calls.append(("second", new, old)))

    emitter.emit(2, 1)

    assert calls == [("first", 2, 1), ("second", 2, 1)]


@pytest.mark.unit
@pytest.mark.emitter
def test_emitter_skips_listener_when_equality_check_is_true():
    """A listener is skipped when its equality check says both states are equal"""
    emitter = ChangeEmitter()
    calls = []
    emitter.subscribe(
        lambda new, old: calls.append((new, old)),
        lambda new, old: new["id"] == old["id"],
    )

    emitter.emit({"id": 1, "v": 2}, {"id": 1, "v": 1})
    emitter.emit({"id": 2}, {"id": 1})

    assert calls == [({"id": 2}, {"id": 1})]


@pytest.mark.unit
@pytest.mark.emitter
def test_emitter_unsubscribe_removes_only_that_listener():
    """Unsubscribe stops one listener and leaves the others registered"""
    emitter = ChangeEmitter()
    first, second = [], []
    unsubscribe = emitter.subscribe(lambda new, old: first.append(new))
    emitter.subscribe(lambda new, old: second.append(new))

    unsubscribe()
    emitter.emit(1, 0)

    assert first == []
    assert second == [1]
    assert len(emitter) == 1


@pytest.mark.unit
@pytest.mark.emitter
def test_emitter_same_listener_can_be_registered_twice():
    """Each subscription gets its own token, even for the same function"""
    emitter = ChangeEmitter()
    calls = []

    def listener(new, old):
        calls.append(new)

    unsubscribe = emitter.subscribe(listener)
    emitter.subscribe(listener)
    unsubscribe()
    emitter.emit("x", None)

    assert calls == ["x"]


@pytest.mark.unit
@pytest.mark.emitter
def test_emitter_unsubscribe_during_emit_prevents_later_calls():
    """A listener removed while an emission is running is not called afterwards"""
    emitter = ChangeEmitter()
    calls = []
    handles = {}

    def remover(new, old):
        handles["victim"]()

    emitter.subscribe(remover)
    handles["victim"] = emitter.subscribe(lambda new, old: calls.append(new))

    emitter.emit(1, 0)
    emitter.emit(2, 1)

    assert calls == []


@pytest.mark.unit
@pytest.mark.emitter
def test_emitter_clear_removes_every_listener():
    """clear() drops all listeners"""
    emitter = ChangeEmitter()
    calls = []
    emitter.subscribe(lambda new, old: calls.append(new))
    emitter.subscribe(lambda new, old: calls.append(new))

    emitter.clear()
    emitter.emit(1, 0)

    assert calls == []
    assert len(emitter) == 0


@pytest.mark.unit
@pytest.mark.emitter
def test_emitter_propagates_listener_exceptions():
    """Exceptions raised by a listener reach the caller of emit()"""
    emitter = ChangeEmitter()

    def failing(new, old):
        raise RuntimeError("boom")

    emitter.subscribe(failing)

    with pytest.raises(RuntimeError, match="boom"):
        emitter.emit(1, 0)
