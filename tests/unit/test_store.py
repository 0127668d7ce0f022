"""Unit tests for the root Store."""

import logging
from collections import OrderedDict, defaultdict
from datetime import date

import pytest

from storex import (
    DestroyedStoreAccess,
    FrozenDict,
    InvalidOptions,
    SelfAssignmentViolation,
    Store,
    StoreOptions,
    create_store,
)


@pytest.mark.unit
@pytest.mark.store
def test_store_inits_state_from_value(john):
    """Store state is initialised from a literal value"""
    store = create_store(john)

    assert store.get() == john


@pytest.mark.unit
@pytest.mark.store
def test_store_shallow_copies_initial_dict_and_list(john):
    """Top-level dicts and lists passed at creation are never aliased"""
    people = [john]

    dict_store = create_store(john)
    list_store = create_store(people)

    assert dict_store.get() is not john
    assert list_store.get() is not people
    people.append("someone")
    assert list_store.get() == [john]


@pytest.mark.unit
@pytest.mark.store
def test_store_inits_state_from_initializer(john):
    """An initializer function is called once and its result becomes the state"""
    calls = []

    def init(get, set):
        calls.append((get, set))
        return john

    store = create_store(init)

    assert store.get() == john
    assert len(calls) == 1


@pytest.mark.unit
@pytest.mark.store
def test_store_initializer_receives_working_accessors():
    """Methods built by the initializer can read and write their own store"""

    def init(get, set):
        return {
            "count": 0,
            "increment": lambda: set(lambda s: {**s, "count": s["count"] + 1}),
            "read": lambda: get()["count"],
        }

    store = create_store(init)
    store.get()["increment"]()
    store.get()["increment"]()

    assert store.get()["count"] == 2
    assert store.get()["read"]() == 2


@pytest.mark.unit
@pytest.mark.store
def test_store_without_initial_value_holds_none():
    """A store created without value starts with None"""
    store = create_store()

    assert store.get() is None


@pytest.mark.unit
@pytest.mark.store
@pytest.mark.parametrize("value", [42, "text", 1.5, True, [1, 2, 3]])
def test_store_handles_primitives_and_lists(value):
    """Primitives and lists are valid store states"""
    store = create_store(value)

    assert store.get() == value


@pytest.mark.unit
@pytest.mark.store
def test_store_set_replaces_state_and_notifies(john, jane, recorder):
    """set() stores the new state and emits (new, old)"""
    store = create_store(john)
    listener = recorder()
    store.subscribe(listener)
    old_state = store.get()

    store.set(jane)

    assert store.get() == jane
    assert listener.calls == [(store.get(), old_state)]


@pytest.mark.unit
@pytest.mark.store
def test_store_set_accepts_updater_function(john):
    """set() calls a function with the current state to get the next one"""
    store = create_store(john)

    store.set(lambda state: {**state, "age": state["age"] + 1})

    assert store.get()["age"] == 43


@pytest.mark.unit
@pytest.mark.store
def test_store_state_is_deeply_frozen():
    """Stored state can't be mutated"""
    store = create_store({"pet": {"names": ["Rex"]}})

    with pytest.raises(TypeError):
        store.get()["pet"] = None
    with pytest.raises(TypeError):
        store.get()["pet"]["names"].append("Fido")

    store.set({"other": {"a": 1}})
    with pytest.raises(TypeError):
        store.get()["other"]["a"] = 2


@pytest.mark.unit
@pytest.mark.store
def test_store_no_freeze_keeps_state_mutable():
    """no_freeze stores state as given"""
    state = {"pet": {"names": ["Rex"]}}
    store = create_store(options={"no_freeze": True})
    store.set(state)

    store.get()["pet"]["names"].append("Fido")

    assert store.get() is state
    assert state["pet"]["names"] == ["Rex", "Fido"]


@pytest.mark.unit
@pytest.mark.store
def test_store_set_to_own_state_is_ignored(john, recorder):
    """Setting the current state again emits nothing"""
    store = create_store(john)
    listener = recorder()
    store.subscribe(listener)

    store.set(store.get())
    store.set(lambda state: state)

    assert listener.count == 0


@pytest.mark.unit
@pytest.mark.store
def test_store_set_to_equal_primitive_is_ignored(recorder):
    """Primitives compare by value: setting an equal number emits nothing"""
    store = create_store(10**6)
    listener = recorder()
    store.subscribe(listener)

    store.set(int("1000000"))

    assert listener.count == 0


@pytest.mark.unit
@pytest.mark.store
def test_store_no_strict_equal_rejects_self_assignment(john, recorder):
    """no_strict_equal turns self assignment of objects into an error"""
    store = create_store(john, StoreOptions(no_strict_equal=True))
    listener = recorder()
    store.subscribe(listener)

    with pytest.raises(SelfAssignmentViolation):
        store.set(store.get())
    with pytest.raises(SelfAssignmentViolation):
        store.set(lambda state: state)

    assert listener.count == 0


@pytest.mark.unit
@pytest.mark.store
def test_store_no_strict_equal_allows_primitives_and_new_references(john):
    """no_strict_equal accepts same primitives and equal-but-new objects"""
    number_store = create_store(1, {"no_strict_equal": True})
    dict_store = create_store(john, {"no_strict_equal": True})

    number_store.set(1)
    dict_store.set(dict(john))

    assert dict_store.get() == john


@pytest.mark.unit
@pytest.mark.store
def test_store_no_strict_equal_ignores_scope_store_writes():
    """Writing the same sub-value through a scope rebuilds the root: no error"""
    store = create_store({"name": "John"}, {"no_strict_equal": True})

    store.get_scope_store("name").set("John")

    assert store.get() == {"name": "John"}


@pytest.mark.unit
@pytest.mark.store
def test_store_warns_on_non_plain_initial_value(caplog):
    """A non-plain initial value logs a warning"""
    with caplog.at_level(logging.WARNING, logger="storex.store"):
        create_store(date(2024, 1, 1))

    assert "no_warn" in caplog.text


@pytest.mark.unit
@pytest.mark.store
def test_store_no_warn_silences_non_plain_warning(caplog):
    """no_warn disables the non-plain value warning"""
    with caplog.at_level(logging.WARNING, logger="storex.store"):
        create_store(date(2024, 1, 1), {"no_warn": True})
        create_store({"a": 1})

    assert caplog.records == []


@pytest.mark.unit
@pytest.mark.store
def test_store_rejects_unknown_options():
    """Unknown option keys raise InvalidOptions"""
    with pytest.raises(InvalidOptions, match="no_frezee"):
        create_store({}, {"no_frezee": True})
    with pytest.raises(InvalidOptions):
        create_store({}, "no_freeze")


@pytest.mark.unit
@pytest.mark.store
def test_store_subscribe_with_equality_check(recorder):
    """An equality check returning True skips the listener"""
    store = create_store({"id": 1, "label": "a"})
    listener = recorder()
    store.subscribe(listener, equality_check=lambda new, old: new["id"] == old["id"])

    store.set({"id": 1, "label": "b"})
    store.set({"id": 2, "label": "b"})

    assert listener.count == 1
    assert listener.calls[0][0]["id"] == 2


@pytest.mark.unit
@pytest.mark.store
def test_store_subscribe_init_call(john, recorder):
    """init_call calls the listener right away with (state, state)"""
    store = create_store(john)
    listener = recorder()

    store.subscribe(listener, init_call=True)

    assert listener.calls == [(store.get(), store.get())]


@pytest.mark.unit
@pytest.mark.store
def test_store_unsubscribe_stops_notifications(recorder):
    """The function returned by subscribe() stops notifications"""
    store = create_store(0)
    listener = recorder()
    unsubscribe = store.subscribe(listener)

    store.set(1)
    unsubscribe()
    store.set(2)

    assert listener.calls == [(1, 0)]


@pytest.mark.unit
@pytest.mark.store
def test_store_reentrant_set_completes_synchronously():
    """A set() from a listener runs its own emission before set() returns"""
    store = create_store(0)
    seen = []

    def bump(new, old):
        seen.append(("bump", new))
        if new < 2:
            store.set(new + 1)

    store.subscribe(bump)
    store.subscribe(lambda new, old: seen.append(("watch", new)))

    store.set(1)

    assert store.get() == 2
    assert seen == [("bump", 1), ("bump", 2), ("watch", 2), ("watch", 1)]


@pytest.mark.unit
@pytest.mark.store
def test_store_destroy_resets_state_and_listeners(john, recorder):
    """destroy() drops listeners and leaves the store destroyed"""
    store = create_store(john)
    listener = recorder()
    store.subscribe(listener)

    store.destroy()

    assert store.is_destroyed()
    assert listener.count == 0
    assert store._state is None


@pytest.mark.unit
@pytest.mark.store
def test_destroyed_store_rejects_every_operation(john):
    """get, set and subscribe raise once the store is destroyed"""
    store = create_store(john)
    store.destroy()

    with pytest.raises(DestroyedStoreAccess):
        store.get()
    with pytest.raises(DestroyedStoreAccess):
        store.set(john)
    with pytest.raises(DestroyedStoreAccess):
        store.subscribe(lambda new, old: None)


@pytest.mark.unit
@pytest.mark.store
def test_store_destroy_twice_is_silent(john):
    """A second destroy() has no visible effect"""
    store = create_store(john)

    store.destroy()
    store.destroy()

    assert store.is_destroyed()


@pytest.mark.unit
@pytest.mark.store
def test_store_extensions_attach_members(john):
    """Extensions add members closing over the store"""

    def grow(store):
        return {"grow": lambda: store.set(lambda s: {**s, "age": s["age"] + 1})}

    store = create_store(john, extensions=[grow, lambda store: None])
    store.grow()

    assert store.get()["age"] == 43


@pytest.mark.unit
@pytest.mark.store
def test_store_extensions_cannot_shadow_members(john):
    """An extension can't replace an existing store attribute"""
    store = Store(john)

    with pytest.raises(InvalidOptions, match="get"):
        store.extend([lambda store: {"get": lambda: None}])
    with pytest.raises(InvalidOptions):
        store.extend(["not callable"])
    with pytest.raises(InvalidOptions):
        store.extend([lambda store: ["not", "a", "mapping"]])


@pytest.mark.unit
@pytest.mark.store
def test_store_state_is_frozen_dict_type(john):
    """The stored snapshot of a dict is a FrozenDict equal to the input"""
    store = create_store(john)

    assert isinstance(store.get(), FrozenDict)
    assert store.get() == john


@pytest.mark.unit
@pytest.mark.store
def test_store_set_same_input_object_twice_is_ignored(recorder):
    """Setting again the object the state was frozen from emits nothing"""
    store = create_store({"a": 1})
    listener = recorder()
    store.subscribe(listener)
    value = {"a": 2}

    store.set(value)
    store.set(value)

    assert listener.count == 1
    assert store.get() == {"a": 2}


@pytest.mark.unit
@pytest.mark.store
def test_store_no_strict_equal_rejects_same_input_object_twice():
    """no_strict_equal treats the last input object as the current state"""
    store = create_store({"a": 1}, {"no_strict_equal": True})
    value = {"a": 2}
    store.set(value)

    with pytest.raises(SelfAssignmentViolation):
        store.set(value)


@pytest.mark.unit
@pytest.mark.store
def test_store_copies_freezes_and_warns_on_dict_subclass(caplog):
    """A dict subclass is copied, frozen and reported as non-plain"""
    source = OrderedDict(a=1, nested=defaultdict(list, x=[1]))

    with caplog.at_level(logging.WARNING, logger="storex.store"):
        store = create_store(source)
    source["a"] = 2

    assert "OrderedDict" in caplog.text
    assert store.get()["a"] == 1
    assert isinstance(store.get(), FrozenDict)
    with pytest.raises(TypeError):
        store.get()["nested"]["x"] = 99
    with pytest.raises(TypeError):
        store.get()["nested"]["x"].append(2)


@pytest.mark.unit
@pytest.mark.store
def test_store_set_freezes_nested_dict_subclasses():
    """Dict subclasses nested in a new state are frozen too"""
    store = create_store({})

    store.set({"config": OrderedDict(debug=False)})

    assert isinstance(store.get()["config"], FrozenDict)
    with pytest.raises(TypeError):
        store.get()["config"]["debug"] = True


@pytest.mark.unit
@pytest.mark.store
def test_store_options_reflect_constructor_options():
    """Options passed as a mapping are exposed as StoreOptions"""
    store = create_store(options={"no_freeze": True})

    assert store.options == StoreOptions(no_freeze=True)
    assert create_store().options == StoreOptions()
