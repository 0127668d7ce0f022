"""
storex recipes - helpers built on the store contract
====================================================

Everything here only uses get/set/subscribe/get_scope_store, so every helper
works the same on a root store and on a scope store.

- ``mutate``: edit a store through a draft (see ``storex.draft``)
- ``set_prop`` / ``remove_prop``: set or delete a key addressed by a dotted path
- ``use_store`` / ``use_reducer``: hook-style accessors and reducer dispatch
- ``bind_storage``: persist a store into any mutable mapping
"""

import json
import logging
from collections.abc import MutableMapping
from typing import Any, Callable, Mapping, Tuple

from .base import NextState, StoreInterface
from .draft import Recipe, check_draftable, produce, shallow_copy
from .exceptions import InvalidOptions, InvalidScopeTarget
from .util.paths import _MISSING, as_index

logger = logging.getLogger(__name__)

Action = Mapping[str, Any]
Reducer = Callable[[Any, Action], Any]


def mutate(store: StoreInterface, recipe: Recipe) -> None:
    """
    Update a store through a draft of its current state.

    ```python
    store = create_store({"first_name": "John", "last_name": "Doe"})

    def full_name_only(draft):
        draft["full_name"] = f"{draft['first_name']} {draft['last_name']}"
        del draft["first_name"]
        del draft["last_name"]

    mutate(store, full_name_only)
    store.get()  # {"full_name": "John Doe"}
    ```

    store.set is not called at all when the recipe leaves the state untouched.

    Raises:
        NotDraftable: The current state is not a dict or a list.
    """
    state = store.get()
    check_draftable(state, "mutate")
    next_state = produce(state, recipe)
    if next_state is not state:
        store.set(next_state)


def _owner_of(store: StoreInterface, path: str) -> Tuple[StoreInterface, str]:
    parent_path, _, last_key = str(path).rpartition(".")
    if not parent_path:
        return store, last_key
    return store.get_scope_store(parent_path), last_key


def _with_key(container: Any, key: str, value: Any) -> Any:
    """Copy of container with key set to value; lists and tuples keep their type."""
    if isinstance(container, (list, tuple)):
        index = as_index(key)
        if index is _MISSING:
            raise InvalidScopeTarget(
                f"Can't set property {key!r} on a {type(container).__name__}"
            )
        items = list(container)
        if index >= len(items):
            items.extend([None] * (index - len(items) + 1))
        items[index] = value
        return tuple(items) if isinstance(container, tuple) else items
    if isinstance(container, dict):
        return {**container, key: value}
    raise InvalidScopeTarget(
        f"Can't set property {key!r} on a {type(container).__name__} value"
    )


def set_prop(store: StoreInterface, path: str, value: Any) -> None:
    """
    Set the value at a dotted path, e.g. ``set_prop(store, "pet.name", "Rex")``.

    A missing owner is created as a new dict.
    """
    owner, key = _owner_of(store, path)
    current = owner.get()
    owner.set(_with_key({} if current is None else current, key, value))


def remove_prop(store: StoreInterface, path: str) -> None:
    """
    Remove the key at a dotted path, e.g. ``remove_prop(store, "pet.name")``.

    In a list or tuple the slot is emptied to None, so later indices don't
    shift. Removing a key that doesn't exist still writes a fresh copy of a
    dict or list owner.
    """
    owner, key = _owner_of(store, path)
    current = owner.get()
    if isinstance(current, (list, tuple)):
        index = as_index(key)
        if index is not _MISSING and index < len(current):
            next_state = _with_key(current, key, None)
        else:
            next_state = shallow_copy(current)
    elif isinstance(current, dict):
        next_state = {k: v for k, v in current.items() if k != key}
    else:
        next_state = current
    owner.set(next_state)


def use_store(store: StoreInterface) -> Tuple[Any, Callable[[NextState], None]]:
    """
    Return ``(state, set)`` for a store.

    ```python
    state, set_state = use_store(store)
    name, set_name = use_store(store.get_scope_store("name"))
    ```
    """
    return store.get(), store.set


def use_reducer(store: StoreInterface, reducer: Reducer) -> Callable[[Action], None]:
    """
    Return a dispatch function feeding actions through reducer.

    ```python
    def reducer(state, action):
        if action["type"] == "GROW":
            return {**state, "age": state["age"] + 1}
        raise ValueError(f"Unknown action type {action['type']}")

    dispatch = use_reducer(store, reducer)
    dispatch({"type": "GROW"})
    ```
    """

    def dispatch(action: Action) -> None:
        store.set(reducer(store.get(), action))

    return dispatch


def bind_storage(
    store: StoreInterface,
    key: str,
    storage: MutableMapping,
    restore: bool = True,
    serializer: Callable[[Any], Any] = json.dumps,
    deserializer: Callable[[Any], Any] = json.loads,
) -> Callable[[], None]:
    """
    Persist a store's state into storage[key].

    Args:
        store: Store (or scope store) to persist.
        key: Key of the state in storage.
        storage: Any mutable mapping, e.g. a dict or a shelve.Shelf.
        restore: On bind, load the stored value into the store when there is
            one; otherwise write the current state into storage. When False
            storage is only written on the next change.
        serializer: Turns state into the stored value.
        deserializer: Turns the stored value back into state.

    Returns:
        A function unbinding the store from storage.

    Raises:
        InvalidOptions: Invalid key, storage, serializer or deserializer.
    """
    if not isinstance(key, str) or not key:
        raise InvalidOptions("bind_storage: key must be a non-empty string")
    if not isinstance(storage, MutableMapping):
        raise InvalidOptions("bind_storage: storage must be a mutable mapping")
    if not callable(serializer) or not callable(deserializer):
        raise InvalidOptions("bind_storage: serializer and deserializer must be callable")

    if restore:
        if key in storage:
            logger.debug("Restoring store state from storage key %r", key)
            store.set(deserializer(storage[key]))
        else:
            logger.debug("Initialising storage key %r from store state", key)
            storage[key] = serializer(store.get())

    def persist(new_state, old_state):
        storage[key] = serializer(new_state)

    return store.subscribe(persist)
