"""
storex Store - Root Store and Scope Stores
==========================================

This module provides the two store flavours:

**Store**: the root container. It owns the state cell, a ChangeEmitter and the
destroy lifecycle. Every snapshot it holds has been deep-frozen (unless
``no_freeze``), and every ``set`` with a new state emits exactly once.

**ScopeStore**: a stateless view addressed by a single key of a parent store
(a root or another scope). Multi-segment paths are a chain of single-key
scopes, so ``a.b.c`` is scope ``c`` of scope ``b`` of scope ``a``. Reads walk
down, writes rebuild every ancestor on the way up until the root stores one
new snapshot, and change notifications are filtered down to the addressed
sub-value.

Basic Usage
-----------

```python
from storex import create_store

family = create_store({"mum": {"name": "Jane", "age": 43}, "dad": {"name": "John"}})
mum = family.get_scope_store("mum")

mum.subscribe(lambda new, old: print(old["age"], "->", new["age"]))
mum.set(lambda state: {**state, "age": 44})  # prints: 43 -> 44

family.get()["mum"]["age"]  # 44
```

Initializer
-----------

A store can be built from a function receiving the store's own ``get`` and
``set``. Whatever it returns becomes the initial state, which allows the state
to carry methods closing over the store:

```python
counter = create_store(lambda get, set: {
    "count": 0,
    "increment": lambda: set(lambda s: {**s, "count": s["count"] + 1}),
})
counter.get()["increment"]()
```
"""

import logging
from typing import Any, Callable, Iterable, Mapping, Optional, TypeVar, Union

from .base import (
    ChangeListener,
    EqualityCheck,
    NextState,
    StoreInterface,
    StoreOptions,
)
from .exceptions import (
    DestroyedStoreAccess,
    InvalidOptions,
    InvalidScopeTarget,
    SelfAssignmentViolation,
)
from .util.change_emitter import ChangeEmitter
from .util.deep_freeze import FrozenDict, deep_freeze
from .util.paths import _MISSING, as_index, is_primitive, parse_path, read_key, same_state

logger = logging.getLogger(__name__)

T = TypeVar("T")

Extension = Callable[["Store"], Optional[Mapping[str, Any]]]

_PLAIN_DICT_TYPES = (dict, FrozenDict)


def _resolve(next_state: NextState, current: Any) -> Any:
    """Apply an updater to the current state, or return the literal candidate."""
    if callable(next_state):
        return next_state(current)
    return next_state


# ============================================================================
# ROOT STORE
# ============================================================================


class Store(StoreInterface[T]):
    """
    Root state container.

    State machine: live until ``destroy()``, destroyed forever after. A
    destroyed store rejects get/set/subscribe with DestroyedStoreAccess, and
    so does every scope derived from it.
    """

    def __init__(
        self,
        init: Any = None,
        options: Union[StoreOptions, Mapping[str, Any], None] = None,
    ):
        self._options = StoreOptions.coerce(options)
        self._emitter = ChangeEmitter()
        self._state: Any = None
        # raw value handed to the last set, before freezing replaced it
        self._last_input: Any = _MISSING
        self._destroyed = False

        if init is None:
            return
        if callable(init):
            state = init(self.get, self.set)
        elif isinstance(init, list):
            state = list(init)
        else:
            if (
                not self._options.no_warn
                and not is_primitive(init)
                and not isinstance(init, tuple)
                and type(init) not in _PLAIN_DICT_TYPES
            ):
                logger.warning(
                    "Store initialised with a %s: stores are intended for dicts, lists "
                    "and primitives, other types may not work as expected. "
                    "Pass no_warn=True to silence this warning.",
                    type(init).__name__,
                )
            state = dict(init) if isinstance(init, dict) else init
        self._state = state if self._options.no_freeze else deep_freeze(state)

    @property
    def options(self) -> StoreOptions:
        return self._options

    def _check_alive(self, message: str) -> None:
        if self._destroyed:
            raise DestroyedStoreAccess(message)

    def is_destroyed(self) -> bool:
        return self._destroyed

    def get(self) -> T:
        """Return the current state snapshot."""
        self._check_alive("Can't read from a destroyed store")
        return self._state

    def set(self, next_state: NextState) -> None:
        """
        Replace the state and notify subscribers.

        Args:
            next_state: The new state, or a function receiving the current
                state and returning the new one. Passing again the object
                the current state was frozen from counts as passing the
                current state.

        Raises:
            DestroyedStoreAccess: The store was destroyed.
            SelfAssignmentViolation: no_strict_equal is set and the candidate
                is the current (non-primitive) state itself.
        """
        self._check_alive("Can't set a destroyed store")
        old_state = self._state
        candidate = _resolve(next_state, old_state)
        if candidate is self._last_input or same_state(candidate, old_state):
            if self._options.no_strict_equal and not is_primitive(candidate):
                raise SelfAssignmentViolation("Store should never be set to its own state")
            return
        self._state = candidate if self._options.no_freeze else deep_freeze(candidate)
        self._last_input = candidate
        self._emitter.emit(self._state, old_state)

    def subscribe(
        self,
        listener: ChangeListener,
        equality_check: Optional[EqualityCheck] = None,
        init_call: bool = False,
    ) -> Callable[[], None]:
        """
        Call listener(new_state, old_state) on every change.

        Args:
            listener: Change callback.
            equality_check: Optional predicate; when it returns True for a
                (new_state, old_state) pair the listener is skipped.
            init_call: Call listener once right away with
                (current_state, current_state).

        Returns:
            Unsubscribe function.
        """
        self._check_alive("Can't subscribe to a destroyed store")
        if init_call:
            listener(self._state, self._state)
        return self._emitter.subscribe(listener, equality_check)

    def destroy(self) -> None:
        """
        Discard the store: drop all listeners, reset state to None.

        Any later get/set/subscribe, on the store or on any of its scopes,
        raises DestroyedStoreAccess.
        """
        if self._destroyed:
            return
        self._emitter.clear()
        self._state = None
        self._last_input = _MISSING
        self._destroyed = True
        logger.debug("Store %s destroyed", id(self))

    def extend(self, extensions: Iterable[Extension]) -> "Store[T]":
        """Apply extensions to this store, see apply_extensions."""
        return apply_extensions(self, extensions)

    def __repr__(self) -> str:
        if self._destroyed:
            return "Store(<destroyed>)"
        return f"Store({self._state!r})"


# ============================================================================
# SCOPE STORE
# ============================================================================


class ScopeStore(StoreInterface):
    """
    View of a single key of a parent store.

    Holds no state: every call is delegated to the parent. There is no
    destroy(); destroying is a root-only operation.
    """

    __slots__ = ("_parent", "_key")

    def __init__(self, parent: StoreInterface, key: str):
        self._parent = parent
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    @property
    def parent(self) -> StoreInterface:
        return self._parent

    def is_destroyed(self) -> bool:
        return self._parent.is_destroyed()

    def get(self) -> Any:
        """Return the addressed sub-value, or None when the path is absent."""
        return read_key(self._parent.get(), self._key)

    def set(self, next_state: NextState) -> None:
        """
        Replace the addressed sub-value.

        The parent value is rebuilt with the new sub-value spliced in (a list
        stays a list, a missing parent becomes a new dict) and handed to the
        parent's set, up to the root.

        Raises:
            InvalidScopeTarget: The parent value can't hold the key.
        """
        self._parent.set(lambda state: self._splice(state, next_state))

    def _splice(self, state: Any, next_state: NextState) -> Any:
        key = self._key
        value = _resolve(next_state, read_key(state, key))
        if state is None:
            return {key: value}
        if isinstance(state, (list, tuple)):
            index = as_index(key)
            if index is _MISSING:
                raise InvalidScopeTarget(
                    f"Can't set property {key!r} on a {type(state).__name__}"
                )
            items = list(state)
            if index >= len(items):
                items.extend([None] * (index - len(items) + 1))
            items[index] = value
            return tuple(items) if isinstance(state, tuple) else items
        if isinstance(state, dict):
            return {**state, key: value}
        raise InvalidScopeTarget(
            f"Can't set property {key!r} on a {type(state).__name__} value"
        )

    def subscribe(
        self,
        listener: ChangeListener,
        equality_check: Optional[EqualityCheck] = None,
        init_call: bool = False,
    ) -> Callable[[], None]:
        """
        Call listener(new_value, old_value) when the addressed sub-value changes.

        Parent changes that leave the sub-value identical are filtered out.
        """
        key = self._key

        def on_parent_change(new_state, old_state):
            new_value = read_key(new_state, key)
            old_value = read_key(old_state, key)
            if equality_check is not None:
                if equality_check(new_value, old_value):
                    return
            elif same_state(new_value, old_value):
                return
            listener(new_value, old_value)

        if init_call:
            state = self.get()
            listener(state, state)
        return self._parent.subscribe(on_parent_change)

    def __repr__(self) -> str:
        return f"ScopeStore({self._key!r} of {self._parent!r})"


def scope_store_from_path(store: StoreInterface, path: str) -> ScopeStore:
    """Compose single-key scopes along a dotted path."""
    scope = store
    for key in parse_path(path):
        scope = ScopeStore(scope, key)
    return scope


# ============================================================================
# FACTORY AND EXTENSIONS
# ============================================================================


def apply_extensions(store: Store, extensions: Iterable[Extension]) -> Store:
    """
    Attach members returned by each extension to the store.

    An extension is called with the store and returns a mapping of member
    names to values (usually functions closing over the store), or None.

    Raises:
        InvalidOptions: An extension is not callable, returns something else
            than a mapping, or would shadow an existing attribute.
    """
    for extension in extensions:
        if not callable(extension):
            raise InvalidOptions(f"store extension must be callable, got {extension!r}")
        members = extension(store)
        if members is None:
            continue
        if not isinstance(members, Mapping):
            raise InvalidOptions(
                f"store extension {extension!r} must return a mapping or None"
            )
        for name, member in members.items():
            if hasattr(store, name):
                raise InvalidOptions(f"store extension can't override {name!r}")
            setattr(store, name, member)
    return store


def create_store(
    init: Any = None,
    options: Union[StoreOptions, Mapping[str, Any], None] = None,
    extensions: Optional[Iterable[Extension]] = None,
) -> Store:
    """
    Create a root store.

    Args:
        init: Initial state, or an initializer ``(get, set) -> state`` called
            once with the new store's own accessors. Top-level dicts and lists
            are shallow-copied before being frozen.
        options: StoreOptions or a mapping with the same keys.
        extensions: Optional list of extensions applied after construction.

    Returns:
        The new Store.
    """
    store = Store(init, options)
    if extensions:
        apply_extensions(store, extensions)
    return store
