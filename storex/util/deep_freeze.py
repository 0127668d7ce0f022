"""
Deep-Freeze
===========

Recursive immutability for store state.

Python can't freeze a dict or a list in place, so ``deep_freeze`` hands back a
frozen replacement for every mutable container it meets:

- ``dict``  -> ``FrozenDict``
- ``list``  -> ``FrozenList``
- ``set``   -> ``frozenset``
- ``tuple`` -> same tuple when its members are already frozen, otherwise a new
  tuple of frozen members

Frozen nodes are a termination condition: they are returned as-is and never
walked again, so freezing is idempotent and cheap on structurally shared trees
(the untouched branches of a produced state keep their identity).

Subclasses (``OrderedDict``, ``defaultdict``, ...) are frozen the same way and
lose their own type and behaviour.

Buffer views (``bytearray``, ``memoryview`` and anything exposing ``itemsize``,
such as ``array.array``) are left mutable. Other objects are returned
unchanged.

Usage:
    frozen = deep_freeze({"user": {"tags": ["a", "b"]}})
    frozen["user"]["tags"].append("c")  # TypeError
"""

from typing import Any, NoReturn


def _readonly(self, *args, **kwargs) -> NoReturn:
    raise TypeError(f"'{type(self).__name__}' object is frozen")


class FrozenDict(dict):
    """A dict whose mutators raise TypeError."""

    __slots__ = ()

    __setitem__ = _readonly
    __delitem__ = _readonly
    __ior__ = _readonly
    clear = _readonly
    pop = _readonly
    popitem = _readonly
    setdefault = _readonly
    update = _readonly

    def copy(self) -> dict:
        """Return a mutable shallow copy."""
        return dict(self)

    def __reduce__(self):
        return (self.__class__, (dict(self),))

    def __repr__(self) -> str:
        return f"FrozenDict({dict.__repr__(self)})"


class FrozenList(list):
    """A list whose mutators raise TypeError."""

    __slots__ = ()

    __setitem__ = _readonly
    __delitem__ = _readonly
    __iadd__ = _readonly
    __imul__ = _readonly
    append = _readonly
    clear = _readonly
    extend = _readonly
    insert = _readonly
    pop = _readonly
    remove = _readonly
    reverse = _readonly
    sort = _readonly

    def copy(self) -> list:
        """Return a mutable shallow copy."""
        return list(self)

    def __reduce__(self):
        return (self.__class__, (list(self),))

    def __repr__(self) -> str:
        return f"FrozenList({list.__repr__(self)})"


def is_buffer_view(value: Any) -> bool:
    """True for binary buffer views, which stay mutable."""
    return isinstance(value, (bytearray, memoryview)) or hasattr(value, "itemsize")


def is_frozen(value: Any) -> bool:
    """True when deep_freeze would return value untouched."""
    if isinstance(value, (dict, list, set)):
        return isinstance(value, (FrozenDict, FrozenList))
    if isinstance(value, tuple):
        return all(is_frozen(item) for item in value)
    return True


def deep_freeze(value: Any) -> Any:
    """
    Return value with every reachable dict, list and set frozen.

    Args:
        value: State to freeze. Must not have been published yet: containers
            are replaced, never copied defensively.

    Returns:
        The frozen value. Primitives, already frozen nodes, buffer views and
        foreign objects are returned by identity.
    """
    if value is None or is_buffer_view(value):
        return value
    if isinstance(value, (FrozenDict, FrozenList, frozenset)):
        return value

    if isinstance(value, dict):
        return FrozenDict({key: deep_freeze(item) for key, item in value.items()})
    if isinstance(value, list):
        return FrozenList([deep_freeze(item) for item in value])
    if isinstance(value, set):
        return frozenset(value)
    if isinstance(value, tuple):
        items = [deep_freeze(item) for item in value]
        if all(new is old for new, old in zip(items, value)):
            return value
        if hasattr(value, "_make"):
            # namedtuple
            return value._make(items)
        return tuple(items)
    return value


def thaw(value: Any) -> Any:
    """Return a mutable deep copy of a (possibly frozen) value."""
    if isinstance(value, dict):
        return {key: thaw(item) for key, item in value.items()}
    if isinstance(value, list):
        return [thaw(item) for item in value]
    if isinstance(value, frozenset):
        return {thaw(item) for item in value}
    return value
