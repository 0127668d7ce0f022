"""
Scope path helpers.

A scope path is a dotted string such as ``"parents.1.name"``. It is split once
into a tuple of keys and the result is memoised, scope stores being rebuilt
from their path on every ``get_scope_store`` call.
"""

from typing import Any, Tuple

from cachetools import LRUCache, cached

PRIMITIVE_TYPES = (type(None), bool, int, float, complex, str, bytes)

_MISSING = object()


@cached(cache=LRUCache(maxsize=1024))
def parse_path(path: str) -> Tuple[str, ...]:
    """Split a dotted path into its keys."""
    return tuple(str(path).split("."))


def is_primitive(value: Any) -> bool:
    """True for values compared by value rather than by identity."""
    return isinstance(value, PRIMITIVE_TYPES)


def same_state(new_state: Any, old_state: Any) -> bool:
    """
    Identity comparison between two states.

    Containers compare by identity; primitives of the same type compare by
    value (``1000 is 1000`` is not guaranteed in Python).
    """
    if new_state is old_state:
        return True
    if type(new_state) is not type(old_state) or not is_primitive(new_state):
        return False
    return new_state == old_state


def as_index(key: Any) -> Any:
    """Return key as a list index, or _MISSING when it isn't one."""
    if isinstance(key, int) and not isinstance(key, bool):
        return key if key >= 0 else _MISSING
    if isinstance(key, str) and key.isdigit():
        return int(key)
    return _MISSING


def read_key(value: Any, key: Any) -> Any:
    """
    Read key from value, returning None where the key can't be reached.

    Dicts are read by key; lists and tuples by integer index.
    """
    if isinstance(value, dict):
        return value.get(key)
    if isinstance(value, (list, tuple)):
        index = as_index(key)
        if index is _MISSING or index >= len(value):
            return None
        return value[index]
    return None
