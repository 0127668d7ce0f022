"""
Draft / Producer
================

Copy-on-write editing of immutable state.

``produce(base, recipe)`` hands the recipe a Draft of ``base``: a mutable
cursor over a shallow copy. Reading a nested dict or list through a draft
lazily wraps it in a child draft (memoised), so deep edits look like plain
mutations:

```python
from storex.draft import produce

state = {"user": {"name": "Jane", "tags": ["a"]}, "settings": {"theme": "dark"}}

def recipe(draft):
    draft["user"]["name"] = "Janet"
    draft["user"]["tags"].append("b")

next_state = produce(state, recipe)
next_state["settings"] is state["settings"]  # True: untouched branches are shared
produce(state, lambda draft: None) is state   # True: nothing modified
```

Writes mark the draft modified and propagate a modified flag to every
ancestor draft. ``commit()`` then copies only the modified branches and reuses
every untouched one by reference.

The recipe can also return a brand new value instead of mutating the draft;
that value becomes the result. Returning the draft itself is an error.
"""

from typing import Any, Callable, Iterator, Optional

from .exceptions import DraftReturnedError, NotDraftable
from .util.deep_freeze import FrozenDict, FrozenList

Recipe = Callable[["Draft"], Any]

_DRAFTABLE_TYPES = (dict, list)
_PLAIN_DRAFTABLE_TYPES = (dict, list, FrozenDict, FrozenList)


def is_draftable(value: Any) -> bool:
    """True for dicts and lists (frozen or not), the only values produce accepts."""
    return type(value) in _PLAIN_DRAFTABLE_TYPES


def check_draftable(value: Any, prefix: str = "produce") -> None:
    if not is_draftable(value):
        raise NotDraftable(
            f"{prefix}: state must be a dict or a list, got {type(value).__name__}"
        )


def shallow_copy(value: Any) -> Any:
    """Mutable shallow copy of a dict or list; other values are returned as-is."""
    if isinstance(value, list):
        return list(value)
    if isinstance(value, dict):
        return dict(value)
    return value


class Draft:
    """
    Mutable copy-on-write cursor over a dict or a list.

    Explicit operations are ``read``, ``write``, ``delete`` and ``commit``; the
    mapping protocol (``draft[key]``, ``draft[key] = value``, ``del draft[key]``)
    and the list helpers ``append``, ``insert`` and ``pop`` are thin aliases.
    """

    __slots__ = ("_base", "_copy", "_parent", "_modified")

    def __init__(self, base: Any, parent: Optional["Draft"] = None):
        self._base = base
        self._copy = shallow_copy(base)
        self._parent = parent
        self._modified = False

    @property
    def base(self) -> Any:
        """The original value this draft shadows."""
        return self._base

    @property
    def is_list(self) -> bool:
        return isinstance(self._copy, list)

    def is_modified(self) -> bool:
        """Whether this draft or any of its descendants was written."""
        return self._modified

    def _set_modified(self) -> None:
        if not self._modified:
            self._modified = True
            if self._parent is not None:
                self._parent._set_modified()

    def read(self, key: Any) -> Any:
        """
        Read key, wrapping dict and list values in a memoised child draft.

        Raises:
            KeyError / IndexError: As the underlying dict or list would.
        """
        value = self._copy[key]
        if isinstance(value, _DRAFTABLE_TYPES):
            value = Draft(value, self)
            self._copy[key] = value
        return value

    def write(self, key: Any, value: Any) -> None:
        """Set key to value and mark the draft modified."""
        self._set_modified()
        self._copy[key] = value

    def delete(self, key: Any) -> None:
        """Remove key and mark the draft modified."""
        self._set_modified()
        del self._copy[key]

    def commit(self) -> Any:
        """
        Materialize the draft.

        Returns the original value when nothing was modified at or below this
        draft; otherwise a new dict or list where modified branches are new
        copies and untouched branches are the original references.
        """
        if not self._modified:
            return self._base
        if isinstance(self._copy, dict):
            return {key: _finalize(value) for key, value in self._copy.items()}
        return [_finalize(value) for value in self._copy]

    # Mapping / sequence aliases

    def __getitem__(self, key: Any) -> Any:
        return self.read(key)

    def __setitem__(self, key: Any, value: Any) -> None:
        self.write(key, value)

    def __delitem__(self, key: Any) -> None:
        self.delete(key)

    def __contains__(self, key: Any) -> bool:
        return key in self._copy

    def __len__(self) -> int:
        return len(self._copy)

    def __iter__(self) -> Iterator[Any]:
        if isinstance(self._copy, dict):
            return iter(list(self._copy))
        return (self.read(index) for index in range(len(self._copy)))

    def get(self, key: Any, default: Any = None) -> Any:
        if isinstance(self._copy, dict):
            return self.read(key) if key in self._copy else default
        try:
            return self.read(key)
        except IndexError:
            return default

    def keys(self):
        if isinstance(self._copy, dict):
            return list(self._copy)
        return list(range(len(self._copy)))

    def items(self):
        return [(key, self.read(key)) for key in self.keys()]

    def values(self):
        return [self.read(key) for key in self.keys()]

    def append(self, value: Any) -> None:
        self._set_modified()
        self._copy.append(value)

    def insert(self, index: int, value: Any) -> None:
        self._set_modified()
        self._copy.insert(index, value)

    def pop(self, key: Any = -1, *default: Any) -> Any:
        """Remove and return an item (list index or dict key)."""
        if isinstance(self._copy, dict) and key not in self._copy and default:
            return default[0]
        value = self._copy[key]
        self._set_modified()
        del self._copy[key]
        return _finalize(value)

    def __repr__(self) -> str:
        state = "modified" if self._modified else "pristine"
        return f"Draft({self._base!r}, {state})"


def _finalize(value: Any) -> Any:
    """Commit value if it is a draft, or any draft nested in a new dict, list or tuple."""
    if isinstance(value, Draft):
        return value.commit()
    kind = type(value)
    if kind is dict:
        items = {key: _finalize(item) for key, item in value.items()}
        if any(items[key] is not item for key, item in value.items()):
            return items
    elif kind is list or kind is tuple:
        members = [_finalize(item) for item in value]
        if any(new is not old for new, old in zip(members, value)):
            return members if kind is list else tuple(members)
    return value


def produce(base: Any, recipe: Recipe) -> Any:
    """
    Apply recipe to a draft of base and return the next state.

    Args:
        base: A dict or a list.
        recipe: Receives the draft. Mutate it and return None, or return a
            replacement value.

    Returns:
        The recipe's return value when it isn't None; otherwise base itself
        when the draft wasn't modified, or the structurally shared result.

    Raises:
        NotDraftable: base is not a dict or a list.
        DraftReturnedError: The recipe returned a draft.
    """
    check_draftable(base, "produce")
    draft = Draft(base)
    result = recipe(draft)
    if isinstance(result, Draft):
        raise DraftReturnedError("produce: recipe must not return a draft object")
    if result is not None:
        return _finalize(result)
    return draft.commit()
