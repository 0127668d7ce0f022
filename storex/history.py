"""
storex History - bounded undo/redo over any store
=================================================

``historize(store)`` records every state the store goes through and lets you
move back and forth between them:

```python
store = create_store({"name": "John"})
history = historize(store, max_size=50)

store.set({"name": "Jane"})
history.back()          # store.get() == {"name": "John"}
history.forward()       # store.get() == {"name": "Jane"}
history.push_state({"name": "Jack"})  # same as store.set(...)
history.destroy()       # stop recording; the store itself is left alone
```

The history only uses the store's public get/set/subscribe, so a scope store
can be historized just like a root store.
"""

import logging
from enum import Enum
from typing import Any, Generic, List, Optional, Sequence, TypeVar

from .base import StoreInterface
from .exceptions import HistoryDestroyed, InvalidOptions
from .util.deep_freeze import thaw

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_SIZE = 100


class HistoryStatus(Enum):
    IDLE = "idle"
    NAVIGATING = "navigating"
    DESTROYED = "destroyed"


class StoreHistory(Generic[T]):
    """
    Undo/redo stack layered on a store.

    The cursor always points at the entry matching the store's current state:
    ``back_length`` entries lie behind it and ``forward_length`` ahead of it.
    Any change that doesn't come from the history's own navigation drops the
    forward entries and appends the new state, evicting the oldest entries
    beyond ``max_size``.
    """

    def __init__(
        self,
        store: StoreInterface,
        max_size: int = DEFAULT_MAX_SIZE,
        init_history: Optional[Sequence[T]] = None,
    ):
        if isinstance(max_size, bool) or not isinstance(max_size, int) or max_size < 1:
            raise InvalidOptions("historize: max_size must be an integer greater than 0")
        if init_history is None:
            init_history = []
        elif not isinstance(init_history, (list, tuple)):
            raise InvalidOptions("historize: init_history must be a list")

        self._store = store
        self._max_size = max_size
        # the live store keeps changing: keep a private copy of the initial state
        self._stack: List[T] = [*init_history, thaw(store.get())][-max_size:]
        self._cursor = len(self._stack) - 1
        self._status = HistoryStatus.IDLE
        self._unsubscribe = store.subscribe(self._on_change)

    def _on_change(self, new_state: T, old_state: T) -> None:
        if self._status is not HistoryStatus.IDLE:
            return
        del self._stack[self._cursor + 1 :]
        self._stack.append(new_state)
        overflow = len(self._stack) - self._max_size
        if overflow > 0:
            del self._stack[:overflow]
            logger.debug("History full, evicted %d oldest entries", overflow)
        self._cursor = len(self._stack) - 1

    def _check_alive(self) -> None:
        if self._status is HistoryStatus.DESTROYED:
            raise HistoryDestroyed(
                "Error calling method on a destroyed StoreHistory instance"
            )

    @property
    def max_size(self) -> int:
        return self._max_size

    @property
    def is_destroyed(self) -> bool:
        return self._status is HistoryStatus.DESTROYED

    @property
    def state(self) -> Any:
        """Current store state, None once destroyed."""
        if self._status is HistoryStatus.DESTROYED:
            return None
        return self._store.get()

    @property
    def length(self) -> int:
        """Total number of entries, back and forward."""
        return len(self._stack)

    @property
    def back_length(self) -> int:
        """How many steps back() can still go."""
        return self._cursor if self._stack else 0

    @property
    def forward_length(self) -> int:
        """How many steps forward() can still go."""
        return len(self._stack) - 1 - self._cursor if self._stack else 0

    def __len__(self) -> int:
        return self.length

    def go(self, relative_position: int) -> None:
        """Move relative_position entries (negative is back), clamped to the stack."""
        self._check_alive()
        target = max(0, min(len(self._stack) - 1, self._cursor + relative_position))
        if target == self._cursor:
            return
        self._cursor = target
        self._status = HistoryStatus.NAVIGATING
        try:
            self._store.set(self._stack[target])
        finally:
            self._status = HistoryStatus.IDLE

    def back(self) -> None:
        self.go(-1)

    def forward(self) -> None:
        self.go(1)

    undo = back
    redo = forward

    def push_state(self, state: T) -> None:
        """Set the store to state, dropping any forward entries."""
        self._check_alive()
        self._store.set(state)

    def destroy(self) -> None:
        """Stop recording and drop the stack. The store is left untouched."""
        self._check_alive()
        self._unsubscribe()
        self._stack.clear()
        self._cursor = 0
        self._status = HistoryStatus.DESTROYED
        logger.debug("History destroyed")

    def __repr__(self) -> str:
        if self._status is HistoryStatus.DESTROYED:
            return "StoreHistory(<destroyed>)"
        return (
            f"StoreHistory(length={self.length}, back={self.back_length}, "
            f"forward={self.forward_length})"
        )


def historize(
    store: StoreInterface,
    max_size: int = DEFAULT_MAX_SIZE,
    init_history: Optional[Sequence[T]] = None,
) -> StoreHistory[T]:
    """
    Start recording a store's history.

    Args:
        store: Root or scope store.
        max_size: Maximum number of entries kept, the current state included.
        init_history: Entries preceding the current state.

    Raises:
        InvalidOptions: max_size is not an integer >= 1, or init_history is
            not a list.
    """
    return StoreHistory(store, max_size=max_size, init_history=init_history)
