"""
Change Emitter
==============

Ordered multi-subscriber notification primitive used by every root store.

Listeners are called synchronously, in registration order, with
``(new_state, old_state)``. A listener registered with an equality check is
skipped for any emission where ``equality_check(new_state, old_state)`` is true.
"""

from typing import Any, Callable, Dict, Optional

Listener = Callable[[Any, Any], None]
EqualityCheck = Callable[[Any, Any], bool]


class ChangeEmitter:
    """
    Ordered listener registry keyed by opaque tokens.

    Unsubscribing while an emission is in flight prevents the listener from
    being called for the rest of that emission and for every later one.
    Listeners added during an emission are only called from the next one.
    """

    __slots__ = ("_subscriptions",)

    def __init__(self):
        self._subscriptions: Dict[object, Listener] = {}

    def subscribe(
        self, listener: Listener, equality_check: Optional[EqualityCheck] = None
    ) -> Callable[[], None]:
        """Register listener and return its unsubscribe function."""
        token = object()
        if equality_check is None:
            self._subscriptions[token] = listener
        else:

            def checked(new_state, old_state):
                if not equality_check(new_state, old_state):
                    listener(new_state, old_state)

            self._subscriptions[token] = checked

        def unsubscribe() -> None:
            self._subscriptions.pop(token, None)

        return unsubscribe

    def emit(self, new_state: Any, old_state: Any) -> None:
        """Notify every registered listener."""
        for token, listener in list(self._subscriptions.items()):
            if token in self._subscriptions:
                listener(new_state, old_state)

    def clear(self) -> None:
        """Remove all listeners."""
        self._subscriptions.clear()

    def __len__(self) -> int:
        return len(self._subscriptions)
