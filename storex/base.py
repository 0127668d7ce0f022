"""
Base classes for the store system.

Architecture:
    StoreInterface: abstract base defining the get/set/subscribe/is_destroyed
        contract shared by root stores and scope stores, plus get_scope_store
    StoreOptions: construction options of a root store

External adapters (history, storage binding, reducers) only rely on
StoreInterface, so they work the same on a root store and on any scope.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, fields
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Generic,
    Mapping,
    Optional,
    TypeVar,
    Union,
)

from .exceptions import InvalidOptions

if TYPE_CHECKING:
    from .store import ScopeStore

T = TypeVar("T")

NextState = Union[T, Callable[[T], T]]
ChangeListener = Callable[[T, T], None]
EqualityCheck = Callable[[T, T], bool]


# ============================================================================
# OPTIONS
# ============================================================================


@dataclass(frozen=True)
class StoreOptions:
    """
    Options of a root store.

    Attributes:
        no_freeze: Keep state mutable instead of deep-freezing every snapshot.
        no_strict_equal: Raise SelfAssignmentViolation when the store is set
            to its own (non-primitive) state instead of silently ignoring it.
        no_warn: Don't warn when initialised with a non-plain object.
    """

    no_freeze: bool = False
    no_strict_equal: bool = False
    no_warn: bool = False

    @classmethod
    def coerce(
        cls, options: Union["StoreOptions", Mapping[str, Any], None]
    ) -> "StoreOptions":
        """Build options from None, a StoreOptions or a mapping of the same keys."""
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        if not isinstance(options, Mapping):
            raise InvalidOptions(
                f"store options must be a StoreOptions or a mapping, got {type(options).__name__}"
            )
        known = {field.name for field in fields(cls)}
        unknown = set(options) - known
        if unknown:
            raise InvalidOptions(f"unknown store options: {', '.join(sorted(unknown))}")
        return cls(**{key: bool(value) for key, value in options.items()})


# ============================================================================
# Store Interface
# ============================================================================


class StoreInterface(ABC, Generic[T]):
    """Abstract interface for all store-like objects."""

    @abstractmethod
    def get(self) -> T:
        """Return the current state."""
        pass

    @abstractmethod
    def set(self, next_state: NextState) -> None:
        """Replace the state, or update it from a function of the current state."""
        pass

    @abstractmethod
    def subscribe(
        self,
        listener: ChangeListener,
        equality_check: Optional[EqualityCheck] = None,
        init_call: bool = False,
    ) -> Callable[[], None]:
        """Call listener(new_state, old_state) on every change; return unsubscribe."""
        pass

    @abstractmethod
    def is_destroyed(self) -> bool:
        """Whether the owning root store was destroyed."""
        pass

    def get_scope_store(self, path: str) -> "ScopeStore":
        """
        Return a store scoped to a dotted path within this store's state.

        ``store.get_scope_store("a.b")`` behaves exactly like
        ``store.get_scope_store("a").get_scope_store("b")``.
        """
        from .store import scope_store_from_path

        return scope_store_from_path(self, path)
