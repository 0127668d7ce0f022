"""
storex - Reactive State Container

A root store holding an immutable state snapshot, scope stores addressing
parts of it by dotted path, a copy-on-write producer for ergonomic updates and
a bounded undo/redo history built on the store contract.
"""

from .base import StoreInterface, StoreOptions
from .draft import Draft, produce
from .exceptions import (
    DestroyedStoreAccess,
    DraftReturnedError,
    HistoryDestroyed,
    InvalidOptions,
    InvalidScopeTarget,
    NotDraftable,
    SelfAssignmentViolation,
    StoreError,
)
from .history import StoreHistory, historize
from .recipes import (
    bind_storage,
    mutate,
    remove_prop,
    set_prop,
    use_reducer,
    use_store,
)
from .store import ScopeStore, Store, apply_extensions, create_store
from .util.change_emitter import ChangeEmitter
from .util.deep_freeze import FrozenDict, FrozenList, deep_freeze, is_frozen

__version__ = "0.1.0"

__all__ = [
    # Stores
    "Store",
    "ScopeStore",
    "StoreInterface",
    "StoreOptions",
    "create_store",
    "apply_extensions",
    "ChangeEmitter",
    # Immutability
    "deep_freeze",
    "is_frozen",
    "FrozenDict",
    "FrozenList",
    # Drafts and recipes
    "Draft",
    "produce",
    "mutate",
    "set_prop",
    "remove_prop",
    "use_store",
    "use_reducer",
    "bind_storage",
    # History
    "StoreHistory",
    "historize",
    # Exceptions
    "StoreError",
    "DestroyedStoreAccess",
    "SelfAssignmentViolation",
    "InvalidScopeTarget",
    "NotDraftable",
    "DraftReturnedError",
    "InvalidOptions",
    "HistoryDestroyed",
]
