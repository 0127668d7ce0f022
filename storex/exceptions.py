"""
Exceptions raised by storex.

Every error is raised synchronously to the immediate caller; the library never
recovers internally.
"""


class StoreError(Exception):
    """Base class for all storex errors."""

    pass


class DestroyedStoreAccess(StoreError, RuntimeError):
    """get/set/subscribe called on a destroyed store or on one of its scopes."""

    pass


class SelfAssignmentViolation(StoreError, ValueError):
    """Store set to its own state while no_strict_equal is active."""

    pass


class InvalidScopeTarget(StoreError, TypeError):
    """A scope store tried to write a property onto a value that can't hold one."""

    pass


class NotDraftable(StoreError, TypeError):
    """produce/mutate called on something other than a dict or a list."""

    pass


class DraftReturnedError(StoreError, ValueError):
    """A recipe returned a draft instead of None or a new value."""

    pass


class InvalidOptions(StoreError, ValueError):
    """Malformed configuration."""

    pass


class HistoryDestroyed(StoreError, RuntimeError):
    """A StoreHistory method was called after destroy()."""

    pass
