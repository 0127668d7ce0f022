"""
storex utils

- ChangeEmitter: ordered listener registry behind every root store
- deep_freeze / thaw: recursive immutability and its inverse
- parse_path / read_key / same_state: scope path helpers
"""

from .change_emitter import ChangeEmitter
from .deep_freeze import FrozenDict, FrozenList, deep_freeze, is_frozen, thaw
from .paths import is_primitive, parse_path, read_key, same_state

__all__ = [
    "ChangeEmitter",
    "FrozenDict",
    "FrozenList",
    "deep_freeze",
    "is_frozen",
    "thaw",
    "is_primitive",
    "parse_path",
    "read_key",
    "same_state",
]
