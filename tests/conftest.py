"""
Shared pytest fixtures for storex tests.
"""

import pytest

from storex import create_store


@pytest.fixture
def john():
    return {"first_name": "John", "last_name": "Doe", "age": 42}


@pytest.fixture
def jane():
    return {"first_name": "Jane", "last_name": "Black", "age": 40}


@pytest.fixture
def jack():
    return {"first_name": "Jack", "last_name": "Bower", "age": 58}


@pytest.fixture
def family_store():
    """Provide a fresh two-parent family store."""
    return create_store(
        {"mum": {"name": "Jane", "age": 43}, "dad": {"name": "John", "age": 41}}
    )


@pytest.fixture
def recorder():
    """Provide a listener factory recording (new, old) call arguments."""

    class Recorder:
        def __init__(self):
            self.calls = []

        def __call__(self, new_state, old_state):
            self.calls.append((new_state, old_state))

        @property
        def count(self):
            return len(self.calls)

    return Recorder
