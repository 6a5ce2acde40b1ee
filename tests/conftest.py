"""Pytest configuration.

pythonpath in pyproject.toml puts src/ and the project root on sys.path, so
tests import optimistic_guard directly and shared helpers via tests.*.
"""

import pytest

from optimistic_guard.domain.config import GuardConfig
from optimistic_guard.infrastructure.di.container import GuardContainer


@pytest.fixture
def config() -> GuardConfig:
    return GuardConfig()


@pytest.fixture(autouse=True)
def _reset_container() -> None:
    GuardContainer.reset()
