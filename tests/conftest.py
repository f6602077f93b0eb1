from datetime import date

import pytest

from ferrocash.client import FerroCash
from ferrocash.core.config import Config
from ferrocash.storage.memory import InMemoryStorage


@pytest.fixture
def storage():
    """Fresh in-memory storage per test."""
    return InMemoryStorage()


@pytest.fixture
def config():
    return Config(lock_retry_count=5, lock_retry_delay=0.01)


@pytest.fixture
def cash(config, storage):
    """FerroCash wired to in-memory storage, no webhook."""
    return FerroCash(config=config, storage=storage)


@pytest.fixture
def today():
    return date(2026, 10, 19)


@pytest.fixture
def check_fields():
    """Minimal valid create_check arguments."""
    return {
        "check_type": "physical",
        "check_number": "00012345",
        "bank_name": "Banco Nación",
        "amount": "25000.00",
        "issue_date": "2026-10-01",
        "due_date": "2026-11-15",
        "issuer_name": "Corralón El Tornillo SRL",
    }
