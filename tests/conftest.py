"""Shared fixtures for the encrypted storage tests."""
import pytest

from encrypted_storage import EncryptedStorage, StorageConfig

from .helpers import ALICE, BOB, FEE, OWNER, FakeClock


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def config():
    return StorageConfig(initial_fee=FEE)


@pytest.fixture
def storage(config, clock):
    """Fresh storage administered by OWNER."""
    return EncryptedStorage(owner=OWNER, config=config, clock=clock)


@pytest.fixture
def subscribed(storage):
    """Storage where ALICE and BOB hold an active trial."""
    storage.subscribe(ALICE, 0)
    storage.subscribe(BOB, 0)
    return storage
