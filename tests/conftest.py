"""
Pytest fixtures for the uRWA20 console tests.
"""
import pytest

from urwa_console._rate_limited_log import reset_rate_limits
from urwa_console.config import NetworkConfig
from urwa_console.schema import ContractSchema
from urwa_console.abi import URWA20_ABI
from urwa_console.signer import WalletSession
from urwa_console.signer.local import LocalSigner

from tests.test_helpers import (
    FakeBackend,
    create_test_console,
    TEST_PRIV_KEY,
    TEST_CHAIN_ID,
)


@pytest.fixture(autouse=True)
def _reset_global_state():
    """Clear rate limit suppression and the network cache between tests"""
    reset_rate_limits()
    NetworkConfig._networks_cache = None
    yield
    reset_rate_limits()
    NetworkConfig._networks_cache = None


@pytest.fixture(autouse=True)
def _isolated_preferences(tmp_path, monkeypatch):
    """Never touch the real ~/.urwa-console during tests"""
    monkeypatch.setenv("URWA_PREFERENCES_PATH", str(tmp_path / "preferences.json"))


@pytest.fixture
def schema():
    return ContractSchema.from_abi(URWA20_ABI)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def signer():
    return LocalSigner(TEST_PRIV_KEY)


@pytest.fixture
def wallet(signer):
    return WalletSession(signer=signer, chain_id=TEST_CHAIN_ID)


@pytest.fixture
def console(backend, wallet):
    return create_test_console(backend=backend, wallet=wallet)
