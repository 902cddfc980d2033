"""
Shared fakes and constants for the console tests.
"""
from .fakes import (
    FakeBackend,
    RejectingSigner,
    create_test_console,
    make_log,
    TEST_CONTRACT,
    TEST_PRIV_KEY,
    TEST_CHAIN_ID,
    TEST_RPC_URL,
    TEST_TOKEN,
    TEST_AUDITOR,
    TEST_TARGET,
)
