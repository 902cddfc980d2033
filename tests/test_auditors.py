"""
Tests for auditor permission management.
"""
import asyncio
import json

import pytest
from eth_utils import keccak

from urwa_console.auditors import AuditorPermissions, DEFAULT_GRANT_DURATION
from urwa_console.exceptions import InvalidAddressError, InvalidParameterError
from urwa_console.marshal import normalize_address
from urwa_console.rpc import Web3Backend
from urwa_console.signer import WalletSession

from tests.test_helpers import TEST_AUDITOR, TEST_CONTRACT, TEST_RPC_URL, TEST_TARGET


class TestGrant:

    def test_grant_with_addresses(self, console, backend):
        auditors = AuditorPermissions(console)
        asyncio.run(auditors.grant(TEST_AUDITOR, 7200, False, [TEST_TARGET, " "]))

        sent = backend.writes[0]
        assert sent["function"] == "grantAuditorPermission"
        auditor, duration, full_access, addresses = sent["args"]
        assert auditor == normalize_address(TEST_AUDITOR)
        assert duration == 7200
        assert full_access is False
        assert json.loads(addresses) == [normalize_address(TEST_TARGET)]

    def test_grant_arguments_encode_against_contract(self, console, backend, schema):
        lowercase = "0x5aaeb6053f3e94c9b9a09f33669435e7ef1beaed"
        asyncio.run(AuditorPermissions(console).grant(TEST_AUDITOR, 60, False, [lowercase]))

        # A real contract object rejects addresses that are not checksummed
        web3_backend = Web3Backend(TEST_RPC_URL, TEST_CONTRACT, schema, WalletSession())
        call = web3_backend._function("grantAuditorPermission", backend.writes[0]["args"])
        data = call._encode_transaction_data()

        selector = keccak(text="grantAuditorPermission(address,uint256,bool,address[])")[:4]
        assert data.startswith("0x" + selector.hex())
        assert lowercase[2:] in data.lower()

    def test_default_duration(self, console, backend):
        asyncio.run(AuditorPermissions(console).grant(TEST_AUDITOR))
        assert DEFAULT_GRANT_DURATION == 3600
        assert backend.writes[0]["args"][1] == 3600

    def test_full_access_ignores_address_list(self, console, backend):
        asyncio.run(AuditorPermissions(console).grant(TEST_AUDITOR, full_access=True,
                                                      allowed_addresses=["not-an-address"]))
        _, _, full_access, addresses = backend.writes[0]["args"]
        assert full_access is True
        assert json.loads(addresses) == []

    def test_invalid_auditor(self, console, backend):
        with pytest.raises(InvalidAddressError, match="auditor"):
            asyncio.run(AuditorPermissions(console).grant("0x1234"))
        assert backend.writes == []

    def test_invalid_address_in_list(self, console, backend):
        with pytest.raises(InvalidAddressError, match="address in list"):
            asyncio.run(AuditorPermissions(console).grant(TEST_AUDITOR, allowed_addresses=["0xzz"]))
        assert backend.writes == []

    @pytest.mark.parametrize("duration", [0, -5])
    def test_non_positive_duration(self, console, duration):
        with pytest.raises(InvalidParameterError):
            asyncio.run(AuditorPermissions(console).grant(TEST_AUDITOR, duration))


def test_revoke(console, backend):
    asyncio.run(AuditorPermissions(console).revoke(TEST_AUDITOR))
    assert backend.writes[0]["function"] == "revokeAuditorPermission"
    assert backend.writes[0]["args"] == [normalize_address(TEST_AUDITOR)]


def test_check(console, backend):
    backend.read_results["checkAuditorPermission"] = True
    assert asyncio.run(AuditorPermissions(console).check(TEST_AUDITOR, TEST_TARGET)) is True
    name, args, _ = backend.read_calls[0]
    assert name == "checkAuditorPermission"
    assert args == [normalize_address(TEST_AUDITOR), normalize_address(TEST_TARGET)]


def test_check_rejects_bad_target(console):
    with pytest.raises(InvalidAddressError, match="target"):
        asyncio.run(AuditorPermissions(console).check(TEST_AUDITOR, "nope"))


def test_details(console, backend):
    backend.read_results["auditorPermissions"] = (1700000000, True)
    details = asyncio.run(AuditorPermissions(console).details(TEST_AUDITOR))
    assert details.expiry == 1700000000
    assert details.full_access is True
