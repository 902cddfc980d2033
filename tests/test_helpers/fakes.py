"""
In-memory collaborators for exercising the console without a node.
"""
import inspect
from typing import Any, Dict, List, Optional, Sequence

from eth_abi import encode as abi_encode
from eth_utils import keccak

from urwa_console.config import ConsoleConfig
from urwa_console.console import ContractConsole
from urwa_console.exceptions import NetworkError
from urwa_console.models import FeeEstimate, GasQuote, TxReceipt
from urwa_console.rpc import ContractBackend
from urwa_console.signer import WalletSession
from urwa_console.signer.local import LocalSigner

# Constants for testing
TEST_RPC_URL = "https://rpc.example.com"
TEST_CONTRACT = "0x1234567890123456789012345678901234567890"
TEST_CHAIN_ID = 23295
TEST_PRIV_KEY = "0x0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef"
TEST_TOKEN = "0x" + "ab" * 32
TEST_AUDITOR = "0x00000000000000000000000000000000000000aa"
TEST_TARGET = "0x00000000000000000000000000000000000000bb"


class FakeBackend(ContractBackend):
    """
    Scriptable ContractBackend.

    `read_results` maps a function name to a value, an exception instance, or
    a callable taking the argument list (which may return an awaitable).
    """

    def __init__(self):
        self.read_results: Dict[str, Any] = {}
        self.read_calls: List[tuple] = []
        self.fee_estimate: Any = FeeEstimate(max_fee_per_gas=200 * 10**9, max_priority_fee_per_gas=150 * 10**9)
        self.legacy_gas_price: Any = 50 * 10**9
        self.gas_estimate: Any = 100000
        self.gas_estimate_calls: List[dict] = []
        self.writes: List[dict] = []
        self.receipt_status = 1
        self.current_block = 5000
        self.logs: List[Dict[str, Any]] = []
        self.log_queries: List[tuple] = []

    async def read(self, function_name: str, args: Sequence[Any], sender: Optional[str] = None) -> Any:
        self.read_calls.append((function_name, list(args), sender))
        if function_name not in self.read_results:
            raise NetworkError(f"No scripted result for {function_name}")
        result = self.read_results[function_name]
        if isinstance(result, Exception):
            raise result
        if callable(result):
            result = result(list(args))
            if inspect.isawaitable(result):
                result = await result
        return result

    async def estimate_fees_per_gas(self) -> FeeEstimate:
        if isinstance(self.fee_estimate, Exception):
            raise self.fee_estimate
        return self.fee_estimate

    async def gas_price(self) -> int:
        if isinstance(self.legacy_gas_price, Exception):
            raise self.legacy_gas_price
        return self.legacy_gas_price

    async def estimate_gas(self, function_name, args, sender=None, value=None, quote=None) -> int:
        self.gas_estimate_calls.append(
            {"function": function_name, "args": list(args), "sender": sender, "value": value, "quote": quote}
        )
        if isinstance(self.gas_estimate, Exception):
            raise self.gas_estimate
        return self.gas_estimate

    async def write(self, function_name: str, args: Sequence[Any], quote: GasQuote,
                    value: Optional[int] = None, gas_limit: Optional[int] = None) -> str:
        self.writes.append({
            "function": function_name,
            "args": list(args),
            "quote": quote,
            "value": value,
            "gas_limit": gas_limit,
        })
        return "0x" + f"{len(self.writes):064x}"

    async def wait_for_receipt(self, tx_hash: str, timeout: float = 120) -> TxReceipt:
        return TxReceipt(
            transactionHash=tx_hash,
            blockNumber=self.current_block,
            blockHash="0x" + "cd" * 32,
            status=self.receipt_status,
            gasUsed=85000,
            **{"from": TEST_CONTRACT, "to": TEST_CONTRACT},
        )

    async def block_number(self) -> int:
        return self.current_block

    async def get_logs(self, from_block, to_block="latest") -> List[Dict[str, Any]]:
        self.log_queries.append((from_block, to_block))
        return list(self.logs)


class RejectingSigner(LocalSigner):
    """Signer whose user declines every message signature"""

    def sign_message(self, message: str) -> str:
        raise RuntimeError("User rejected the request")


def make_log(event_name: str, payload: bytes, block_number: int = 100,
             tx_hash: Optional[str] = None, extra_topics: Sequence[bytes] = ()) -> Dict[str, Any]:
    """Build a raw log as emitted by an `EventName(bytes encryptedData)` event"""
    return {
        "address": TEST_CONTRACT,
        "topics": [keccak(text=f"{event_name}(bytes)"), *extra_topics],
        "data": abi_encode(["bytes"], [payload]),
        "blockNumber": block_number,
        "transactionHash": bytes.fromhex(tx_hash[2:]) if tx_hash else bytes([block_number % 256]) * 32,
    }


def create_test_console(backend: Optional[FakeBackend] = None,
                        wallet: Optional[WalletSession] = None,
                        connected: bool = True,
                        **config_overrides) -> ContractConsole:
    """Build a ContractConsole over a FakeBackend with instant read-back"""
    settings = {
        "network": "testnet",
        "chain_id": TEST_CHAIN_ID,
        "rpc_url": TEST_RPC_URL,
        "contract_address": TEST_CONTRACT,
        "readback_backoff": 0,
    }
    settings.update(config_overrides)
    config = ConsoleConfig(**settings)

    if wallet is None:
        wallet = WalletSession()
        if connected:
            wallet = WalletSession(signer=LocalSigner(TEST_PRIV_KEY), chain_id=TEST_CHAIN_ID)
    return ContractConsole(config, backend or FakeBackend(), wallet)
