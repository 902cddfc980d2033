"""
JSON-RPC collaborator for contract reads, writes, log queries and estimation.

ContractBackend is the interface the console components depend on;
Web3Backend implements it over web3's AsyncWeb3.
"""
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Union

from eth_utils import to_checksum_address
from web3 import AsyncWeb3, Web3

from .exceptions import NetworkError, NotConnectedError, InvalidParameterError
from .models import FeeEstimate, GasQuote, ParamKind, TxReceipt
from .schema import ContractSchema
from .signer import WalletSession

logger = logging.getLogger(__name__)

BlockId = Union[int, str]

DEFAULT_RECEIPT_TIMEOUT = 120
# Matches the base-fee headroom viem applies when estimating EIP-1559 fees
BASE_FEE_MULTIPLIER_PERCENT = 120


class ContractBackend(ABC):
    """
    Abstract base class for the contract RPC collaborator.

    All methods are coroutines; each one is a suspension point of the console.
    """

    @abstractmethod
    async def read(self, function_name: str, args: Sequence[Any], sender: Optional[str] = None) -> Any:
        """
        Call a read-only contract function.

        Raises:
            NetworkError: If the call fails
        """
        pass

    @abstractmethod
    async def estimate_fees_per_gas(self) -> FeeEstimate:
        """
        Request a dynamic (two-part) fee estimate.

        Raises:
            NetworkError: If the node cannot provide an estimate
        """
        pass

    @abstractmethod
    async def gas_price(self) -> int:
        """
        Request the legacy gas price.

        Raises:
            NetworkError: If the node cannot provide a price
        """
        pass

    @abstractmethod
    async def estimate_gas(
        self,
        function_name: str,
        args: Sequence[Any],
        sender: Optional[str] = None,
        value: Optional[int] = None,
        quote: Optional[GasQuote] = None,
    ) -> int:
        """
        Simulate a write and return its gas cost.

        Raises:
            NetworkError: If simulation fails
        """
        pass

    @abstractmethod
    async def write(
        self,
        function_name: str,
        args: Sequence[Any],
        quote: GasQuote,
        value: Optional[int] = None,
        gas_limit: Optional[int] = None,
    ) -> str:
        """
        Sign and submit a write, returning the transaction hash.

        Raises:
            NetworkError: If signing or submission fails
        """
        pass

    @abstractmethod
    async def wait_for_receipt(self, tx_hash: str, timeout: float = DEFAULT_RECEIPT_TIMEOUT) -> TxReceipt:
        """
        Wait until a transaction is mined.

        Raises:
            NetworkError: If the receipt cannot be obtained
        """
        pass

    @abstractmethod
    async def block_number(self) -> int:
        pass

    @abstractmethod
    async def get_logs(self, from_block: BlockId, to_block: BlockId = "latest") -> List[Dict[str, Any]]:
        """
        Fetch raw logs emitted by the contract.

        Raises:
            NetworkError: If the log query fails
        """
        pass


class Web3Backend(ContractBackend):
    """ContractBackend over an AsyncWeb3 HTTP connection"""

    def __init__(
        self,
        rpc_url: str,
        contract_address: str,
        schema: ContractSchema,
        wallet: WalletSession,
        poll_interval: float = 0.5,
        w3: Optional[AsyncWeb3] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.rpc_url = rpc_url
        self.contract_address = to_checksum_address(contract_address)
        self.schema = schema
        self.wallet = wallet
        self.poll_interval = poll_interval
        self.logger = logger or logging.getLogger(__name__)

        self.w3 = w3 or AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url))
        self.contract = self.w3.eth.contract(address=self.contract_address, abi=schema.abi)

    def _prepare_args(self, function_name: str, args: Sequence[Any]) -> List[Any]:
        """Parse array/tuple arguments supplied as JSON text"""
        fn = self.schema.get_function(function_name)
        prepared = []
        for param, value in zip(fn.inputs, args):
            if param.kind in (ParamKind.ARRAY, ParamKind.TUPLE) and isinstance(value, str):
                try:
                    value = json.loads(value)
                except ValueError as e:
                    raise InvalidParameterError(
                        f"Parameter {param.name or param.declared_type} must be JSON: {e}"
                    )
            prepared.append(value)
        return prepared

    def _function(self, function_name: str, args: Sequence[Any]):
        return getattr(self.contract.functions, function_name)(*self._prepare_args(function_name, args))

    async def read(self, function_name: str, args: Sequence[Any], sender: Optional[str] = None) -> Any:
        call_params = {"from": sender} if sender else {}
        try:
            return await self._function(function_name, args).call(call_params)
        except InvalidParameterError:
            raise
        except Exception as e:
            self.logger.error(f"Read {function_name} failed: {e}")
            raise NetworkError(f"Failed to read {function_name}: {e}") from e

    async def estimate_fees_per_gas(self) -> FeeEstimate:
        try:
            block = await self.w3.eth.get_block("latest")
            priority = await self.w3.eth.max_priority_fee
        except Exception as e:
            raise NetworkError(f"Fee estimation failed: {e}") from e

        base_fee = block.get("baseFeePerGas")
        if base_fee is None:
            return FeeEstimate(max_priority_fee_per_gas=priority)
        max_fee = base_fee * BASE_FEE_MULTIPLIER_PERCENT // 100 + priority
        return FeeEstimate(max_fee_per_gas=max_fee, max_priority_fee_per_gas=priority)

    async def gas_price(self) -> int:
        try:
            return await self.w3.eth.gas_price
        except Exception as e:
            raise NetworkError(f"Gas price request failed: {e}") from e

    async def estimate_gas(
        self,
        function_name: str,
        args: Sequence[Any],
        sender: Optional[str] = None,
        value: Optional[int] = None,
        quote: Optional[GasQuote] = None,
    ) -> int:
        tx_params: Dict[str, Any] = {}
        if sender:
            tx_params["from"] = sender
        if value:
            tx_params["value"] = value
        if quote:
            tx_params.update(quote.as_tx_params())
        try:
            return await self._function(function_name, args).estimate_gas(tx_params)
        except Exception as e:
            raise NetworkError(f"Gas estimation for {function_name} failed: {e}") from e

    async def write(
        self,
        function_name: str,
        args: Sequence[Any],
        quote: GasQuote,
        value: Optional[int] = None,
        gas_limit: Optional[int] = None,
    ) -> str:
        signer = self.wallet.signer
        if signer is None:
            raise NotConnectedError("Wallet not connected")

        try:
            nonce = await self.w3.eth.get_transaction_count(signer.address, "pending")
            chain_id = self.wallet.chain_id or await self.w3.eth.chain_id

            tx_params: Dict[str, Any] = {
                "from": signer.address,
                "nonce": nonce,
                "chainId": chain_id,
                **quote.as_tx_params(),
            }
            if value:
                tx_params["value"] = value
            if gas_limit is not None:
                tx_params["gas"] = gas_limit

            tx = await self._function(function_name, args).build_transaction(tx_params)
        except InvalidParameterError:
            raise
        except Exception as e:
            self.logger.error(f"Failed to build {function_name} transaction: {e}")
            raise NetworkError(f"Failed to build transaction: {e}") from e

        try:
            signed_tx = signer.sign_transaction(tx)
        except Exception as e:
            self.logger.error(f"Transaction signing failed: {e}")
            raise NetworkError(f"Failed to sign transaction: {e}") from e

        try:
            tx_hash = await self.w3.eth.send_raw_transaction(signed_tx.raw_transaction)
        except Exception as e:
            self.logger.error(f"Failed to send transaction: {e}")
            raise NetworkError(f"Failed to send transaction: {e}") from e

        tx_hash_hex = Web3.to_hex(tx_hash)
        self.logger.info(f"Transaction sent: {tx_hash_hex}")
        return tx_hash_hex

    async def wait_for_receipt(self, tx_hash: str, timeout: float = DEFAULT_RECEIPT_TIMEOUT) -> TxReceipt:
        try:
            receipt = await self.w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=timeout, poll_latency=self.poll_interval
            )
        except Exception as e:
            raise NetworkError(f"Failed to get receipt for {tx_hash}: {e}") from e
        return self._convert_receipt(receipt)

    async def block_number(self) -> int:
        try:
            return await self.w3.eth.block_number
        except Exception as e:
            raise NetworkError(f"Failed to get block number: {e}") from e

    async def get_logs(self, from_block: BlockId, to_block: BlockId = "latest") -> List[Dict[str, Any]]:
        try:
            logs = await self.w3.eth.get_logs({
                "address": self.contract_address,
                "fromBlock": from_block,
                "toBlock": to_block,
            })
        except Exception as e:
            raise NetworkError(f"Failed to fetch logs: {e}") from e
        return [dict(log) for log in logs]

    def _convert_receipt(self, web3_receipt: Any) -> TxReceipt:
        """Convert a web3 receipt to our TxReceipt model"""
        receipt_dict = dict(web3_receipt)

        # Convert bytes to hex strings
        for key, value in list(receipt_dict.items()):
            if isinstance(value, bytes):
                receipt_dict[key] = Web3.to_hex(value)
        receipt_dict["logs"] = [dict(log) for log in receipt_dict.get("logs", [])]

        return TxReceipt.model_validate(receipt_dict)
