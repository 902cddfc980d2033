"""
ContractConsole - request/response glue for the uRWA20 console.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence

from .abi import URWA20_ABI
from .auth import AuthSessionManager
from .config import ConsoleConfig
from .events import EventDecoder, as_bytes, as_int, to_hex
from .exceptions import NotConnectedError, TransactionRevertedError, ValidationError
from .fees import FeeNegotiator
from .marshal import parse_function_inputs
from .models import EncryptedLogEvent, FunctionDescriptor, TransactionRecord, TxReceipt
from .rpc import ContractBackend
from .schema import ContractSchema
from .signer import WalletSession


class ContractConsole:
    """
    Console for operating a contract whose ABI is supplied at runtime.

    Reads go straight to the backend; writes are quoted by the FeeNegotiator,
    submitted, and awaited until mined.
    """

    def __init__(
        self,
        config: ConsoleConfig,
        backend: ContractBackend,
        wallet: WalletSession,
        schema: Optional[ContractSchema] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config
        self.backend = backend
        self.wallet = wallet
        self.schema = schema or ContractSchema.from_abi(URWA20_ABI)
        self.logger = logger or logging.getLogger(__name__)

        self.auth = AuthSessionManager(backend, wallet, origin_uri=config.origin_uri, logger=self.logger)
        self.fees = FeeNegotiator(backend, floor_wei=config.fee_floor_wei, logger=self.logger)
        self.decoder = EventDecoder(self.schema)

    @property
    def view_functions(self) -> Sequence[FunctionDescriptor]:
        return self.schema.view_functions

    @property
    def write_functions(self) -> Sequence[FunctionDescriptor]:
        return self.schema.write_functions

    def describe(self, function_name: str) -> FunctionDescriptor:
        return self.schema.get_function(function_name)

    async def read(self, function_name: str, values: Sequence[Optional[str]] = ()) -> Any:
        """
        Call a view or pure function with form values.

        Raises:
            ValidationError: If the function is not read-only or a value is bad
            NetworkError: If the call fails
        """
        fn = self.schema.get_function(function_name)
        if not fn.is_read_only:
            raise ValidationError(f"{function_name} is not a view function")
        args = parse_function_inputs(fn, values, auth_token=self.auth.token)
        self.logger.debug(f"Reading {fn.signature}")
        return await self.backend.read(function_name, args, sender=self.wallet.address)

    async def submit(
        self,
        function_name: str,
        values: Sequence[Optional[str]] = (),
        value: Optional[int] = None,
    ) -> str:
        """
        Submit a write without waiting for it to be mined.

        Returns:
            Transaction hash

        Raises:
            ValidationError: If the function is read-only or a value is bad
            NotConnectedError: If no wallet is connected
            NetworkError: If submission fails
        """
        fn = self.schema.get_function(function_name)
        if fn.is_read_only:
            raise ValidationError(f"{function_name} is not a write function")
        args = parse_function_inputs(fn, values, auth_token=self.auth.token)
        if not self.wallet.is_connected:
            raise NotConnectedError("Wallet not connected")
        if not fn.is_payable:
            value = None

        quote = await self.fees.quote()
        gas_limit = await self.fees.estimate_gas_limit(
            function_name, args, sender=self.wallet.address, value=value, quote=quote
        )
        self.logger.info(
            f"Submitting {fn.signature} with maxFee={quote.max_fee_per_gas} "
            f"priority={quote.max_priority_fee_per_gas} gas={gas_limit or 'default'}"
        )
        return await self.backend.write(function_name, args, quote, value=value, gas_limit=gas_limit)

    async def write(
        self,
        function_name: str,
        values: Sequence[Optional[str]] = (),
        value: Optional[int] = None,
    ) -> TxReceipt:
        """
        Submit a write and wait for it to be mined.

        Raises:
            TransactionRevertedError: If the transaction is mined but failed
        """
        tx_hash = await self.submit(function_name, values, value=value)
        receipt = await self.backend.wait_for_receipt(tx_hash, timeout=self.config.receipt_timeout)
        if not receipt.succeeded:
            raise TransactionRevertedError(f"Transaction {tx_hash} reverted", tx_hash=tx_hash)
        self.logger.info(f"Transaction {tx_hash} confirmed in block {receipt.block_number}")
        return receipt

    async def _start_block(self, from_block: Optional[int]) -> int:
        if from_block is not None:
            return from_block
        current = await self.backend.block_number()
        return max(current - self.config.event_window_blocks, 0)

    async def fetch_encrypted_events(self, from_block: Optional[int] = None) -> List[EncryptedLogEvent]:
        """
        Fetch encrypted events, newest first.

        Defaults to the last `event_window_blocks` blocks.
        """
        start = await self._start_block(from_block)
        logs = await self.backend.get_logs(start, "latest")
        events = self.decoder.decode_all(logs)
        self.logger.debug(f"Decoded {len(events)} encrypted events from {len(logs)} logs since block {start}")
        return events

    async def transaction_history(
        self,
        from_block: Optional[int] = None,
        filter_address: Optional[str] = None,
    ) -> List[TransactionRecord]:
        """
        List contract transactions with a recognised event, one per tx hash.

        Args:
            from_block: First block to scan (defaults to the event window)
            filter_address: Only keep logs whose topics contain this address
        """
        start = await self._start_block(from_block)
        logs = await self.backend.get_logs(start, "latest")

        needle = filter_address.lower().replace("0x", "") if filter_address else None
        records: Dict[str, TransactionRecord] = {}
        for log in logs:
            event_name, payload = self.decoder.decode(log)
            if not event_name:
                continue
            if needle and not any(needle in as_bytes(t).hex() for t in log.get("topics") or []):
                continue
            tx_hash = to_hex(log.get("transactionHash") or "")
            records[tx_hash] = TransactionRecord(
                block_number=as_int(log.get("blockNumber")),
                transaction_hash=tx_hash,
                event_name=event_name,
                payload=payload,
            )
        return sorted(records.values(), key=lambda r: r.block_number, reverse=True)
