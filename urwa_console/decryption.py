"""
Decryption of encrypted event payloads through the contract.

The client never interprets a payload itself: it submits processDecryption,
waits for that write to be mined, then reads the result back with
viewLastDecryptedData. The read-back is retried with exponential backoff in
case the node serving reads lags behind the one that confirmed the write.
"""
import asyncio
import logging
from typing import Any, Optional

from .console import ContractConsole
from .exceptions import DecryptionUnavailableError, MissingParameterError, NetworkError
from .models import DecryptedPayload, TxReceipt

logger = logging.getLogger(__name__)

ZERO_ADDRESS = "0x" + "0" * 40
EMPTY_TOKEN = "0x"


def _is_empty_result(result: Any) -> bool:
    if not result:
        return True
    from_addr, to_addr, amount, action = result[0], result[1], result[2], result[3]
    return (
        str(from_addr).lower() == ZERO_ADDRESS
        and str(to_addr).lower() == ZERO_ADDRESS
        and int(amount) == 0
        and not action
    )


class DecryptionService:
    """Runs the processDecryption / viewLastDecryptedData round trip"""

    def __init__(self, console: ContractConsole, logger: Optional[logging.Logger] = None):
        self.console = console
        self.config = console.config
        self.logger = logger or logging.getLogger(__name__)

    async def read_last_decrypted(self) -> Optional[DecryptedPayload]:
        """
        Read the caller's last decrypted data.

        Returns:
            The decrypted payload, or None if the contract holds none
        """
        # The active SIWE token replaces the empty token when authenticated
        result = await self.console.read("viewLastDecryptedData", [EMPTY_TOKEN])
        if _is_empty_result(result):
            return None
        return DecryptedPayload.from_call_result(result)

    async def decrypt(self, payload: str) -> DecryptedPayload:
        """
        Decrypt an encrypted event payload.

        Args:
            payload: Encrypted data, with or without 0x prefix

        Returns:
            The decrypted transaction data

        Raises:
            MissingParameterError: If the payload is empty
            NetworkError: If the decryption write fails
            DecryptionUnavailableError: If the result cannot be read back
        """
        if not payload or payload == EMPTY_TOKEN:
            raise MissingParameterError("encryptedData")
        if not payload.startswith("0x"):
            payload = f"0x{payload}"

        receipt: TxReceipt = await self.console.write("processDecryption", [payload])
        self.logger.info(f"processDecryption confirmed in block {receipt.block_number}, reading result")

        attempts = self.config.readback_attempts
        last_error: Optional[Exception] = None
        for attempt in range(attempts):
            try:
                decrypted = await self.read_last_decrypted()
                if decrypted is not None:
                    return decrypted
                self.logger.debug(f"Decrypted data not yet available (attempt {attempt + 1}/{attempts})")
            except NetworkError as e:
                last_error = e
                self.logger.warning(f"Read-back attempt {attempt + 1}/{attempts} failed: {e}")

            if attempt < attempts - 1:
                await asyncio.sleep(self.config.readback_backoff * (2 ** attempt))

        message = f"Decrypted data unavailable after {attempts} attempts"
        if last_error is not None:
            message = f"{message}: {last_error}"
        raise DecryptionUnavailableError(message)

    async def clear(self) -> TxReceipt:
        """Clear the caller's last decrypted data on the contract"""
        return await self.console.write("clearLastDecryptedData", [])
