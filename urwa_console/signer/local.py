"""
Local private-key signer backed by eth-account.
"""
import logging
from typing import Any, Dict

from eth_account import Account
from eth_account.messages import encode_defunct

logger = logging.getLogger(__name__)


class LocalSigner:
    """Signs messages and transactions with an in-process private key"""

    def __init__(self, private_key: str):
        if not private_key:
            raise ValueError("private_key must be provided")
        self._account = Account.from_key(private_key)
        self.address = self._account.address

    def sign_message(self, message: str) -> str:
        signed = self._account.sign_message(encode_defunct(text=message))
        logger.debug(f"Signed {len(message)} char message for {self.address}")
        return "0x" + bytes(signed.signature).hex()

    def sign_transaction(self, transaction_dict: Dict[str, Any]) -> Any:
        return self._account.sign_transaction(transaction_dict)

    def __repr__(self) -> str:
        return f"LocalSigner(address={self.address!r})"
