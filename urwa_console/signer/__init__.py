"""
Signer interface and wallet session for the uRWA20 console.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol


class Signer(Protocol):
    """Protocol for wallet signers"""
    address: str

    def sign_message(self, message: str) -> str:
        """Sign a plain-text (EIP-191) message and return the 0x-prefixed signature"""
        ...

    def sign_transaction(self, transaction_dict: Dict[str, Any]) -> Any:
        """Sign transaction and return signed tx object"""
        ...


@dataclass
class WalletSession:
    """
    The connected wallet as seen by the console.

    Attributes:
        signer: Signer for the connected account, or None when disconnected
        chain_id: Chain id the wallet is connected to
    """
    signer: Optional[Signer] = None
    chain_id: Optional[int] = None

    @property
    def address(self) -> Optional[str]:
        return self.signer.address if self.signer else None

    @property
    def is_connected(self) -> bool:
        return self.signer is not None and self.chain_id is not None

    def disconnect(self) -> None:
        self.signer = None
        self.chain_id = None


__all__ = ["Signer", "WalletSession"]
