"""
Console for operating the uRWA20 confidential token contract.
"""
from .auditors import AuditorPermissions
from .auth import AuthSessionManager, AuthSession, AuthState, parse_signature
from .config import ConsoleConfig, NetworkConfig
from .console import ContractConsole
from .decryption import DecryptionService
from .events import EventDecoder
from .exceptions import (
    ConsoleError, ValidationError, MissingParameterError, InvalidParameterError,
    InvalidAddressError, SchemaError, ConfigurationError, NetworkError,
    TransactionRevertedError, DecryptionUnavailableError, AuthError,
    NotConnectedError, DomainUnavailableError, SignatureRejectedError,
    LoginRejectedError,
)
from .fees import FeeNegotiator
from .models import (
    ParamKind, ParamSpec, FunctionDescriptor, EventDescriptor, GasQuote,
    EncryptedEventKind, EncryptedLogEvent, DecryptedPayload, AuditorPermission,
    TransactionRecord, TxReceipt,
)
from .rpc import ContractBackend, Web3Backend
from .schema import ContractSchema
from .signer import Signer, WalletSession
from .version import __version__

__all__ = [
    "AuditorPermissions",
    "AuthSessionManager",
    "AuthSession",
    "AuthState",
    "parse_signature",
    "ConsoleConfig",
    "NetworkConfig",
    "ContractConsole",
    "DecryptionService",
    "EventDecoder",
    "ConsoleError",
    "ValidationError",
    "MissingParameterError",
    "InvalidParameterError",
    "InvalidAddressError",
    "SchemaError",
    "ConfigurationError",
    "NetworkError",
    "TransactionRevertedError",
    "DecryptionUnavailableError",
    "AuthError",
    "NotConnectedError",
    "DomainUnavailableError",
    "SignatureRejectedError",
    "LoginRejectedError",
    "FeeNegotiator",
    "ParamKind",
    "ParamSpec",
    "FunctionDescriptor",
    "EventDescriptor",
    "GasQuote",
    "EncryptedEventKind",
    "EncryptedLogEvent",
    "DecryptedPayload",
    "AuditorPermission",
    "TransactionRecord",
    "TxReceipt",
    "ContractBackend",
    "Web3Backend",
    "ContractSchema",
    "Signer",
    "WalletSession",
    "__version__",
]
