"""
Exceptions for the uRWA20 console.
"""
from typing import Optional


class ConsoleError(Exception):
    """Base exception for all console errors."""
    pass


class ValidationError(ConsoleError):
    """Raised for bad caller input before any network call is attempted."""
    pass


class MissingParameterError(ValidationError):
    """Raised when a required call parameter has no value."""

    def __init__(self, parameter: str):
        self.parameter = parameter
        super().__init__(f"Missing value for parameter {parameter}")


class InvalidParameterError(ValidationError):
    """Raised when a parameter value cannot be coerced to its declared type."""
    pass


class InvalidAddressError(ValidationError):
    """Raised when an address is not a 0x-prefixed 20-byte hex string."""
    pass


class SchemaError(ConsoleError):
    """Raised when a contract interface description cannot be loaded."""
    pass


class ConfigurationError(ConsoleError):
    """Raised for fatal startup configuration problems."""
    pass


class NetworkError(ConsoleError):
    """Raised when an RPC read, write or log query fails."""
    pass


class TransactionRevertedError(NetworkError):
    """Raised when a submitted transaction is mined with a failed status."""

    def __init__(self, message: str, tx_hash: Optional[str] = None):
        self.tx_hash = tx_hash
        super().__init__(message)


class DecryptionUnavailableError(NetworkError):
    """Raised when decrypted data cannot be read back after a decryption write."""
    pass


class AuthError(ConsoleError):
    """Base exception for SIWE authentication failures."""
    pass


class NotConnectedError(AuthError):
    """Raised when no account or chain id is available."""
    pass


class DomainUnavailableError(AuthError):
    """Raised when the contract does not return a SIWE domain."""
    pass


class SignatureRejectedError(AuthError):
    """Raised when the signer declines to sign the challenge message."""
    pass


class LoginRejectedError(AuthError):
    """Raised when the contract login call fails or returns no token."""
    pass
