"""
SIWE authentication against the uRWA20 contract.

The contract exposes `domain()` and `login(message, signature)`; a successful
login returns an opaque bearer token that view functions taking a trailing
`bytes token` parameter accept in place of msg.sender.

Each authenticate() call is tagged with a generation number. Responses that
arrive after a newer attempt started (or after clear_auth()) are discarded.
"""
import asyncio
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, Optional, Tuple

from cachetools import TTLCache
from eth_utils import to_checksum_address
from siwe import SiweMessage, generate_nonce

from .exceptions import (
    AuthError, NotConnectedError, DomainUnavailableError,
    SignatureRejectedError, LoginRejectedError,
)
from .rpc import ContractBackend
from .signer import WalletSession

logger = logging.getLogger(__name__)

SIWE_VERSION = "1"
SESSION_LIFETIME = timedelta(hours=1)
# Nonces are remembered for as long as a message carrying them stays valid
NONCE_CACHE_SIZE = 1024
_SIGNATURE_RE = re.compile(r"^(0x)?[a-fA-F0-9]{130}$")


class AuthState(str, Enum):
    IDLE = "idle"
    AWAITING_DOMAIN = "awaiting_domain"
    AWAITING_SIGNATURE = "awaiting_signature"
    AWAITING_LOGIN_RESPONSE = "awaiting_login_response"
    AUTHENTICATED = "authenticated"
    FAILED = "failed"


def _iso8601(moment: datetime) -> str:
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


@dataclass(frozen=True)
class SignatureRSV:
    """A secp256k1 signature split into the components login() expects"""
    r: str
    s: str
    v: int

    @property
    def y_parity(self) -> int:
        return self.v - 27

    def as_abi_tuple(self) -> Tuple[bytes, bytes, int]:
        return (bytes.fromhex(self.r[2:]), bytes.fromhex(self.s[2:]), self.v)


def parse_signature(signature: str) -> SignatureRSV:
    """
    Split a 65-byte hex signature into r, s and v.

    Raises:
        ValueError: If the signature is not 65 bytes of hex
    """
    if not isinstance(signature, str) or not _SIGNATURE_RE.match(signature):
        raise ValueError("Signature must be 65 bytes of hex")
    body = signature[2:] if signature.startswith("0x") else signature
    v = int(body[128:130], 16)
    if v < 27:
        v += 27
    return SignatureRSV(r="0x" + body[0:64], s="0x" + body[64:128], v=v)


def _normalize_token(data: Any) -> Optional[str]:
    if data is None:
        return None
    if isinstance(data, (bytes, bytearray)):
        return "0x" + bytes(data).hex() if data else None
    if isinstance(data, str):
        body = data[2:] if data.startswith("0x") else data
        return "0x" + body if body else None
    return None


def _redact(value: Optional[str]) -> str:
    if not value:
        return "None"
    return f"[REDACTED - {len(value)} chars]"


@dataclass
class AuthSession:
    """State of one SIWE authentication attempt"""
    generation: int = 0
    domain: Optional[str] = None
    challenge_message: Optional[str] = None
    signature: Optional[SignatureRSV] = None
    token: Optional[str] = None
    state: AuthState = AuthState.IDLE
    error: Optional[AuthError] = None


class AuthSessionManager:
    """
    Drives the SIWE handshake and owns the single active AuthSession.

    Steps of one attempt run strictly in order: domain, message, signature,
    login. Only this class mutates the session.
    """

    def __init__(
        self,
        backend: ContractBackend,
        wallet: WalletSession,
        origin_uri: Optional[str] = None,
        clock: Optional[Callable[[], datetime]] = None,
        nonce_factory: Callable[[], str] = generate_nonce,
        logger: Optional[logging.Logger] = None,
    ):
        self.backend = backend
        self.wallet = wallet
        self.origin_uri = origin_uri
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._nonce_factory = nonce_factory
        self.logger = logger or logging.getLogger(__name__)

        self._domain: Optional[str] = None
        self._generation = 0
        self._used_nonces: TTLCache = TTLCache(
            maxsize=NONCE_CACHE_SIZE, ttl=SESSION_LIFETIME.total_seconds()
        )
        self._session = AuthSession()

    @property
    def session(self) -> AuthSession:
        return self._session

    @property
    def state(self) -> AuthState:
        return self._session.state

    @property
    def error(self) -> Optional[AuthError]:
        return self._session.error

    @property
    def token(self) -> Optional[str]:
        return self._session.token

    @property
    def is_authenticated(self) -> bool:
        return self._session.token is not None

    @property
    def domain(self) -> Optional[str]:
        return self._domain

    def _is_current(self, session: AuthSession) -> bool:
        return session is self._session and session.generation == self._generation

    def _fail(self, session: AuthSession, error: AuthError) -> AuthError:
        if self._is_current(session):
            session.state = AuthState.FAILED
            session.error = error
        self.logger.error(f"SIWE authentication failed: {error}")
        return error

    def _next_nonce(self) -> str:
        nonce = self._nonce_factory()
        while nonce in self._used_nonces:
            nonce = self._nonce_factory()
        self._used_nonces[nonce] = True
        return nonce

    def build_message(self, address: str, chain_id: int, domain: str) -> str:
        """Build a fresh challenge message with a new nonce and timestamps"""
        issued_at = self._clock()
        return SiweMessage(
            domain=domain,
            address=to_checksum_address(address),
            uri=self.origin_uri or f"http://{domain}",
            version=SIWE_VERSION,
            chain_id=chain_id,
            nonce=self._next_nonce(),
            issued_at=_iso8601(issued_at),
            expiration_time=_iso8601(issued_at + SESSION_LIFETIME),
        ).prepare_message()

    async def authenticate(self) -> Optional[str]:
        """
        Run one SIWE login attempt.

        Returns:
            The new token, or None if this attempt was superseded by a newer
            attempt or by clear_auth() before it completed

        Raises:
            NotConnectedError: If no account or chain id is available
            DomainUnavailableError: If the contract returns no domain
            SignatureRejectedError: If the signer declines
            LoginRejectedError: If login fails or returns no token
        """
        self._generation += 1
        session = AuthSession(generation=self._generation, domain=self._domain)
        self._session = session

        address = self.wallet.address
        chain_id = self.wallet.chain_id
        if not address or chain_id is None:
            raise self._fail(session, NotConnectedError("Wallet not connected"))

        if session.domain is None:
            session.state = AuthState.AWAITING_DOMAIN
            try:
                domain = await self.backend.read("domain", [])
            except Exception as e:
                if not self._is_current(session):
                    return None
                raise self._fail(session, DomainUnavailableError(f"Unable to retrieve domain from contract: {e}")) from e
            if not self._is_current(session):
                return None
            if not domain or not isinstance(domain, str):
                raise self._fail(session, DomainUnavailableError("Unable to retrieve domain from contract"))
            self._domain = domain
            session.domain = domain

        message = self.build_message(address, chain_id, session.domain)
        session.challenge_message = message
        session.state = AuthState.AWAITING_SIGNATURE
        self.logger.debug(f"Requesting SIWE signature from {address} (generation {session.generation})")

        try:
            raw_signature = await asyncio.to_thread(self.wallet.signer.sign_message, message)
            if not raw_signature:
                raise ValueError("signer returned no signature")
            signature = parse_signature(raw_signature)
        except Exception as e:
            if not self._is_current(session):
                return None
            raise self._fail(session, SignatureRejectedError(f"Signature request rejected: {e}")) from e
        if not self._is_current(session):
            return None

        session.signature = signature
        session.state = AuthState.AWAITING_LOGIN_RESPONSE
        self.logger.debug(f"Submitting SIWE login, signature {_redact(raw_signature)}")

        try:
            response = await self.backend.read("login", [message, signature.as_abi_tuple()])
        except Exception as e:
            if not self._is_current(session):
                return None
            raise self._fail(session, LoginRejectedError(f"Login failed: {e}")) from e

        if not self._is_current(session):
            self.logger.info(f"Discarding stale login response for generation {session.generation}")
            return None

        token = _normalize_token(response)
        if token is None:
            raise self._fail(session, LoginRejectedError("Login returned an empty token"))

        session.token = token
        session.state = AuthState.AUTHENTICATED
        session.error = None
        self.logger.info(f"SIWE authentication succeeded, token {_redact(token)}")
        return token

    def clear_auth(self) -> None:
        """Discard message, signature and token and return to Idle"""
        self._generation += 1
        self._session = AuthSession(generation=self._generation, domain=self._domain)
        self.logger.debug("SIWE session cleared")
