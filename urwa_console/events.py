"""
Decoding of encrypted contract events.

The log stream for a contract address can include events this console does not
know about; those are not errors and decode to (None, None).
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from eth_abi import decode as abi_decode
from eth_utils import keccak, to_int
from hexbytes import HexBytes

from .models import EncryptedEventKind, EncryptedLogEvent, EventDescriptor
from .schema import ContractSchema

logger = logging.getLogger(__name__)

_ENCRYPTED_KINDS = {kind.value: kind for kind in EncryptedEventKind}


def is_encrypted_event(event_name: Optional[str]) -> bool:
    return event_name in _ENCRYPTED_KINDS


def event_topic(event: EventDescriptor) -> bytes:
    """keccak256 of the canonical event signature"""
    return keccak(text=event.canonical_signature)


def as_int(value: Any) -> int:
    """Read a quantity that nodes may return as int, hex string or bytes"""
    if value is None:
        return 0
    if isinstance(value, (bytes, bytearray)):
        return int.from_bytes(value, "big")
    if isinstance(value, str):
        if value.startswith(("0x", "0X")):
            return to_int(hexstr=value)
        return int(value) if value else 0
    return int(value)


def as_bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        return bytes(HexBytes(value)) if value not in ("", "0x") else b""
    raise TypeError(f"Cannot interpret {type(value).__name__} as bytes")


def to_hex(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    text = str(value)
    return text if text.startswith("0x") else "0x" + text


class EventDecoder:
    """Matches raw logs against the events declared in a contract schema"""

    def __init__(self, schema: ContractSchema):
        self.schema = schema
        self._topics: List[Tuple[bytes, EventDescriptor]] = [
            (event_topic(event), event)
            for event in schema.events
            if not event.anonymous and event.payload_field is not None
        ]

    def _match(self, event: EventDescriptor, topic: bytes, topics: List[bytes], data: bytes) -> Optional[str]:
        if not topics or topics[0] != topic:
            return None
        indexed = [p for p in event.inputs if p.indexed]
        if len(topics) != 1 + len(indexed):
            return None

        non_indexed = [p for p in event.inputs if not p.indexed]
        try:
            values = abi_decode([p.canonical_type for p in non_indexed], data)
        except Exception as e:
            logger.debug(f"Log data does not decode as {event.name}: {e}")
            return None

        payload_field = event.payload_field
        for param, value in zip(non_indexed, values):
            if param is payload_field:
                return "0x" + bytes(value).hex()
        return None

    def decode(self, log: Dict[str, Any]) -> Tuple[Optional[str], Optional[str]]:
        """
        Identify which declared event produced a log and extract its payload.

        Args:
            log: Raw log with `topics` and `data`

        Returns:
            (event_name, payload_hex) if exactly one event shape matches,
            otherwise (None, None)
        """
        try:
            topics = [as_bytes(t) for t in log.get("topics") or []]
            data = as_bytes(log.get("data") or b"")
        except (TypeError, ValueError, AttributeError) as e:
            logger.debug(f"Skipping malformed log: {e}")
            return None, None

        matches = []
        for topic, event in self._topics:
            payload = self._match(event, topic, topics, data)
            if payload is not None:
                matches.append((event.name, payload))

        if len(matches) != 1:
            if len(matches) > 1:
                logger.warning(f"Ambiguous log matched {len(matches)} event shapes, skipping")
            return None, None
        return matches[0]

    def to_encrypted_event(self, log: Dict[str, Any]) -> Optional[EncryptedLogEvent]:
        """Decode a log into an EncryptedLogEvent, or None if it is not one"""
        name, payload = self.decode(log)
        kind = _ENCRYPTED_KINDS.get(name) if name else None
        if kind is None:
            return None
        return EncryptedLogEvent(
            event_kind=kind,
            payload=payload,
            block_number=as_int(log.get("blockNumber")),
            transaction_hash=to_hex(log.get("transactionHash") or ""),
        )

    def decode_all(self, logs: List[Dict[str, Any]]) -> List[EncryptedLogEvent]:
        """Decode the encrypted events in a batch of logs, newest block first"""
        events = [e for e in (self.to_encrypted_event(log) for log in logs) if e is not None]
        events.sort(key=lambda e: e.block_number, reverse=True)
        return events
