"""
Data models for the uRWA20 console.
"""
from enum import Enum
from typing import Dict, Any, Optional, List, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

AUTH_TOKEN_PARAM_NAMES = ("token", "authToken")


class ParamKind(str, Enum):
    """Closed set of parameter kinds the console knows how to marshal"""
    UINT = "uint"
    INT = "int"
    BOOL = "bool"
    ADDRESS = "address"
    BYTES = "bytes"
    FIXED_BYTES = "fixed_bytes"
    STRING = "string"
    ARRAY = "array"
    TUPLE = "tuple"

    @property
    def is_integer(self) -> bool:
        return self in (ParamKind.UINT, ParamKind.INT)

    @property
    def is_opaque_bytes(self) -> bool:
        return self in (ParamKind.BYTES, ParamKind.FIXED_BYTES)


class Mutability(str, Enum):
    PURE = "pure"
    VIEW = "view"
    NONPAYABLE = "nonpayable"
    PAYABLE = "payable"


class ParamSpec(BaseModel):
    """A single declared input, output or event field"""
    model_config = ConfigDict(frozen=True)

    name: str = ""
    declared_type: str
    kind: ParamKind
    indexed: bool = False
    components: Tuple["ParamSpec", ...] = ()

    @property
    def canonical_type(self) -> str:
        """Type string as used in selectors and topic hashes"""
        if self.declared_type.startswith("tuple"):
            inner = ",".join(c.canonical_type for c in self.components)
            return f"({inner}){self.declared_type[len('tuple'):]}"
        return self.declared_type


ParamSpec.model_rebuild()


class FunctionDescriptor(BaseModel):
    """A callable contract function parsed from the interface description"""
    model_config = ConfigDict(frozen=True)

    name: str
    inputs: Tuple[ParamSpec, ...] = ()
    outputs: Tuple[ParamSpec, ...] = ()
    mutability: Mutability

    @property
    def is_read_only(self) -> bool:
        return self.mutability in (Mutability.PURE, Mutability.VIEW)

    @property
    def is_payable(self) -> bool:
        return self.mutability == Mutability.PAYABLE

    @property
    def requires_auth_token(self) -> bool:
        """True when the trailing input is a `bytes` SIWE token parameter"""
        if not self.inputs:
            return False
        last = self.inputs[-1]
        return last.kind == ParamKind.BYTES and last.name in AUTH_TOKEN_PARAM_NAMES

    @property
    def signature(self) -> str:
        params = ", ".join(
            f"{p.declared_type} {p.name}".strip() for p in self.inputs
        )
        return f"{self.name}({params})"


class EventDescriptor(BaseModel):
    """An emittable contract event parsed from the interface description"""
    model_config = ConfigDict(frozen=True)

    name: str
    inputs: Tuple[ParamSpec, ...] = ()
    anonymous: bool = False

    @property
    def canonical_signature(self) -> str:
        return f"{self.name}({','.join(p.canonical_type for p in self.inputs)})"

    @property
    def payload_field(self) -> Optional[ParamSpec]:
        """The single non-indexed `bytes` field, if the event has exactly one"""
        candidates = [p for p in self.inputs if p.kind == ParamKind.BYTES and not p.indexed]
        if len(candidates) != 1:
            return None
        return candidates[0]


class GasQuote(BaseModel):
    """Fee quote for a write, usable in a dynamic-fee transaction envelope"""
    model_config = ConfigDict(frozen=True)

    max_fee_per_gas: int = Field(..., ge=0)
    max_priority_fee_per_gas: int = Field(..., ge=0)

    @model_validator(mode="after")
    def _check_ordering(self) -> "GasQuote":
        if self.max_fee_per_gas < self.max_priority_fee_per_gas:
            raise ValueError("max_fee_per_gas must be >= max_priority_fee_per_gas")
        return self

    def as_tx_params(self) -> Dict[str, int]:
        return {
            "maxFeePerGas": self.max_fee_per_gas,
            "maxPriorityFeePerGas": self.max_priority_fee_per_gas,
        }


class FeeEstimate(BaseModel):
    """Raw two-part fee estimate as reported by the node; either part may be missing"""
    max_fee_per_gas: Optional[int] = None
    max_priority_fee_per_gas: Optional[int] = None


class EncryptedEventKind(str, Enum):
    TRANSFER = "EncryptedTransfer"
    APPROVAL = "EncryptedApproval"
    FORCED_TRANSFER = "EncryptedForcedTransfer"
    FROZEN = "EncryptedFrozen"
    WHITELISTED = "EncryptedWhitelisted"


class EncryptedLogEvent(BaseModel):
    """An encrypted event positively matched against one of the known shapes"""
    model_config = ConfigDict(frozen=True)

    event_kind: EncryptedEventKind
    payload: str
    block_number: int
    transaction_hash: str


class TransactionRecord(BaseModel):
    """One contract transaction in the history view"""
    model_config = ConfigDict(frozen=True)

    block_number: int
    transaction_hash: str
    event_name: str
    payload: Optional[str] = None


class DecryptedPayload(BaseModel):
    """Decrypted transaction data read back from viewLastDecryptedData"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_address: str = Field(..., alias="from")
    to_address: str = Field(..., alias="to")
    amount: int = Field(..., ge=0)
    action: str

    @classmethod
    def from_call_result(cls, result: Any) -> "DecryptedPayload":
        """Build from the (from, to, amount, action) tuple returned by the contract"""
        return cls(
            from_address=result[0],
            to_address=result[1],
            amount=int(result[2]),
            action=result[3],
        )


class AuditorPermission(BaseModel):
    """Auditor grant details as stored by the contract"""
    model_config = ConfigDict(frozen=True)

    expiry: int
    full_access: bool

    @classmethod
    def from_call_result(cls, result: Any) -> "AuditorPermission":
        return cls(expiry=int(result[0]), full_access=bool(result[1]))


class TxReceipt(BaseModel):
    """Transaction receipt from the blockchain"""
    model_config = ConfigDict(populate_by_name=True)

    tx_hash: str = Field(..., alias="transactionHash")
    block_number: int = Field(..., alias="blockNumber")
    block_hash: str = Field(..., alias="blockHash")
    status: int
    gas_used: int = Field(..., alias="gasUsed")
    from_address: str = Field(..., alias="from")
    to_address: Optional[str] = Field(None, alias="to")
    logs: List[Dict[str, Any]] = Field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status == 1
