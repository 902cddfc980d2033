"""
Schema classification for contract interface descriptions.

Parses an ABI (ordered list of entries) into immutable function and event
descriptors. Every declared parameter type is resolved to a ParamKind at load
time so that unsupported types fail here rather than at call time.
"""
import logging
import re
from typing import Dict, Any, List, Optional, Sequence, Tuple

from .exceptions import SchemaError
from .models import ParamKind, ParamSpec, FunctionDescriptor, EventDescriptor, Mutability

logger = logging.getLogger(__name__)

_ARRAY_SUFFIX = re.compile(r"\[(\d*)\]$")
_SIZED = re.compile(r"^(uint|int|bytes)(\d+)$")


def parse_param_type(declared: str) -> ParamKind:
    """
    Resolve a declared ABI type string to its ParamKind.

    Args:
        declared: ABI type such as "uint256", "bytes32" or "address[]"

    Returns:
        The matching ParamKind

    Raises:
        SchemaError: If the type is not part of the supported vocabulary
    """
    if not isinstance(declared, str) or not declared:
        raise SchemaError(f"Invalid parameter type: {declared!r}")

    if _ARRAY_SUFFIX.search(declared):
        # Validate the element type even though the array itself passes through
        parse_param_type(_ARRAY_SUFFIX.sub("", declared))
        return ParamKind.ARRAY

    if declared == "tuple":
        return ParamKind.TUPLE
    if declared == "bool":
        return ParamKind.BOOL
    if declared == "address":
        return ParamKind.ADDRESS
    if declared == "string":
        return ParamKind.STRING
    if declared == "bytes":
        return ParamKind.BYTES
    if declared in ("uint", "int"):
        return ParamKind(declared)

    match = _SIZED.match(declared)
    if match:
        base, size = match.group(1), int(match.group(2))
        if base == "bytes":
            if 1 <= size <= 32:
                return ParamKind.FIXED_BYTES
        elif 8 <= size <= 256 and size % 8 == 0:
            return ParamKind(base)

    raise SchemaError(f"Unsupported parameter type: {declared}")


def _parse_param(entry: Dict[str, Any]) -> ParamSpec:
    declared = entry.get("type")
    kind = parse_param_type(declared)
    components: Tuple[ParamSpec, ...] = ()
    if declared.startswith("tuple"):
        components = tuple(_parse_param(c) for c in entry.get("components") or [])
    return ParamSpec(
        name=entry.get("name") or "",
        declared_type=declared,
        kind=kind,
        indexed=bool(entry.get("indexed", False)),
        components=components,
    )


def _parse_function(entry: Dict[str, Any]) -> FunctionDescriptor:
    name = entry.get("name")
    if not name:
        raise SchemaError("Function entry is missing a name")

    mutability = entry.get("stateMutability")
    if mutability is None:
        # Pre-0.5 ABIs only carry constant/payable flags
        if entry.get("constant"):
            mutability = "view"
        else:
            mutability = "payable" if entry.get("payable") else "nonpayable"
    try:
        mutability = Mutability(mutability)
    except ValueError:
        raise SchemaError(f"Unknown state mutability for {name}: {mutability}")

    try:
        return FunctionDescriptor(
            name=name,
            inputs=tuple(_parse_param(p) for p in entry.get("inputs") or []),
            outputs=tuple(_parse_param(p) for p in entry.get("outputs") or []),
            mutability=mutability,
        )
    except SchemaError as e:
        raise SchemaError(f"Invalid function {name}: {e}") from e


def _parse_event(entry: Dict[str, Any]) -> EventDescriptor:
    name = entry.get("name")
    if not name:
        raise SchemaError("Event entry is missing a name")
    try:
        return EventDescriptor(
            name=name,
            inputs=tuple(_parse_param(p) for p in entry.get("inputs") or []),
            anonymous=bool(entry.get("anonymous", False)),
        )
    except SchemaError as e:
        raise SchemaError(f"Invalid event {name}: {e}") from e


class ContractSchema:
    """
    Classified view of a contract interface description.

    Functions keep their ABI order; view_functions and write_functions
    partition them by mutability while preserving relative order.
    """

    def __init__(self, functions: Sequence[FunctionDescriptor], events: Sequence[EventDescriptor], abi: Optional[List[Dict[str, Any]]] = None):
        self.functions: Tuple[FunctionDescriptor, ...] = tuple(functions)
        self.events: Tuple[EventDescriptor, ...] = tuple(events)
        self.abi = list(abi or [])

    @classmethod
    def from_abi(cls, abi: Sequence[Dict[str, Any]]) -> "ContractSchema":
        """
        Parse an interface description.

        Args:
            abi: Ordered list of ABI entries

        Returns:
            ContractSchema with parsed functions and events

        Raises:
            SchemaError: If an entry is malformed or uses an unsupported type
        """
        if not isinstance(abi, (list, tuple)):
            raise SchemaError(f"ABI must be a list, got {type(abi).__name__}")

        functions: List[FunctionDescriptor] = []
        events: List[EventDescriptor] = []
        for entry in abi:
            if not isinstance(entry, dict):
                raise SchemaError(f"ABI entry must be an object, got {type(entry).__name__}")
            entry_type = entry.get("type", "function")
            if entry_type == "function":
                functions.append(_parse_function(entry))
            elif entry_type == "event":
                events.append(_parse_event(entry))

        logger.debug(f"Loaded ABI with {len(functions)} functions and {len(events)} events")
        return cls(functions, events, abi=list(abi))

    @property
    def view_functions(self) -> Tuple[FunctionDescriptor, ...]:
        return tuple(fn for fn in self.functions if fn.is_read_only)

    @property
    def write_functions(self) -> Tuple[FunctionDescriptor, ...]:
        return tuple(fn for fn in self.functions if not fn.is_read_only)

    def get_function(self, name: str) -> FunctionDescriptor:
        for fn in self.functions:
            if fn.name == name:
                return fn
        raise SchemaError(f"Unknown function: {name}")

    def get_event(self, name: str) -> EventDescriptor:
        for event in self.events:
            if event.name == name:
                return event
        raise SchemaError(f"Unknown event: {name}")
