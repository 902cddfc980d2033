"""
Argument marshalling between form text and typed contract values.
"""
import json
import re
from typing import Any, List, Optional, Sequence

from eth_utils import to_checksum_address

from .exceptions import MissingParameterError, InvalidParameterError
from .models import FunctionDescriptor, ParamKind, ParamSpec

_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")
_HEX_RE = re.compile(r"^[a-fA-F0-9]+$")


def is_address(value: Any) -> bool:
    """Check for a 0x-prefixed 20-byte hex string (any letter case)"""
    return isinstance(value, str) and bool(_ADDRESS_RE.match(value))


def normalize_address(value: str) -> str:
    """
    Prefix an address with 0x and, when it is a valid 20-byte address,
    return its checksum form. Invalid input passes through prefixed only.
    """
    if not value.startswith("0x"):
        value = f"0x{value}"
    if is_address(value):
        return to_checksum_address(value.lower())
    return value


def _format_bytes(value: str) -> str:
    if value.startswith("0x"):
        return value
    if _HEX_RE.match(value):
        return f"0x{value}"
    return "0x" + value.encode("utf-8").hex()


def format_parameter_value(value: str, param: ParamSpec) -> Any:
    """
    Coerce a single text value to the typed value for its declared parameter.

    Args:
        value: Text supplied by the caller
        param: Declared parameter

    Returns:
        Typed call argument

    Raises:
        InvalidParameterError: If an integer parameter is not a base-10 integer
    """
    kind = param.kind
    if kind.is_integer:
        text = value.strip() if value else ""
        if not text:
            return 0
        try:
            return int(text, 10)
        except ValueError:
            raise InvalidParameterError(
                f"Invalid integer for parameter {param.name or param.declared_type}: {value!r}"
            )
    if kind == ParamKind.BOOL:
        return value == "true" or value == "1"
    if kind == ParamKind.ADDRESS:
        return normalize_address(value)
    if kind.is_opaque_bytes:
        return _format_bytes(value)
    # STRING, ARRAY and TUPLE are passed through as text
    return value


def parse_function_inputs(
    fn: FunctionDescriptor,
    values: Sequence[Optional[str]],
    auth_token: Optional[str] = None,
) -> List[Any]:
    """
    Convert ordered form values into call arguments for a function.

    If the function takes a trailing SIWE token and auth_token is set, the
    token replaces whatever was supplied for that parameter.

    Args:
        fn: Function being called
        values: Text value per declared input, in order
        auth_token: Active SIWE token, if any

    Returns:
        Typed arguments, one per declared input

    Raises:
        MissingParameterError: If a required value is absent or empty
        InvalidParameterError: If a value cannot be coerced
    """
    args: List[Any] = []
    last_index = len(fn.inputs) - 1
    for index, param in enumerate(fn.inputs):
        value = values[index] if index < len(values) else None

        if fn.requires_auth_token and index == last_index and auth_token:
            value = auth_token

        if value is None or value == "":
            raise MissingParameterError(param.name or str(index))

        args.append(format_parameter_value(value, param))
    return args


def _jsonable(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def format_output_value(value: Any) -> str:
    """Render a typed call result as display text"""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if isinstance(value, (list, tuple, dict)):
        return json.dumps(_jsonable(value), indent=2)
    return str(value)


def format_token_amount(amount: int, decimals: int = 18) -> str:
    """
    Format an integer token amount with the given number of decimals.

    Uses exact integer arithmetic; trailing fractional zeros are trimmed.
    """
    divisor = 10 ** decimals
    sign = "-" if amount < 0 else ""
    whole, remainder = divmod(abs(amount), divisor)
    if remainder == 0:
        return f"{sign}{whole}"
    fraction = str(remainder).rjust(decimals, "0").rstrip("0")
    return f"{sign}{whole}.{fraction}"


def format_address_short(address: str) -> str:
    if not address or len(address) < 10:
        return address
    return f"{address[:6]}...{address[-4:]}"
